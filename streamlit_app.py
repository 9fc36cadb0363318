"""
Streamlit chat UI for the Mutual Fund FAQ Assistant
"""
import asyncio

import streamlit as st
from dotenv import load_dotenv

from config_loader import get_config
from constants import FIELD_DISPLAY_NAMES
from rag_system import RAGSystem
from structured_logger import configure_logger

load_dotenv()

st.set_page_config(
    page_title="MF FAQ Assistant",
    page_icon="💼",
    layout="wide",
    initial_sidebar_state="expanded"
)

st.markdown("""
<style>
    .main-header {
        font-size: 2.5rem;
        font-weight: bold;
        color: #00d09c;
        margin-bottom: 0.5rem;
    }
    .disclaimer {
        background-color: #fff4e6;
        padding: 1rem;
        border-radius: 0.5rem;
        border-left: 4px solid #ff9800;
        margin-bottom: 1.5rem;
    }
    .source-link {
        font-size: 0.9rem;
        color: #00d09c;
        margin-top: 0.5rem;
    }
</style>
""", unsafe_allow_html=True)

EXAMPLES = [
    ("Expense Ratio", "What is the expense ratio of Nippon India Large Cap Fund?"),
    ("Exit Load", "What is the exit load for Flexi Cap Fund?"),
    ("Minimum SIP", "What is the minimum SIP for ELSS?"),
    ("Lock-in Period", "What is the lock-in period for ELSS Tax Saver Fund?"),
    ("Riskometer", "What is the riskometer for Liquid Fund?"),
    ("Benchmark", "What is the benchmark for Balanced Advantage Fund?"),
    ("Statements", "How can I download capital gains statement from CAMS?"),
]


@st.cache_resource(show_spinner=False)
def init_rag_system() -> RAGSystem:
    """Build the system once per Streamlit process"""
    config = get_config()
    configure_logger(config.log_level, config.log_file)
    return RAGSystem.from_config(config)


async def _answer(system: RAGSystem, question: str) -> dict:
    # Each rerun gets a fresh event loop, so provider sessions are closed before it ends
    try:
        return await system.answer(question)
    finally:
        await system.close()


def ask(question: str):
    """Answer a question and append both turns to the chat history"""
    st.session_state.messages.append({"role": "user", "content": question})
    try:
        response = asyncio.run(_answer(st.session_state.rag_system, question))
        st.session_state.messages.append({
            "role": "assistant",
            "content": response['answer'],
            "source": response.get('source_url')
        })
    except Exception as e:
        st.session_state.messages.append({
            "role": "assistant",
            "content": f"❌ Sorry, I encountered an error: {str(e)}"
        })


if 'messages' not in st.session_state:
    st.session_state.messages = []

if 'rag_system' not in st.session_state:
    with st.spinner("🔄 Loading knowledge base..."):
        try:
            st.session_state.rag_system = init_rag_system()
        except (OSError, ValueError) as e:
            st.error(f"❌ Failed to initialize the assistant: {str(e)}")
            st.info("💡 Check knowledge_base.json and run `python rebuild_index.py` after setting GOOGLE_API_KEY")
            st.stop()

# Sidebar
with st.sidebar:
    st.markdown("### 💼 MF FAQ Assistant")
    st.caption(f"Mode: {st.session_state.rag_system.mode}")
    st.markdown("---")

    st.markdown("#### 📚 Covered Schemes")
    st.markdown("\n".join(f"- **{name}**" for name in st.session_state.rag_system.knowledge_base.scheme_names))

    st.markdown("#### 🔎 Facts I can answer")
    st.markdown("\n".join(f"- {name}" for name in FIELD_DISPLAY_NAMES.values()))

    st.markdown("---")
    st.markdown("#### 💡 Example Questions")
    for label, question in EXAMPLES:
        if st.button(f"📌 {label}", key=f"btn_{label}", use_container_width=True):
            ask(question)
            st.rerun()

    st.markdown("---")
    if st.button("🗑️ Clear Chat", use_container_width=True):
        st.session_state.messages = []
        st.rerun()

st.markdown('<div class="main-header">💼 Mutual Fund FAQ Assistant</div>', unsafe_allow_html=True)
st.markdown("""
<div class="disclaimer">
    ⚠️ <strong>Facts-Only Assistant</strong><br>
    This assistant provides <strong>factual information only</strong>, not investment advice,
    recommendations, comparisons, or opinions.
</div>
""", unsafe_allow_html=True)

for message in st.session_state.messages:
    with st.chat_message(message["role"]):
        st.markdown(message["content"])
        if message["role"] == "assistant" and message.get("source"):
            st.markdown(f'<div class="source-link">📎 <a href="{message["source"]}" target="_blank">View Source</a></div>',
                        unsafe_allow_html=True)

if prompt := st.chat_input("Ask about expense ratio, exit load, minimum SIP..."):
    ask(prompt)
    st.rerun()
