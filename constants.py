"""
Constants and Configuration
Centralized constants to avoid duplication and magic strings
"""
from typing import Dict

# Fact types stored in the knowledge base
FACT_TYPES = [
    'expense_ratio',
    'exit_load',
    'minimum_sip',
    'minimum_lump_sum',
    'lock_in',
    'riskometer',
    'benchmark',
    'statement_download'
]

EXPENSE_RATIO_PLANS = ['direct', 'regular']

# Field display names
FIELD_DISPLAY_NAMES = {
    'expense_ratio': 'Expense ratio',
    'exit_load': 'Exit load',
    'minimum_sip': 'Minimum SIP',
    'minimum_lump_sum': 'Minimum lump sum',
    'lock_in': 'Lock-in (for ELSS)',
    'riskometer': 'Riskometer',
    'benchmark': 'Benchmark',
    'statement_download': 'How to download statements'
}

# Alias phrase -> scheme name (checked in order, before full scheme names)
DEFAULT_SCHEME_ALIASES: Dict[str, str] = {
    'large cap': 'Nippon India Large Cap Fund Direct Growth',
    'large-cap': 'Nippon India Large Cap Fund Direct Growth',
    'largecap': 'Nippon India Large Cap Fund Direct Growth',
    'flexi cap': 'Nippon India Flexi Cap Fund Direct Growth',
    'flexi-cap': 'Nippon India Flexi Cap Fund Direct Growth',
    'flexicap': 'Nippon India Flexi Cap Fund Direct Growth',
    'elss': 'Nippon India ELSS Tax Saver Fund Direct Growth',
    'tax saver': 'Nippon India ELSS Tax Saver Fund Direct Growth',
    'tax-saver': 'Nippon India ELSS Tax Saver Fund Direct Growth',
    'balanced advantage': 'Nippon India Balanced Advantage Fund Direct Growth',
    'balanced-advantage': 'Nippon India Balanced Advantage Fund Direct Growth',
    'liquid': 'Nippon India Liquid Fund Direct Growth',
    'liquid fund': 'Nippon India Liquid Fund Direct Growth'
}

# Statement download platforms
PLATFORM_DISPLAY_NAMES = {
    'cams': 'CAMS',
    'groww': 'Groww'
}

PLATFORM_ANSWER_TEMPLATES = {
    'cams': "To download capital gains/account/tax statements from CAMS, visit: {url}",
    'groww': "To download reports and statements on Groww, visit: {url}"
}

GENERIC_STATEMENT_TEMPLATE = "To download statements from {platform}, visit: {url}"

# Advice filter
ADVICE_ALLOW_TERMS = [
    'download', 'statement', 'capital gain', 'account statement', 'tax statement'
]

ADVICE_PATTERNS = [
    r'\bshould i\b.*\binvest\b',
    r'\bshould i\b.*\bbuy\b',
    r'\bshould i\b.*\bsell\b',
    r'\bis.*\bgood\b',
    r'\bis.*\bbad\b',
    r'\bis.*\bworth\b',
    r'\brecommend\b',
    r'\brecommendation\b',
    r'\bwhich.*\bbetter\b',
    r'\bwhich.*\bbest\b',
    r'\bwhich.*\bworst\b',
    r'\bcompare\b',
    r'\bcomparison\b',
    r'\badvice\b',
    r'\bsuggest\b',
    r'\bopinion\b',
    r'\bwhat.*\breturns\b',
    r'\bwhat.*\bperformance\b',
    r'\bhow much will i get\b',
    r'\bprofit\b.*\bloss\b',
    r'\binvestment advice\b'
]

# Retrieval settings
DEFAULT_TOP_K = 3
CONFIDENCE_THRESHOLD = 0.5

# Embedding settings
GEMINI_EMBEDDING_MODEL = 'text-embedding-004'
GEMINI_API_BASE = 'https://generativelanguage.googleapis.com/v1beta'
LOCAL_EMBEDDING_MODEL = 'all-MiniLM-L6-v2'
EMBEDDING_TIMEOUT = 15
MAX_CONCURRENT_REQUESTS = 5

# Data files
KNOWLEDGE_BASE_PATH = 'knowledge_base.json'
EMBEDDINGS_PATH = 'embeddings.json'

# Answer templates
SUPPORTED_FACTS_TEXT = (
    "expense ratio, exit load, minimum SIP, minimum lump sum, lock-in, "
    "riskometer, benchmark, or statement downloads"
)

REFUSAL_MESSAGE = (
    "I'm sorry, but I cannot provide investment advice, recommendations, "
    "comparisons, or opinions. I can only provide factual information about the schemes."
)

NO_RESULTS_MESSAGE = (
    "I couldn't find relevant information to answer your question. "
    f"Please try rephrasing or ask about {SUPPORTED_FACTS_TEXT}."
)

LOW_CONFIDENCE_MESSAGE = (
    "I found some related information, but it may not directly answer your question. "
    "Please try rephrasing or be more specific about which scheme and fact you're asking about."
)

CONFIGURATION_ERROR_MESSAGE = (
    "I'm having trouble processing your question. "
    "Please ensure GOOGLE_API_KEY is set in your .env file."
)

EMPTY_QUESTION_MESSAGE = (
    "I need a question to help you. Please ask about expense ratio, exit load, "
    "minimum SIP, lock-in, riskometer, benchmark, or statement downloads."
)

UNKNOWN_FACT_MESSAGE = (
    "I can provide information about: expense ratio, exit load, minimum SIP, "
    "minimum lump sum, lock-in (for ELSS), riskometer, benchmark, and statement downloads. "
    "Please ask about one of these facts."
)

INTERNAL_ERROR_MESSAGE = "Sorry, I encountered an error processing your question. Please try again."
