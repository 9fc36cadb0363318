"""
Interactive command-line FAQ assistant
Type a question at the prompt; "exit" quits.
"""
import asyncio
import sys
from typing import Callable

from dotenv import load_dotenv

from config_loader import get_config
from constants import FIELD_DISPLAY_NAMES
from rag_system import RAGSystem
from structured_logger import configure_logger

PROMPT = "Your question: "


def print_banner(system: RAGSystem, write: Callable[[str], None] = print):
    title = "Mutual Fund FAQ Assistant" + (" (RAG Version)" if system.mode == 'retrieval' else "")
    write(title)
    write("=" * len(title))
    write("I can answer factual questions about:")
    for display_name in FIELD_DISPLAY_NAMES.values():
        write(f"- {display_name}")
    write("\nI cannot provide investment advice, recommendations, or comparisons.")
    write('Type "exit" to quit.\n')


async def run_cli(system: RAGSystem,
                  read_line: Callable[[str], str] = input,
                  write: Callable[[str], None] = print):
    """
    Read-eval loop over RAGSystem.answer

    Args:
        system: Answering system
        read_line: Prompt function (input() by default, run off the event loop)
        write: Output function
    """
    loop = asyncio.get_running_loop()
    print_banner(system, write)

    while True:
        try:
            question = await loop.run_in_executor(None, read_line, PROMPT)
        except EOFError:
            write("Goodbye!")
            return

        if question.strip().lower() == 'exit':
            write("Goodbye!")
            return

        if not question.strip():
            continue

        try:
            result = await system.answer(question)
        except Exception as e:
            # One bad question never ends the session
            write(f"\nError: {e}\n")
            continue

        write(f"\nAnswer: {result['answer']}")
        if result.get('source_url'):
            write(f"Source: {result['source_url']}")
        write("")


async def main() -> int:
    load_dotenv()
    config = get_config()
    configure_logger(config.log_level, config.log_file)

    system = RAGSystem.from_config(config)
    try:
        await run_cli(system)
    finally:
        await system.close()
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
