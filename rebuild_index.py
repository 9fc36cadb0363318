"""
Rebuild the embeddings snapshot from the knowledge base
One embedding per fact (two per expense ratio), fetched concurrently.
"""
import asyncio
import sys
import time
from typing import List, Optional

from dotenv import load_dotenv

from config_loader import get_config
from embedding_provider import EmbeddingProvider, create_embedding_provider
from enhanced_error_handler import EnhancedErrorHandler
from knowledge_base import Fact, KnowledgeBase
from structured_logger import configure_logger, get_logger
from vector_store import VectorStore


async def build_vector_store(knowledge_base: KnowledgeBase, provider: EmbeddingProvider,
                             max_concurrent: int = 5,
                             error_handler: Optional[EnhancedErrorHandler] = None) -> VectorStore:
    """
    Embed every knowledge base fact

    Args:
        knowledge_base: Source facts
        provider: Embedding provider
        max_concurrent: Maximum embedding calls in flight
        error_handler: Retries transient provider errors

    Returns:
        VectorStore with facts in knowledge base order
    """
    logger = get_logger()
    error_handler = error_handler or EnhancedErrorHandler()
    facts: List[Fact] = knowledge_base.iter_facts()

    semaphore = asyncio.Semaphore(max(1, max_concurrent))

    async def embed_with_semaphore(fact: Fact):
        async with semaphore:
            vector = await error_handler.retry_with_backoff(provider.embed, fact.text)
            logger.debug("fact_embedded", scheme=fact.scheme, fact_type=fact.fact_type,
                         fact_sub_type=fact.fact_sub_type, platform=fact.platform)
            return vector

    # gather keeps input order, so appends follow the knowledge base
    vectors = await asyncio.gather(*(embed_with_semaphore(fact) for fact in facts))

    store = VectorStore()
    for vector, fact in zip(vectors, facts):
        store.add(vector, fact)
    return store


async def main() -> int:
    load_dotenv()
    config = get_config()
    configure_logger(config.log_level, config.log_file)
    logger = get_logger()

    provider = create_embedding_provider(config)
    if provider is None:
        logger.error("embedding_provider_unconfigured",
                     hint="set GOOGLE_API_KEY in .env (https://aistudio.google.com/app/apikey) "
                          "or EMBEDDING_PROVIDER=local")
        return 1

    knowledge_base = KnowledgeBase.from_file(config.knowledge_base_path)
    error_handler = EnhancedErrorHandler(max_retries=config.max_retries)

    start_time = time.time()
    async with provider:
        store = await build_vector_store(
            knowledge_base,
            provider,
            max_concurrent=config.max_concurrent_requests,
            error_handler=error_handler
        )

    store.save(config.embeddings_path)
    logger.info("index_rebuilt",
                vector_count=len(store),
                dimension=len(store.vectors[0]) if len(store) else 0,
                provider=provider.name,
                elapsed_seconds=round(time.time() - start_time, 2))
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
