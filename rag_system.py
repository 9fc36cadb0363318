"""
Main RAG System - Advice filter, question embedding, vector search, rendering
Falls back to lexical answers when no embedding provider or snapshot is available.
"""
import asyncio
import time
from pathlib import Path
from typing import Dict, Optional

from advice_filter import AdviceFilter
from config_loader import Config
from constants import (
    CONFIDENCE_THRESHOLD, CONFIGURATION_ERROR_MESSAGE, DEFAULT_TOP_K, EMBEDDING_TIMEOUT,
    EMPTY_QUESTION_MESSAGE, REFUSAL_MESSAGE
)
from embedding_provider import EmbeddingProvider, create_embedding_provider
from enhanced_error_handler import EnhancedErrorHandler
from fact_renderer import FactRenderer
from knowledge_base import KnowledgeBase
from lexical_qa import LexicalQA
from structured_logger import get_logger
from vector_store import VectorStore


class RetrievalPipeline:
    """filter -> embed question -> search -> render"""

    def __init__(self, knowledge_base: KnowledgeBase, vector_store: VectorStore,
                 embedding_provider: Optional[EmbeddingProvider],
                 advice_filter: Optional[AdviceFilter] = None,
                 renderer: Optional[FactRenderer] = None,
                 top_k: int = DEFAULT_TOP_K,
                 embedding_timeout: float = EMBEDDING_TIMEOUT,
                 error_handler: Optional[EnhancedErrorHandler] = None):
        self.knowledge_base = knowledge_base
        self.vector_store = vector_store
        self.embedding_provider = embedding_provider
        self.advice_filter = advice_filter or AdviceFilter()
        self.renderer = renderer or FactRenderer(knowledge_base)
        self.top_k = top_k
        self.embedding_timeout = embedding_timeout
        self.error_handler = error_handler or EnhancedErrorHandler()
        self.logger = get_logger()

    async def answer(self, question: str) -> Dict:
        """
        Answer one question

        Args:
            question: User question

        Returns:
            Dict with 'answer' and 'source_url'. Refusals, provider failures
            and missing matches are all answer text, never exceptions.
        """
        start_time = time.time()

        if not question or not question.strip():
            return {'answer': EMPTY_QUESTION_MESSAGE, 'source_url': None}

        if self.advice_filter.is_advice_question(question):
            self.logger.log_question(question, mode='retrieval', outcome='refused',
                                     response_time=time.time() - start_time)
            return {'answer': REFUSAL_MESSAGE, 'source_url': None}

        if self.embedding_provider is None:
            self.logger.warning("embedding_provider_unavailable", question=question[:100])
            return {'answer': CONFIGURATION_ERROR_MESSAGE, 'source_url': None}

        try:
            query_vector = await asyncio.wait_for(self.embedding_provider.embed(question),
                                                  timeout=self.embedding_timeout)
        except Exception as e:
            # Any provider failure, wrapped or not, becomes the configuration answer
            category = self.error_handler.record_error(e)
            self.logger.log_error(e, {'stage': 'embed_question', 'category': category.value,
                                      'provider': self.embedding_provider.name})
            return {'answer': CONFIGURATION_ERROR_MESSAGE, 'source_url': None}

        results = self.vector_store.search(query_vector, self.top_k)
        result = self.renderer.render(question, results)

        top = results[0] if results else None
        self.logger.log_question(
            question,
            mode='retrieval',
            outcome='answered' if top and top['similarity'] >= self.renderer.confidence_threshold else 'no_match',
            response_time=time.time() - start_time,
            top_similarity=round(top['similarity'], 4) if top else None,
            fact_type=top['metadata'].fact_type if top else None
        )
        return result


class RAGSystem:
    """Serves questions through the retrieval pipeline, or lexically as a degraded mode"""

    def __init__(self, knowledge_base: KnowledgeBase,
                 vector_store: Optional[VectorStore] = None,
                 embedding_provider: Optional[EmbeddingProvider] = None,
                 top_k: int = DEFAULT_TOP_K,
                 confidence_threshold: float = CONFIDENCE_THRESHOLD,
                 embedding_timeout: float = EMBEDDING_TIMEOUT,
                 error_handler: Optional[EnhancedErrorHandler] = None):
        """
        Args:
            knowledge_base: Facts used for rendering and lexical answers
            vector_store: Loaded snapshot (None for lexical mode)
            embedding_provider: Question embedder (None for lexical mode)
            top_k: Search results passed to the renderer
            confidence_threshold: Minimum similarity for a factual answer
            embedding_timeout: Seconds allowed per embedding call
            error_handler: Shared error counter
        """
        self.knowledge_base = knowledge_base
        self.embedding_provider = embedding_provider
        self.error_handler = error_handler or EnhancedErrorHandler()
        self.advice_filter = AdviceFilter()
        self.lexical_qa = LexicalQA(knowledge_base, self.advice_filter)
        self.logger = get_logger()

        if embedding_provider is not None and vector_store is not None:
            self.pipeline = RetrievalPipeline(
                knowledge_base,
                vector_store,
                embedding_provider,
                advice_filter=self.advice_filter,
                renderer=FactRenderer(knowledge_base, confidence_threshold=confidence_threshold),
                top_k=top_k,
                embedding_timeout=embedding_timeout,
                error_handler=self.error_handler
            )
            self.mode = 'retrieval'
        else:
            self.pipeline = None
            self.mode = 'lexical'

    @classmethod
    def from_config(cls, config: Config, error_handler: Optional[EnhancedErrorHandler] = None) -> 'RAGSystem':
        """Load knowledge base, snapshot and provider as configured"""
        logger = get_logger()
        knowledge_base = KnowledgeBase.from_file(config.knowledge_base_path)
        embedding_provider = create_embedding_provider(config)

        vector_store = None
        if embedding_provider is not None:
            embeddings_path = Path(config.embeddings_path)
            if embeddings_path.exists():
                vector_store = VectorStore.from_file(embeddings_path)
            else:
                logger.warning("embeddings_snapshot_missing", path=str(embeddings_path),
                               hint="run: python rebuild_index.py")

        system = cls(
            knowledge_base,
            vector_store=vector_store,
            embedding_provider=embedding_provider,
            top_k=config.retrieval_top_k,
            confidence_threshold=config.confidence_threshold,
            embedding_timeout=config.embedding_timeout,
            error_handler=error_handler
        )
        logger.info("rag_system_ready", mode=system.mode, schemes=len(knowledge_base.scheme_names))
        return system

    async def answer(self, question: str) -> Dict:
        """Dict with 'answer' and 'source_url'"""
        if self.pipeline is not None:
            return await self.pipeline.answer(question)

        start_time = time.time()
        result = self.lexical_qa.answer(question)
        self.logger.log_question(question or '', mode='lexical', outcome='answered',
                                 response_time=time.time() - start_time)
        return result

    async def close(self):
        if self.embedding_provider is not None:
            await self.embedding_provider.close()
