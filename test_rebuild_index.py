"""
Tests for the offline embeddings build.
"""
import asyncio

import pytest

from conftest import FACT_COUNT, FakeEmbeddingProvider
from enhanced_error_handler import EmbeddingProviderError, EnhancedErrorHandler
from rebuild_index import build_vector_store
from vector_store import VectorStore


class CountingProvider(FakeEmbeddingProvider):
    """Embeds text as [len(text)] and tracks how many calls overlap"""

    def __init__(self, failures=None):
        super().__init__(default=[0.0])
        self.failures = dict(failures or {})
        self.in_flight = 0
        self.max_in_flight = 0

    async def embed(self, text):
        self.calls.append(text)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0.01)
            if self.failures.get(text):
                self.failures[text] -= 1
                raise EmbeddingProviderError("HTTP 503", status=503)
            return [float(len(text)), 1.0]
        finally:
            self.in_flight -= 1


class TestBuildVectorStore:

    def test_facts_in_knowledge_base_order(self, knowledge_base, facts):
        provider = CountingProvider()
        store = asyncio.run(build_vector_store(knowledge_base, provider))

        assert isinstance(store, VectorStore)
        assert len(store) == FACT_COUNT
        assert store.metadata == facts
        assert store.vectors == [[float(len(f.text)), 1.0] for f in facts]

    def test_concurrency_limit(self, knowledge_base):
        provider = CountingProvider()
        asyncio.run(build_vector_store(knowledge_base, provider, max_concurrent=2))

        assert len(provider.calls) == FACT_COUNT
        assert 1 <= provider.max_in_flight <= 2

    def test_transient_errors_retried(self, knowledge_base, facts):
        provider = CountingProvider(failures={facts[0].text: 2})
        store = asyncio.run(build_vector_store(knowledge_base, provider,
                                               error_handler=EnhancedErrorHandler(retry_delay=0)))

        assert len(store) == FACT_COUNT
        assert provider.calls.count(facts[0].text) == 3

    def test_auth_error_aborts(self, knowledge_base):
        provider = FakeEmbeddingProvider(error=EmbeddingProviderError("HTTP 401", status=401))

        with pytest.raises(EmbeddingProviderError):
            asyncio.run(build_vector_store(knowledge_base, provider,
                                           error_handler=EnhancedErrorHandler(retry_delay=0)))
        # 401 is never retried
        assert len(provider.calls) == len(set(provider.calls))
