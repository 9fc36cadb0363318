"""
Shared fixtures: a small knowledge base and controllable embedding providers.
"""
import asyncio
import math

import pytest

from embedding_provider import EmbeddingProvider
from knowledge_base import KnowledgeBase
from vector_store import VectorStore

LARGE_CAP = "Nippon India Large Cap Fund Direct Growth"
ELSS = "Nippon India ELSS Tax Saver Fund Direct Growth"
LARGE_CAP_URL = "https://groww.in/mutual-funds/nippon-india-large-cap-fund-direct-growth"
ELSS_URL = "https://groww.in/mutual-funds/nippon-india-tax-saver-elss-fund-direct-growth"
CAMS_URL = "https://www.camsonline.com/Investors/Statements/Consolidated-Account-Statement"
GROWW_URL = "https://groww.in/help/mutual-funds/reports"

KB_DATA = {
    "schemes": {
        LARGE_CAP: {
            "expense_ratio": {"direct": "0.67%", "regular": "1.52%", "source_url": LARGE_CAP_URL},
            "exit_load": {"value": "1% if redeemed within 7 days", "source_url": LARGE_CAP_URL},
            "riskometer": {"value": "Very High", "source_url": LARGE_CAP_URL}
        },
        ELSS: {
            "expense_ratio": {"direct": "1.03%", "regular": "1.66%", "source_url": ELSS_URL},
            "lock_in": {"value": "3 years", "source_url": ELSS_URL}
        }
    },
    "statement_download": {
        "cams": {"description": "Request a capital gains statement from CAMS by email.", "source_url": CAMS_URL},
        "groww": {"description": "Go to Profile > Reports in the Groww app.", "source_url": GROWW_URL}
    }
}

# Position of each fact in KnowledgeBase(KB_DATA).iter_facts()
FACT_INDEX = {
    'large_cap_direct': 0,
    'large_cap_regular': 1,
    'large_cap_exit_load': 2,
    'large_cap_riskometer': 3,
    'elss_direct': 4,
    'elss_regular': 5,
    'elss_lock_in': 6,
    'cams': 7,
    'groww': 8
}
FACT_COUNT = len(FACT_INDEX)
# One spare dimension that no stored fact uses
DIMENSION = FACT_COUNT + 1


def one_hot(index, dim=DIMENSION):
    vector = [0.0] * dim
    vector[index] = 1.0
    return vector


def toward(index, similarity, dim=DIMENSION):
    """Unit vector with the given cosine to fact `index` and zero to every other fact"""
    vector = [0.0] * dim
    vector[index] = similarity
    vector[dim - 1] = math.sqrt(1.0 - similarity ** 2)
    return vector


class FakeEmbeddingProvider(EmbeddingProvider):
    """Returns preset vectors per text; can fail or stall on demand"""

    name = "fake"

    def __init__(self, vectors=None, default=None, error=None, delay=0.0):
        self.vectors = dict(vectors or {})
        self.default = default
        self.error = error
        self.delay = delay
        self.calls = []
        self.closed = False

    async def embed(self, text):
        self.calls.append(text)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if text in self.vectors:
            return self.vectors[text]
        if self.default is None:
            raise AssertionError(f"unexpected text embedded: {text!r}")
        return self.default

    async def close(self):
        self.closed = True


@pytest.fixture
def kb_data():
    return KB_DATA


@pytest.fixture
def knowledge_base():
    return KnowledgeBase.from_dict(KB_DATA)


@pytest.fixture
def facts(knowledge_base):
    return knowledge_base.iter_facts()


@pytest.fixture
def vector_store(facts):
    """One-hot vector per fact, so a one-hot query hits exactly one fact"""
    store = VectorStore()
    for index, fact in enumerate(facts):
        store.add(one_hot(index), fact)
    return store
