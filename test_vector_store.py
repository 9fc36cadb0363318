"""
Tests for cosine similarity and the in-memory vector store.
"""
import json

import pytest

from conftest import FACT_COUNT, FACT_INDEX, one_hot
from knowledge_base import Fact
from vector_store import VectorStore, cosine_similarity


class TestCosineSimilarity:

    def test_symmetric(self):
        a = [0.1, 0.2, 0.3]
        b = [0.4, -0.5, 0.6]
        assert cosine_similarity(a, b) == cosine_similarity(b, a)

    def test_self_similarity_is_one(self):
        assert cosine_similarity([0.3, 0.4, 1.2], [0.3, 0.4, 1.2]) == pytest.approx(1.0)

    def test_opposite_and_orthogonal(self):
        assert cosine_similarity([1.0, 2.0], [-1.0, -2.0]) == pytest.approx(-1.0)
        assert cosine_similarity([1.0, 0.0], [0.0, 3.0]) == 0.0

    def test_zero_magnitude_is_zero(self):
        assert cosine_similarity([0.0, 0.0, 0.0], [1.0, 2.0, 3.0]) == 0.0
        assert cosine_similarity([1.0, 2.0, 3.0], [0.0, 0.0, 0.0]) == 0.0

    def test_length_mismatch_is_zero(self):
        assert cosine_similarity([1.0, 2.0], [1.0, 2.0, 3.0]) == 0.0

    def test_empty_vectors_are_zero(self):
        assert cosine_similarity([], []) == 0.0

    @pytest.mark.parametrize("a,b", [
        ([[1.0, 2.0], [3.0]], [1.0, 2.0]),
        ([1.0, "two"], [1.0, 2.0]),
        ([1.0, 2.0], [{"x": 1}, 2.0]),
    ])
    def test_malformed_vectors_are_zero(self, a, b):
        assert cosine_similarity(a, b) == 0.0
        assert cosine_similarity(b, a) == 0.0

    def test_nested_vector_not_flattened(self):
        assert cosine_similarity([[1.0, 2.0]], [1.0, 2.0]) == 0.0
        assert cosine_similarity([[1.0, 2.0]], [[1.0, 2.0]]) == 0.0

    def test_search_with_malformed_query(self, vector_store):
        results = vector_store.search([[1.0], [2.0, 3.0]], top_k=2)
        assert [r['similarity'] for r in results] == [0.0, 0.0]


class TestVectorStore:

    def test_add_keeps_vectors_and_metadata_aligned(self, vector_store, facts):
        assert len(vector_store) == FACT_COUNT
        assert vector_store.metadata == facts
        assert vector_store.vectors[FACT_INDEX['cams']] == one_hot(FACT_INDEX['cams'])

    def test_add_does_not_dedup(self, facts):
        store = VectorStore()
        store.add([1.0, 0.0], facts[0])
        store.add([1.0, 0.0], facts[0])
        assert len(store) == 2

    def test_search_returns_best_match_first(self, vector_store, facts):
        results = vector_store.search(one_hot(FACT_INDEX['elss_lock_in']))
        assert results[0]['index'] == FACT_INDEX['elss_lock_in']
        assert results[0]['similarity'] == pytest.approx(1.0)
        assert results[0]['metadata'] == facts[FACT_INDEX['elss_lock_in']]

    def test_search_sorted_descending(self, facts):
        store = VectorStore()
        store.add([0.1, 0.9], facts[0])
        store.add([1.0, 0.0], facts[1])
        store.add([0.7, 0.7], facts[2])
        results = store.search([1.0, 0.1], top_k=3)
        similarities = [r['similarity'] for r in results]
        assert similarities == sorted(similarities, reverse=True)
        assert [r['index'] for r in results] == [1, 2, 0]

    @pytest.mark.parametrize("top_k,expected", [(1, 1), (3, 3), (FACT_COUNT, FACT_COUNT), (50, FACT_COUNT), (0, 0)])
    def test_search_returns_min_of_k_and_n(self, vector_store, top_k, expected):
        assert len(vector_store.search(one_hot(0), top_k=top_k)) == expected

    def test_search_default_top_k_is_three(self, vector_store):
        assert len(vector_store.search(one_hot(0))) == 3

    def test_ties_keep_insertion_order(self, facts):
        store = VectorStore()
        store.add([0.0, 1.0], facts[0])
        store.add([2.0, 0.0], facts[1])
        store.add([5.0, 0.0], facts[2])
        store.add([1.0, 0.0], facts[3])
        results = store.search([1.0, 0.0], top_k=4)
        assert [r['index'] for r in results] == [1, 2, 3, 0]

    def test_search_on_empty_store(self):
        assert VectorStore().search([1.0, 0.0]) == []

    def test_mismatched_dimensions_score_zero(self, facts):
        store = VectorStore()
        store.add([1.0, 0.0, 0.0], facts[0])
        store.add([1.0, 0.0], facts[1])
        results = store.search([1.0, 0.0], top_k=2)
        assert results[0]['index'] == 1
        assert results[1]['similarity'] == 0.0


class TestVectorStorePersistence:

    def test_round_trip(self, vector_store, tmp_path):
        path = tmp_path / "embeddings.json"
        vector_store.save(path)

        loaded = VectorStore.from_file(path)
        assert loaded.vectors == vector_store.vectors
        assert loaded.metadata == vector_store.metadata

    def test_snapshot_is_plain_json(self, vector_store, tmp_path):
        path = tmp_path / "embeddings.json"
        vector_store.save(path)

        data = json.loads(path.read_text(encoding="utf-8"))
        assert set(data) == {"vectors", "metadata"}
        direct = data["metadata"][FACT_INDEX['large_cap_direct']]
        assert direct["factType"] == "expense_ratio"
        assert direct["factSubType"] == "direct"
        assert direct["sourceUrl"].startswith("https://")
        cams = data["metadata"][FACT_INDEX['cams']]
        assert cams["scheme"] is None
        assert cams["platform"] == "cams"

    def test_load_replaces_contents(self, vector_store, facts, tmp_path):
        path = tmp_path / "embeddings.json"
        vector_store.save(path)

        store = VectorStore()
        store.add([9.0], facts[0])
        store.load(path)
        assert len(store) == FACT_COUNT

    def test_load_statement_record_without_value(self, tmp_path):
        path = tmp_path / "embeddings.json"
        path.write_text(json.dumps({
            "vectors": [[0.5, 0.5]],
            "metadata": [{
                "scheme": None,
                "factType": "statement_download",
                "platform": "cams",
                "description": "Email request",
                "sourceUrl": "https://www.camsonline.com",
                "text": "How to download statements from cams: Email request"
            }]
        }), encoding="utf-8")

        store = VectorStore.from_file(path)
        fact = store.metadata[0]
        assert isinstance(fact, Fact)
        assert fact.value == "Email request"
        assert fact.platform == "cams"

    def test_load_rejects_misaligned_snapshot(self, tmp_path):
        path = tmp_path / "embeddings.json"
        path.write_text(json.dumps({"vectors": [[1.0], [2.0]], "metadata": []}), encoding="utf-8")
        with pytest.raises(ValueError):
            VectorStore.from_file(path)
