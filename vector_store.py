"""
Vector Store - In-memory exhaustive cosine search over fact embeddings

Every search scores all stored vectors, O(n*d) for n facts of dimension d.
That is fine for the tens of facts in the knowledge base; past a few
thousand facts this needs a real index.
"""
import json
from pathlib import Path
from typing import Dict, List, Sequence, Union

import numpy as np

from constants import DEFAULT_TOP_K
from knowledge_base import Fact
from structured_logger import get_logger

Vector = Union[Sequence[float], np.ndarray]


def cosine_similarity(vec_a: Vector, vec_b: Vector) -> float:
    """
    Cosine similarity of two vectors.
    0.0 when the lengths differ, either vector has zero magnitude,
    or either input is not a flat list of numbers.
    """
    try:
        a = np.asarray(vec_a, dtype=np.float64)
        b = np.asarray(vec_b, dtype=np.float64)
    except (TypeError, ValueError):
        return 0.0
    if a.ndim != 1 or b.ndim != 1 or a.shape != b.shape:
        return 0.0

    norm_a = float(np.dot(a, a))
    norm_b = float(np.dot(b, b))
    if norm_a == 0 or norm_b == 0:
        return 0.0

    return float(np.dot(a, b)) / (np.sqrt(norm_a) * np.sqrt(norm_b))


class VectorStore:
    """Parallel vectors / metadata lists, vectors[i] belongs to metadata[i]"""

    def __init__(self):
        self.vectors: List[List[float]] = []
        self.metadata: List[Fact] = []

    def __len__(self) -> int:
        return len(self.vectors)

    def add(self, vector: Vector, metadata: Fact):
        """Append a vector and its fact (no dedup, no dimension check)"""
        self.vectors.append([float(x) for x in vector])
        self.metadata.append(metadata)

    def search(self, query_vector: Vector, top_k: int = DEFAULT_TOP_K) -> List[Dict]:
        """
        Rank every stored fact by cosine similarity to the query

        Args:
            query_vector: Question embedding
            top_k: Number of results to return

        Returns:
            List of dicts with 'index', 'similarity', 'metadata', best first.
            Equal scores keep insertion order.
        """
        if top_k <= 0:
            return []

        similarities = [
            {
                'index': index,
                'similarity': cosine_similarity(query_vector, vector),
                'metadata': self.metadata[index]
            }
            for index, vector in enumerate(self.vectors)
        ]

        # sorted() is stable, also with reverse=True
        similarities = sorted(similarities, key=lambda r: r['similarity'], reverse=True)
        return similarities[:top_k]

    def save(self, filepath):
        """Write the whole store as JSON {vectors, metadata}"""
        data = {
            'vectors': self.vectors,
            'metadata': [fact.to_dict() for fact in self.metadata]
        }
        with open(Path(filepath), 'w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        get_logger().info("vector_store_saved", path=str(filepath), vector_count=len(self.vectors))

    def load(self, filepath):
        """Replace the contents with a saved snapshot"""
        with open(Path(filepath), 'r', encoding='utf-8') as f:
            data = json.load(f)

        vectors = data.get('vectors', [])
        metadata = data.get('metadata', [])
        if len(vectors) != len(metadata):
            raise ValueError(
                f"Corrupt snapshot {filepath}: {len(vectors)} vectors but {len(metadata)} metadata records"
            )

        self.vectors = [[float(x) for x in vector] for vector in vectors]
        self.metadata = [Fact.from_dict(record) for record in metadata]
        get_logger().info("vector_store_loaded", path=str(filepath), vector_count=len(self.vectors))

    @classmethod
    def from_file(cls, filepath) -> 'VectorStore':
        store = cls()
        store.load(filepath)
        return store
