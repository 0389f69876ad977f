"""
Deterministic hash embeddings for verse text.

This is not a trained model. Each character of each word is hashed into a
slot of a fixed-length vector, weighted by word and character position, and
a coarse term-frequency signal is added per distinct word. Texts that share
words, leading characters and word order end up with similar vectors.

Usage:
    from quran_search.embedding import HashEmbedding

    engine = HashEmbedding()
    vec = engine.embed("bismillah")
    score = engine.similarity(vec, engine.embed("bismillahi"))
"""

import math
from collections import Counter
from typing import Dict

import numpy as np

from .utils.normalize import normalize_text, tokenize

EMBEDDING_DIM = 384
# Room for every verse of the Quran plus recent queries
DEFAULT_MAX_CACHE_SIZE = 20000


class HashEmbedding:
    """
    Generate pseudo-embeddings by character/position hashing.

    Vectors are memoized by normalized text, so two documents whose text
    normalizes to the same string share one cache entry. The cache holds at
    most `max_cache_size` vectors.
    """

    def __init__(self, dimension: int = EMBEDDING_DIM, max_cache_size: int = DEFAULT_MAX_CACHE_SIZE):
        if dimension < 1:
            raise ValueError("dimension must be >= 1")
        self.dimension = dimension
        self.max_cache_size = max(1, max_cache_size)
        self._cache: Dict[str, np.ndarray] = {}

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    def clear_cache(self) -> None:
        self._cache.clear()

    def embed(self, text: str) -> np.ndarray:
        """
        Embed a single text.

        Args:
            text: Raw text, normalized before hashing

        Returns:
            Read-only float64 array of shape (dimension,), unit length unless
            the text is empty
        """
        key = normalize_text(text)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        vector = self._hash_vector(key)
        vector.setflags(write=False)
        if len(self._cache) >= self.max_cache_size:
            # Insertion order: drop the oldest entry
            del self._cache[next(iter(self._cache))]
        self._cache[key] = vector
        return vector

    def _hash_vector(self, normalized: str) -> np.ndarray:
        dim = self.dimension
        vector = np.zeros(dim, dtype=np.float64)
        words = tokenize(normalized)

        for i, word in enumerate(words):
            word_weight = 1.0 / (i + 1)  # Earlier words weigh more
            for j, ch in enumerate(word):
                index = (ord(ch) * 7 + i * 31 + j * 13) % dim
                vector[index] += word_weight * (1.0 / (j + 1))

        # Term frequency signal keyed on the first character
        for word, freq in Counter(words).items():
            freq_index = (ord(word[0]) * 11) % dim
            vector[freq_index] += math.log(freq + 1) * 0.5

        magnitude = np.linalg.norm(vector)
        if magnitude > 0:
            vector /= magnitude
        return vector

    def similarity(self, vec1: np.ndarray, vec2: np.ndarray) -> float:
        """
        Compute cosine similarity between two vectors.

        Returns:
            Cosine similarity score (-1 to 1), 0.0 if either vector is zero
        """
        norm1 = np.linalg.norm(vec1)
        norm2 = np.linalg.norm(vec2)

        if norm1 == 0 or norm2 == 0:
            return 0.0

        return float(np.dot(vec1, vec2) / (norm1 * norm2))
