from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np
import faiss

from ..embedding import EMBEDDING_DIM, HashEmbedding
from .types import Ayat


class VectorStore:
    """
    In-memory cosine-similarity store keyed by verse id.

    Embeddings are unit-normalized (or all zero for empty text), so an
    exhaustive inner-product FAISS index gives cosine similarity directly.
    The id map lets a verse be re-indexed in place.
    """

    def __init__(self, embedding: Optional[HashEmbedding] = None, dimension: int = EMBEDDING_DIM):
        self.embedding = embedding or HashEmbedding(dimension)
        self.dim = self.embedding.dimension
        self._index = faiss.IndexIDMap2(faiss.IndexFlatIP(self.dim))
        self._documents: Dict[int, Ayat] = {}

    def __len__(self) -> int:
        return int(self._index.ntotal)

    def index_documents(self, documents: Iterable[Ayat]) -> None:
        """Embed and store each verse, replacing any vector already held for its id."""
        latest: Dict[int, Ayat] = {}
        for doc in documents:
            latest[doc.id] = doc
        if not latest:
            return

        ids = np.array(list(latest.keys()), dtype=np.int64)
        vectors = np.vstack([self.embedding.embed(doc.combined_text) for doc in latest.values()])

        stale = np.array([i for i in ids.tolist() if i in self._documents], dtype=np.int64)
        if stale.size:
            self._index.remove_ids(stale)

        self._index.add_with_ids(np.ascontiguousarray(vectors, dtype=np.float32), ids)
        self._documents.update(latest)

    def search(self, query: str, top_k: int = 10) -> List[Tuple[int, float]]:
        """
        Rank stored verses by cosine similarity to the query.

        Args:
            query: Raw query text
            top_k: Maximum number of hits

        Returns:
            List of (verse_id, similarity) sorted by similarity descending
        """
        if top_k <= 0 or len(self) == 0:
            return []

        q = self.embedding.embed(query).reshape(1, -1)
        k = min(top_k, len(self))
        scores, ids = self._index.search(np.ascontiguousarray(q, dtype=np.float32), k)

        hits: List[Tuple[int, float]] = []
        for score, doc_id in zip(scores[0].tolist(), ids[0].tolist()):
            if doc_id < 0:
                continue
            hits.append((int(doc_id), float(score)))
        return hits

    def get_vector(self, doc_id: int) -> Optional[np.ndarray]:
        if doc_id not in self._documents:
            return None
        return self._index.reconstruct(int(doc_id))

    def get_document(self, doc_id: int) -> Optional[Ayat]:
        return self._documents.get(doc_id)

    def clear(self) -> None:
        self._index.reset()
        self._documents.clear()
