"""
Hybrid search over the verses of a surah (or of the whole Quran).
Combines fuzzy keyword (BM25) scoring with hash-embedding similarity.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from .config import (
    DEFAULT_HYBRID_CONFIG,
    KEYWORD_ONLY_BOOST,
    SEMANTIC_ONLY_BOOST,
    HybridSearchConfig,
)
from .embedding import HashEmbedding
from .lexical import LexicalScorer
from .utils.indexing import VectorStore
from .utils.types import MATCH_BOTH, MATCH_KEYWORD, MATCH_SEMANTIC, Ayat, SearchResult

logger = logging.getLogger(__name__)


def fuse_scores(bm25_score: float, semantic_score: float, config: HybridSearchConfig) -> Optional[Tuple[float, str]]:
    """
    Merge the two channel scores of one candidate.

    Returns:
        (hybrid_score, match_type), or None when neither channel clears its
        admission threshold
    """
    if bm25_score < config.min_bm25_threshold and semantic_score < config.min_semantic_threshold:
        return None

    if bm25_score > 0 and semantic_score > 0:
        hybrid = bm25_score * config.bm25_weight + semantic_score * config.semantic_weight
        return hybrid, MATCH_BOTH
    if bm25_score > 0:
        return bm25_score * KEYWORD_ONLY_BOOST, MATCH_KEYWORD
    if semantic_score > 0:
        return semantic_score * SEMANTIC_ONLY_BOOST, MATCH_SEMANTIC
    # Only reachable with non-positive thresholds
    return 0.0, MATCH_SEMANTIC


class HybridSearchEngine:
    """Search engine for a bounded verse corpus."""

    def __init__(
        self,
        documents: Sequence[Ayat],
        config: Optional[HybridSearchConfig] = None,
        embedding: Optional[HashEmbedding] = None,
        **overrides: float,
    ):
        """
        Index the corpus for both channels.

        Args:
            documents: Verses to search; ids must be unique
            config: Base configuration (defaults when omitted)
            embedding: Shared embedding generator, so its cache can be reused
                across engines
            **overrides: Individual config fields to replace
        """
        self.documents: List[Ayat] = list(documents)
        self._position: Dict[int, int] = {doc.id: i for i, doc in enumerate(self.documents)}
        self._by_id: Dict[int, Ayat] = {doc.id: doc for doc in self.documents}
        self.config = (config or DEFAULT_HYBRID_CONFIG).merged(**overrides)

        self.bm25 = LexicalScorer(self.documents)
        self.vector_db = VectorStore(embedding)
        self.vector_db.index_documents(self.documents)

    def search(self, query: str, top_k: int = 20) -> List[SearchResult]:
        """
        Search for verses matching the query.

        Args:
            query: Search query, Arabic or Latin
            top_k: Number of results to return

        Returns:
            List of SearchResult objects sorted by hybrid score
        """
        if top_k <= 0 or not query or not query.strip() or not self.documents:
            return []
        logger.debug("Hybrid search for %r over %d verses", query, len(self.documents))

        config = self.config
        bm25_scores = dict(self.bm25.search(query))
        semantic_scores = dict(self.vector_db.search(query, top_k * 2))

        # Candidates in corpus order so equal scores keep input order
        candidates = sorted(set(bm25_scores) | set(semantic_scores), key=self._position.__getitem__)

        results: List[SearchResult] = []
        for doc_id in candidates:
            document = self._by_id.get(doc_id)
            if document is None:
                continue
            bm25_score = bm25_scores.get(doc_id, 0.0)
            semantic_score = semantic_scores.get(doc_id, 0.0)

            fused = fuse_scores(bm25_score, semantic_score, config)
            if fused is None:
                continue
            hybrid_score, match_type = fused
            results.append(SearchResult.from_ayat(document, bm25_score, semantic_score, hybrid_score, match_type))

        results.sort(key=lambda r: r.hybrid_score, reverse=True)
        results = results[:top_k]
        logger.debug("Found %d results", len(results))
        return results

    def update_config(self, **partial: float) -> None:
        """Merge fields into the live config; affects later searches only."""
        self.config = self.config.merged(**partial)

    def get_config(self) -> HybridSearchConfig:
        return self.config.merged()
