"""
Helpers for summarizing and post-processing hybrid search results.
"""

from typing import Dict, List, Sequence

from .types import MATCH_BOTH, MATCH_KEYWORD, MATCH_SEMANTIC, SearchMetrics, SearchResult


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def calculate_search_metrics(results: Sequence[SearchResult], execution_time: float) -> SearchMetrics:
    """Count results per match type and average each score (rounded to 2 places)."""
    return SearchMetrics(
        total_results=len(results),
        keyword_matches=sum(1 for r in results if r.match_type == MATCH_KEYWORD),
        semantic_matches=sum(1 for r in results if r.match_type == MATCH_SEMANTIC),
        hybrid_matches=sum(1 for r in results if r.match_type == MATCH_BOTH),
        average_bm25_score=round(_mean([r.bm25_score for r in results]), 2),
        average_semantic_score=round(_mean([r.semantic_score for r in results]), 2),
        average_hybrid_score=round(_mean([r.hybrid_score for r in results]), 2),
        execution_time=execution_time,
    )


def format_search_result(result: SearchResult) -> dict:
    return {
        "id": result.id,
        "arab": result.arab,
        "latin": result.latin,
        "terjemahan": result.terjemahan,
        "tafsir": result.tafsir,
        "scores": {
            "bm25": f"{result.bm25_score:.2f}",
            "semantic": f"{result.semantic_score:.2f}",
            "hybrid": f"{result.hybrid_score:.2f}",
        },
        "match_type": result.match_type,
    }


def group_results_by_match_type(results: Sequence[SearchResult]) -> Dict[str, List[SearchResult]]:
    groups: Dict[str, List[SearchResult]] = {MATCH_KEYWORD: [], MATCH_SEMANTIC: [], MATCH_BOTH: []}
    for r in results:
        groups[r.match_type].append(r)
    return groups


def filter_results_by_score(
    results: Sequence[SearchResult],
    min_hybrid_score: float = 0.3,
    min_bm25_score: float = 0.0,
    min_semantic_score: float = 0.0,
) -> List[SearchResult]:
    """Keep results above the hybrid floor, or above both channel floors."""
    return [
        r
        for r in results
        if r.hybrid_score >= min_hybrid_score
        or (r.bm25_score >= min_bm25_score and r.semantic_score >= min_semantic_score)
    ]


def rank_results_by_relevance(results: Sequence[SearchResult]) -> List[SearchResult]:
    """Results confirmed by both channels first, then by hybrid score."""
    return sorted(results, key=lambda r: (r.match_type != MATCH_BOTH, -r.hybrid_score))


def deduplicate_results(results: Sequence[SearchResult]) -> List[SearchResult]:
    seen = set()
    out: List[SearchResult] = []
    for r in results:
        if r.id in seen:
            continue
        seen.add(r.id)
        out.append(r)
    return out
