"""
Search manager for Quran verse search.
Owns the engine configuration and the surah/term caches, and runs local
(one surah) and global (all surahs) searches.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable, Dict, List, Optional, Tuple, Union

from rapidfuzz import fuzz
from tqdm.asyncio import tqdm_asyncio

from .client import QuranClient
from .config import HybridSearchConfig
from .embedding import HashEmbedding
from .search import HybridSearchEngine
from .utils.loaders import load_corpus, surah_summary
from .utils.normalize import has_arabic, normalize_text
from .utils.surah_names import SURAH_COUNT, parse_surah_reference
from .utils.types import Ayat, FormattedSearchResult, JsonDict, Surah

logger = logging.getLogger(__name__)

FetchSurah = Callable[[int], Awaitable[Surah]]
ListSurahs = Callable[[], Awaitable[List[JsonDict]]]

LANGUAGE_ARABIC = "arab"
LANGUAGE_INDONESIAN = "indonesia"

# Oldest normalized terms are evicted past this size
MAX_TERM_CACHE = 1024


class EmptyQueryError(ValueError):
    """The search term is empty or whitespace only."""


class SearchFailedError(RuntimeError):
    """An unexpected error occurred while searching."""


@dataclass(frozen=True)
class FallbackOptions:
    fields: Tuple[Tuple[str, float], ...]
    threshold: float
    min_match_length: int = 2


ARABIC_FALLBACK = FallbackOptions(fields=(("arab", 2.0), ("latin", 1.0), ("terjemahan", 1.0)), threshold=0.25)
LATIN_FALLBACK = FallbackOptions(fields=(("terjemahan", 1.0), ("latin", 1.0), ("tafsir", 1.0)), threshold=0.3)
LATIN_COUNT_FIELDS = ("terjemahan", "latin", "tafsir")


def count_matches(ayat: Ayat, term: str, arabic: bool) -> int:
    """
    Count literal occurrences of a normalized term in a verse.

    Arabic terms are counted as substrings of the Arabic text; Latin terms as
    whole words in the translation, transliteration and tafsir.
    """
    if not term:
        return 0
    if arabic:
        return normalize_text(ayat.arab).count(term)

    pattern = re.compile(rf"\b{re.escape(term)}\b")
    return sum(len(pattern.findall(normalize_text(getattr(ayat, f)))) for f in LATIN_COUNT_FIELDS)


def matched_field(ayat: Ayat, term: str, arabic: bool) -> str:
    """The verse field a hit is attributed to."""
    if arabic:
        return "arab"
    for name in LATIN_COUNT_FIELDS:
        if term and term in normalize_text(getattr(ayat, name)):
            return name
    return "terjemahan"


def fuzzy_distance(ayat: Ayat, term: str, options: FallbackOptions) -> Optional[float]:
    """
    Weighted fuzzy-substring distance of a verse from the term.

    Returns:
        Distance in [0, 1], or None when no field is within the threshold
    """
    if len(term) < options.min_match_length:
        return None
    weighted = 0.0
    total = 0.0
    for name, weight in options.fields:
        text = normalize_text(getattr(ayat, name))
        if len(text) < options.min_match_length:
            continue
        distance = 1.0 - fuzz.partial_ratio(term, text) / 100
        if distance <= options.threshold:
            weighted += weight * distance
            total += weight
    if total == 0:
        return None
    return weighted / total


class SearchManager:
    """
    Entry point for verse search.

    One instance is created at the composition root and passed to callers;
    it carries the engine config, the surah cache and the normalized-term
    cache.
    """

    def __init__(
        self,
        fetch_surah: FetchSurah,
        config: Optional[HybridSearchConfig] = None,
        min_hybrid_score: float = 0.4,
        engine_top_k: int = 50,
        surah_count: int = SURAH_COUNT,
        show_progress: bool = False,
        on_close: Optional[Callable[[], Awaitable[None]]] = None,
        list_surahs: Optional[ListSurahs] = None,
    ):
        """
        Initialize the search manager.

        Args:
            fetch_surah: Coroutine function returning a Surah by number
            config: Hybrid engine configuration
            min_hybrid_score: Hybrid results below this score are dropped
            engine_top_k: Results requested from the engine per surah
            surah_count: Number of surahs searched globally
            show_progress: Show a progress bar during global search
            on_close: Coroutine function releasing the fetch resources
            list_surahs: Coroutine function returning surah summaries
        """
        self._fetch_surah = fetch_surah
        self._config = config or HybridSearchConfig()
        self.min_hybrid_score = min_hybrid_score
        self.engine_top_k = engine_top_k
        self.surah_count = surah_count
        self.show_progress = show_progress
        self._on_close = on_close
        self._list_surahs = list_surahs

        self.embedding = HashEmbedding()
        self._surah_cache: Dict[int, Surah] = {}
        self._term_cache: Dict[str, str] = {}

    def get_config(self) -> HybridSearchConfig:
        return self._config.merged()

    def update_config(self, **partial: float) -> None:
        self._config = self._config.merged(**partial)

    def normalize_term(self, term: str) -> str:
        cached = self._term_cache.get(term)
        if cached is None:
            cached = normalize_text(term)
            if len(self._term_cache) >= MAX_TERM_CACHE:
                del self._term_cache[next(iter(self._term_cache))]
            self._term_cache[term] = cached
        return cached

    async def get_surah(self, surah_number: int) -> Surah:
        """Fetch a surah, reusing the cached copy when present."""
        surah = self._surah_cache.get(surah_number)
        if surah is None:
            surah = await self._fetch_surah(surah_number)
            self._surah_cache[surah_number] = surah
        return surah

    def search_local(self, term: str, surah: Surah) -> List[FormattedSearchResult]:
        """
        Search within a single surah.

        Args:
            term: Raw search term, Arabic or Latin
            surah: The surah to search

        Returns:
            Results sorted by match count, best first

        Raises:
            EmptyQueryError: if the term is blank
            SearchFailedError: on any unexpected error while searching
        """
        clean_term, arabic = self._prepare(term)
        try:
            results = self._search_surah(surah, clean_term, arabic)
        except Exception as e:
            logger.exception("Error searching surah %s", surah.number)
            raise SearchFailedError("Search failed") from e

        results.sort(key=lambda r: r.match_count, reverse=True)
        return results

    async def search_global(self, term: str) -> List[FormattedSearchResult]:
        """
        Search every surah concurrently.

        A surah that cannot be fetched or searched contributes no results;
        the failure is logged and the search carries on.

        Raises:
            EmptyQueryError: if the term is blank
            SearchFailedError: on any unexpected error outside a single surah
        """
        clean_term, arabic = self._prepare(term)

        async def search_one(surah_number: int) -> List[FormattedSearchResult]:
            try:
                surah = await self.get_surah(surah_number)
                return self._search_surah(surah, clean_term, arabic)
            except Exception as e:
                logger.warning("Error searching surah %d: %s", surah_number, e)
                return []

        numbers = range(1, self.surah_count + 1)
        try:
            per_surah = await tqdm_asyncio.gather(
                *(search_one(n) for n in numbers),
                total=len(numbers),
                desc="Searching surahs",
                disable=not self.show_progress,
            )
        except Exception as e:
            logger.exception("Global search error")
            raise SearchFailedError("Search failed") from e

        # gather keeps surah order; the stable sort keeps it among equal counts
        results = [r for surah_results in per_surah for r in surah_results]
        results.sort(key=lambda r: r.match_count, reverse=True)
        return results

    async def lookup_reference(self, text: str) -> Optional[Tuple[Surah, Ayat]]:
        """
        Resolve a direct verse reference such as "Al-Fatihah:7".

        Returns:
            (surah, ayat) if the text is a reference to an existing verse,
            otherwise None
        """
        ref = parse_surah_reference(text)
        if ref is None:
            return None
        surah_number, ayat_number = ref
        surah = await self.get_surah(surah_number)
        ayat = surah.get_ayat(ayat_number)
        if ayat is None:
            return None
        return surah, ayat

    async def list_surahs(self) -> List[JsonDict]:
        """
        Summaries of every surah (number, names, verse count, revelation).

        Uses the configured lister when there is one, otherwise builds the
        summaries from fetched surahs.
        """
        if self._list_surahs is not None:
            return await self._list_surahs()
        return [surah_summary(await self.get_surah(n)) for n in range(1, self.surah_count + 1)]

    def clear_cache(self) -> None:
        self._surah_cache.clear()
        self._term_cache.clear()
        self.embedding.clear_cache()

    async def aclose(self) -> None:
        if self._on_close is not None:
            await self._on_close()

    def _prepare(self, term: str) -> Tuple[str, bool]:
        if not term or not term.strip():
            raise EmptyQueryError("Search term cannot be empty")
        return self.normalize_term(term), has_arabic(term)

    def _search_surah(self, surah: Surah, clean_term: str, arabic: bool) -> List[FormattedSearchResult]:
        language = LANGUAGE_ARABIC if arabic else LANGUAGE_INDONESIAN
        engine = HybridSearchEngine(surah.verses, self._config, embedding=self.embedding)

        results: List[FormattedSearchResult] = []
        for hit in engine.search(clean_term, self.engine_top_k):
            if hit.hybrid_score < self.min_hybrid_score:
                continue
            ayat = hit.to_ayat()
            results.append(
                FormattedSearchResult(
                    ayat=ayat,
                    surah_number=surah.number,
                    surah_name=surah.name_short,
                    match_count=1,
                    match_type=matched_field(ayat, clean_term, arabic),
                    search_language=language,
                    score=hit.hybrid_score,
                )
            )

        if not results:
            results = self._fallback_search(surah, clean_term, arabic)
        return results

    def _fallback_search(self, surah: Surah, clean_term: str, arabic: bool) -> List[FormattedSearchResult]:
        """Plain fuzzy-substring pass used when the hybrid engine finds nothing."""
        options = ARABIC_FALLBACK if arabic else LATIN_FALLBACK
        language = LANGUAGE_ARABIC if arabic else LANGUAGE_INDONESIAN

        scored = []
        for ayat in surah.verses:
            distance = fuzzy_distance(ayat, clean_term, options)
            if distance is None:
                continue
            match_count = count_matches(ayat, clean_term, arabic)
            if match_count > 0:
                scored.append((distance, ayat, match_count))

        scored.sort(key=lambda item: item[0])
        return [
            FormattedSearchResult(
                ayat=ayat,
                surah_number=surah.number,
                surah_name=surah.name_short,
                match_count=match_count,
                match_type=matched_field(ayat, clean_term, arabic),
                search_language=language,
                score=1.0 - distance,
            )
            for distance, ayat, match_count in scored
        ]


def create_manager(
    data_file: Optional[Union[str, Path]] = None,
    config: Optional[HybridSearchConfig] = None,
    show_progress: bool = False,
    **kwargs,
) -> SearchManager:
    """
    Factory function to create a search manager.

    Args:
        data_file: Corpus file written by `quran-build-index`; when omitted
            surahs are fetched from the verse API
        config: Engine configuration (default: from environment)
        show_progress: Show a progress bar during global search
        **kwargs: Passed to SearchManager

    Returns:
        Configured SearchManager instance
    """
    config = config or HybridSearchConfig.from_env()

    if data_file is not None:
        corpus = load_corpus(data_file)

        async def fetch_local(surah_number: int) -> Surah:
            if surah_number not in corpus:
                raise KeyError(f"Surah {surah_number} not found in {data_file}")
            return corpus[surah_number]

        async def list_local() -> List[JsonDict]:
            return [surah_summary(corpus[n]) for n in sorted(corpus)]

        return SearchManager(
            fetch_local, config, show_progress=show_progress, list_surahs=list_local, **kwargs
        )

    client = QuranClient()
    return SearchManager(
        client.fetch_surah,
        config,
        show_progress=show_progress,
        on_close=client.close,
        list_surahs=client.fetch_surah_list,
        **kwargs,
    )
