from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

MATCH_KEYWORD = "keyword"
MATCH_SEMANTIC = "semantic"
MATCH_BOTH = "both"


@dataclass(frozen=True)
class Ayat:
    """A single verse as served by the verse API."""
    id: int
    arab: str
    latin: str
    terjemahan: str
    tafsir: str = ""

    @property
    def combined_text(self) -> str:
        return " ".join(part or "" for part in (self.arab, self.latin, self.terjemahan, self.tafsir))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Ayat":
        return cls(
            id=int(data["id"]),
            arab=data.get("arab") or "",
            latin=data.get("latin") or "",
            terjemahan=data.get("terjemahan") or "",
            tafsir=data.get("tafsir") or "",
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Surah:
    """A surah with its verses."""
    number: int
    name_short: str
    name_long: str = ""
    transliteration: str = ""
    translation: str = ""
    verses: List[Ayat] = field(default_factory=list)
    revelation: str = ""

    @property
    def number_of_verses(self) -> int:
        return len(self.verses)

    def get_ayat(self, ayat_id: int) -> Optional[Ayat]:
        for ayat in self.verses:
            if ayat.id == ayat_id:
                return ayat
        return None


@dataclass
class SearchResult:
    """A verse ranked by the hybrid engine."""
    id: int
    arab: str
    latin: str
    terjemahan: str
    tafsir: str
    bm25_score: float
    semantic_score: float
    hybrid_score: float
    match_type: str  # "keyword" | "semantic" | "both"

    @classmethod
    def from_ayat(
        cls,
        ayat: Ayat,
        bm25_score: float,
        semantic_score: float,
        hybrid_score: float,
        match_type: str,
    ) -> "SearchResult":
        return cls(
            id=ayat.id,
            arab=ayat.arab,
            latin=ayat.latin,
            terjemahan=ayat.terjemahan,
            tafsir=ayat.tafsir,
            bm25_score=bm25_score,
            semantic_score=semantic_score,
            hybrid_score=hybrid_score,
            match_type=match_type,
        )

    def to_ayat(self) -> Ayat:
        return Ayat(
            id=self.id,
            arab=self.arab,
            latin=self.latin,
            terjemahan=self.terjemahan,
            tafsir=self.tafsir,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class FormattedSearchResult:
    """A search hit as returned by the search manager."""
    ayat: Ayat
    surah_number: int
    surah_name: str
    match_count: int
    match_type: str  # "arab" | "latin" | "terjemahan" | "tafsir"
    search_language: str  # "arab" | "indonesia"
    score: float = 0.0


@dataclass
class SearchMetrics:
    total_results: int
    keyword_matches: int
    semantic_matches: int
    hybrid_matches: int
    average_bm25_score: float
    average_semantic_score: float
    average_hybrid_score: float
    execution_time: float


JsonDict = Dict[str, Any]
