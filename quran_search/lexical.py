"""
Fuzzy keyword scoring for verses.

Each verse field gets its own BM25 index. Query tokens are expanded to the
fuzzy-matching vocabulary of the field (edit-distance tolerant, so spelling
variants and words with attached prefixes still match), and the quality of
those matches becomes a per-field distance. Field distances are combined
with a weighted product so that the Arabic text dominates.
"""

import logging
import math
import sys
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np
from rank_bm25 import BM25Okapi
from rapidfuzz import fuzz, process

from .utils.normalize import normalize_text, tokenize
from .utils.types import Ayat

logger = logging.getLogger(__name__)

EPSILON = sys.float_info.epsilon
MIN_RETRY_LENGTH = 2


def _lowercase(text: str) -> str:
    return text.lower()


@dataclass(frozen=True)
class FieldSpec:
    name: str
    weight: float
    prepare: Callable[[str], str] = normalize_text


# Arabic text carries most of the weight; tafsir is matched raw.
DEFAULT_FIELDS: Tuple[FieldSpec, ...] = (
    FieldSpec("arab", 0.6),
    FieldSpec("latin", 0.2),
    FieldSpec("terjemahan", 0.15),
    FieldSpec("tafsir", 0.05, _lowercase),
)


class LuceneBM25(BM25Okapi):
    """
    Okapi BM25 with Lucene's IDF.

    The classic Okapi IDF turns negative for terms present in more than half
    of the documents, which breaks small corpora (a one-verse surah would
    score every term below zero).
    """

    def _calc_idf(self, nd):
        for word, freq in nd.items():
            self.idf[word] = self.term_idf(freq)

    def term_idf(self, freq: int) -> float:
        return math.log(1 + (self.corpus_size - freq + 0.5) / (freq + 0.5))

    def term_frequencies(self, term: str) -> np.ndarray:
        return np.array([doc.get(term, 0) for doc in self.doc_freqs], dtype=np.float64)


@dataclass
class _FieldIndex:
    spec: FieldSpec
    weight: float
    bm25: Optional[LuceneBM25]
    vocabulary: List[str]


class LexicalScorer:
    """Fuzzy BM25 scorer over the text fields of a verse corpus."""

    def __init__(
        self,
        documents: Sequence[Ayat] = (),
        threshold: float = 0.15,
        min_match_length: int = 2,
        max_retries: int = 4,
        fields: Sequence[FieldSpec] = DEFAULT_FIELDS,
    ):
        """
        Initialize the scorer and index the documents.

        Args:
            documents: Verses to index
            threshold: Maximum normalized edit distance between a query token
                and an indexed term (0 = exact, 1 = anything)
            min_match_length: Query tokens shorter than this are ignored
            max_retries: Maximum number of shortened-prefix retries when the
                full query matches nothing
            fields: Indexed fields and their weights
        """
        if not 0 <= threshold <= 1:
            raise ValueError("threshold must be in [0, 1]")
        self.threshold = threshold
        self.min_match_length = max(1, min_match_length)
        self.max_retries = max(0, max_retries)
        self.fields = tuple(fields)

        self._documents: List[Ayat] = []
        self._by_id: Dict[int, Ayat] = {}
        self._fields: List[_FieldIndex] = []
        self.index(documents)

    def index(self, documents: Sequence[Ayat]) -> None:
        """Build the per-field indexes, replacing any previous ones."""
        self._documents = list(documents)
        self._by_id = {doc.id: doc for doc in self._documents}

        total_weight = sum(f.weight for f in self.fields) or 1.0
        self._fields = []
        for spec in self.fields:
            corpus = [tokenize(spec.prepare(getattr(doc, spec.name) or "")) for doc in self._documents]
            bm25 = None
            vocabulary: List[str] = []
            # BM25 divides by the average document length
            if any(corpus):
                bm25 = LuceneBM25(corpus)
                vocabulary = list(bm25.idf.keys())
            self._fields.append(_FieldIndex(spec, spec.weight / total_weight, bm25, vocabulary))

    def __len__(self) -> int:
        return len(self._documents)

    def get_document(self, doc_id: int) -> Optional[Ayat]:
        return self._by_id.get(doc_id)

    def search(self, query: str) -> List[Tuple[int, float]]:
        """
        Score verses against a query.

        Args:
            query: Raw query text

        Returns:
            List of (verse_id, score) with score in [0, 1], best first
        """
        normalized = normalize_text(query)
        if not normalized or not self._documents:
            return []

        hits = self._search_once(normalized)
        if not hits and len(normalized) > MIN_RETRY_LENGTH:
            length = math.ceil(len(normalized) / 2)
            attempts = 0
            while length >= MIN_RETRY_LENGTH and attempts < self.max_retries:
                hits = self._search_once(normalized[:length])
                if hits:
                    logger.debug("Prefix retry %r matched %d verses", normalized[:length], len(hits))
                    break
                length -= 1
                attempts += 1
        return hits

    def search_documents(self, query: str) -> List[Tuple[Ayat, float]]:
        return [(self._by_id[doc_id], score) for doc_id, score in self.search(query)]

    def _match_terms(self, token: str, vocabulary: List[str]) -> Dict[str, float]:
        """Vocabulary terms within the edit-distance threshold, with their similarity."""
        cutoff = (1 - self.threshold) * 100
        matches: Dict[str, float] = {}
        for term, score, _ in process.extract(
            token, vocabulary, scorer=fuzz.ratio, processor=None, score_cutoff=cutoff, limit=None
        ):
            matches[term] = score / 100

        # The token may sit inside a longer word (attached prefixes, compounds)
        longer = [t for t in vocabulary if len(t) > len(token)]
        for term, score, _ in process.extract(
            token, longer, scorer=fuzz.partial_ratio, processor=None, score_cutoff=cutoff, limit=None
        ):
            matches[term] = max(matches.get(term, 0.0), score / 100)
        return matches

    def _search_once(self, normalized: str) -> List[Tuple[int, float]]:
        tokens = [t for t in tokenize(normalized) if len(t) >= self.min_match_length]
        if not tokens:
            return []

        n_docs = len(self._documents)
        log_distance = np.zeros(n_docs)
        matched = np.zeros(n_docs, dtype=bool)
        relevance = np.zeros(n_docs)

        for field in self._fields:
            if field.bm25 is None:
                continue
            coverage, raw = self._score_field(field, tokens)
            has_match = coverage > 0
            if not has_match.any():
                continue
            distance = np.maximum(1.0 - coverage, EPSILON)
            log_distance += np.where(has_match, field.weight * np.log(distance), 0.0)
            matched |= has_match
            relevance += field.weight * raw

        scores = np.where(matched, np.maximum(0.0, 1.0 - np.exp(log_distance)), 0.0)
        positions = [i for i in range(n_docs) if matched[i]]
        # Stable: ties fall back to BM25 relevance, then corpus order
        positions.sort(key=lambda i: (-scores[i], -relevance[i]))
        return [(self._documents[i].id, float(scores[i])) for i in positions]

    def _score_field(self, field: _FieldIndex, tokens: List[str]) -> Tuple[np.ndarray, np.ndarray]:
        """Return (coverage, bm25) arrays over the corpus for one field."""
        bm25 = field.bm25
        n_docs = len(self._documents)
        coverage = np.zeros(n_docs)
        raw = np.zeros(n_docs)
        total_idf = 0.0

        for token in tokens:
            matches = self._match_terms(token, field.vocabulary)
            best = np.zeros(n_docs)
            containing = np.zeros(n_docs, dtype=bool)
            for term, sim in matches.items():
                present = bm25.term_frequencies(term) > 0
                containing |= present
                best = np.maximum(best, np.where(present, sim, 0.0))
                raw += sim * bm25.get_scores([term])
            # Rare query words count more towards coverage
            idf = bm25.term_idf(int(containing.sum()))
            coverage += idf * best
            total_idf += idf

        if total_idf > 0:
            coverage /= total_idf
        return coverage, raw
