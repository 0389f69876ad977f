"""
Text normalization for Arabic verses and Latin/Indonesian text.

Folding is lossy on purpose: several Arabic letter forms collapse to one
representative so that spelling variants match each other.
"""

import re
import unicodedata
from typing import List, Optional

ARABIC_DIACRITICS_RE = re.compile(r"[\u064B-\u065F]")
TATWEEL = "\u0640"
ARABIC_RANGE_RE = re.compile(r"[\u0600-\u06FF]")
WHITESPACE_RE = re.compile(r"\s+")
# Anything that is not a letter, digit or whitespace. Underscore is part of \w.
NON_WORD_RE = re.compile(r"[^\w\s]|_")

ARABIC_LETTER_MAP = {
    # Alef variations
    "أ": "ا",
    "إ": "ا",
    "آ": "ا",
    # Ya variations
    "ى": "ي",
    "ئ": "ي",
    # Ta marbuta
    "ة": "ه",
    # Standalone hamza
    "ء": "",
    # Waw with hamza
    "ؤ": "و",
}
_ARABIC_TRANSLATION = str.maketrans(ARABIC_LETTER_MAP)


def collapse_whitespace(text: str) -> str:
    return WHITESPACE_RE.sub(" ", text).strip()


def normalize_arabic(text: Optional[str]) -> str:
    """Strip harakat and tatweel, then fold Arabic letter variants."""
    if not text:
        return ""
    normalized = unicodedata.normalize("NFKD", text)
    normalized = ARABIC_DIACRITICS_RE.sub("", normalized)
    normalized = normalized.replace(TATWEEL, "")
    normalized = normalized.translate(_ARABIC_TRANSLATION)
    return collapse_whitespace(normalized)


def normalize_latin(text: Optional[str]) -> str:
    """Lowercase and drop punctuation and combining marks from Latin text."""
    if not text:
        return ""
    normalized = unicodedata.normalize("NFKD", text).lower()
    normalized = NON_WORD_RE.sub("", normalized)
    return collapse_whitespace(normalized)


def normalize_text(text: Optional[str]) -> str:
    """
    Canonical form used for matching queries against verse text.

    Works on mixed Arabic and Latin input: Arabic folding is applied first,
    then case folding and punctuation stripping.
    """
    return normalize_latin(normalize_arabic(text))


def has_arabic(text: Optional[str]) -> bool:
    """True when the text contains any codepoint from the Arabic block."""
    if not text:
        return False
    return ARABIC_RANGE_RE.search(text) is not None


def tokenize(text: Optional[str]) -> List[str]:
    if not text:
        return []
    return [t for t in WHITESPACE_RE.split(text) if t]
