"""
Surah name lookup and "name:ayat" reference parsing.
"""

import re
from typing import Dict, List, Optional, Tuple

# Transliterated surah names (as used by the verse API) to surah number
SURAH_NAME_MAP: Dict[str, int] = {
    "al-fatihah": 1,
    "al-baqarah": 2,
    "ali-imran": 3,
    "an-nisa": 4,
    "al-maidah": 5,
    "al-anam": 6,
    "al-araf": 7,
    "al-anfal": 8,
    "at-taubah": 9,
    "yunus": 10,
    "hud": 11,
    "yusuf": 12,
    "ar-rad": 13,
    "ibrahim": 14,
    "al-hijr": 15,
    "an-nahl": 16,
    "al-isra": 17,
    "al-kahf": 18,
    "maryam": 19,
    "taha": 20,
    "al-anbiya": 21,
    "al-hajj": 22,
    "al-mukminun": 23,
    "an-nur": 24,
    "al-furqan": 25,
    "ash-shuara": 26,
    "an-naml": 27,
    "al-qasas": 28,
    "al-ankabut": 29,
    "ar-rum": 30,
    "luqman": 31,
    "as-sajdah": 32,
    "al-ahzab": 33,
    "saba": 34,
    "fatir": 35,
    "ya-sin": 36,
    "as-saffat": 37,
    "sad": 38,
    "az-zumar": 39,
    "ghafir": 40,
    "fussilat": 41,
    "ash-shura": 42,
    "az-zukhruf": 43,
    "ad-dukhan": 44,
    "al-jathiyah": 45,
    "al-ahqaf": 46,
    "muhammad": 47,
    "al-fath": 48,
    "al-hujurat": 49,
    "qaf": 50,
    "adh-dhariyat": 51,
    "at-tur": 52,
    "an-najm": 53,
    "al-qamar": 54,
    "ar-rahman": 55,
    "al-waqiah": 56,
    "al-hadid": 57,
    "al-mujadilah": 58,
    "al-hashr": 59,
    "al-mumtahanah": 60,
    "as-saff": 61,
    "al-jumuah": 62,
    "al-munafiqun": 63,
    "at-taghabun": 64,
    "at-talaq": 65,
    "at-tahrim": 66,
    "al-mulk": 67,
    "al-qalam": 68,
    "al-haqqah": 69,
    "al-maarij": 70,
    "nuh": 71,
    "al-jinn": 72,
    "al-muzzammil": 73,
    "al-muddaththir": 74,
    "al-qiyamah": 75,
    "al-insan": 76,
    "al-mursalat": 77,
    "an-naba": 78,
    "an-naziat": 79,
    "abasa": 80,
    "at-takwir": 81,
    "al-infitar": 82,
    "al-mutaffifin": 83,
    "al-inshiqaq": 84,
    "al-buruj": 85,
    "at-tariq": 86,
    "al-ala": 87,
    "al-ghashiyah": 88,
    "al-fajr": 89,
    "al-balad": 90,
    "ash-shams": 91,
    "al-lail": 92,
    "ad-duha": 93,
    "ash-sharh": 94,
    "at-tin": 95,
    "al-alaq": 96,
    "al-qadr": 97,
    "al-bayyinah": 98,
    "az-zalzalah": 99,
    "al-adiyat": 100,
    "al-qaria": 101,
    "at-takathur": 102,
    "al-asr": 103,
    "al-humaza": 104,
    "al-fil": 105,
    "quraish": 106,
    "al-maun": 107,
    "al-kawthar": 108,
    "al-kafirun": 109,
    "an-nasr": 110,
    "al-lahab": 111,
    "al-ikhlas": 112,
    "al-falaq": 113,
    "an-nas": 114,
}

SURAH_COUNT = 114
MAX_AYAT_IN_SURAH = 286  # Al-Baqarah

REFERENCE_RE = re.compile(r"^([A-Za-z\s'-]+?)[:\s]+(\d+)$")


def normalize_surah_name(name: str) -> str:
    """Lowercase and join words with single hyphens ("Al Fatihah" -> "al-fatihah")."""
    name = name.lower().strip()
    name = re.sub(r"[-\s]+", "-", name)
    return re.sub(r"[^\w-]|_", "", name).strip("-")


def get_surah_number_by_name(name: str) -> Optional[int]:
    return SURAH_NAME_MAP.get(normalize_surah_name(name))


def get_all_surah_names() -> List[str]:
    return list(SURAH_NAME_MAP.keys())


def parse_surah_reference(text: str) -> Optional[Tuple[int, int]]:
    """
    Parse a verse reference from a query string.

    Handles formats like:
    - "Al-Fatihah:7"
    - "al fatihah 7"

    Returns:
        (surah_number, ayat_number) if the text is a reference, otherwise None
    """
    if not text or not text.strip():
        return None

    match = REFERENCE_RE.match(text.strip())
    if not match:
        return None

    surah_number = get_surah_number_by_name(match.group(1))
    ayat_number = int(match.group(2))
    if surah_number is None or not 1 <= ayat_number <= MAX_AYAT_IN_SURAH:
        return None
    return surah_number, ayat_number
