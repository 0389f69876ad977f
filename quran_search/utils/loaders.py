from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Sequence

from .types import Ayat, JsonDict, Surah


def _get(data: Any, *keys: str, default: Any = "") -> Any:
    """Walk nested dicts, returning `default` when any level is missing."""
    for key in keys:
        if not isinstance(data, dict) or data.get(key) is None:
            return default
        data = data[key]
    return data


def parse_ayat(verse: JsonDict) -> Ayat:
    """Turn one API verse record into an Ayat."""
    return Ayat(
        id=int(_get(verse, "number", "inSurah", default=0)),
        arab=_get(verse, "text", "arab"),
        latin=_get(verse, "text", "transliteration", "en"),
        terjemahan=_get(verse, "translation", "id"),
        tafsir=_get(verse, "tafsir", "id", "short"),
    )


def parse_surah_payload(payload: JsonDict) -> Surah:
    """
    Parse the body of `GET /surah/{number}`.

    Raises:
        ValueError: if the payload has no verse list
    """
    data = payload.get("data") if isinstance(payload, dict) else None
    verses = _get(data, "verses", default=None)
    if not isinstance(verses, list):
        raise ValueError("Invalid API data structure: missing verse list")

    return Surah(
        number=int(_get(data, "number", default=0)),
        name_short=_get(data, "name", "short"),
        name_long=_get(data, "name", "long"),
        transliteration=_get(data, "name", "transliteration", "id"),
        translation=_get(data, "name", "translation", "id"),
        verses=[parse_ayat(v) for v in verses],
        revelation=_get(data, "revelation", "id"),
    )


def parse_surah_list(payload: JsonDict) -> List[JsonDict]:
    """Parse the body of `GET /surah` into plain summary dicts."""
    items = payload.get("data") if isinstance(payload, dict) else None
    out: List[JsonDict] = []
    for item in items or []:
        out.append(
            {
                "number": int(_get(item, "number", default=0)),
                "name_short": _get(item, "name", "short"),
                "transliteration": _get(item, "name", "transliteration", "id"),
                "translation": _get(item, "name", "translation", "id"),
                "number_of_verses": int(_get(item, "numberOfVerses", default=0)),
                "revelation": _get(item, "revelation", "id"),
            }
        )
    return out


def surah_summary(surah: Surah) -> JsonDict:
    """Summary dict in the same shape as `parse_surah_list` items."""
    return {
        "number": surah.number,
        "name_short": surah.name_short,
        "transliteration": surah.transliteration,
        "translation": surah.translation,
        "number_of_verses": surah.number_of_verses,
        "revelation": surah.revelation,
    }


def surah_to_dict(surah: Surah) -> JsonDict:
    return {
        "number": surah.number,
        "name_short": surah.name_short,
        "name_long": surah.name_long,
        "transliteration": surah.transliteration,
        "translation": surah.translation,
        "revelation": surah.revelation,
        "verses": [a.to_dict() for a in surah.verses],
    }


def surah_from_dict(data: JsonDict) -> Surah:
    return Surah(
        number=int(data["number"]),
        name_short=data.get("name_short", ""),
        name_long=data.get("name_long", ""),
        transliteration=data.get("transliteration", ""),
        translation=data.get("translation", ""),
        verses=[Ayat.from_dict(v) for v in data.get("verses") or []],
        revelation=data.get("revelation", ""),
    )


def save_corpus(surahs: Sequence[Surah], path: str | Path) -> None:
    """Write surahs to a corpus file (a JSON list ordered by surah number)."""
    p = Path(path)
    data = [surah_to_dict(s) for s in sorted(surahs, key=lambda s: s.number)]
    p.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")


def load_corpus(path: str | Path) -> Dict[int, Surah]:
    """
    Load a corpus file written by `save_corpus`.

    Returns:
        Mapping of surah number to Surah
    """
    p = Path(path)
    raw = json.loads(p.read_text(encoding="utf-8"))
    if not isinstance(raw, list):
        raise ValueError(f"Corpus file {p} must contain a JSON list of surahs")
    surahs: Dict[int, Surah] = {}
    for item in raw:
        surah = surah_from_dict(item)
        surahs[surah.number] = surah
    return surahs
