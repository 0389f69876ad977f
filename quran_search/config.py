"""
Hybrid search configuration.

Values are supplied programmatically; `from_env` lets a deployment override
the defaults through environment variables (or a `.env` file loaded by the
CLI).
"""

import os
from dataclasses import asdict, dataclass, fields, replace
from typing import Dict, Optional

ENV_PREFIX = "QURAN_"

# Weight applied to a score that only one channel produced. A single strong
# signal ranks close to, but below, the same score confirmed by both channels.
KEYWORD_ONLY_BOOST = 0.9
SEMANTIC_ONLY_BOOST = 0.95


@dataclass(frozen=True)
class HybridSearchConfig:
    """Fusion weights and per-channel admission floors."""
    bm25_weight: float = 0.5
    semantic_weight: float = 0.5
    min_bm25_threshold: float = 0.05
    min_semantic_threshold: float = 0.2

    def merged(self, **partial: Optional[float]) -> "HybridSearchConfig":
        """
        Return a copy with the given fields replaced.

        `None` values are ignored so partially-filled option dicts can be
        passed straight through. Unknown field names raise `TypeError`.
        """
        known = {f.name for f in fields(self)}
        unknown = set(partial) - known
        if unknown:
            raise TypeError(f"Unknown config field(s): {', '.join(sorted(unknown))}")
        changes = {k: float(v) for k, v in partial.items() if v is not None}
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)

    @classmethod
    def from_env(cls, base: Optional["HybridSearchConfig"] = None) -> "HybridSearchConfig":
        """
        Build a config from QURAN_BM25_WEIGHT, QURAN_SEMANTIC_WEIGHT,
        QURAN_MIN_BM25_THRESHOLD and QURAN_MIN_SEMANTIC_THRESHOLD.
        """
        base = base or cls()
        overrides: Dict[str, float] = {}
        for f in fields(cls):
            env_name = ENV_PREFIX + f.name.upper()
            raw = os.getenv(env_name)
            if raw is None or not raw.strip():
                continue
            try:
                overrides[f.name] = float(raw)
            except ValueError:
                raise ValueError(f"{env_name} must be a number, got {raw!r}") from None
        return base.merged(**overrides)


DEFAULT_HYBRID_CONFIG = HybridSearchConfig()
