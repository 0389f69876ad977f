"""
Tests for the hybrid search configuration.
"""

import sys
import unittest
from pathlib import Path
from unittest.mock import patch

sys.path.insert(0, str(Path(__file__).parent.parent))

from quran_search.config import DEFAULT_HYBRID_CONFIG, HybridSearchConfig


class TestHybridSearchConfig(unittest.TestCase):

    def test_defaults(self):
        config = HybridSearchConfig()
        self.assertEqual(config.bm25_weight, 0.5)
        self.assertEqual(config.semantic_weight, 0.5)
        self.assertEqual(config.min_bm25_threshold, 0.05)
        self.assertEqual(config.min_semantic_threshold, 0.2)
        self.assertEqual(config, DEFAULT_HYBRID_CONFIG)

    def test_merged(self):
        config = DEFAULT_HYBRID_CONFIG.merged(bm25_weight=0.7, semantic_weight=None)
        self.assertEqual(config.bm25_weight, 0.7)
        self.assertEqual(config.semantic_weight, 0.5)
        self.assertEqual(DEFAULT_HYBRID_CONFIG.bm25_weight, 0.5)

    def test_merged_unknown_field(self):
        with self.assertRaises(TypeError):
            DEFAULT_HYBRID_CONFIG.merged(weight=1)

    def test_to_dict(self):
        self.assertEqual(
            HybridSearchConfig().to_dict(),
            {
                "bm25_weight": 0.5,
                "semantic_weight": 0.5,
                "min_bm25_threshold": 0.05,
                "min_semantic_threshold": 0.2,
            },
        )

    def test_from_env(self):
        env = {"QURAN_BM25_WEIGHT": "0.8", "QURAN_MIN_SEMANTIC_THRESHOLD": " "}
        with patch.dict("os.environ", env):
            config = HybridSearchConfig.from_env()
        self.assertEqual(config.bm25_weight, 0.8)
        self.assertEqual(config.min_semantic_threshold, 0.2)

    def test_from_env_invalid(self):
        with patch.dict("os.environ", {"QURAN_SEMANTIC_WEIGHT": "high"}):
            with self.assertRaises(ValueError):
                HybridSearchConfig.from_env()


if __name__ == "__main__":
    unittest.main()
