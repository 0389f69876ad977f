"""
Tests for Arabic and Latin text normalization.
"""

import sys
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from quran_search.utils.normalize import (
    has_arabic,
    normalize_arabic,
    normalize_latin,
    normalize_text,
    tokenize,
)
from sample_data import FATIHAH_VERSES


class TestNormalizeArabic(unittest.TestCase):
    """Test harakat stripping and letter folding."""

    def test_strips_harakat(self):
        self.assertEqual(normalize_arabic("بِسْمِ اللَّهِ"), "بسم الله")

    def test_strips_tatweel(self):
        self.assertEqual(normalize_arabic("اللـــه"), "الله")

    def test_folds_alef_variants(self):
        self.assertEqual(normalize_arabic("أحمد"), "احمد")
        self.assertEqual(normalize_arabic("إيمان"), "ايمان")
        self.assertEqual(normalize_arabic("آمن"), "امن")

    def test_folds_ya_and_ta_marbuta(self):
        self.assertEqual(normalize_arabic("هُدًى"), "هدي")
        self.assertEqual(normalize_arabic("رحمة"), "رحمه")

    def test_drops_standalone_hamza(self):
        self.assertEqual(normalize_arabic("سماء"), "سما")

    def test_empty(self):
        self.assertEqual(normalize_arabic(""), "")
        self.assertEqual(normalize_arabic(None), "")


class TestNormalizeLatin(unittest.TestCase):

    def test_lowercase_and_punctuation(self):
        self.assertEqual(normalize_latin("  Dengan  NAMA, Allah!  "), "dengan nama allah")

    def test_strips_combining_marks(self):
        self.assertEqual(normalize_latin("Raḥmān"), "rahman")

    def test_hyphen_and_apostrophe_removed(self):
        self.assertEqual(normalize_latin("Rabbil 'aalameen"), "rabbil aalameen")
        self.assertEqual(normalize_latin("Ar-Rahmaanir"), "arrahmaanir")

    def test_underscore_removed(self):
        self.assertEqual(normalize_latin("snake_case"), "snakecase")


class TestNormalizeText(unittest.TestCase):

    def test_idempotent(self):
        """Normalizing twice gives the same result as normalizing once."""
        samples = ["  Ya  ALLAH!! ", "", "سَمَاءٌ", "Qul huwal-laahu ahad", "اللـــه Allah"]
        for ayat in FATIHAH_VERSES:
            samples.extend([ayat.arab, ayat.latin, ayat.terjemahan, ayat.tafsir])
        for text in samples:
            once = normalize_text(text)
            self.assertEqual(normalize_text(once), once, text)

    def test_mixed_script(self):
        self.assertEqual(normalize_text("Kata اللَّهِ, Allah"), "kata الله allah")

    def test_none(self):
        self.assertEqual(normalize_text(None), "")


class TestHelpers(unittest.TestCase):

    def test_has_arabic(self):
        self.assertTrue(has_arabic("الله"))
        self.assertTrue(has_arabic("kata الله"))
        self.assertFalse(has_arabic("Allah"))
        self.assertFalse(has_arabic(""))
        self.assertFalse(has_arabic(None))

    def test_tokenize(self):
        self.assertEqual(tokenize("  a  b\tc "), ["a", "b", "c"])
        self.assertEqual(tokenize(""), [])


if __name__ == "__main__":
    unittest.main()
