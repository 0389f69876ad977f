"""
Tests for the command-line entry points.
"""

import io
import sys
import unittest
from contextlib import redirect_stdout
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

sys.path.insert(0, str(Path(__file__).parent.parent))

from quran_search.build_index import download_surahs
from quran_search.main import interactive_mode, run_query
from quran_search.manager import SearchManager
from sample_data import make_fatihah


class TestRunQuery(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.manager = SearchManager(AsyncMock(return_value=make_fatihah()), surah_count=1)

    async def test_reference_prints_verse(self):
        out = io.StringIO()
        with redirect_stdout(out):
            await run_query(self.manager, "Al-Fatihah:2", None, 10, False)
        self.assertIn("[الفاتحة 1:2]", out.getvalue())
        self.assertIn("Segala puji bagi Allah", out.getvalue())

    async def test_local_search_with_stats(self):
        out = io.StringIO()
        with redirect_stdout(out):
            await run_query(self.manager, "Allah", 1, 10, True)
        self.assertIn("Found", out.getvalue())
        self.assertIn("Engine:", out.getvalue())

    async def test_no_results(self):
        manager = SearchManager(AsyncMock(side_effect=ConnectionError("offline")), surah_count=1)
        out = io.StringIO()
        with redirect_stdout(out), self.assertLogs("quran_search.manager", level="WARNING"):
            await run_query(manager, "Allah", None, 10, False)
        self.assertIn("No verses found.", out.getvalue())


class TestInteractiveMode(unittest.IsolatedAsyncioTestCase):

    async def test_failed_query_keeps_session_alive(self):
        """A query whose surah cannot be fetched prints an error and the loop continues."""
        manager = SearchManager(AsyncMock(side_effect=ConnectionError("offline")), surah_count=1)
        inputs = ["Al-Fatihah:1", "allah", "/quit"]
        out = io.StringIO()
        with patch("builtins.input", side_effect=inputs) as fake_input, redirect_stdout(out):
            with self.assertLogs("quran_search.manager", level="WARNING"):
                await interactive_mode(manager, None, 10, False)

        self.assertEqual(fake_input.call_count, 3)
        self.assertIn("Error: offline", out.getvalue())
        self.assertIn("No verses found.", out.getvalue())

    async def test_failed_local_surah_keeps_session_alive(self):
        manager = SearchManager(AsyncMock(side_effect=KeyError("Surah 5 not found")), surah_count=1)
        out = io.StringIO()
        with patch("builtins.input", side_effect=["allah", "/quit"]) as fake_input, redirect_stdout(out):
            await interactive_mode(manager, 5, 10, False)
        self.assertEqual(fake_input.call_count, 2)
        self.assertIn("Error:", out.getvalue())

    async def test_surahs_command(self):
        summaries = [
            {
                "number": 1,
                "name_short": "الفاتحة",
                "transliteration": "Al-Fatihah",
                "translation": "Pembukaan",
                "number_of_verses": 7,
                "revelation": "Makkiyyah",
            }
        ]
        manager = SearchManager(AsyncMock(), list_surahs=AsyncMock(return_value=summaries))
        out = io.StringIO()
        with patch("builtins.input", side_effect=["/surahs", "/quit"]), redirect_stdout(out):
            await interactive_mode(manager, None, 10, False)
        self.assertIn("  1. Al-Fatihah (Pembukaan) - 7 verses, Makkiyyah", out.getvalue())

    async def test_eof_ends_session(self):
        manager = SearchManager(AsyncMock())
        with patch("builtins.input", side_effect=EOFError), redirect_stdout(io.StringIO()):
            await interactive_mode(manager, None, 10, False)


class TestDownloadSurahs(unittest.IsolatedAsyncioTestCase):

    async def test_downloads_in_order(self):
        client = MagicMock()
        client.fetch_surah = AsyncMock(side_effect=lambda n: make_fatihah() if n == 1 else MagicMock(number=n))
        surahs = await download_surahs(client, [1, 2, 3], concurrency=2)
        self.assertEqual([s.number for s in surahs], [1, 2, 3])

    async def test_failure_aborts(self):
        client = MagicMock()
        client.fetch_surah = AsyncMock(side_effect=ConnectionError("offline"))
        with self.assertRaises(ConnectionError):
            await download_surahs(client, [1, 2], concurrency=1)


if __name__ == "__main__":
    unittest.main()
