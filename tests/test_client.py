"""
Tests for the verse API client (HTTP session mocked).
"""

import sys
import unittest
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

sys.path.insert(0, str(Path(__file__).parent.parent))

from quran_search.client import QuranAPIError, QuranClient
from sample_data import make_fatihah, make_payload


def make_response(status, payload=None):
    response = MagicMock(status=status)
    response.json = AsyncMock(return_value=payload)
    context = MagicMock()
    context.__aenter__.return_value = response
    return context


def make_session(*responses):
    session = MagicMock()
    session.closed = False
    session.close = AsyncMock()
    session.get.side_effect = list(responses)
    return session


class TestQuranClient(unittest.IsolatedAsyncioTestCase):

    async def test_fetch_surah(self):
        session = make_session(make_response(200, make_payload(make_fatihah())))
        client = QuranClient(base_url="http://api.test/", session=session)

        surah = await client.fetch_surah(1)

        session.get.assert_called_once_with("http://api.test/surah/1")
        self.assertEqual(surah.number, 1)
        self.assertEqual(surah.transliteration, "Al-Fatihah")
        self.assertEqual(surah.verses, make_fatihah().verses)

    async def test_retries_transient_status(self):
        session = make_session(
            make_response(503),
            make_response(200, make_payload(make_fatihah())),
        )
        client = QuranClient(base_url="http://api.test", session=session)

        with patch("quran_search.client._sleep_backoff", new=AsyncMock()) as backoff:
            surah = await client.fetch_surah(1)

        self.assertEqual(surah.number, 1)
        self.assertEqual(session.get.call_count, 2)
        backoff.assert_awaited_once_with(0)

    async def test_gives_up_after_max_retries(self):
        session = make_session(*(make_response(500) for _ in range(3)))
        client = QuranClient(base_url="http://api.test", session=session, max_retries=3)

        with patch("quran_search.client._sleep_backoff", new=AsyncMock()):
            with self.assertRaises(QuranAPIError) as ctx:
                await client.fetch_surah(1)

        self.assertEqual(ctx.exception.status, 500)
        self.assertEqual(session.get.call_count, 3)

    async def test_client_error_not_retried(self):
        session = make_session(make_response(404))
        client = QuranClient(base_url="http://api.test", session=session)

        with self.assertRaises(QuranAPIError) as ctx:
            await client.fetch_surah(999)

        self.assertEqual(ctx.exception.status, 404)
        self.assertEqual(session.get.call_count, 1)

    async def test_invalid_payload(self):
        session = make_session(make_response(200, {"code": 200, "data": {}}))
        client = QuranClient(base_url="http://api.test", session=session)

        with self.assertRaises(QuranAPIError):
            await client.fetch_surah(1)

    async def test_fetch_surah_list(self):
        payload = {
            "code": 200,
            "data": [
                {
                    "number": 112,
                    "numberOfVerses": 4,
                    "name": {"short": "الإخلاص", "transliteration": {"id": "Al-Ikhlas"}, "translation": {"id": "Ikhlas"}},
                    "revelation": {"id": "Makkiyyah"},
                }
            ],
        }
        session = make_session(make_response(200, payload))
        client = QuranClient(base_url="http://api.test", session=session)

        surahs = await client.fetch_surah_list()

        session.get.assert_called_once_with("http://api.test/surah")
        self.assertEqual(surahs[0]["number"], 112)
        self.assertEqual(surahs[0]["transliteration"], "Al-Ikhlas")
        self.assertEqual(surahs[0]["number_of_verses"], 4)

    async def test_external_session_not_closed(self):
        session = make_session()
        async with QuranClient(base_url="http://api.test", session=session):
            pass
        session.close.assert_not_awaited()

    def test_env_defaults(self):
        env = {"QURAN_API_BASE_URL": "http://env.test/", "QURAN_API_TIMEOUT": "5"}
        with patch.dict("os.environ", env):
            client = QuranClient()
        self.assertEqual(client.base_url, "http://env.test")
        self.assertEqual(client.timeout, 5.0)


if __name__ == "__main__":
    unittest.main()
