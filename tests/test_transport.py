from __future__ import annotations

import unittest
from unittest.mock import MagicMock

import requests
import urllib3

from storecheck.common.errors import TransportError
from storecheck.sources.transport import NO_CACHE_HEADERS, build_session, fetch_bytes


URL = "https://downloads.example.com/app/manifest.plist"


class TransportTests(unittest.IsolatedAsyncioTestCase):
    async def test_request_bypasses_cache_and_closes_session(self) -> None:
        resp = requests.Response()
        resp.status_code = 200
        resp._content = b"payload"
        resp.url = URL
        session = MagicMock(spec=requests.Session)
        session.get.return_value = resp

        body = await fetch_bytes(URL, timeout=30.0, session_factory=lambda: session)

        self.assertEqual(body, b"payload")
        session.get.assert_called_once_with(URL, params=None, headers=NO_CACHE_HEADERS, timeout=30.0)
        session.close.assert_called_once()

    async def test_timeout_is_transport_error(self) -> None:
        session = MagicMock(spec=requests.Session)
        session.get.side_effect = requests.Timeout("read timed out")
        with self.assertRaises(TransportError) as ctx:
            await fetch_bytes(URL, timeout=30.0, session_factory=lambda: session)
        self.assertIsInstance(ctx.exception.cause, requests.Timeout)
        session.close.assert_called_once()

    async def test_tls_failure_is_transport_error(self) -> None:
        session = MagicMock(spec=requests.Session)
        session.get.side_effect = requests.exceptions.SSLError("certificate verify failed")
        with self.assertRaises(TransportError):
            await fetch_bytes(URL, timeout=30.0, session_factory=lambda: session)

    async def test_urllib3_error_is_transport_error(self) -> None:
        session = MagicMock(spec=requests.Session)
        error = urllib3.exceptions.LocationParseError("a" * 70 + ".example.com")
        session.get.side_effect = error
        with self.assertRaises(TransportError) as ctx:
            await fetch_bytes(URL, timeout=30.0, session_factory=lambda: session)
        self.assertIs(ctx.exception.cause, error)

    async def test_invalid_timeout_is_transport_error(self) -> None:
        session = MagicMock(spec=requests.Session)
        session.get.side_effect = ValueError("Attempted to set connect timeout to 0")
        with self.assertRaises(TransportError) as ctx:
            await fetch_bytes(URL, timeout=30.0, session_factory=lambda: session)
        self.assertIsInstance(ctx.exception.cause, ValueError)


class BuildSessionTests(unittest.TestCase):
    def test_retries_disabled(self) -> None:
        session = build_session()
        try:
            adapter = session.get_adapter("https://itunes.apple.com/lookup")
            self.assertEqual(adapter.max_retries.total, 0)
        finally:
            session.close()


if __name__ == "__main__":
    unittest.main()
