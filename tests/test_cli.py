from __future__ import annotations

import contextlib
import io
import json
import os
import plistlib
import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

import requests

from storecheck.cli import EXIT_CHECK_FAILED, EXIT_OK, main


MANIFEST_URL = "https://downloads.example.com/app/manifest.plist"


def _manifest_session() -> MagicMock:
    body = plistlib.dumps(
        {
            "items": [
                {
                    "assets": [],
                    "metadata": {
                        "bundle-identifier": "com.example.app",
                        "bundle-version": "4.0.0",
                        "release-date": "2024-03-01",
                        "release-notes": "New look",
                        "kind": "software",
                        "platform-identifier": "com.apple.platform.iphoneos",
                        "title": "Example",
                    },
                }
            ]
        }
    )
    resp = requests.Response()
    resp.status_code = 200
    resp._content = body
    resp.url = MANIFEST_URL
    session = MagicMock(spec=requests.Session)
    session.get.return_value = resp
    return session


class CliTests(unittest.TestCase):
    def test_manifest_check_prints_result(self) -> None:
        out = io.StringIO()
        with patch.dict(os.environ, {}, clear=True), patch(
            "storecheck.sources.base.build_session", return_value=_manifest_session()
        ), contextlib.redirect_stdout(out):
            code = main(["manifest", "--url", MANIFEST_URL, "--bundle-id", "com.example.app"])
        self.assertEqual(code, EXIT_OK)
        payload = json.loads(out.getvalue())
        self.assertEqual(payload["entries"][0]["version"], "4.0.0")

    def test_manifest_url_from_env(self) -> None:
        session = _manifest_session()
        env = {"STORECHECK_MANIFEST_URL": MANIFEST_URL, "STORECHECK_BUNDLE_ID": "com.example.app"}
        with patch.dict(os.environ, env, clear=True), patch(
            "storecheck.sources.base.build_session", return_value=session
        ), contextlib.redirect_stdout(io.StringIO()):
            code = main(["manifest"])
        self.assertEqual(code, EXIT_OK)
        self.assertEqual(session.get.call_args.args[0], MANIFEST_URL)

    def test_missing_bundle_id_exits_with_failure(self) -> None:
        err = io.StringIO()
        with patch.dict(os.environ, {}, clear=True), contextlib.redirect_stderr(err):
            code = main(["manifest", "--url", MANIFEST_URL])
        self.assertEqual(code, EXIT_CHECK_FAILED)
        self.assertIn("missingBundleIdentifier", err.getvalue())

    def test_non_positive_timeout_is_usage_error(self) -> None:
        with patch.dict(os.environ, {}, clear=True), contextlib.redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit) as ctx:
                main(["manifest", "--url", MANIFEST_URL, "--bundle-id", "com.example.app", "--timeout", "0"])
        self.assertEqual(ctx.exception.code, 2)

    def test_log_dir_is_passed_to_logging(self) -> None:
        with tempfile.TemporaryDirectory() as td, patch.dict(os.environ, {}, clear=True), patch(
            "storecheck.cli.configure_logging"
        ) as configure, contextlib.redirect_stderr(io.StringIO()):
            main(["--log-dir", td, "manifest", "--url", MANIFEST_URL])
        configure.assert_called_once_with(level="WARNING", log_dir=Path(td))

    def test_allowed_host_option_blocks_other_hosts(self) -> None:
        session = _manifest_session()
        err = io.StringIO()
        with patch.dict(os.environ, {}, clear=True), patch(
            "storecheck.sources.base.build_session", return_value=session
        ), contextlib.redirect_stderr(err):
            code = main(
                ["manifest", "--url", MANIFEST_URL, "--bundle-id", "com.example.app", "--allowed-host", "example.org"]
            )
        self.assertEqual(code, EXIT_CHECK_FAILED)
        self.assertIn("malformedURL", err.getvalue())
        session.get.assert_not_called()


if __name__ == "__main__":
    unittest.main()
