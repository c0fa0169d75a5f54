from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from storecheck import __version__ as STORECHECK_VERSION
from storecheck.common.config import SourceConfig
from storecheck.common.errors import VersionCheckError
from storecheck.common.logging_utils import configure_logging
from storecheck.sources.base import VersionSource
from storecheck.sources.lookup import LOOKUP_BASE_URL, LookupSource
from storecheck.sources.manifest import ManifestSource


log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CHECK_FAILED = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="storecheck", description="Fetch the latest published app version.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {STORECHECK_VERSION}")
    parser.add_argument("--log-level", default="WARNING", help="Log level.")
    parser.add_argument("--log-dir", type=Path, default=None, help="Also write storecheck.log to this directory.")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--bundle-id", help="Bundle identifier (default: $STORECHECK_BUNDLE_ID).")
    common.add_argument("--country", help="Two-letter store country code (default: US).")
    common.add_argument("--language", help="Language for release notes, e.g. en_us.")
    common.add_argument("--timeout", type=float, default=None, help="Request timeout in seconds.")
    common.add_argument(
        "--allowed-host",
        action="append",
        dest="allowed_hosts",
        help="Only fetch from this host or its subdomains; repeatable (default: $STORECHECK_ALLOWED_HOSTS).",
    )

    sub = parser.add_subparsers(dest="source", required=True)
    lookup = sub.add_parser("lookup", parents=[common], help="Query the iTunes Lookup API.")
    lookup.add_argument("--base-url", default=LOOKUP_BASE_URL, help="Lookup API URL.")
    lookup.add_argument("--tv", action="store_true", help="Look up tvOS software.")

    manifest = sub.add_parser("manifest", parents=[common], help="Read a self-hosted plist manifest.")
    manifest.add_argument("--url", help="Manifest URL (default: $STORECHECK_MANIFEST_URL).")
    return parser


def build_source(args: argparse.Namespace) -> VersionSource:
    config = SourceConfig.from_env().with_overrides(
        bundle_identifier=args.bundle_id,
        country=args.country,
        language=args.language,
        timeout_seconds=args.timeout,
        allowed_hosts=tuple(args.allowed_hosts) if args.allowed_hosts else None,
    )
    if args.source == "lookup":
        return LookupSource.from_config(config, base_url=args.base_url, tv_software=args.tv)
    endpoint = args.url or SourceConfig.manifest_url_from_env()
    return ManifestSource.from_config(config, endpoint=endpoint)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(level=args.log_level, log_dir=args.log_dir)

    try:
        source = build_source(args)
    except ValueError as exc:
        parser.error(str(exc))

    try:
        result = asyncio.run(source.fetch())
    except VersionCheckError as exc:
        log.error("Version check failed (%s): %s", exc.kind.value, exc)
        print(f"{exc.kind.value}: {exc}", file=sys.stderr)
        return EXIT_CHECK_FAILED

    print(json.dumps(result.to_dict(), indent=2))
    return EXIT_OK
