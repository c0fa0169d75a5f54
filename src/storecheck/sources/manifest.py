from __future__ import annotations

import logging
import plistlib
from typing import Any

from storecheck.common.config import DEFAULT_TIMEOUT_SECONDS, SourceConfig
from storecheck.common.country import Country
from storecheck.common.errors import EmptyResultsError, ParsingError
from storecheck.common.types import (
    ManifestAsset,
    ManifestDocument,
    ManifestItem,
    ManifestMetadata,
    VersionRecord,
    VersionResult,
)
from storecheck.sources.base import ConfiguredSource
from storecheck.sources.transport import SessionFactory, fetch_bytes


log = logging.getLogger(__name__)

# The manifest format has no store id or OS requirement; these fill the record.
MANIFEST_APPLICATION_ID = 1
MANIFEST_MINIMUM_OS_VERSION = "14.0"

_METADATA_FIELDS = (
    ("bundle_identifier", "bundle-identifier"),
    ("bundle_version", "bundle-version"),
    ("release_date", "release-date"),
    ("release_notes", "release-notes"),
    ("kind", "kind"),
    ("platform_identifier", "platform-identifier"),
    ("title", "title"),
)


def _require(mapping: dict, key: str, expected: type, where: str) -> Any:
    if key not in mapping:
        raise ValueError(f"{where} missing field: {key!r}")
    value = mapping[key]
    if not isinstance(value, expected):
        raise ValueError(
            f"{where} field {key!r} must be {expected.__name__}, got {type(value).__name__}"
        )
    return value


def _parse_asset(raw: object, where: str) -> ManifestAsset:
    if not isinstance(raw, dict):
        raise ValueError(f"{where} is not a dictionary.")
    return ManifestAsset(
        kind=_require(raw, "kind", str, where),
        url=_require(raw, "url", str, where),
    )


def _parse_item(raw: object, where: str) -> ManifestItem:
    if not isinstance(raw, dict):
        raise ValueError(f"{where} is not a dictionary.")
    raw_assets = _require(raw, "assets", list, where)
    assets = tuple(_parse_asset(a, f"{where} asset {idx}") for idx, a in enumerate(raw_assets))
    raw_metadata = _require(raw, "metadata", dict, where)
    metadata = ManifestMetadata(
        **{attr: _require(raw_metadata, key, str, f"{where} metadata") for attr, key in _METADATA_FIELDS}
    )
    return ManifestItem(assets=assets, metadata=metadata)


def parse_manifest_document(data: object) -> ManifestDocument:
    """Validate a decoded manifest and build a ``ManifestDocument``.

    Unknown keys are ignored. Missing keys and wrong value types raise
    ``ValueError`` naming the offending location.
    """
    if not isinstance(data, dict):
        raise ValueError("Manifest root must be a dictionary.")
    raw_items = _require(data, "items", list, "Manifest")
    items = tuple(_parse_item(raw, f"Manifest item at index {idx}") for idx, raw in enumerate(raw_items))
    return ManifestDocument(items=items)


def decode_manifest(body: bytes) -> ManifestDocument:
    """Decode a plist body into a ``ManifestDocument``.

    Raises ``ParsingError`` whose ``cause`` is the plistlib error or the
    structural ``ValueError`` from ``parse_manifest_document``.
    """
    try:
        data = plistlib.loads(body)
    except Exception as exc:
        raise ParsingError("Manifest body is not a valid property list.", cause=exc) from exc
    try:
        return parse_manifest_document(data)
    except ValueError as exc:
        raise ParsingError(cause=exc) from exc


def manifest_to_result(document: ManifestDocument) -> VersionResult:
    if not document.items:
        raise EmptyResultsError()
    metadata = document.items[0].metadata
    record = VersionRecord(
        application_identifier=MANIFEST_APPLICATION_ID,
        current_version_release_date=metadata.release_date,
        minimum_os_version=MANIFEST_MINIMUM_OS_VERSION,
        release_notes=metadata.release_notes,
        version=metadata.bundle_version,
    )
    return VersionResult(entries=(record,))


class ManifestSource(ConfiguredSource):
    """Reads version metadata from a self-hosted plist manifest.

    ``endpoint`` may be passed in or assigned after construction. It must be
    set before ``fetch`` is awaited and left alone while a fetch is running.
    Country and language are kept on the config but do not affect the URL.
    """

    def __init__(
        self,
        country: str | Country | None = None,
        language: str | None = None,
        bundle_identifier: str | None = None,
        *,
        endpoint: str | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        allowed_hosts: tuple[str, ...] | None = None,
        session_factory: SessionFactory | None = None,
    ):
        config = SourceConfig(
            bundle_identifier=bundle_identifier,
            country=Country.from_code(country),
            language=language,
            timeout_seconds=timeout_seconds,
            allowed_hosts=allowed_hosts,
        )
        super().__init__(config, session_factory=session_factory)
        self.endpoint = endpoint

    @classmethod
    def from_config(
        cls,
        config: SourceConfig,
        *,
        endpoint: str | None = None,
        session_factory: SessionFactory | None = None,
    ) -> "ManifestSource":
        return cls(
            country=config.country,
            language=config.language,
            bundle_identifier=config.bundle_identifier,
            endpoint=endpoint,
            timeout_seconds=config.timeout_seconds,
            allowed_hosts=config.allowed_hosts,
            session_factory=session_factory,
        )

    async def fetch(self) -> VersionResult:
        self._require_bundle_identifier()
        url = self._require_url(self.endpoint)
        log.info("Fetching manifest from %s", url)
        body = await fetch_bytes(
            url,
            timeout=self.config.timeout_seconds,
            session_factory=self.session_factory,
        )
        try:
            document = decode_manifest(body)
        except ParsingError as exc:
            log.warning("Manifest from %s could not be decoded: %s", url, exc)
            raise
        log.debug("Manifest from %s has %d item(s)", url, len(document.items))
        return self._ensure_entries(manifest_to_result(document))
