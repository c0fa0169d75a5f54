from __future__ import annotations

import json
import logging
from typing import Any

import requests

from storecheck.common.config import DEFAULT_TIMEOUT_SECONDS, SourceConfig
from storecheck.common.country import Country
from storecheck.common.errors import ParsingError
from storecheck.common.types import VersionRecord, VersionResult
from storecheck.sources.base import ConfiguredSource
from storecheck.sources.transport import SessionFactory, fetch_bytes


log = logging.getLogger(__name__)

LOOKUP_BASE_URL = "https://itunes.apple.com/lookup"

PARAM_BUNDLE_ID = "bundleId"
PARAM_COUNTRY = "country"
PARAM_LANGUAGE = "lang"
PARAM_ENTITY = "entity"
ENTITY_TV_SOFTWARE = "tvSoftware"


def _require_str(raw: dict, key: str, where: str) -> str:
    value = raw.get(key)
    if not isinstance(value, str):
        raise ValueError(f"{where} field {key!r} must be a string, got {type(value).__name__}")
    return value


def _parse_result(raw: object, where: str) -> VersionRecord:
    if not isinstance(raw, dict):
        raise ValueError(f"{where} is not an object.")
    app_id = raw.get("trackId")
    if isinstance(app_id, bool) or not isinstance(app_id, (int, str)):
        raise ValueError(f"{where} field 'trackId' must be a number, got {type(app_id).__name__}")
    notes = raw.get("releaseNotes", "")
    if notes is None:
        notes = ""
    if not isinstance(notes, str):
        raise ValueError(f"{where} field 'releaseNotes' must be a string, got {type(notes).__name__}")
    return VersionRecord(
        application_identifier=app_id,
        current_version_release_date=_require_str(raw, "currentVersionReleaseDate", where),
        minimum_os_version=_require_str(raw, "minimumOsVersion", where),
        release_notes=notes,
        version=_require_str(raw, "version", where),
    )


def parse_lookup_payload(data: Any) -> VersionResult:
    if not isinstance(data, dict):
        raise ValueError("Lookup response must be a JSON object.")
    results = data.get("results")
    if not isinstance(results, list):
        raise ValueError("Lookup response field 'results' must be a list.")
    entries = tuple(_parse_result(raw, f"Lookup result at index {idx}") for idx, raw in enumerate(results))
    return VersionResult(entries=entries)


class LookupSource(ConfiguredSource):
    """Queries the iTunes Lookup API by bundle identifier, country and language."""

    def __init__(
        self,
        country: str | Country | None = None,
        language: str | None = None,
        bundle_identifier: str | None = None,
        *,
        base_url: str = LOOKUP_BASE_URL,
        tv_software: bool = False,
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
        self.base_url = base_url
        self.tv_software = tv_software

    @classmethod
    def from_config(
        cls,
        config: SourceConfig,
        *,
        base_url: str = LOOKUP_BASE_URL,
        tv_software: bool = False,
        session_factory: SessionFactory | None = None,
    ) -> "LookupSource":
        return cls(
            country=config.country,
            language=config.language,
            bundle_identifier=config.bundle_identifier,
            base_url=base_url,
            tv_software=tv_software,
            timeout_seconds=config.timeout_seconds,
            allowed_hosts=config.allowed_hosts,
            session_factory=session_factory,
        )

    def query_params(self) -> dict[str, str]:
        params = {
            PARAM_BUNDLE_ID: self._require_bundle_identifier(),
            PARAM_COUNTRY: self.config.country.query_value,
        }
        if self.config.language:
            params[PARAM_LANGUAGE] = self.config.language
        if self.tv_software:
            params[PARAM_ENTITY] = ENTITY_TV_SOFTWARE
        return params

    @property
    def endpoint(self) -> str:
        prepared = requests.Request("GET", self.base_url, params=self.query_params()).prepare()
        return str(prepared.url)

    async def fetch(self) -> VersionResult:
        params = self.query_params()
        url = self._require_url(self.base_url)
        log.info(
            "Looking up %s in the %s store",
            params[PARAM_BUNDLE_ID],
            self.config.country.code,
        )
        body = await fetch_bytes(
            url,
            params=params,
            timeout=self.config.timeout_seconds,
            session_factory=self.session_factory,
        )
        try:
            result = parse_lookup_payload(json.loads(body))
        except (ValueError, RecursionError) as exc:
            log.warning("Lookup response for %s could not be decoded: %s", params[PARAM_BUNDLE_ID], exc)
            raise ParsingError(cause=exc) from exc
        log.debug("Lookup returned %d result(s)", len(result.entries))
        return self._ensure_entries(result)
