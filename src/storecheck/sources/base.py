"""Version source contract.

A source performs one network request and turns the payload into a
``VersionResult``. Concrete sources subclass ``ConfiguredSource``; the
``UnconfiguredSource`` variant stands in when no source was selected and
always fails.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from storecheck.common.config import SourceConfig
from storecheck.common.errors import (
    EmptyResultsError,
    MalformedURLError,
    MissingBundleIdentifierError,
    NoSourceConfiguredError,
)
from storecheck.common.types import VersionResult
from storecheck.common.url_checks import validate_endpoint_url
from storecheck.sources.transport import SessionFactory, build_session


class VersionSource(ABC):
    @abstractmethod
    async def fetch(self) -> VersionResult:
        """Fetch the remote catalog and return normalized version metadata.

        Raises a ``VersionCheckError`` subclass on every failure path; a
        result is only returned when it holds at least one entry.
        """


class UnconfiguredSource(VersionSource):
    async def fetch(self) -> VersionResult:
        raise NoSourceConfiguredError()


def resolve_source(source: VersionSource | None) -> VersionSource:
    if source is None:
        return UnconfiguredSource()
    return source


class ConfiguredSource(VersionSource):
    def __init__(self, config: SourceConfig, session_factory: SessionFactory | None = None):
        self.config = config
        self.session_factory = session_factory or build_session

    @property
    def bundle_identifier(self) -> str | None:
        return self.config.bundle_identifier

    def _require_bundle_identifier(self) -> str:
        bundle_identifier = (self.config.bundle_identifier or "").strip()
        if not bundle_identifier:
            raise MissingBundleIdentifierError()
        return bundle_identifier

    def _require_url(self, url: str | None) -> str:
        try:
            return validate_endpoint_url(url, self.config.allowed_hosts)
        except ValueError as exc:
            raise MalformedURLError(str(exc)) from None

    @staticmethod
    def _ensure_entries(result: VersionResult) -> VersionResult:
        if not result.entries:
            raise EmptyResultsError()
        return result
