from __future__ import annotations

import math
import os
from dataclasses import dataclass, field

from storecheck.common.country import Country


DEFAULT_TIMEOUT_SECONDS = 30.0


def _optional_env(name: str) -> str | None:
    value = os.environ.get(name, "").strip()
    return value or None


def _hosts_from_env(name: str) -> tuple[str, ...] | None:
    raw = _optional_env(name)
    if raw is None:
        return None
    return tuple(part.strip() for part in raw.split(",") if part.strip())


@dataclass(frozen=True)
class SourceConfig:
    bundle_identifier: str | None = None
    country: Country = field(default_factory=Country)
    language: str | None = None
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    # None allows any host; otherwise endpoints must be on one of these (or a subdomain).
    allowed_hosts: tuple[str, ...] | None = None

    def __post_init__(self) -> None:
        timeout = float(self.timeout_seconds)
        if not (timeout > 0 and math.isfinite(timeout)):
            raise ValueError(f"timeout_seconds must be a positive number of seconds, got {self.timeout_seconds!r}")
        object.__setattr__(self, "timeout_seconds", timeout)
        if self.allowed_hosts is not None and not isinstance(self.allowed_hosts, tuple):
            object.__setattr__(self, "allowed_hosts", tuple(self.allowed_hosts))

    @classmethod
    def from_env(cls) -> "SourceConfig":
        return cls(
            bundle_identifier=_optional_env("STORECHECK_BUNDLE_ID"),
            country=Country.from_code(_optional_env("STORECHECK_COUNTRY")),
            language=_optional_env("STORECHECK_LANGUAGE"),
            timeout_seconds=float(os.environ.get("STORECHECK_TIMEOUT", str(DEFAULT_TIMEOUT_SECONDS))),
            allowed_hosts=_hosts_from_env("STORECHECK_ALLOWED_HOSTS"),
        )

    @staticmethod
    def manifest_url_from_env() -> str | None:
        return _optional_env("STORECHECK_MANIFEST_URL")

    def with_overrides(
        self,
        *,
        bundle_identifier: str | None = None,
        country: str | Country | None = None,
        language: str | None = None,
        timeout_seconds: float | None = None,
        allowed_hosts: tuple[str, ...] | None = None,
    ) -> "SourceConfig":
        return SourceConfig(
            bundle_identifier=bundle_identifier or self.bundle_identifier,
            country=Country.from_code(country) if country else self.country,
            language=language or self.language,
            timeout_seconds=self.timeout_seconds if timeout_seconds is None else float(timeout_seconds),
            allowed_hosts=self.allowed_hosts if allowed_hosts is None else tuple(allowed_hosts),
        )
