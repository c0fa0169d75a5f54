from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class VersionRecord:
    application_identifier: int | str
    current_version_release_date: str
    minimum_os_version: str
    release_notes: str
    version: str


@dataclass(frozen=True)
class VersionResult:
    """Normalized version metadata returned by every source."""

    entries: tuple[VersionRecord, ...]

    def __post_init__(self) -> None:
        if not isinstance(self.entries, tuple):
            object.__setattr__(self, "entries", tuple(self.entries))

    @property
    def latest(self) -> VersionRecord:
        return self.entries[0]

    def to_dict(self) -> dict[str, Any]:
        return {"entries": [asdict(entry) for entry in self.entries]}


@dataclass(frozen=True)
class ManifestAsset:
    kind: str
    url: str


@dataclass(frozen=True)
class ManifestMetadata:
    bundle_identifier: str
    bundle_version: str
    release_date: str
    release_notes: str
    kind: str
    platform_identifier: str
    title: str


@dataclass(frozen=True)
class ManifestItem:
    assets: tuple[ManifestAsset, ...]
    metadata: ManifestMetadata


@dataclass(frozen=True)
class ManifestDocument:
    items: tuple[ManifestItem, ...]
