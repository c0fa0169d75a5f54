from storecheck.sources.base import ConfiguredSource, UnconfiguredSource, VersionSource, resolve_source
from storecheck.sources.lookup import LookupSource
from storecheck.sources.manifest import ManifestSource

__all__ = [
    "ConfiguredSource",
    "LookupSource",
    "ManifestSource",
    "UnconfiguredSource",
    "VersionSource",
    "resolve_source",
]
