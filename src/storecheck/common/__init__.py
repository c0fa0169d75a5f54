from storecheck.common.config import SourceConfig
from storecheck.common.country import Country
from storecheck.common.errors import (
    DataRetrievalError,
    EmptyResultsError,
    ErrorKind,
    MalformedURLError,
    MissingBundleIdentifierError,
    NoSourceConfiguredError,
    ParsingError,
    RequestCancelledError,
    TransportError,
    VersionCheckError,
)
from storecheck.common.types import VersionRecord, VersionResult

__all__ = [
    "Country",
    "SourceConfig",
    "DataRetrievalError",
    "EmptyResultsError",
    "ErrorKind",
    "MalformedURLError",
    "MissingBundleIdentifierError",
    "NoSourceConfiguredError",
    "ParsingError",
    "RequestCancelledError",
    "TransportError",
    "VersionCheckError",
    "VersionRecord",
    "VersionResult",
]
