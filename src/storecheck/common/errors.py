"""Errors raised by version sources.

Every failure a source can produce is one of the classes below. Each carries
an ``ErrorKind`` so callers can branch on a closed set of values, and the
underlying exception (if any) is kept both as ``cause`` and as
``__cause__``.
"""

from __future__ import annotations

import asyncio
from enum import Enum


class ErrorKind(str, Enum):
    APP_ID_FAILURE = "appStoreAppIDFailure"
    MISSING_BUNDLE_IDENTIFIER = "missingBundleIdentifier"
    MALFORMED_URL = "malformedURL"
    DATA_RETRIEVAL_FAILURE = "dataRetrievalFailure"
    DATA_RETRIEVAL_EMPTY_RESULTS = "dataRetrievalEmptyResults"
    JSON_PARSING_FAILURE = "jsonParsingFailure"
    TRANSPORT_FAILURE = "transportFailure"


class VersionCheckError(Exception):
    kind: ErrorKind
    default_message = "The version check failed."

    def __init__(self, message: str | None = None, *, cause: BaseException | None = None):
        super().__init__(message or self.default_message)
        self.cause = cause

    def __str__(self) -> str:
        text = super().__str__()
        if self.cause is not None:
            return f"{text} ({self.cause})"
        return text


class NoSourceConfiguredError(VersionCheckError):
    kind = ErrorKind.APP_ID_FAILURE
    default_message = "No version data source is configured."


class MissingBundleIdentifierError(VersionCheckError):
    kind = ErrorKind.MISSING_BUNDLE_IDENTIFIER
    default_message = "The bundle identifier is missing; a version check cannot be performed."


class MalformedURLError(VersionCheckError):
    kind = ErrorKind.MALFORMED_URL
    default_message = "The version check URL is missing or malformed."


class DataRetrievalError(VersionCheckError):
    kind = ErrorKind.DATA_RETRIEVAL_FAILURE
    default_message = "Error retrieving version data; the response was empty or unusable."


class EmptyResultsError(VersionCheckError):
    kind = ErrorKind.DATA_RETRIEVAL_EMPTY_RESULTS
    default_message = "The version data was decoded but contained no results."


class ParsingError(VersionCheckError):
    kind = ErrorKind.JSON_PARSING_FAILURE
    default_message = "Error decoding the version data payload."

    def __init__(self, message: str | None = None, *, cause: BaseException):
        super().__init__(message, cause=cause)


class TransportError(VersionCheckError):
    kind = ErrorKind.TRANSPORT_FAILURE
    default_message = "The version check request failed before a response was received."

    def __init__(self, message: str | None = None, *, cause: BaseException):
        super().__init__(message, cause=cause)


class RequestCancelledError(TransportError, asyncio.CancelledError):
    """Raised when the task awaiting a fetch is cancelled.

    Still an ``asyncio.CancelledError`` so task cancellation and
    ``asyncio.timeout`` behave as usual.
    """

    default_message = "The version check request was cancelled."
