from __future__ import annotations

import asyncio
import logging
from typing import Callable, Mapping

import requests
import urllib3
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from storecheck.common.errors import DataRetrievalError, RequestCancelledError, TransportError


log = logging.getLogger(__name__)

NO_CACHE_HEADERS: dict[str, str] = {
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
}

SessionFactory = Callable[[], requests.Session]


def build_session() -> requests.Session:
    session = requests.Session()
    # Retry policy belongs to the caller; a failed attempt surfaces immediately.
    retry = Retry(total=0, read=False, raise_on_status=False)
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


def _get(
    session_factory: SessionFactory,
    url: str,
    params: Mapping[str, str] | None,
    timeout: float,
) -> requests.Response:
    session = session_factory()
    try:
        return session.get(url, params=params, headers=NO_CACHE_HEADERS, timeout=timeout)
    finally:
        session.close()


async def fetch_bytes(
    url: str,
    *,
    timeout: float,
    params: Mapping[str, str] | None = None,
    session_factory: SessionFactory = build_session,
) -> bytes:
    """GET ``url`` in a worker thread and return the response body.

    Raises ``TransportError`` for connection-level failures (DNS, TLS,
    timeout, reset), ``RequestCancelledError`` when the awaiting task is
    cancelled and ``DataRetrievalError`` for an error status or empty body.
    """
    try:
        response = await asyncio.to_thread(_get, session_factory, url, params, timeout)
    except asyncio.CancelledError as exc:
        log.info("Request to %s cancelled", url)
        raise RequestCancelledError(cause=exc) from exc
    except (requests.RequestException, urllib3.exceptions.HTTPError, ValueError) as exc:
        log.warning("Request to %s failed: %s", url, exc)
        raise TransportError(cause=exc) from exc

    log.debug("GET %s -> %s (%d bytes)", response.url, response.status_code, len(response.content or b""))
    try:
        response.raise_for_status()
    except requests.HTTPError as exc:
        raise DataRetrievalError(
            f"Version data request returned HTTP {response.status_code}.", cause=exc
        ) from exc

    body = response.content
    if not body:
        raise DataRetrievalError()
    return body
