"""HTTP acquisition strategies for the catalog endpoint."""

from __future__ import annotations

import json
import logging
import os
import time
from dataclasses import dataclass
from threading import Lock
from typing import Any, Callable, Sequence
from urllib.parse import quote, urlparse

import requests
from requests import Session
from tenacity import (  # type: ignore[import-untyped]
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from urllib3.exceptions import DecodeError, ProtocolError, ReadTimeoutError

from ..errors import TotalAcquisitionFailure, TransientAccessError

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = os.getenv(
    "FILAMENT_ATLAS_ENDPOINT", "https://app.polymaker.com/api/color_data.php"
)
DEFAULT_TIMEOUT = float(os.getenv("FILAMENT_ATLAS_TIMEOUT", "15"))

_WRAPPING_PROXY = "https://api.allorigins.win/get?url={target}"
_PASSTHROUGH_PROXY = "https://corsproxy.io/?{target}"
_CHUNK_SIZE = 8192
_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)

_session_lock = Lock()
_session: Session | None = None


@dataclass(frozen=True, slots=True)
class Strategy:
    """One way of reaching the catalog endpoint."""

    name: str
    attempt: Callable[[str, float], Any]


def _get_session() -> Session:
    """Return a shared requests session configured with default headers."""
    global _session
    if _session is None:
        with _session_lock:
            if _session is None:
                session = requests.Session()
                session.headers.update(
                    {
                        "User-Agent": _USER_AGENT,
                        "Accept": "application/json,text/plain;q=0.9,*/*;q=0.8",
                        "Accept-Language": "en-US,en;q=0.5",
                    }
                )
                _session = session
    return _session


def ensure_http_scheme(url: str) -> str:
    """Ensure *url* is qualified with an HTTP scheme, defaulting to https."""
    cleaned = url.strip()
    if not cleaned:
        return cleaned
    if cleaned.startswith(("http://", "https://")):
        return cleaned
    if cleaned.startswith("//"):
        return f"https:{cleaned}"
    parsed = urlparse(cleaned)
    if parsed.scheme:
        return cleaned
    return f"https://{cleaned}"


def strip_leading_noise(text: str) -> str:
    """Drop anything before the first ``{`` or ``[`` in *text*.

    Backends that print warnings or a BOM ahead of the JSON body are common
    behind PHP endpoints.
    """
    starts = [index for index in (text.find("{"), text.find("[")) if index != -1]
    if not starts:
        return text
    return text[min(starts):]


def loads_lenient(text: str) -> Any:
    """Parse JSON from *text* after stripping leading noise."""
    return json.loads(strip_leading_noise(text))


def _read_body(response: requests.Response, deadline: float, timeout: float) -> bytes:
    """Read the body in whatever pieces arrive, giving up at *deadline*."""
    chunks: list[bytes] = []
    while True:
        if time.monotonic() > deadline:
            raise requests.Timeout(f"Body not received within {timeout:g}s")
        try:
            chunk = response.raw.read1(_CHUNK_SIZE, decode_content=True)
        except ReadTimeoutError as exc:
            raise requests.Timeout(exc) from exc
        except ProtocolError as exc:
            raise requests.exceptions.ChunkedEncodingError(exc) from exc
        except DecodeError as exc:
            raise requests.exceptions.ContentDecodingError(exc) from exc
        if not chunk:
            return b"".join(chunks)
        chunks.append(chunk)


def _get_text(url: str, timeout: float) -> str:
    """GET *url* and return the decoded body, bounded by *timeout* overall."""
    deadline = time.monotonic() + timeout
    response = _get_session().get(url, timeout=timeout, allow_redirects=True, stream=True)
    try:
        if not response.ok:
            raise requests.HTTPError(f"Status {response.status_code}", response=response)
        body = _read_body(response, deadline, timeout)
    finally:
        response.close()
    return body.decode(response.encoding or "utf-8", errors="replace")


def _try_wrapping_proxy(url: str, timeout: float) -> Any:
    """Fetch through a proxy answering ``{"contents": "<body>"}``."""
    envelope = json.loads(_get_text(_WRAPPING_PROXY.format(target=quote(url, safe="")), timeout))
    contents = envelope.get("contents") if isinstance(envelope, dict) else None
    if not contents:
        raise ValueError("No contents in proxy envelope")
    if not isinstance(contents, str):
        return contents
    try:
        return json.loads(contents)
    except ValueError:
        return contents


def _try_direct(url: str, timeout: float) -> Any:
    return loads_lenient(_get_text(url, timeout))


def _try_passthrough_proxy(url: str, timeout: float) -> Any:
    return json.loads(_get_text(_PASSTHROUGH_PROXY.format(target=quote(url, safe="")), timeout))


DEFAULT_STRATEGIES: tuple[Strategy, ...] = (
    Strategy("allorigins", _try_wrapping_proxy),
    Strategy("direct", _try_direct),
    Strategy("corsproxy", _try_passthrough_proxy),
)


def _attempt(strategy: Strategy, url: str, timeout: float) -> Any:
    """Run one strategy, folding every failure mode into TransientAccessError."""
    try:
        return strategy.attempt(url, timeout)
    except requests.Timeout as exc:
        raise TransientAccessError(strategy.name, f"timed out after {timeout:g}s") from exc
    except requests.RequestException as exc:
        raise TransientAccessError(strategy.name, str(exc) or type(exc).__name__) from exc
    except ValueError as exc:
        raise TransientAccessError(strategy.name, f"undecodable body ({exc})") from exc


def fetch_json_robust(
    url: str = DEFAULT_ENDPOINT,
    strategies: Sequence[Strategy] = DEFAULT_STRATEGIES,
    timeout: float = DEFAULT_TIMEOUT,
    attempts_per_strategy: int = 1,
) -> tuple[str, Any]:
    """Return ``(strategy_name, payload)`` from the first strategy that works.

    Strategies run one at a time in priority order. Each failure is logged and
    the next strategy is tried; when all of them fail a
    :class:`TotalAcquisitionFailure` is raised.
    """
    if attempts_per_strategy < 1:
        raise ValueError("attempts_per_strategy must be at least 1")
    target_url = ensure_http_scheme(url)
    failures: list[TransientAccessError] = []
    for strategy in strategies:
        retryer = Retrying(
            stop=stop_after_attempt(attempts_per_strategy),
            wait=wait_exponential(multiplier=1, min=1, max=5),
            retry=retry_if_exception_type(TransientAccessError),
            before_sleep=before_sleep_log(logger, logging.DEBUG),
            reraise=True,
        )
        try:
            payload = retryer(_attempt, strategy, target_url, timeout)
        except TransientAccessError as exc:
            logger.warning("Strategy %s failed for %s: %s", strategy.name, target_url, exc.reason)
            failures.append(exc)
            continue
        logger.info("Fetched catalog from %s via %s", target_url, strategy.name)
        return strategy.name, payload
    raise TotalAcquisitionFailure(failures)
