"""
Shared pytest fixtures for the filament_atlas tests.

Provides:
  - A factory for catalog entries
  - A fake requests session so the strategy chain never touches the network
"""

import json
import sys
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pytest
import requests

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from filament_atlas.crawl import fetch  # noqa: E402
from filament_atlas.io.models import CatalogEntry, Category  # noqa: E402


# ---------------------------------------------------------------------------
# Entries
# ---------------------------------------------------------------------------

@pytest.fixture()
def make_entry() -> Callable[..., CatalogEntry]:
    def _make(
        entry_id: str,
        hex_value: str,
        category: Category = Category.PLA,
        product: str = "PolyLite PLA",
        name: Optional[str] = None,
    ) -> CatalogEntry:
        return CatalogEntry(
            id=entry_id,
            product=product,
            name=name or f"Color {entry_id}",
            category=category,
            hex=hex_value,
            url="https://us.polymaker.com",
        )

    return _make


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------

class FakeRaw:
    """Serves a body in pieces, optionally pausing before each one."""

    def __init__(self, data: bytes, piece: int = 8192, delay: float = 0.0):
        self.data = data
        self.piece = piece
        self.delay = delay
        self.position = 0

    def read1(self, amt: int = -1, decode_content: bool = True) -> bytes:
        if self.position >= len(self.data):
            return b""
        if self.delay:
            time.sleep(self.delay)
        size = min(amt, self.piece) if amt and amt > 0 else self.piece
        chunk = self.data[self.position:self.position + size]
        self.position += len(chunk)
        return chunk


class FakeResponse:
    def __init__(
        self,
        body: Any = None,
        status_code: int = 200,
        text: Optional[str] = None,
        piece: int = 8192,
        delay: float = 0.0,
    ):
        self.status_code = status_code
        self.text = text if text is not None else json.dumps(body)
        self.encoding = "utf-8"
        self.raw = FakeRaw(self.text.encode("utf-8"), piece=piece, delay=delay)
        self.closed = False

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    def rewind(self) -> None:
        self.raw.position = 0
        self.closed = False

    def close(self) -> None:
        self.closed = True


class FakeSession:
    """Answers GETs from an ordered list of (url prefix, response or exception)."""

    def __init__(self) -> None:
        self.routes: List[tuple] = []
        self.calls: List[Dict[str, Any]] = []

    def route(self, prefix: str, outcome: Any) -> "FakeSession":
        self.routes.append((prefix, outcome))
        return self

    def get(self, url: str, timeout: float = None, allow_redirects: bool = True, stream: bool = False):
        self.calls.append({"url": url, "timeout": timeout, "stream": stream})
        for prefix, outcome in self.routes:
            if url.startswith(prefix):
                if isinstance(outcome, Exception):
                    raise outcome
                outcome.rewind()
                return outcome
        raise requests.ConnectionError(f"no route for {url}")


WRAPPING_PREFIX = "https://api.allorigins.win/"
PASSTHROUGH_PREFIX = "https://corsproxy.io/"
ENDPOINT = "https://catalog.example.com/api/color_data.php"


@pytest.fixture()
def fake_session(monkeypatch) -> FakeSession:
    session = FakeSession()
    monkeypatch.setattr(fetch, "_get_session", lambda: session)
    return session
