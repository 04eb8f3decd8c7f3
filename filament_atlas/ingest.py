"""Drive acquisition, decoding and normalization of the product catalog."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Iterator

from .crawl.fetch import DEFAULT_ENDPOINT, DEFAULT_TIMEOUT, fetch_json_robust
from .errors import EmptyCatalogError, NoValidEntriesError
from .extract.decode import find_record_list
from .extract.normalize import RecordNormalizer
from .io.models import CatalogEntry, IngestionReport

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, int], None]
EntryCallback = Callable[[CatalogEntry], None]
Fetcher = Callable[[str], tuple[str, Any]]

PROGRESS_EVERY = 20


def _noop_progress(status: str, count: int) -> None:
    return None


def _locate_records(payload: Any) -> list[Any]:
    result = find_record_list(payload)
    if not result.found or not result.records:
        raise EmptyCatalogError("Connected to API but found no product list in response.")
    logger.debug("Located %d records via %s", len(result.records), result.source)
    return result.records


def _iter_records(
    records: list[Any], report: ProgressCallback, progress_every: int
) -> Iterator[CatalogEntry]:
    report(f"Processing {len(records)} items...", 0)
    count = 0
    for entry in RecordNormalizer().iter_entries(records):
        count += 1
        yield entry
        if progress_every > 0 and count % progress_every == 0:
            report(f"Loaded {count} colors...", count)
            time.sleep(0)

    if count == 0:
        raise NoValidEntriesError("API response parsed but no valid hex codes were found.")


def iter_catalog(
    payload: Any,
    on_progress: ProgressCallback | None = None,
    progress_every: int = PROGRESS_EVERY,
) -> Iterator[CatalogEntry]:
    """Yield catalog entries from a decoded API *payload* in source order.

    Raises :class:`EmptyCatalogError` when no record list can be located and
    :class:`NoValidEntriesError` when records exist but none is usable.
    """
    records = _locate_records(payload)
    yield from _iter_records(records, on_progress or _noop_progress, progress_every)


def fetch_catalog(
    on_entry: EntryCallback,
    on_progress: ProgressCallback | None = None,
    endpoint: str = DEFAULT_ENDPOINT,
    timeout: float = DEFAULT_TIMEOUT,
    fetcher: Fetcher | None = None,
) -> IngestionReport:
    """Fetch the catalog and stream each entry to *on_entry*.

    *fetcher* maps an endpoint to ``(strategy_name, payload)`` and defaults to
    the sequential strategy chain.
    """
    report = on_progress or _noop_progress
    report("Connecting to API...", 0)

    if fetcher is None:
        strategy, payload = fetch_json_robust(endpoint, timeout=timeout)
    else:
        strategy, payload = fetcher(endpoint)

    records = _locate_records(payload)
    count = 0
    for entry in _iter_records(records, report, PROGRESS_EVERY):
        on_entry(entry)
        count += 1

    report("Done!", count)
    logger.info("Loaded %d catalog entries from %d records", count, len(records))
    return IngestionReport(entries=count, records=len(records), strategy=strategy)


def load_catalog(
    endpoint: str = DEFAULT_ENDPOINT,
    on_progress: ProgressCallback | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    fetcher: Fetcher | None = None,
) -> list[CatalogEntry]:
    """Return the full list of entries for *endpoint*."""
    entries: list[CatalogEntry] = []
    fetch_catalog(
        entries.append,
        on_progress=on_progress,
        endpoint=endpoint,
        timeout=timeout,
        fetcher=fetcher,
    )
    return entries
