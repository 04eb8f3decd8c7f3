"""Command-line interface for the filament_atlas project."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Iterable

from tqdm import tqdm

from .crawl.fetch import DEFAULT_ENDPOINT, DEFAULT_TIMEOUT
from .errors import CatalogError, TotalAcquisitionFailure
from .group.group_and_metrics import cluster_and_report
from .group.lod import DEFAULT_THRESHOLD, threshold_for_distance
from .group.visibility import category_counts, visible_ids
from .ingest import fetch_catalog
from .io.models import CatalogEntry
from .io.outputs import read_catalog, write_catalog, write_catalog_table


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments for the catalog pipeline."""
    parser = argparse.ArgumentParser(
        description="Fetch the filament colour catalog and cluster it in RGB space."
    )
    parser.add_argument(
        "--out",
        required=True,
        help="Directory path where JSON and parquet outputs will be written.",
    )
    parser.add_argument(
        "--endpoint",
        default=DEFAULT_ENDPOINT,
        help="Catalog API endpoint to fetch.",
    )
    parser.add_argument(
        "--input",
        default=None,
        help="Load a previously exported catalog.json instead of fetching.",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help="Per-strategy request timeout in seconds.",
    )
    lod = parser.add_mutually_exclusive_group()
    lod.add_argument(
        "--distance",
        type=float,
        default=None,
        help="Viewer distance used to pick the clustering threshold.",
    )
    lod.add_argument(
        "--threshold",
        type=float,
        default=None,
        help="Explicit clustering threshold in RGB units.",
    )
    parser.add_argument(
        "--category",
        action="append",
        default=None,
        help="Category to include (repeatable). Defaults to every category seen.",
    )
    parser.add_argument(
        "--search",
        default="",
        help="Only keep entries whose product, colour or category contains this text.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    return parser.parse_args(list(argv) if argv is not None else None)


def _fetch_entries(endpoint: str, timeout: float) -> list[CatalogEntry]:
    """Fetch the catalog, rendering ingestion progress with tqdm."""
    entries: list[CatalogEntry] = []
    with tqdm(desc="Connecting", unit="color", leave=False) as bar:

        def on_progress(status: str, count: int) -> None:
            bar.set_description_str(status)
            bar.n = count
            bar.refresh()

        report = fetch_catalog(
            entries.append,
            on_progress=on_progress,
            endpoint=endpoint,
            timeout=timeout,
        )
    print(
        f"[catalog] {report.entries} colors from {report.records} records "
        f"(via {report.strategy})"
    )
    return entries


def _resolve_threshold(args: argparse.Namespace) -> float:
    if args.threshold is not None:
        return args.threshold
    if args.distance is not None:
        return threshold_for_distance(args.distance)
    return DEFAULT_THRESHOLD


def main(argv: Iterable[str] | None = None) -> int:
    """Entry point for the CLI."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    out_dir = Path(args.out)
    out_dir.mkdir(parents=True, exist_ok=True)

    try:
        if args.input:
            entries = read_catalog(Path(args.input))
            print(f"[catalog] loaded {len(entries)} colors from {args.input}")
        else:
            entries = _fetch_entries(args.endpoint, args.timeout)
    except TotalAcquisitionFailure as exc:
        for failure in exc.failures:
            print(f"[warn] {failure.strategy}: {failure.reason}")
        print(f"[error] {exc}")
        return 1
    except CatalogError as exc:
        print(f"[error] {exc}")
        return 1
    except (OSError, ValueError) as exc:
        print(f"[error] could not load {args.input}: {exc}")
        return 1

    write_catalog(out_dir / "catalog.json", entries)
    table_path = write_catalog_table(out_dir / "catalog.parquet", entries)
    if table_path:
        print(f"[catalog] wrote {len(entries)} rows to {table_path}")

    counts = category_counts(entries)
    for category, count in counts.items():
        print(f"  {category}: {count}")

    categories = args.category or list(counts)
    selected = visible_ids(entries, categories, args.search)
    cluster_and_report(entries, selected, _resolve_threshold(args), out_dir)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
