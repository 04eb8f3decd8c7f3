"""Output helpers for persisting catalog snapshots."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Sequence

import pandas as pd

from .models import CatalogEntry


def write_catalog(path: Path, entries: Sequence[CatalogEntry]) -> Path:
    """Write *entries* to *path* as a flat JSON array and return the path."""
    serialised = [entry.to_dict() for entry in entries]
    path.write_text(json.dumps(serialised, indent=2), encoding="utf-8")
    return path


def read_catalog(path: Path) -> list[CatalogEntry]:
    """Load entries previously written by :func:`write_catalog`.

    Raises ``ValueError`` when the file is not a catalog array.
    """
    rows = json.loads(path.read_text(encoding="utf-8-sig"))
    if not isinstance(rows, list):
        raise ValueError(f"Expected a JSON array in {path}")
    try:
        return [CatalogEntry.from_dict(row) for row in rows]
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"Malformed catalog row in {path}: {exc!r}") from exc


def write_catalog_table(path: Path, entries: Sequence[CatalogEntry]) -> Path | None:
    """Write *entries* to a parquet table; returns ``None`` when empty."""
    if not entries:
        return None
    df = pd.DataFrame([entry.to_dict() for entry in entries])
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_parquet(path, index=False, engine="pyarrow")
    return path
