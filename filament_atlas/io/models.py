"""Data models shared across the catalog pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, NamedTuple

from ..features.color import rgb_to_hex, rms_color


class Category(str, Enum):
    """Material families a catalog entry can be filed under."""

    PLA = "PLA"
    PETG = "PETG"
    ABS = "ABS"
    ASA = "ASA"
    TPU = "TPU"
    NYLON = "Nylon"
    PC = "PC"
    PVB = "PVB"
    WOOD = "Wood"
    OTHER = "Other"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class CatalogEntry:
    """One normalized product colour."""

    id: str
    product: str
    name: str
    category: Category
    hex: str
    url: str
    transmission_distance: str | None = None

    def to_dict(self) -> Dict[str, Any]:
        """Return the flat export row for this entry."""
        return {
            "id": self.id,
            "product": self.product,
            "name": self.name,
            "category": self.category.value,
            "hex": self.hex,
            "url": self.url,
            "td": self.transmission_distance,
        }

    @classmethod
    def from_dict(cls, row: Mapping[str, Any]) -> "CatalogEntry":
        """Rebuild an entry from a row written by :meth:`to_dict`."""
        td = row.get("td", row.get("transmissionDistance"))
        return cls(
            id=str(row["id"]),
            product=str(row["product"]),
            name=str(row["name"]),
            category=Category(row.get("category") or Category.OTHER.value),
            hex=str(row["hex"]),
            url=str(row["url"]),
            transmission_distance=None if td in (None, "", "null") else str(td),
        )


class Point3(NamedTuple):
    """A position in RGB space (red=x, green=y, blue=z)."""

    x: float
    y: float
    z: float


@dataclass(frozen=True, slots=True)
class Cluster:
    """Entries grouped into one visual unit for the current level of detail."""

    members: tuple[CatalogEntry, ...]
    centroid: Point3

    @property
    def size(self) -> int:
        return len(self.members)

    @property
    def representative(self) -> CatalogEntry:
        return self.members[0]

    @property
    def key(self) -> str:
        """Display key; not stable across recomputations."""
        suffix = "-cluster" if self.size > 1 else ""
        return f"{self.representative.id}{suffix}"

    def display_color(self) -> str:
        """Return the member hex for singletons, an RMS blend otherwise."""
        if self.size == 1:
            return self.representative.hex
        r, g, b = rms_color(member.hex for member in self.members)
        return f"rgb({r},{g},{b})"

    def display_hex(self) -> str:
        if self.size == 1:
            return self.representative.hex
        return rgb_to_hex(rms_color(member.hex for member in self.members))


@dataclass(slots=True)
class IngestionReport:
    """Outcome of one ingestion run."""

    entries: int
    records: int
    strategy: str | None = None


@dataclass(slots=True)
class ClusterSummary:
    """High-level summary of a clustering pass."""

    total_entries: int
    visible: int
    plotted: int
    clusters: int
    largest_cluster: int
    threshold: float
