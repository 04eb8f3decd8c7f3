"""Greedy spatial clustering of catalog entries in RGB space."""

from __future__ import annotations

from typing import Collection, Dict, Iterable, List, Sequence, Tuple

import numpy as np

from ..features.color import hex_to_rgb
from ..io.models import CatalogEntry, Cluster, Point3

CacheKey = Tuple[frozenset, float]


def _plottable(
    entries: Iterable[CatalogEntry], visible_ids: Collection[str]
) -> list[tuple[CatalogEntry, tuple[int, int, int]]]:
    items = []
    for entry in entries:
        if entry.id not in visible_ids:
            continue
        rgb = hex_to_rgb(entry.hex)
        if rgb is None:
            continue
        items.append((entry, rgb))
    items.sort(key=lambda item: item[0].id)
    return items


def cluster_entries(
    entries: Iterable[CatalogEntry],
    visible_ids: Collection[str],
    threshold: float,
) -> list[Cluster]:
    """Partition the visible *entries* into clusters.

    Entries are processed in id order. Each one joins the first existing
    cluster, in creation order, whose centroid lies strictly closer than
    *threshold*; otherwise it opens a new cluster. Centroids are running
    means of the members' channels.
    """
    items = _plottable(entries, visible_ids)
    if not items:
        return []

    centroids = np.zeros((len(items), 3), dtype=np.float64)
    members: List[List[CatalogEntry]] = []

    for entry, rgb in items:
        point = np.asarray(rgb, dtype=np.float64)
        opened = len(members)
        target = -1
        if opened:
            distances = np.sqrt(np.square(centroids[:opened] - point).sum(axis=1))
            hits = np.flatnonzero(distances < threshold)
            if hits.size:
                target = int(hits[0])

        if target < 0:
            centroids[opened] = point
            members.append([entry])
            continue

        group = members[target]
        group.append(entry)
        n = len(group)
        centroids[target] = (centroids[target] * (n - 1) + point) / n

    return [
        Cluster(members=tuple(group), centroid=Point3(*(float(v) for v in centroids[index])))
        for index, group in enumerate(members)
    ]


class ClusterCache:
    """Memoize :func:`cluster_entries` for one entry collection."""

    def __init__(self, entries: Sequence[CatalogEntry] = ()) -> None:
        self._entries: tuple[CatalogEntry, ...] = tuple(entries)
        self._results: Dict[CacheKey, tuple[Cluster, ...]] = {}

    @property
    def entries(self) -> tuple[CatalogEntry, ...]:
        return self._entries

    def reset(self, entries: Sequence[CatalogEntry]) -> None:
        """Replace the entry collection and drop every cached result."""
        self._entries = tuple(entries)
        self._results.clear()

    def add(self, entry: CatalogEntry) -> None:
        self._entries = self._entries + (entry,)
        self._results.clear()

    def get(self, visible_ids: Collection[str], threshold: float) -> list[Cluster]:
        key: CacheKey = (frozenset(visible_ids), float(threshold))
        cached = self._results.get(key)
        if cached is None:
            cached = tuple(cluster_entries(self._entries, key[0], threshold))
            self._results[key] = cached
        return list(cached)

    def __len__(self) -> int:
        return len(self._results)
