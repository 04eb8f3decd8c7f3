"""Clustering and reporting utilities for the catalog pipeline."""

from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any, Collection, Dict, Sequence

from tqdm import tqdm

from .clustering import cluster_entries
from ..features.color import hex_to_rgb
from ..io.models import CatalogEntry, Cluster, ClusterSummary


def cluster_payload(clusters: Sequence[Cluster]) -> list[Dict[str, Any]]:
    """Return a JSON-ready description of *clusters*."""
    payload: list[Dict[str, Any]] = []
    for cluster in tqdm(clusters, desc="Summarising clusters", unit="cluster", leave=False):
        payload.append(
            {
                "key": cluster.key,
                "size": cluster.size,
                "centroid": cluster.centroid._asdict(),
                "color": cluster.display_color(),
                "hex": cluster.display_hex(),
                "members": [entry.id for entry in cluster.members],
            }
        )
    return payload


def summarise(
    entries: Sequence[CatalogEntry],
    visible_ids: Collection[str],
    clusters: Sequence[Cluster],
    threshold: float,
) -> ClusterSummary:
    visible = [entry for entry in entries if entry.id in visible_ids]
    plotted = sum(1 for entry in visible if hex_to_rgb(entry.hex) is not None)
    return ClusterSummary(
        total_entries=len(entries),
        visible=len(visible),
        plotted=plotted,
        clusters=len(clusters),
        largest_cluster=max((cluster.size for cluster in clusters), default=0),
        threshold=float(threshold),
    )


def cluster_and_report(
    entries: Sequence[CatalogEntry],
    visible_ids: Collection[str],
    threshold: float,
    out_dir: str | Path,
) -> Dict[str, Any]:
    """Cluster the visible entries, persist reports, and print a console summary."""
    out_path = Path(out_dir)
    out_path.mkdir(parents=True, exist_ok=True)

    clusters = cluster_entries(entries, visible_ids, threshold)
    groups_payload = cluster_payload(clusters)
    summary = summarise(entries, visible_ids, clusters, threshold)

    clusters_path = out_path / "clusters.json"
    try:
        clusters_path.write_text(json.dumps(groups_payload, indent=2), encoding="utf-8")
    except OSError as exc:
        print(f"[group] failed to write {clusters_path}: {exc}")

    metrics_path = out_path / "metrics.json"
    try:
        metrics_path.write_text(json.dumps(asdict(summary), indent=2), encoding="utf-8")
    except OSError as exc:
        print(f"[group] failed to write {metrics_path}: {exc}")

    print(f"Total entries: {summary.total_entries}")
    print(f"Visible: {summary.visible} (plotted {summary.plotted})")
    print(f"Clusters: {summary.clusters}")
    print(f"Largest cluster: {summary.largest_cluster} colors")
    print(f"Threshold: {summary.threshold:.2f}")

    return {"clusters": clusters, "groups": groups_payload, "metrics": asdict(summary)}
