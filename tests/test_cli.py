"""End-to-end CLI runs without network access."""

import json

from filament_atlas import cli
from filament_atlas.errors import TotalAcquisitionFailure, TransientAccessError
from filament_atlas.group.group_and_metrics import cluster_and_report
from filament_atlas.io.outputs import write_catalog


def _write_input(tmp_path, make_entry):
    entries = [
        make_entry("a", "#000000"),
        make_entry("b", "#020202"),
        make_entry("c", "#c8c8c8"),
    ]
    return write_catalog(tmp_path / "input.json", entries), entries


def test_cluster_and_report_writes_outputs(tmp_path, make_entry, capsys):
    _, entries = _write_input(tmp_path, make_entry)
    result = cluster_and_report(entries, {"a", "b", "c"}, 15, tmp_path / "out")
    groups = json.loads((tmp_path / "out" / "clusters.json").read_text(encoding="utf-8"))
    metrics = json.loads((tmp_path / "out" / "metrics.json").read_text(encoding="utf-8"))
    assert [group["members"] for group in groups] == [["a", "b"], ["c"]]
    assert groups[0]["key"] == "a-cluster"
    assert groups[0]["centroid"] == {"x": 1.0, "y": 1.0, "z": 1.0}
    assert groups[1]["color"] == "#c8c8c8"
    assert metrics["clusters"] == 2
    assert metrics["largest_cluster"] == 2
    assert result["metrics"] == metrics
    assert "Clusters: 2" in capsys.readouterr().out


def test_main_from_exported_catalog(tmp_path, make_entry):
    input_path, _ = _write_input(tmp_path, make_entry)
    out_dir = tmp_path / "run"
    code = cli.main(["--input", str(input_path), "--out", str(out_dir), "--distance", "900"])
    assert code == 0
    assert (out_dir / "catalog.json").exists()
    assert (out_dir / "catalog.parquet").exists()
    metrics = json.loads((out_dir / "metrics.json").read_text(encoding="utf-8"))
    assert metrics["threshold"] == 45.0
    assert metrics["clusters"] == 2


def test_main_reports_total_failure(tmp_path, monkeypatch, capsys):
    def failing(*args, **kwargs):
        raise TotalAcquisitionFailure([TransientAccessError("direct", "timed out after 15s")])

    monkeypatch.setattr(cli, "fetch_catalog", failing)
    code = cli.main(["--out", str(tmp_path)])
    out = capsys.readouterr().out
    assert code == 1
    assert "[warn] direct: timed out after 15s" in out
    assert "any proxy" in out


def test_search_and_category_filters(tmp_path, make_entry):
    input_path, _ = _write_input(tmp_path, make_entry)
    out_dir = tmp_path / "run"
    code = cli.main(
        ["--input", str(input_path), "--out", str(out_dir), "--category", "PETG", "--threshold", "400"]
    )
    assert code == 0
    metrics = json.loads((out_dir / "metrics.json").read_text(encoding="utf-8"))
    assert metrics["visible"] == 0
    assert metrics["clusters"] == 0


def test_main_rejects_malformed_input(tmp_path, capsys):
    not_a_list = tmp_path / "object.json"
    not_a_list.write_text('{"not": "a list"}', encoding="utf-8")
    missing_field = tmp_path / "rows.json"
    missing_field.write_text('[{"id": "1", "hex": "#fff"}]', encoding="utf-8")
    broken = tmp_path / "broken.json"
    broken.write_text("[{", encoding="utf-8")

    for path in (not_a_list, missing_field, broken, tmp_path / "absent.json"):
        code = cli.main(["--input", str(path), "--out", str(tmp_path / "run")])
        assert code == 1
        assert f"[error] could not load {path}" in capsys.readouterr().out
