"""Category and search filtering of visible ids."""

from filament_atlas.group.visibility import category_counts, visible_ids
from filament_atlas.io.models import Category


def _catalog(make_entry):
    return [
        make_entry("1", "#ff0000", Category.PLA, "PolyLite PLA", "Red"),
        make_entry("2", "#00ff00", Category.PETG, "PolyLite PETG", "Lime"),
        make_entry("3", "#0000ff", Category.PLA, "PolyTerra PLA", "Ocean Blue"),
        make_entry("4", "#ffffff", Category.NYLON, "PolyMide CoPA", "Natural"),
    ]


def test_empty_selection_hides_everything(make_entry):
    assert visible_ids(_catalog(make_entry), []) == set()


def test_category_filter(make_entry):
    assert visible_ids(_catalog(make_entry), ["PLA", Category.NYLON]) == {"1", "3", "4"}


def test_query_matches_product_name_or_category(make_entry):
    entries = _catalog(make_entry)
    everything = [category.value for category in Category]
    assert visible_ids(entries, everything, "  BLUE ") == {"3"}
    assert visible_ids(entries, everything, "polylite") == {"1", "2"}
    assert visible_ids(entries, everything, "nylon") == {"4"}
    assert visible_ids(entries, ["PETG"], "terra") == set()


def test_category_counts_sorted(make_entry):
    counts = category_counts(_catalog(make_entry))
    assert list(counts) == ["Nylon", "PETG", "PLA"]
    assert counts["PLA"] == 2
