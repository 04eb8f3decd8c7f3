"""Map free-text material fields onto catalog categories."""

from __future__ import annotations

from typing import NamedTuple

from ..io.models import Category


class _Rule(NamedTuple):
    category: Category
    category_tokens: tuple[str, ...]
    name_tokens: tuple[str, ...]


# First match wins. Generic tokens such as "PC" must stay below the more
# specific polymer names.
_RULES: tuple[_Rule, ...] = (
    _Rule(Category.PLA, ("PLA",), ("PLA",)),
    _Rule(Category.PETG, ("PETG",), ("PETG",)),
    _Rule(Category.ABS, ("ABS",), ("ABS",)),
    _Rule(Category.ASA, ("ASA",), ("ASA",)),
    _Rule(Category.TPU, ("TPU", "FLEX"), ("TPU",)),
    _Rule(Category.NYLON, ("NYLON", "PA6", "PA12"), ("NYLON",)),
    _Rule(Category.PC, ("PC",), ("PC",)),
    _Rule(Category.PVB, ("PVB",), ("PVB",)),
    _Rule(Category.WOOD, ("WOOD",), ("WOOD",)),
)


def classify_category(raw_category: str | None, product_name: str | None) -> Category:
    """Return the category for a material field and product name."""
    material = (raw_category or "").upper()
    name = (product_name or "").upper()
    for rule in _RULES:
        if any(token in material for token in rule.category_tokens):
            return rule.category
        if any(token in name for token in rule.name_tokens):
            return rule.category
    return Category.OTHER
