"""Level-of-detail threshold selection from viewer distance."""

from __future__ import annotations

from typing import NamedTuple, Sequence


class LodLevel(NamedTuple):
    """Applies when the viewer distance is greater than *min_distance*."""

    min_distance: float
    threshold: float


# Ordered far to near; the breakpoints are wide so small camera moves do not
# flip the grouping back and forth.
LOD_LEVELS: tuple[LodLevel, ...] = (
    LodLevel(800.0, 45.0),
    LodLevel(500.0, 30.0),
    LodLevel(300.0, 15.0),
    LodLevel(0.0, 4.0),
)

DEFAULT_THRESHOLD = 15.0


def threshold_for_distance(
    distance: float, levels: Sequence[LodLevel] = LOD_LEVELS
) -> float:
    """Return the clustering threshold for a viewer *distance*."""
    for level in levels:
        if distance > level.min_distance:
            return level.threshold
    return levels[-1].threshold


class LodTracker:
    """Hold the active threshold and report when it changes."""

    def __init__(
        self,
        levels: Sequence[LodLevel] = LOD_LEVELS,
        initial: float = DEFAULT_THRESHOLD,
    ) -> None:
        if not levels:
            raise ValueError("levels must not be empty")
        self.levels = tuple(levels)
        self.threshold = float(initial)

    def update(self, distance: float) -> bool:
        """Recompute the threshold for *distance*; return ``True`` if it changed."""
        threshold = threshold_for_distance(distance, self.levels)
        if threshold == self.threshold:
            return False
        self.threshold = threshold
        return True
