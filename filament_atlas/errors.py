"""Error kinds raised by the catalog ingestion pipeline."""

from __future__ import annotations

from typing import Sequence


class CatalogError(Exception):
    """Base class for fatal catalog ingestion failures."""


class TransientAccessError(CatalogError):
    """A single acquisition strategy attempt failed."""

    def __init__(self, strategy: str, reason: str) -> None:
        super().__init__(f"{strategy}: {reason}")
        self.strategy = strategy
        self.reason = reason


class TotalAcquisitionFailure(CatalogError):
    """Raised when every acquisition strategy failed."""

    def __init__(
        self,
        failures: Sequence[TransientAccessError] = (),
        message: str = "Unable to connect to the catalog API via any proxy.",
    ) -> None:
        super().__init__(message)
        self.failures = list(failures)


class EmptyCatalogError(CatalogError):
    """The response decoded but held no usable product list."""


class NoValidEntriesError(CatalogError):
    """Records were processed but none produced a plottable entry."""
