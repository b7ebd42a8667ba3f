"""Data-quality conditions raised by the pipeline.

None of these are transient: rerunning on the same input raises again.
"""

from __future__ import annotations


class DataQualityError(ValueError):
    """Base class for every data-quality failure of the pipeline."""


class MalformedRecordError(DataQualityError):
    """Rows with missing or impossible raw fields, or a missing column."""

    def __init__(self, message: str, count: int = 0) -> None:
        super().__init__(message)
        self.count = count


class InvalidGeometryError(DataQualityError):
    """Rows whose coordinates fall outside |lat| <= 90, |lon| <= 180."""

    def __init__(self, message: str, count: int = 0) -> None:
        super().__init__(message)
        self.count = count


class EmptyDatasetError(DataQualityError):
    """A statistic was requested over a partition with no rows."""
