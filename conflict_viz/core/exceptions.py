"""
Exception taxonomy for the chart suite.

Structural failures (``LoadError``, ``MissingColumnsError``) escalate to the
pipeline's single top-level handler, which writes one uniform message into
every chart container.  Parsing anomalies never raise; they are resolved by
lenient defaults in the row normalizer.  An empty subset is not an error at
all: see ``conflict_viz.models.data_models.EmptySubset``.
"""

from typing import Iterable, List


class ConflictVizError(Exception):
    """Base class for every error raised by conflict_viz."""


class LoadError(ConflictVizError):
    """The CSV or the companion geo file could not be fetched or parsed."""

    def __init__(self, message: str, source: str = ""):
        super().__init__(message)
        self.source = source


class MissingColumnsError(ConflictVizError):
    """Required canonical fields could not be resolved from the header row."""

    def __init__(self, missing: Iterable[str]):
        self.missing: List[str] = list(missing)
        super().__init__(f"Missing required columns: {self.missing}")


class UnknownChartError(ConflictVizError, KeyError):
    """A chart kind was requested that is not in the registry."""

    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(f"Unknown chart kind: {kind!r}")

    def __str__(self):
        return self.args[0]
