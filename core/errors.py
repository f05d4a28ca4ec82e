from __future__ import annotations


class DashboardError(Exception):
    """Base class for errors raised by the dashboard core."""


class InvalidInputError(DashboardError, ValueError):
    """Raised when a caller passes input the aggregation layer cannot use (empty series, unknown period, bad filter)."""
