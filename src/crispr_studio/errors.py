"""
Aggregation errors.

Absence (missing or not-owned experiment) is never an error: loaders
and the service return None. Storage errors raised by psycopg propagate
unchanged. Only the conditions the aggregation itself detects live here.
"""


class AggregationError(Exception):
    """Base class for failures detected by the aggregation layer."""


class AggregationTimeout(AggregationError, TimeoutError):
    """The aggregation deadline passed before every fan-out load finished."""

    def __init__(self, pending: int, timeout: float | None = None):
        self.pending = pending
        self.timeout = timeout
        detail = f" after {timeout:g}s" if timeout else ""
        super().__init__(f"Aggregation cancelled{detail} with {pending} load(s) still pending")
