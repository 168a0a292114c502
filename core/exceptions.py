"""
exceptions.py
--------------
Engine exceptions.

Only two conditions leave the engine as exceptions: a rejected analysis
window (RangeError) and a caller-requested abort (AnalysisAborted).
Insufficient samples and zero denominators are ordinary results.
"""

from typing import Any


class RangeError(ValueError):
    """Analysis window rejected before aggregation. Carries the offending bound."""

    def __init__(self, message: str, bound: str, value: Any = None):
        self.bound = bound
        self.value = value
        super().__init__(message)


class AnalysisAborted(RuntimeError):
    """Deadline passed or cancellation requested before an expensive stage."""

    def __init__(self, stage: str, reason: str = "deadline exceeded"):
        self.stage = stage
        self.reason = reason
        super().__init__(f"Analysis aborted before '{stage}' stage: {reason}")
