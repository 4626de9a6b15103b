"""Retry accounting for conflict resolution within one run."""

from __future__ import annotations


class RetryBudget:
    """
    Counts automatic retries after a resolved port conflict.

    Preflight and reactive resolutions draw from the same budget, so a port
    that keeps coming back is reported instead of being killed forever.
    """

    def __init__(self, max_retries: int) -> None:
        if max_retries < 0:
            raise ValueError(f"max_retries must be >= 0 (got {max_retries})")
        self.max_retries = max_retries
        self.used = 0

    @property
    def exhausted(self) -> bool:
        return self.used >= self.max_retries

    def consume(self) -> None:
        if self.exhausted:
            raise RuntimeError("Retry budget already exhausted")
        self.used += 1
