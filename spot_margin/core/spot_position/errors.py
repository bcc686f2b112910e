"""Exception types for the spot-position margin kernel.

Every error here is fatal for the calculation that raised it: a wrapped or
out-of-bound number would silently misprice account risk.
"""

from __future__ import annotations


class SpotOverflowError(Exception):
    """Raised when a fixed-point intermediate leaves the i128 domain."""


class SpotWeightBoundError(Exception):
    """Raised when a weight curve returns a weight outside its documented bound."""

    def __init__(self, violations: list[str]) -> None:
        self.violations = violations
        super().__init__(f"weight bound violations: {', '.join(violations)}")


class SpotConfigError(Exception):
    """Raised when a spot market configuration is malformed."""
