"""
Strict oracle price.

A strict price pairs the live oracle reading with its TWAP so risk code can
value every exposure against the bound that is worst for the account:
- assets are valued at `min()`,
- liabilities and removed orders are valued at `max()`.

This module is pure. Fetching the reading and judging its freshness belong to
the caller (see the imperative shell).
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class StrictOraclePrice:
    """Oracle price (PRICE_PRECISION) with an optional TWAP bound."""

    current: int
    twap: int | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.current, int) or isinstance(self.current, bool):
            raise TypeError("current must be an int")
        if self.current < 0:
            raise ValueError(f"current must be non-negative: {self.current}")
        if self.twap is not None:
            if not isinstance(self.twap, int) or isinstance(self.twap, bool):
                raise TypeError("twap must be an int or None")
            if self.twap < 0:
                raise ValueError(f"twap must be non-negative: {self.twap}")

    def max(self) -> int:
        """Upper bound: the higher of current and TWAP."""
        if self.twap is None:
            return self.current
        return self.current if self.current >= self.twap else self.twap

    def min(self) -> int:
        """Lower bound: the lower of current and TWAP."""
        if self.twap is None:
            return self.current
        return self.current if self.current <= self.twap else self.twap
