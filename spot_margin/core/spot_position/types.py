"""Data types for the spot-position margin kernel.

All types are frozen dataclasses (immutable).

Units/conventions:
- `scaled_balance` is in SPOT_BALANCE_PRECISION (1e9) and needs the market's
  cumulative interest to become a token amount.
- token amounts are in the market's own `decimals`.
- `*_value` fields are QUOTE_PRECISION (1e6).
- weights are SPOT_WEIGHT_PRECISION (1e4 == 1.0).
- `imf_factor` is SPOT_IMF_PRECISION (1e6).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique

from .errors import SpotConfigError
from .math import SPOT_CUMULATIVE_INTEREST_PRECISION, SPOT_WEIGHT_PRECISION

MAX_DECIMALS: int = 19


@unique
class BalanceType(Enum):
    DEPOSIT = "deposit"
    BORROW = "borrow"


@unique
class MarginCategory(Enum):
    """Risk regime selecting which weight curve applies."""
    INITIAL = "initial"
    MAINTENANCE = "maintenance"


def _is_int(x: object) -> bool:
    return isinstance(x, int) and not isinstance(x, bool)


@dataclass(frozen=True)
class SpotPosition:
    """One account's holding in a single spot market."""

    market_index: int = 0
    scaled_balance: int = 0
    balance_type: BalanceType = BalanceType.DEPOSIT

    # Resting order size per side, as non-negative token magnitudes.
    open_bids: int = 0
    open_asks: int = 0
    open_orders: int = 0

    def __post_init__(self) -> None:
        for name in ("market_index", "scaled_balance", "open_bids", "open_asks", "open_orders"):
            value = getattr(self, name)
            if not _is_int(value):
                raise TypeError(f"{name} must be an int")
            if value < 0:
                raise ValueError(f"{name} must be non-negative: {value}")
        if not isinstance(self.balance_type, BalanceType):
            raise TypeError("balance_type must be a BalanceType")


@dataclass(frozen=True)
class SpotMarketConfig:
    """Static per-market configuration read by the valuation and weight curves."""

    market_index: int = 0
    decimals: int = 6

    # Interest accumulators (SPOT_CUMULATIVE_INTEREST_PRECISION)
    cumulative_deposit_interest: int = SPOT_CUMULATIVE_INTEREST_PRECISION
    cumulative_borrow_interest: int = SPOT_CUMULATIVE_INTEREST_PRECISION

    # Market-wide scaled deposits, used by the initial asset weight scaling
    deposit_balance: int = 0

    # Weights (SPOT_WEIGHT_PRECISION)
    initial_asset_weight: int = SPOT_WEIGHT_PRECISION
    maintenance_asset_weight: int = SPOT_WEIGHT_PRECISION
    initial_liability_weight: int = SPOT_WEIGHT_PRECISION
    maintenance_liability_weight: int = SPOT_WEIGHT_PRECISION

    # Size derating (SPOT_IMF_PRECISION); 0 disables it
    imf_factor: int = 0

    # Deposits value (QUOTE_PRECISION) above which the initial asset weight
    # is scaled down; 0 disables it
    scale_initial_asset_weight_start: int = 0

    def __post_init__(self) -> None:
        violations = [f"{f}:not_int" for f, v in vars(self).items() if not _is_int(v)]
        if violations:
            raise SpotConfigError(f"market {self.market_index!r}: {', '.join(violations)}")

        if not (0 <= self.decimals <= MAX_DECIMALS):
            violations.append("decimals_range")
        if self.market_index < 0:
            violations.append("market_index_negative")
        if self.cumulative_deposit_interest <= 0 or self.cumulative_borrow_interest <= 0:
            violations.append("cumulative_interest_positive")
        if self.deposit_balance < 0:
            violations.append("deposit_balance_negative")
        if not (0 <= self.initial_asset_weight <= self.maintenance_asset_weight <= SPOT_WEIGHT_PRECISION):
            violations.append("asset_weights_ordered")
        if not (SPOT_WEIGHT_PRECISION <= self.maintenance_liability_weight <= self.initial_liability_weight):
            violations.append("liability_weights_ordered")
        if self.imf_factor < 0:
            violations.append("imf_factor_negative")
        if self.scale_initial_asset_weight_start < 0:
            violations.append("scale_start_negative")
        if violations:
            raise SpotConfigError(f"market {self.market_index}: {', '.join(violations)}")


@dataclass(frozen=True)
class OrderFillSimulation:
    """Snapshot of one simulated scenario (no fill, all bids fill, or all asks fill)."""

    token_amount: int
    orders_value: int
    token_value: int
    weight: int
    weighted_token_value: int
    free_collateral_contribution: int
