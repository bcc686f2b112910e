"""`spot_position`: worst-case margin valuation of a single spot position.

- deterministic, integer-only fixed-point math (i128-checked),
- immutable inputs and outputs (frozen dataclasses),
- fail-closed: overflow, out-of-bound weights and malformed configs raise.

Public API:
- `is_spot_position_available(position) -> bool`
- `get_worst_case_token_amounts(position, market, strict_price, category) -> OrderFillSimulation`
- `get_worst_case_free_collateral(positions, markets, prices, category) -> int`
"""

from .balance import STANDARD_BALANCE_MATH, SpotBalanceMath, StandardSpotBalanceMath
from .config import load_spot_markets, spot_markets_from_dict
from .errors import SpotConfigError, SpotOverflowError, SpotWeightBoundError
from .position import (
    calculate_weighted_token_value,
    get_worst_case_free_collateral,
    get_worst_case_token_amounts,
    is_spot_position_available,
    simulate_order_fill,
)
from .types import BalanceType, MarginCategory, OrderFillSimulation, SpotMarketConfig, SpotPosition

__all__ = [
    "is_spot_position_available",
    "get_worst_case_token_amounts",
    "get_worst_case_free_collateral",
    "calculate_weighted_token_value",
    "simulate_order_fill",
    "load_spot_markets",
    "spot_markets_from_dict",
    "SpotBalanceMath",
    "StandardSpotBalanceMath",
    "STANDARD_BALANCE_MATH",
    "BalanceType",
    "MarginCategory",
    "OrderFillSimulation",
    "SpotMarketConfig",
    "SpotPosition",
    "SpotConfigError",
    "SpotOverflowError",
    "SpotWeightBoundError",
]
