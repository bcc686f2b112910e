"""
Core margin algorithms
"""

from .oracle import StrictOraclePrice
from .spot_position import (
    BalanceType,
    MarginCategory,
    OrderFillSimulation,
    SpotMarketConfig,
    SpotPosition,
    get_worst_case_free_collateral,
    get_worst_case_token_amounts,
    is_spot_position_available,
)

__all__ = [
    "StrictOraclePrice",
    "BalanceType",
    "MarginCategory",
    "OrderFillSimulation",
    "SpotMarketConfig",
    "SpotPosition",
    "get_worst_case_free_collateral",
    "get_worst_case_token_amounts",
    "is_spot_position_available",
]
