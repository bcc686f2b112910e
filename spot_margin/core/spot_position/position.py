"""Worst-case valuation of a spot position with resting orders.

A spot position's free collateral contribution depends on which of its open
orders fill. `get_worst_case_token_amounts()` simulates the two extremes
(every bid fills, every ask fills) and keeps the more adverse one:

    no open orders  -> weighted value of the balance itself
    bids/asks open  -> min(simulate(+open_bids), simulate(-open_asks)), ties -> bids

Removed orders are always priced at the strict oracle's upper bound, for
both sides. Weighting uses the current price.
"""

from __future__ import annotations

import logging
from typing import Mapping

from ..oracle import StrictOraclePrice
from .balance import STANDARD_BALANCE_MATH, SpotBalanceMath
from .errors import SpotWeightBoundError
from .math import SPOT_WEIGHT_PRECISION, abs_val, checked_add, mul_div_trunc
from .types import MarginCategory, OrderFillSimulation, SpotMarketConfig, SpotPosition

logger = logging.getLogger(__name__)


def is_spot_position_available(position: SpotPosition) -> bool:
    """True when the position holds nothing and has no resting orders."""
    return position.scaled_balance == 0 and position.open_orders == 0


def _check_weight_bound(weight: int, *, is_asset: bool) -> None:
    if is_asset:
        if not (0 <= weight <= SPOT_WEIGHT_PRECISION):
            raise SpotWeightBoundError([f"asset_weight_range:{weight}"])
    elif weight < SPOT_WEIGHT_PRECISION:
        raise SpotWeightBoundError([f"liability_weight_floor:{weight}"])


def calculate_weighted_token_value(
    token_amount: int,
    token_value: int,
    oracle_price: int,
    market: SpotMarketConfig,
    margin_category: MarginCategory,
    *,
    balance_math: SpotBalanceMath = STANDARD_BALANCE_MATH,
) -> tuple[int, int]:
    """Return ``(weight, token_value * weight / SPOT_WEIGHT_PRECISION)``.

    Non-negative values are assets and get the (derating) asset weight;
    negative values are liabilities and get the (inflating) liability weight.
    """
    is_asset = token_value >= 0
    if is_asset:
        weight = balance_math.asset_weight(token_amount, oracle_price, market, margin_category)
    else:
        weight = balance_math.liability_weight(abs_val(token_amount), market, margin_category)
    _check_weight_bound(weight, is_asset=is_asset)

    return weight, mul_div_trunc(token_value, weight, SPOT_WEIGHT_PRECISION)


def simulate_order_fill(
    token_amount: int,
    token_value: int,
    open_orders: int,
    strict_oracle_price: StrictOraclePrice,
    market: SpotMarketConfig,
    margin_category: MarginCategory,
    *,
    balance_math: SpotBalanceMath = STANDARD_BALANCE_MATH,
) -> OrderFillSimulation:
    """Value the position as if every order on one side filled.

    `open_orders` is the signed token change of that fill: ``+open_bids`` for
    the bid side, ``-open_asks`` for the ask side. The orders themselves are
    charged as a cost (`orders_value <= 0`) at the upper price bound.
    """
    max_price = strict_oracle_price.max()
    orders_value = balance_math.token_value(-abs_val(open_orders), market.decimals, max_price)
    fill_value = balance_math.token_value(open_orders, market.decimals, max_price)

    token_amount_after_fill = checked_add(token_amount, open_orders)
    token_value_after_fill = checked_add(token_value, fill_value)

    weight, weighted_token_value_after_fill = calculate_weighted_token_value(
        token_amount_after_fill,
        token_value_after_fill,
        strict_oracle_price.current,
        market,
        margin_category,
        balance_math=balance_math,
    )

    return OrderFillSimulation(
        token_amount=token_amount_after_fill,
        orders_value=orders_value,
        token_value=token_value_after_fill,
        weight=weight,
        weighted_token_value=weighted_token_value_after_fill,
        free_collateral_contribution=checked_add(weighted_token_value_after_fill, orders_value),
    )


def get_worst_case_token_amounts(
    position: SpotPosition,
    market: SpotMarketConfig,
    strict_oracle_price: StrictOraclePrice,
    margin_category: MarginCategory,
    *,
    balance_math: SpotBalanceMath = STANDARD_BALANCE_MATH,
) -> OrderFillSimulation:
    """Most adverse valuation of *position* over its possible order fills."""
    token_amount = balance_math.signed_token_amount(
        balance_math.token_amount(position.scaled_balance, market, position.balance_type),
        position.balance_type,
    )
    token_value = balance_math.strict_token_value(token_amount, market.decimals, strict_oracle_price)

    if position.open_bids == 0 and position.open_asks == 0:
        weight, weighted_token_value = calculate_weighted_token_value(
            token_amount,
            token_value,
            strict_oracle_price.current,
            market,
            margin_category,
            balance_math=balance_math,
        )
        return OrderFillSimulation(
            token_amount=token_amount,
            orders_value=0,
            token_value=token_value,
            weight=weight,
            weighted_token_value=weighted_token_value,
            free_collateral_contribution=weighted_token_value,
        )

    bids_simulation = simulate_order_fill(
        token_amount, token_value, position.open_bids,
        strict_oracle_price, market, margin_category, balance_math=balance_math,
    )
    asks_simulation = simulate_order_fill(
        token_amount, token_value, -position.open_asks,
        strict_oracle_price, market, margin_category, balance_math=balance_math,
    )

    if asks_simulation.free_collateral_contribution < bids_simulation.free_collateral_contribution:
        logger.debug(
            "market %d: asks worst case (%d < %d)",
            market.market_index,
            asks_simulation.free_collateral_contribution,
            bids_simulation.free_collateral_contribution,
        )
        return asks_simulation
    logger.debug(
        "market %d: bids worst case (%d <= %d)",
        market.market_index,
        bids_simulation.free_collateral_contribution,
        asks_simulation.free_collateral_contribution,
    )
    return bids_simulation


def get_worst_case_free_collateral(
    positions: list[SpotPosition],
    markets: Mapping[int, SpotMarketConfig],
    prices: Mapping[int, StrictOraclePrice],
    margin_category: MarginCategory,
    *,
    balance_math: SpotBalanceMath = STANDARD_BALANCE_MATH,
) -> int:
    """Sum of worst-case contributions over an account's non-empty positions.

    Raises KeyError when a position's market or price is missing.
    """
    total = 0
    for position in positions:
        if is_spot_position_available(position):
            continue
        market = markets[position.market_index]
        if market.market_index != position.market_index:
            raise ValueError(
                f"market config {market.market_index} registered under index {position.market_index}"
            )
        simulation = get_worst_case_token_amounts(
            position, market, prices[position.market_index], margin_category, balance_math=balance_math,
        )
        total = checked_add(total, simulation.free_collateral_contribution)
    return total
