"""Spot balance math: token conversions and asset/liability weight curves.

These are the collaborators of the worst-case valuation in `position.py`.
The valuation only sees them through `SpotBalanceMath`, so tests can swap in
deterministic stubs; `STANDARD_BALANCE_MATH` binds the curves below.

Rounding policy:
- deposits convert to token amounts truncating, borrows rounding up,
- token values truncate toward zero,
- strict values price assets at the low bound and liabilities at the high one.
"""

from __future__ import annotations

from typing import Protocol

from ..oracle import StrictOraclePrice
from .math import (
    AMM_RESERVE_PRECISION,
    SPOT_BALANCE_INTEREST_EXP,
    SPOT_IMF_PRECISION,
    SPOT_WEIGHT_PRECISION,
    abs_val,
    checked_add,
    checked_mul,
    div_ceil,
    div_trunc,
    mul_div_trunc,
    sqrt_floor,
)
from .types import BalanceType, MarginCategory, SpotMarketConfig


# -- Token amounts and values ------------------------------------------------

def get_token_amount(scaled_balance: int, market: SpotMarketConfig, balance_type: BalanceType) -> int:
    """Unsigned token amount (market decimals) held by a scaled balance."""
    precision_decrease = 10 ** (SPOT_BALANCE_INTEREST_EXP - market.decimals)
    if balance_type is BalanceType.DEPOSIT:
        return div_trunc(checked_mul(scaled_balance, market.cumulative_deposit_interest), precision_decrease)
    return div_ceil(checked_mul(scaled_balance, market.cumulative_borrow_interest), precision_decrease)


def get_signed_token_amount(token_amount: int, balance_type: BalanceType) -> int:
    """Positive for deposits, negative for borrows."""
    if balance_type is BalanceType.DEPOSIT:
        return token_amount
    return -abs_val(token_amount)


def get_token_value(token_amount: int, decimals: int, price: int) -> int:
    """Signed value in QUOTE_PRECISION: ``amount * price / 10**decimals``.

    The result is in price units, so PRICE_PRECISION must equal QUOTE_PRECISION.
    """
    if token_amount == 0:
        return 0
    return mul_div_trunc(token_amount, price, 10 ** decimals)


def get_strict_token_value(token_amount: int, decimals: int, strict_price: StrictOraclePrice) -> int:
    """Token value at the bound that is worst for the holder."""
    if token_amount == 0:
        return 0
    price = strict_price.min() if token_amount >= 0 else strict_price.max()
    return mul_div_trunc(token_amount, price, 10 ** decimals)


# -- Weight curves -----------------------------------------------------------

def calculate_size_in_amm_reserve_precision(token_amount: int, decimals: int) -> int:
    """Rescale a token amount to AMM_RESERVE_PRECISION (1e9) for IMF curves."""
    size_precision = 10 ** decimals
    if size_precision > AMM_RESERVE_PRECISION:
        return div_trunc(token_amount, size_precision // AMM_RESERVE_PRECISION)
    return mul_div_trunc(token_amount, AMM_RESERVE_PRECISION, size_precision)


def calculate_scaled_initial_asset_weight(market: SpotMarketConfig, oracle_price: int) -> int:
    """Initial asset weight, scaled down once market deposits exceed the start value."""
    if market.scale_initial_asset_weight_start == 0:
        return market.initial_asset_weight

    deposits = get_token_amount(market.deposit_balance, market, BalanceType.DEPOSIT)
    deposits_value = get_token_value(deposits, market.decimals, oracle_price)
    if deposits_value < market.scale_initial_asset_weight_start:
        return market.initial_asset_weight
    return mul_div_trunc(market.initial_asset_weight, market.scale_initial_asset_weight_start, deposits_value)


def _imf_size_sqrt(size: int) -> int:
    # size in 1e9 -> 1e10 -> sqrt ~1e5
    return sqrt_floor(checked_add(checked_mul(abs_val(size), 10), 1))


def calculate_size_discount_asset_weight(size: int, imf_factor: int, asset_weight: int) -> int:
    """Asset weight derated for large positions; never above *asset_weight*."""
    if imf_factor == 0:
        return asset_weight

    size_sqrt = _imf_size_sqrt(size)
    imf_numerator = SPOT_IMF_PRECISION + SPOT_IMF_PRECISION // 10
    denominator = SPOT_IMF_PRECISION + mul_div_trunc(size_sqrt, imf_factor, 100_000)
    size_discount_asset_weight = mul_div_trunc(imf_numerator, SPOT_WEIGHT_PRECISION, denominator)
    return min(asset_weight, size_discount_asset_weight)


def calculate_size_premium_liability_weight(
    size: int,
    imf_factor: int,
    liability_weight: int,
    precision: int,
) -> int:
    """Liability weight inflated for large positions; never below *liability_weight*."""
    if imf_factor == 0:
        return liability_weight

    size_sqrt = _imf_size_sqrt(size)
    liability_weight_numerator = liability_weight - liability_weight // 5
    denom = div_trunc(100_000 * SPOT_IMF_PRECISION, precision)
    if denom <= 0:
        raise ValueError(f"precision too large for IMF denominator: {precision}")
    size_premium_liability_weight = liability_weight_numerator + mul_div_trunc(size_sqrt, imf_factor, denom)
    return max(liability_weight, size_premium_liability_weight)


def calculate_asset_weight(
    token_amount: int,
    oracle_price: int,
    market: SpotMarketConfig,
    margin_category: MarginCategory,
) -> int:
    size = calculate_size_in_amm_reserve_precision(token_amount, market.decimals)
    if margin_category is MarginCategory.INITIAL:
        base_weight = calculate_scaled_initial_asset_weight(market, oracle_price)
    elif margin_category is MarginCategory.MAINTENANCE:
        base_weight = market.maintenance_asset_weight
    else:
        raise ValueError(f"unknown margin category: {margin_category!r}")
    return calculate_size_discount_asset_weight(size, market.imf_factor, base_weight)


def calculate_liability_weight(
    token_amount: int,
    market: SpotMarketConfig,
    margin_category: MarginCategory,
) -> int:
    size = calculate_size_in_amm_reserve_precision(token_amount, market.decimals)
    if margin_category is MarginCategory.INITIAL:
        base_weight = market.initial_liability_weight
    elif margin_category is MarginCategory.MAINTENANCE:
        base_weight = market.maintenance_liability_weight
    else:
        raise ValueError(f"unknown margin category: {margin_category!r}")
    return calculate_size_premium_liability_weight(
        size, market.imf_factor, base_weight, SPOT_WEIGHT_PRECISION,
    )


# -- Collaborator interface --------------------------------------------------

class SpotBalanceMath(Protocol):
    """Conversions and weight curves consumed by the worst-case valuation."""

    def asset_weight(
        self, token_amount: int, oracle_price: int, market: SpotMarketConfig, margin_category: MarginCategory,
    ) -> int: ...

    def liability_weight(
        self, token_amount: int, market: SpotMarketConfig, margin_category: MarginCategory,
    ) -> int: ...

    def token_amount(self, scaled_balance: int, market: SpotMarketConfig, balance_type: BalanceType) -> int: ...

    def signed_token_amount(self, token_amount: int, balance_type: BalanceType) -> int: ...

    def token_value(self, token_amount: int, decimals: int, price: int) -> int: ...

    def strict_token_value(self, token_amount: int, decimals: int, strict_price: StrictOraclePrice) -> int: ...


class StandardSpotBalanceMath:
    """`SpotBalanceMath` over the module-level curves."""

    def asset_weight(self, token_amount, oracle_price, market, margin_category):
        return calculate_asset_weight(token_amount, oracle_price, market, margin_category)

    def liability_weight(self, token_amount, market, margin_category):
        return calculate_liability_weight(token_amount, market, margin_category)

    def token_amount(self, scaled_balance, market, balance_type):
        return get_token_amount(scaled_balance, market, balance_type)

    def signed_token_amount(self, token_amount, balance_type):
        return get_signed_token_amount(token_amount, balance_type)

    def token_value(self, token_amount, decimals, price):
        return get_token_value(token_amount, decimals, price)

    def strict_token_value(self, token_amount, decimals, strict_price):
        return get_strict_token_value(token_amount, decimals, strict_price)


STANDARD_BALANCE_MATH: SpotBalanceMath = StandardSpotBalanceMath()
