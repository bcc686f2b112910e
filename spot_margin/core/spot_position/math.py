"""Fixed-point arithmetic for the spot-position margin kernel.

Every function is stateless and operates on plain Python ints.

Python ints never wrap, so the platform width is enforced explicitly: every
product and quotient is checked against the signed 128-bit range and raises
`SpotOverflowError` instead of returning a value the on-chain program could not
have produced.

Rounding is explicit. `div_trunc` truncates toward zero (not Python's floor
`//`), `div_ceil` rounds toward +inf for non-negative operands.
"""

from __future__ import annotations

from math import isqrt

from .errors import SpotOverflowError

# Domain constants
PRICE_PRECISION: int = 1_000_000  # 1e6
QUOTE_PRECISION: int = 1_000_000  # 1e6
SPOT_BALANCE_PRECISION: int = 1_000_000_000  # 1e9
SPOT_CUMULATIVE_INTEREST_PRECISION: int = 10_000_000_000  # 1e10
SPOT_WEIGHT_PRECISION: int = 10_000
SPOT_IMF_PRECISION: int = 1_000_000  # 1e6
AMM_RESERVE_PRECISION: int = 1_000_000_000  # 1e9

# balance precision (1e9) * cumulative interest precision (1e10)
SPOT_BALANCE_INTEREST_EXP: int = 19

I128_MAX: int = (1 << 127) - 1
I128_MIN: int = -(1 << 127)


# -- Basic helpers -----------------------------------------------------------

def _require_int(name: str, x: int) -> None:
    if not isinstance(x, int) or isinstance(x, bool):
        raise TypeError(f"{name} must be an int")


def check_i128(x: int, *, context: str = "value") -> int:
    """Return *x* unchanged, or raise when it does not fit in an i128."""
    if x < I128_MIN or x > I128_MAX:
        raise SpotOverflowError(f"{context} overflows i128: {x}")
    return x


def abs_val(x: int) -> int:
    """Absolute value of *x*."""
    return x if x >= 0 else -x


def checked_add(a: int, b: int) -> int:
    _require_int("a", a)
    _require_int("b", b)
    return check_i128(a + b, context="add")


def checked_mul(a: int, b: int) -> int:
    _require_int("a", a)
    _require_int("b", b)
    return check_i128(a * b, context="mul")


def div_trunc(a: int, b: int) -> int:
    """Integer division truncating toward zero (``BN.div`` / Rust semantics)."""
    _require_int("a", a)
    _require_int("b", b)
    if b == 0:
        raise ValueError("division by zero")
    q = abs_val(a) // abs_val(b)
    if (a < 0) != (b < 0):
        q = -q
    return check_i128(q, context="div")


def div_ceil(a: int, b: int) -> int:
    """Ceiling division for ``a >= 0`` and ``b > 0``."""
    _require_int("a", a)
    _require_int("b", b)
    if b <= 0:
        raise ValueError("divisor must be positive")
    if a < 0:
        raise ValueError("dividend must be non-negative")
    return check_i128(-(-a // b), context="div_ceil")


def mul_div_trunc(a: int, b: int, d: int) -> int:
    """``a * b / d`` with a checked intermediate product, truncating toward zero."""
    return div_trunc(checked_mul(a, b), d)


def sqrt_floor(x: int) -> int:
    """Integer square root of a non-negative *x*."""
    _require_int("x", x)
    if x < 0:
        raise ValueError("sqrt of negative value")
    return isqrt(x)
