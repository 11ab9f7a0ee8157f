# SPDX-License-Identifier: MIT
# Copyright (c) 2026 PredictLink Contributors

"""Integer basis-point arithmetic.

All value math in the core is integer with floor division. Helpers that
split an amount return parts that always add back up to the amount.
"""

from __future__ import annotations

from .exceptions import ErrorCode, ValidationException

BPS_DENOMINATOR = 10_000
SECONDS_PER_YEAR = 365 * 24 * 60 * 60


def apply_bps(amount: int, bps: int) -> int:
    """Return ``amount * bps / 10000`` rounded down."""
    return amount * bps // BPS_DENOMINATOR


def split_bps(amount: int, bps: int) -> tuple[int, int]:
    """Split an amount into (bps share, remainder)."""
    share = apply_bps(amount, bps)
    return share, amount - share


def to_bps(part: int, whole: int) -> int:
    """Express ``part`` as basis points of ``whole``, capped at 10000."""
    if whole <= 0:
        raise ValidationException("Whole must be positive", field="whole", value=whole)
    return min(BPS_DENOMINATOR, part * BPS_DENOMINATOR // whole)


def pro_rata(total: int, shares: int, total_shares: int) -> int:
    """Proportional share of ``total`` rounded down."""
    if total_shares <= 0:
        return 0
    return total * shares // total_shares


def linear_accrual(principal: int, rate_bps: int, elapsed: int) -> int:
    """Simple-interest accrual over ``elapsed`` seconds at an annual bps rate."""
    if elapsed <= 0 or principal <= 0:
        return 0
    return principal * rate_bps * elapsed // (SECONDS_PER_YEAR * BPS_DENOMINATOR)


def require_bps(value: int, field: str) -> int:
    if not 0 <= value <= BPS_DENOMINATOR:
        raise ValidationException(
            f"{field} must be within 0..{BPS_DENOMINATOR}",
            field=field,
            value=value,
            code=ErrorCode.INVALID_PARAMETER,
        )
    return value


def require_positive_amount(amount: int, field: str = "amount") -> int:
    """Reject zero, negative and non-integer amounts."""
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise ValidationException(f"{field} must be an integer", field=field, value=amount)
    if amount <= 0:
        raise ValidationException(
            f"{field} must be positive",
            field=field,
            value=amount,
            code=ErrorCode.ZERO_AMOUNT,
        )
    return amount
