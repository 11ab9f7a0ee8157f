# SPDX-License-Identifier: MIT
# Copyright (c) 2026 PredictLink Contributors

"""Argument validation for proposals and disputes."""

from __future__ import annotations

import hashlib

from ..core.basis_points import BPS_DENOMINATOR
from ..core.exceptions import ErrorCode, InsufficientBondError, ValidationException


def compute_outcome_hash(outcome: str) -> str:
    """SHA-256 of the outcome payload, hex encoded."""
    return hashlib.sha256(outcome.encode("utf-8")).hexdigest()


def resolve_outcome_hash(outcome: str, outcome_hash: str | None) -> str:
    """Return the outcome hash, checking a caller-supplied one against the payload."""
    computed = compute_outcome_hash(outcome)
    if outcome_hash is not None and outcome_hash.lower() != computed:
        raise ValidationException(
            "outcome_hash does not match the outcome payload",
            field="outcome_hash",
            value=outcome_hash,
        )
    return computed


def validate_confidence(score: int, minimum: int) -> None:
    if not 0 <= score <= BPS_DENOMINATOR:
        raise ValidationException(
            f"Confidence score must be within 0..{BPS_DENOMINATOR}",
            field="confidence_score",
            value=score,
            code=ErrorCode.CONFIDENCE_OUT_OF_RANGE,
        )
    if score < minimum:
        raise ValidationException(
            f"Confidence score {score} below minimum {minimum}",
            field="confidence_score",
            value=score,
            code=ErrorCode.CONFIDENCE_TOO_LOW,
        )


def validate_bond(bond: int, minimum: int, role: str) -> None:
    if bond < minimum:
        raise InsufficientBondError(
            f"{role} bond {bond} below minimum {minimum}", bond=bond, minimum=minimum
        )


def require_text(value: str | None, field: str) -> str:
    if value is None or not value.strip():
        raise ValidationException(f"{field} must not be empty", field=field)
    return value
