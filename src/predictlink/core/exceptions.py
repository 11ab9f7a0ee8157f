# SPDX-License-Identifier: MIT
# Copyright (c) 2026 PredictLink Contributors

"""Exception hierarchy for the PredictLink oracle core.

Every exception carries a machine-checkable ``code`` so callers can decide
whether to retry, wait for a time gate, or escalate. Any exception raised
inside a ledger operation aborts the whole operation.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Failure reasons surfaced to callers."""

    UNKNOWN = "unknown"
    VALIDATION_FAILED = "validation_failed"
    INVALID_PARAMETER = "invalid_parameter"
    ZERO_AMOUNT = "zero_amount"
    ZERO_ADDRESS = "zero_address"
    CONFIDENCE_OUT_OF_RANGE = "confidence_out_of_range"
    CONFIDENCE_TOO_LOW = "confidence_too_low"
    NOT_FOUND = "not_found"
    DUPLICATE_ID = "duplicate_id"
    CONFIG_ERROR = "config_error"
    UNAUTHORIZED = "unauthorized"
    INVALID_STATE = "invalid_state"
    ACTIVE_PROPOSAL_EXISTS = "active_proposal_exists"
    UNRESOLVED_DISPUTES = "unresolved_disputes"
    INSUFFICIENT_BOND = "insufficient_bond"
    INSUFFICIENT_STAKE = "insufficient_stake"
    NO_ACTIVE_STAKE = "no_active_stake"
    STAKE_LIMIT_EXCEEDED = "stake_limit_exceeded"
    STAKE_LOCKED = "stake_locked"
    PERIOD_NOT_EXPIRED = "period_not_expired"
    PERIOD_EXPIRED = "period_expired"
    QUORUM_NOT_MET = "quorum_not_met"
    ALREADY_CLAIMED = "already_claimed"
    ALREADY_EXECUTED = "already_executed"
    ALREADY_RESOLVED = "already_resolved"
    ALREADY_SETTLED = "already_settled"
    ALREADY_VOTED = "already_voted"
    ALREADY_APPROVED = "already_approved"
    APPEAL_NOT_ALLOWED = "appeal_not_allowed"
    ALLOCATION_CLOSED = "allocation_closed"
    BLACKLISTED = "blacklisted"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    TRANSFER_FAILED = "transfer_failed"
    SCHEMA_VERSION = "schema_version"


class PredictLinkException(Exception):  # noqa: N818
    """Base exception for all PredictLink errors."""

    default_code: ErrorCode = ErrorCode.UNKNOWN

    def __init__(
        self,
        message: str,
        details: dict | None = None,
        code: ErrorCode | None = None,
    ):
        self.message = message
        self.details = details or {}
        self.code = code or self.default_code
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "error": self.__class__.__name__,
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(PredictLinkException):
    """Exception for invalid arguments.

    Raised when:
    - An amount is zero or negative
    - A principal identifier is empty
    - A score or rate is out of range
    - Parameter updates violate an invariant
    """

    default_code = ErrorCode.VALIDATION_FAILED

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
        code: ErrorCode | None = None,
    ):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)
        super().__init__(message, details, code)
        self.field = field
        self.value = value


class ConfigException(PredictLinkException):
    """Exception for configuration errors."""

    default_code = ErrorCode.CONFIG_ERROR

    def __init__(self, message: str, missing_vars: list[str] | None = None):
        details = {}
        if missing_vars:
            details["missing_vars"] = missing_vars
        super().__init__(message, details)
        self.missing_vars = missing_vars or []


class NotFoundError(PredictLinkException):
    """Exception for unknown identifiers."""

    default_code = ErrorCode.NOT_FOUND

    def __init__(self, resource_type: str, resource_id: str):
        message = f"{resource_type} not found: {resource_id}"
        details = {
            "resource_type": resource_type,
            "resource_id": resource_id,
        }
        super().__init__(message, details)
        self.resource_type = resource_type
        self.resource_id = resource_id


class ConflictError(PredictLinkException):
    """Exception for conflicting writes."""

    default_code = ErrorCode.DUPLICATE_ID

    def __init__(self, message: str, existing_id: str | None = None):
        details = {}
        if existing_id:
            details["existing_id"] = existing_id
        super().__init__(message, details)
        self.existing_id = existing_id


class DuplicateIdError(ConflictError):
    """An entity with the same identifier already exists."""

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(f"{resource_type} already exists: {resource_id}", existing_id=resource_id)
        self.resource_type = resource_type


class SchemaVersionError(ValidationException):
    """Snapshot schema version is unknown or cannot be migrated."""

    default_code = ErrorCode.SCHEMA_VERSION


# ============================================================================
# Protocol precondition failures
# ============================================================================


class ProtocolError(PredictLinkException):
    """A protocol precondition was violated.

    ``details`` carries the keyword arguments passed in, so the failure
    context (ids, amounts, deadlines) is available to callers.
    """

    def __init__(self, message: str, code: ErrorCode | None = None, **details: Any):
        super().__init__(message, details, code)


class UnauthorizedError(ProtocolError):
    """Caller lacks the capability required for the operation."""

    default_code = ErrorCode.UNAUTHORIZED


class InvalidStateError(ProtocolError):
    """Entity is not in a state that permits the requested transition."""

    default_code = ErrorCode.INVALID_STATE


class InsufficientBondError(ProtocolError):
    """Posted bond is below the configured minimum."""

    default_code = ErrorCode.INSUFFICIENT_BOND


class TimeGateError(ProtocolError):
    """A time window has not opened yet or has already closed."""

    default_code = ErrorCode.PERIOD_NOT_EXPIRED


class AlreadyProcessedError(ProtocolError):
    """The action was already performed (claimed, executed, resolved...)."""

    default_code = ErrorCode.ALREADY_EXECUTED


class QuorumNotMetError(ProtocolError):
    """Not enough votes or approvals to make an outcome binding."""

    default_code = ErrorCode.QUORUM_NOT_MET


class BlacklistedError(ProtocolError):
    """Principal is permanently banned."""

    default_code = ErrorCode.BLACKLISTED


class InsufficientFundsError(ProtocolError):
    """A reserve does not hold enough value for the payout."""

    default_code = ErrorCode.INSUFFICIENT_FUNDS


class TransferError(ProtocolError):
    """Outbound or inbound value transfer failed."""

    default_code = ErrorCode.TRANSFER_FAILED
