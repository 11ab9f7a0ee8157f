# SPDX-License-Identifier: MIT
# Copyright (c) 2026 PredictLink Contributors

"""Shared infrastructure: config, errors, logging, ledger, access and events."""

from .access import Authorizer, Capability, RoleRegistry
from .config import CoreSettings, clear_config_cache, get_config
from .events import DomainEvent, EventLog, EventType
from .exceptions import ErrorCode, PredictLinkException, ProtocolError
from .ledger import InMemoryValueLedger, Ledger, ManualClock, SystemClock

__all__ = [
    "Authorizer",
    "Capability",
    "CoreSettings",
    "DomainEvent",
    "ErrorCode",
    "EventLog",
    "EventType",
    "InMemoryValueLedger",
    "Ledger",
    "ManualClock",
    "PredictLinkException",
    "ProtocolError",
    "RoleRegistry",
    "SystemClock",
    "clear_config_cache",
    "get_config",
]
