# SPDX-License-Identifier: MIT
# Copyright (c) 2026 PredictLink Contributors

"""PredictLink oracle core: bonded proposal, dispute, arbitration and settlement."""

from .core.access import Capability, RoleRegistry
from .core.config import CoreSettings, get_config
from .core.exceptions import ErrorCode, PredictLinkException
from .core.ledger import InMemoryValueLedger, Ledger, ManualClock
from .protocol import OracleProtocol

__version__ = "0.2.0"

__all__ = [
    "Capability",
    "CoreSettings",
    "ErrorCode",
    "InMemoryValueLedger",
    "Ledger",
    "ManualClock",
    "OracleProtocol",
    "PredictLinkException",
    "RoleRegistry",
    "__version__",
    "get_config",
]
