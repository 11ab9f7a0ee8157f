# SPDX-License-Identifier: MIT
# Copyright (c) 2026 PredictLink Contributors

"""Core configuration - centralized settings for the predictlink package.

All environment-based configuration flows through this module. Component
parameter models (``StakingParameters`` and friends) are built from these
settings with ``from_settings()``.

Usage:
    from predictlink.core.config import get_config
    config = get_config()

    liveness = config.liveness_period
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

HOUR = 60 * 60
DAY = 24 * HOUR
BPS_DENOMINATOR = 10_000


class CoreSettings(BaseSettings):
    """Core configuration settings for PredictLink.

    Every setting can be overridden with a PREDICTLINK_ environment variable.
    Durations are in seconds, rates in basis points, amounts in base units.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # ==========================================================================
    # LOGGING SETTINGS
    # ==========================================================================

    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
        validation_alias="PREDICTLINK_LOG_LEVEL",
    )
    log_format: str = Field(
        default="",
        description="Log format: 'json', 'text', or '' (auto-detect)",
        validation_alias="PREDICTLINK_LOG_FORMAT",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (optional)",
        validation_alias="PREDICTLINK_LOG_FILE",
    )

    # ==========================================================================
    # TREASURY
    # ==========================================================================

    treasury_principal: str = Field(
        default="treasury",
        description="Principal receiving platform fees and slashed value",
        validation_alias="PREDICTLINK_TREASURY",
    )

    # ==========================================================================
    # STAKING (BOND LEDGER)
    # ==========================================================================

    min_stake_amount: int = Field(
        default=10_000,
        description="Minimum amount accepted by a single stake call",
        validation_alias="PREDICTLINK_MIN_STAKE_AMOUNT",
    )
    max_stake_per_user: int = Field(
        default=1_000_000,
        description="Maximum total principal per owner",
        validation_alias="PREDICTLINK_MAX_STAKE_PER_USER",
    )
    stake_lock_period: int = Field(
        default=30 * DAY,
        description="Seconds a stake stays locked after the last deposit",
        validation_alias="PREDICTLINK_STAKE_LOCK_PERIOD",
    )
    staking_reward_rate: int = Field(
        default=500,
        description="Annual staking reward rate in basis points",
        validation_alias="PREDICTLINK_STAKING_REWARD_RATE",
    )

    # ==========================================================================
    # RESOLUTION LIFECYCLE
    # ==========================================================================

    min_proposer_bond: int = Field(
        default=1_000,
        description="Minimum bond for an outcome proposal",
        validation_alias="PREDICTLINK_MIN_PROPOSER_BOND",
    )
    min_disputer_bond: int = Field(
        default=500,
        description="Minimum bond for a dispute",
        validation_alias="PREDICTLINK_MIN_DISPUTER_BOND",
    )
    liveness_period: int = Field(
        default=2 * HOUR,
        description="Challenge window after a proposal, in seconds",
        validation_alias="PREDICTLINK_LIVENESS_PERIOD",
    )
    min_confidence_score: int = Field(
        default=8_000,
        description="Lowest confidence score (0-10000) accepted with a proposal",
        validation_alias="PREDICTLINK_MIN_CONFIDENCE_SCORE",
    )
    proposer_reward_rate: int = Field(
        default=6_000,
        description="Proposer share of a forfeited bond, basis points",
        validation_alias="PREDICTLINK_PROPOSER_REWARD_RATE",
    )
    disputer_reward_rate: int = Field(
        default=3_000,
        description="Disputer share of a forfeited proposer bond, basis points",
        validation_alias="PREDICTLINK_DISPUTER_REWARD_RATE",
    )
    platform_fee_rate: int = Field(
        default=1_000,
        description="Platform fee, basis points",
        validation_alias="PREDICTLINK_PLATFORM_FEE_RATE",
    )
    reopen_on_upheld: bool = Field(
        default=False,
        description="Return an event to CREATED instead of CANCELLED when a dispute is upheld",
        validation_alias="PREDICTLINK_REOPEN_ON_UPHELD",
    )
    report_misbehavior: bool = Field(
        default=True,
        description="File slashing requests for false proposals and frivolous disputes",
        validation_alias="PREDICTLINK_REPORT_MISBEHAVIOR",
    )
    arbitration_mode: Literal["direct", "committee"] = Field(
        default="direct",
        description="'direct': validators resolve disputes; 'committee': arbitrators vote",
        validation_alias="PREDICTLINK_ARBITRATION_MODE",
    )

    # ==========================================================================
    # ARBITRATION
    # ==========================================================================

    min_arbitrators: int = Field(
        default=3,
        description="Committee size used for the quorum computation",
        validation_alias="PREDICTLINK_MIN_ARBITRATORS",
    )
    voting_period: int = Field(
        default=7 * DAY,
        description="Voting window in seconds",
        validation_alias="PREDICTLINK_VOTING_PERIOD",
    )
    quorum_percentage: int = Field(
        default=66,
        description="Percentage of min_arbitrators that must vote",
        validation_alias="PREDICTLINK_QUORUM_PERCENTAGE",
    )
    appeal_bond: int = Field(
        default=100,
        description="Bond required to appeal an arbitration outcome",
        validation_alias="PREDICTLINK_APPEAL_BOND",
    )
    appeal_window: int = Field(
        default=DAY,
        description="Seconds after resolution during which an appeal may be filed",
        validation_alias="PREDICTLINK_APPEAL_WINDOW",
    )
    max_appeals: int = Field(
        default=1,
        description="Maximum number of appeals per dispute",
        validation_alias="PREDICTLINK_MAX_APPEALS",
    )

    # ==========================================================================
    # SLASHING GOVERNOR
    # ==========================================================================

    min_approvals: int = Field(
        default=3,
        description="Approvals required before a slashing request can execute",
        validation_alias="PREDICTLINK_MIN_APPROVALS",
    )
    slashing_delay: int = Field(
        default=DAY,
        description="Cooling-off delay between request and execution, seconds",
        validation_alias="PREDICTLINK_SLASHING_DELAY",
    )
    max_slashing_percentage: int = Field(
        default=5_000,
        description="Cap on a single slash, basis points of the base amount",
        validation_alias="PREDICTLINK_MAX_SLASHING_PERCENTAGE",
    )
    permanent_ban_threshold: int = Field(
        default=100_000,
        description="Cumulative slashed amount that triggers a permanent ban",
        validation_alias="PREDICTLINK_PERMANENT_BAN_THRESHOLD",
    )

    # ==========================================================================
    # REWARD DISTRIBUTOR
    # ==========================================================================

    default_pool_duration: int = Field(
        default=30 * DAY,
        description="Pool lifetime used when no expiry is given",
        validation_alias="PREDICTLINK_DEFAULT_POOL_DURATION",
    )

    @model_validator(mode="after")
    def validate_reward_split(self) -> CoreSettings:
        """The three reward rates must partition the whole bond."""
        total = self.proposer_reward_rate + self.disputer_reward_rate + self.platform_fee_rate
        if total != BPS_DENOMINATOR:
            raise ValueError(
                f"proposer + disputer + platform rates must equal {BPS_DENOMINATOR}, got {total}"
            )
        return self


# ==========================================================================
# GLOBAL CONFIG INSTANCE (lazy loaded)
# ==========================================================================

_config: CoreSettings | None = None


def get_config() -> CoreSettings:
    """Get the global configuration instance.

    Returns:
        The singleton CoreSettings instance.
    """
    global _config
    if _config is None:
        _config = CoreSettings()
    return _config


def clear_config_cache() -> None:
    """Clear the config cache. Useful for testing."""
    global _config
    _config = None
