"""Tests for predictlink.core.config - CoreSettings and global config management."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from predictlink.core.config import DAY, HOUR, CoreSettings, clear_config_cache, get_config


class TestCoreSettingsDefaults:
    """CoreSettings loads with the documented defaults."""

    def test_logging_defaults(self):
        settings = CoreSettings()
        assert settings.log_level == "INFO"
        assert settings.log_format == ""
        assert settings.log_file is None

    def test_resolution_defaults(self):
        settings = CoreSettings()
        assert settings.min_proposer_bond == 1_000
        assert settings.min_disputer_bond == 500
        assert settings.liveness_period == 2 * HOUR
        assert settings.min_confidence_score == 8_000
        assert settings.proposer_reward_rate == 6_000
        assert settings.disputer_reward_rate == 3_000
        assert settings.platform_fee_rate == 1_000
        assert settings.arbitration_mode == "direct"

    def test_staking_defaults(self):
        settings = CoreSettings()
        assert settings.min_stake_amount == 10_000
        assert settings.max_stake_per_user == 1_000_000
        assert settings.stake_lock_period == 30 * DAY
        assert settings.staking_reward_rate == 500

    def test_arbitration_and_slashing_defaults(self):
        settings = CoreSettings()
        assert settings.min_arbitrators == 3
        assert settings.voting_period == 7 * DAY
        assert settings.quorum_percentage == 66
        assert settings.min_approvals == 3
        assert settings.slashing_delay == DAY
        assert settings.max_slashing_percentage == 5_000
        assert settings.permanent_ban_threshold == 100_000

    def test_treasury_default(self):
        assert CoreSettings().treasury_principal == "treasury"


class TestEnvironmentOverrides:
    def test_int_override(self, monkeypatch):
        monkeypatch.setenv("PREDICTLINK_LIVENESS_PERIOD", "60")
        assert CoreSettings().liveness_period == 60

    def test_treasury_override(self, monkeypatch):
        monkeypatch.setenv("PREDICTLINK_TREASURY", "dao-vault")
        assert CoreSettings().treasury_principal == "dao-vault"

    def test_arbitration_mode_override(self, monkeypatch):
        monkeypatch.setenv("PREDICTLINK_ARBITRATION_MODE", "committee")
        assert CoreSettings().arbitration_mode == "committee"

    def test_invalid_arbitration_mode(self, monkeypatch):
        monkeypatch.setenv("PREDICTLINK_ARBITRATION_MODE", "jury")
        with pytest.raises(ValidationError):
            CoreSettings()


class TestRewardSplitValidation:
    def test_rates_must_sum_to_whole(self):
        with pytest.raises(ValidationError, match="must equal 10000"):
            CoreSettings(proposer_reward_rate=5_000)

    def test_alternative_split_accepted(self):
        settings = CoreSettings(
            proposer_reward_rate=5_000, disputer_reward_rate=4_000, platform_fee_rate=1_000
        )
        assert settings.disputer_reward_rate == 4_000


class TestGlobalConfig:
    def test_singleton(self):
        assert get_config() is get_config()

    def test_clear_cache(self, monkeypatch):
        first = get_config()
        monkeypatch.setenv("PREDICTLINK_MIN_APPROVALS", "5")
        assert get_config().min_approvals == first.min_approvals
        clear_config_cache()
        assert get_config().min_approvals == 5
