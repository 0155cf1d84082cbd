"""Unit tests for configuration."""

import pytest
from pydantic import ValidationError

from policy_reconciler.config import ReconciliationConfig, Settings
from policy_reconciler.core.exceptions import ConfigurationError


class TestReconciliationConfig:

    def test_defaults_match_settings(self):
        settings = Settings(_env_file=None)
        assert ReconciliationConfig.from_settings(settings) == ReconciliationConfig()

    def test_overrides_are_carried(self):
        settings = Settings(_env_file=None, monthly_tolerance_ratio=0.3, penalty_divergence=25)

        config = ReconciliationConfig.from_settings(settings)

        assert config.monthly_tolerance_ratio == 0.3
        assert config.penalty_divergence == 25

    def test_thresholds_out_of_order(self):
        settings = Settings(_env_file=None, high_reliability_threshold=50, medium_reliability_threshold=70)

        with pytest.raises(ConfigurationError):
            ReconciliationConfig.from_settings(settings)

    def test_config_is_immutable(self):
        config = ReconciliationConfig()
        with pytest.raises(ValidationError):
            config.penalty_divergence = 0
