"""Tests for PlanConfig defaults, overrides and validation."""

import dataclasses

import pytest

from reactor_planning import constants as C
from reactor_planning.config import PlanConfig, resolve_config


class TestPlanConfigDefaults:
    """Tests for default configuration values."""

    def test_defaults_match_constants(self):
        """Test that every default comes from the constants module."""
        config = PlanConfig()

        assert config.line_rate_lpm == C.LINE_RATE_LPM == 30.0
        assert config.ibc_fill_lpm == 80.0
        assert config.prod_time_min == 120.0
        assert config.cluster_gap_min == 240.0
        assert config.min_batch_l == 1500.0
        assert config.max_batch_l == 13000.0
        assert config.max_batches_per_cluster == 40
        assert config.min_split_candidates == 5
        assert config.max_split_candidates == 12
        assert config.step_min == 5

    def test_target_batch_sizes(self):
        """Test the explored average batch sizes."""
        assert PlanConfig().target_batch_sizes == (
            13000, 10000, 7500, 7000, 6500, 5000, 4700, 4000, 3500, 3000, 2500, 2000, 1500,
        )

    def test_config_is_frozen(self):
        """Test that a configuration cannot be mutated."""
        config = PlanConfig()

        with pytest.raises(dataclasses.FrozenInstanceError):
            config.line_rate_lpm = 60.0


class TestPlanConfigOverrides:
    """Tests for building configurations from override mappings."""

    def test_upper_case_names(self):
        """Test overrides given by their upper-case parameter name."""
        config = PlanConfig.from_overrides({"LINE_RATE_LPM": 60, "STEP_MIN": 10})

        assert config.line_rate_lpm == 60
        assert config.step_min == 10
        assert config.max_batch_l == 13000.0

    def test_field_names(self):
        """Test overrides given by field name."""
        config = PlanConfig.from_overrides({"prod_time_min": 90})

        assert config.prod_time_min == 90

    def test_short_aliases(self):
        """Test the short parameter names used in planning documents."""
        config = PlanConfig.from_overrides({"FILL_RATE": 45, "IBC_RATE": 100, "PROD_TIME": 60})

        assert config.line_rate_lpm == 45
        assert config.ibc_fill_lpm == 100
        assert config.prod_time_min == 60

    def test_none_values_are_ignored(self):
        """Test that None keeps the default."""
        config = PlanConfig.from_overrides({"LINE_RATE_LPM": None})

        assert config.line_rate_lpm == 30.0

    def test_unknown_key_raises(self):
        """Test that typos in parameter names are rejected."""
        with pytest.raises(ValueError, match="Unknown planning parameter"):
            PlanConfig.from_overrides({"LINE_RATE": 60})

    def test_list_targets_become_tuple(self):
        """Test that list overrides are frozen into tuples."""
        config = PlanConfig.from_overrides({"TARGET_BATCH_SIZES": [5000, 2500]})

        assert config.target_batch_sizes == (5000, 2500)

    def test_with_overrides_keeps_base(self):
        """Test overriding on top of a non-default configuration."""
        base = PlanConfig(prod_time_min=60)
        config = base.with_overrides({"cluster_gap_min": 0})

        assert config.prod_time_min == 60
        assert config.cluster_gap_min == 0
        assert base.cluster_gap_min == 240.0


class TestPlanConfigValidation:
    """Tests for configuration validation."""

    def test_non_positive_rate(self):
        """Test that a zero line rate is rejected."""
        with pytest.raises(ValueError, match="line_rate_lpm"):
            PlanConfig(line_rate_lpm=0)

    def test_inverted_batch_limits(self):
        """Test that min batch above max batch is rejected."""
        with pytest.raises(ValueError, match="min_batch_l"):
            PlanConfig(min_batch_l=20000)

    def test_negative_production_time(self):
        """Test that negative production time is rejected."""
        with pytest.raises(ValueError, match="prod_time_min"):
            PlanConfig(prod_time_min=-1)

    def test_candidate_limits(self):
        """Test that max candidates below min candidates is rejected."""
        with pytest.raises(ValueError, match="split candidate limits"):
            PlanConfig(min_split_candidates=5, max_split_candidates=3)

    def test_non_positive_target(self):
        """Test that non-positive target batch sizes are rejected."""
        with pytest.raises(ValueError, match="target_batch_sizes"):
            PlanConfig(target_batch_sizes=(5000, 0))


class TestResolveConfig:
    """Tests for resolve_config."""

    def test_none_gives_defaults(self):
        assert resolve_config(None) == PlanConfig()

    def test_instance_is_returned(self):
        config = PlanConfig(step_min=10)
        assert resolve_config(config) is config

    def test_mapping_is_applied(self):
        assert resolve_config({"MIN_BATCH_L": 1000}).min_batch_l == 1000
