"""
Unit tests for configuration loading and validation.

Tests defaults, strict key validation, and value checks for guard configs.
"""

import os
import tempfile
from decimal import Decimal
from unittest.mock import patch

import pytest
import yaml

from devlog_guard.config.loader import (
    CONFIG_ENV_VAR,
    BudgetConfig,
    GuardConfig,
    ModelConfig,
    RateLimitConfig,
    load_guard_config,
)


class TestConfigLoading:
    """Test configuration loading and validation."""

    def setup_method(self):
        """Set up test environment."""
        self.temp_dir = tempfile.mkdtemp()

    def teardown_method(self):
        """Clean up test environment."""
        import shutil
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _write_config(self, config_data, filename: str = "config.yaml") -> str:
        """Write configuration data to temporary file."""
        config_path = os.path.join(self.temp_dir, filename)
        with open(config_path, 'w', encoding='utf-8') as f:
            yaml.dump(config_data, f)
        return config_path

    def test_valid_config_loads_correctly(self):
        """Test that a valid configuration loads correctly."""
        config_path = self._write_config({
            "rate_limit": {"max_requests": 5, "window_seconds": 600},
            "budget": {"monthly_limit_usd": 25.5, "max_monthly_tokens": 1_000_000},
            "model": {"name": "gpt-4o", "input_per_1m": 2.5, "output_per_1m": 10, "temperature": 0.2},
            "extraction": {"max_fragments": 2, "max_lines": 10},
            "storage": {"db_path": "/tmp/ledger.db"},
            "platforms": {"x": {"max_tokens": 300}},
        })

        config = load_guard_config(config_path)

        assert config.rate_limit == RateLimitConfig(max_requests=5, window_seconds=600)
        assert config.budget.monthly_limit_usd == Decimal("25.5")
        assert config.budget.max_monthly_tokens == 1_000_000
        assert config.model.name == "gpt-4o"
        assert config.model.pricing.output_per_1m == Decimal("10")
        assert config.model.temperature == 0.2
        assert config.extraction.max_fragments == 2
        assert config.storage.db_path == "/tmp/ledger.db"
        assert config.platform_max_tokens == {"linkedin": 1000, "x": 300}

    def test_defaults_when_no_path(self):
        """Test defaults are used when no file is named anywhere."""
        with patch.dict(os.environ, {}, clear=True):
            config = load_guard_config()

        assert config == GuardConfig()
        assert config.rate_limit.max_requests == 3
        assert config.rate_limit.window_seconds == 3600
        assert config.budget.monthly_limit_usd == Decimal("10")
        assert config.budget.max_monthly_tokens == 3_000_000

    def test_path_from_environment(self):
        """Test the environment variable names the config file."""
        config_path = self._write_config({"rate_limit": {"max_requests": 9}})
        with patch.dict(os.environ, {CONFIG_ENV_VAR: config_path}):
            config = load_guard_config()
        assert config.rate_limit.max_requests == 9

    def test_empty_file_uses_defaults(self):
        """Test an empty YAML document yields defaults."""
        config_path = os.path.join(self.temp_dir, "empty.yaml")
        open(config_path, "w").close()
        assert load_guard_config(config_path) == GuardConfig()

    def test_missing_file_raises_error(self):
        """Test that missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError, match="Guard config file not found"):
            load_guard_config(os.path.join(self.temp_dir, "missing.yaml"))

    def test_invalid_yaml_raises_error(self):
        """Test that malformed YAML is reported."""
        config_path = os.path.join(self.temp_dir, "bad.yaml")
        with open(config_path, "w") as f:
            f.write("rate_limit: [unclosed")
        with pytest.raises(yaml.YAMLError, match="Invalid YAML"):
            load_guard_config(config_path)

    def test_non_dict_root_rejected(self):
        """Test that the root must be a mapping."""
        config_path = self._write_config(["not", "a", "dict"])
        with pytest.raises(ValueError, match="root must be a dictionary"):
            load_guard_config(config_path)

    def test_unknown_top_level_key_rejected(self):
        """Test strict validation of section names."""
        config_path = self._write_config({"budgets": {"monthly_limit_usd": 5}})
        with pytest.raises(ValueError, match="Unknown configuration keys"):
            load_guard_config(config_path)

    def test_unknown_section_key_rejected(self):
        """Test that a typo inside a section is not silently ignored."""
        config_path = self._write_config({"budget": {"monthly_limit": 5}})
        with pytest.raises(ValueError, match="Unknown keys in budget"):
            load_guard_config(config_path)

    def test_non_positive_integer_rejected(self):
        """Test integer fields must be positive."""
        config_path = self._write_config({"rate_limit": {"max_requests": 0}})
        with pytest.raises(ValueError, match="'rate_limit.max_requests' must be a positive integer"):
            load_guard_config(config_path)

    def test_boolean_is_not_an_integer(self):
        """Test YAML booleans are not accepted as counts."""
        config_path = self._write_config({"extraction": {"max_lines": True}})
        with pytest.raises(ValueError, match="must be a positive integer"):
            load_guard_config(config_path)

    def test_non_numeric_price_rejected(self):
        """Test prices must be numbers."""
        config_path = self._write_config({"model": {"input_per_1m": "cheap"}})
        with pytest.raises(ValueError, match="'model.input_per_1m' must be a number"):
            load_guard_config(config_path)

    def test_platform_entry_shape(self):
        """Test platform entries only carry max_tokens."""
        config_path = self._write_config({"platforms": {"linkedin": {"max_tokens": 900, "tone": "formal"}}})
        with pytest.raises(ValueError, match="must contain only 'max_tokens'"):
            load_guard_config(config_path)


class TestConfigValidation:
    """Test dataclass-level validation."""

    def test_budget_must_be_positive(self):
        with pytest.raises(ValueError, match="monthly_limit_usd must be > 0"):
            BudgetConfig(monthly_limit_usd=Decimal("0"))

    def test_temperature_range(self):
        with pytest.raises(ValueError, match="temperature must be between 0 and 2"):
            ModelConfig(temperature=3.0)

    def test_empty_model_name(self):
        with pytest.raises(ValueError, match="model name cannot be empty"):
            ModelConfig(name="  ")

    def test_rate_limit_window_positive(self):
        with pytest.raises(ValueError, match="window_seconds must be > 0"):
            RateLimitConfig(window_seconds=0)


class TestModelPricing:
    """Test price resolution for the configured model."""

    def test_prices_follow_model_name(self):
        """Verify the named model's listed prices are used."""
        pricing = ModelConfig(name="gpt-4o").pricing
        assert pricing.input_per_1m == Decimal("2.50")
        assert pricing.output_per_1m == Decimal("10.00")

    def test_default_model_prices(self):
        pricing = ModelConfig().pricing
        assert pricing.input_per_1m == Decimal("0.15")
        assert pricing.output_per_1m == Decimal("0.60")

    def test_single_override_keeps_listed_price(self):
        """Verify overriding one price leaves the other at its listed value."""
        pricing = ModelConfig(name="gpt-4o", input_per_1m=Decimal("1")).pricing
        assert pricing.input_per_1m == Decimal("1")
        assert pricing.output_per_1m == Decimal("10.00")

    def test_unlisted_model_rejected(self):
        """Verify an unknown model without prices fails at construction."""
        with pytest.raises(ValueError, match="Unsupported model: mystery-model"):
            ModelConfig(name="mystery-model")

    def test_unlisted_model_with_partial_prices_rejected(self):
        with pytest.raises(ValueError, match="Unsupported model"):
            ModelConfig(name="mystery-model", input_per_1m=Decimal("1"))

    def test_unlisted_model_with_both_prices_accepted(self):
        """Verify explicit prices make any model name usable."""
        pricing = ModelConfig(
            name="mystery-model",
            input_per_1m=Decimal("1"),
            output_per_1m=Decimal("2"),
        ).pricing
        assert pricing.input_per_1m == Decimal("1")
        assert pricing.output_per_1m == Decimal("2")

    def test_unlisted_model_rejected_at_load(self):
        """Verify a config naming an unknown model does not load."""
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = os.path.join(temp_dir, "config.yaml")
            with open(config_path, "w", encoding="utf-8") as f:
                yaml.dump({"model": {"name": "mystery-model"}}, f)

            with pytest.raises(ValueError, match="Unsupported model"):
                load_guard_config(config_path)
