"""
Unit tests for pricing calculations.

Tests cost accuracy, rounding behavior, and error handling.
"""

import pytest
from decimal import Decimal

from devlog_guard.core.pricing import (
    ModelPricing,
    PRICING_TABLE,
    calculate_cost,
    round_cost,
)
from devlog_guard.core.token_counter import TokenUsage


class TestTokenUsage:
    """Test TokenUsage dataclass."""

    def test_defaults_are_zero(self):
        """Verify an empty usage has zero counts."""
        usage = TokenUsage()
        assert usage.to_dict() == {"prompt_tokens": 0, "completion_tokens": 0, "total_tokens": 0}

    def test_total_is_taken_as_reported(self):
        """Verify total_tokens is not recomputed."""
        usage = TokenUsage(prompt_tokens=100, completion_tokens=50, total_tokens=160)
        assert usage.total_tokens == 160

    def test_addition_sums_each_field(self):
        """Verify usages from several completions can be summed."""
        total = TokenUsage(100, 50, 150) + TokenUsage(200, 80, 280)
        assert total == TokenUsage(300, 130, 430)

    def test_negative_counts_rejected(self):
        """Verify negative counts are invalid."""
        with pytest.raises(ValueError, match="prompt_tokens cannot be negative"):
            TokenUsage(prompt_tokens=-1)
        with pytest.raises(ValueError, match="total_tokens cannot be negative"):
            TokenUsage(total_tokens=-5)


class TestPricingTable:
    """Test pricing table functionality."""

    def test_get_supported_model(self):
        """Verify pricing retrieval for supported models."""
        pricing = PRICING_TABLE.get_pricing("gpt-4o-mini")
        assert pricing.input_per_1m == Decimal("0.15")
        assert pricing.output_per_1m == Decimal("0.60")

    def test_unsupported_model_raises_error(self):
        """Verify error for unknown models."""
        with pytest.raises(ValueError, match="Unsupported model: unknown-model"):
            PRICING_TABLE.get_pricing("unknown-model")

    def test_negative_price_rejected(self):
        """Verify prices cannot be negative."""
        with pytest.raises(ValueError, match="input_per_1m cannot be negative"):
            ModelPricing(input_per_1m=Decimal("-1"), output_per_1m=Decimal("1"))


class TestCostCalculation:
    """Test cost calculation accuracy and rounding."""

    def test_exact_cost_gpt4o_mini(self):
        """Verify exact cost for a typical completion."""
        pricing = PRICING_TABLE.get_pricing("gpt-4o-mini")
        cost = calculate_cost(pricing, prompt_tokens=1000, completion_tokens=500)
        # Prompt: 1000/1M * $0.15 = $0.00015
        # Completion: 500/1M * $0.60 = $0.0003
        assert cost == Decimal("0.000450")

    def test_one_million_tokens(self):
        """Verify a full million prompt tokens costs the listed price."""
        pricing = PRICING_TABLE.get_pricing("gpt-4o")
        assert calculate_cost(pricing, 1_000_000, 0) == Decimal("2.500000")

    def test_zero_tokens_cost_nothing(self):
        """Verify zero usage has zero cost."""
        pricing = PRICING_TABLE.get_pricing("gpt-4o-mini")
        assert calculate_cost(pricing, 0, 0) == Decimal("0")

    def test_result_has_six_decimal_places(self):
        """Verify the cost is quantized to the ledger precision."""
        pricing = PRICING_TABLE.get_pricing("gpt-4o-mini")
        cost = calculate_cost(pricing, 1, 0)
        assert cost.as_tuple().exponent == -6
        assert cost == Decimal("0.000000")

    def test_rounds_half_up(self):
        """Verify exact half-way values round away from zero."""
        pricing = ModelPricing(input_per_1m=Decimal("0.5"), output_per_1m=Decimal("0"))
        # 1/1M * 0.5 = 0.0000005
        assert calculate_cost(pricing, 1, 0) == Decimal("0.000001")

    def test_round_cost(self):
        """Verify direct rounding helper."""
        assert round_cost(Decimal("0.1234565")) == Decimal("0.123457")
        assert round_cost(Decimal("0.1234564")) == Decimal("0.123456")
