"""
Pricing calculations and rate management.

Handles cost computations for the supported generation models.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict

# Costs are tracked at the precision of the price table (USD per 1M tokens)
COST_QUANTUM = Decimal("0.000001")
ONE_MILLION = Decimal("1000000")


@dataclass(frozen=True)
class ModelPricing:
    """Per-token pricing for a specific model."""
    input_per_1m: Decimal  # USD per 1M prompt tokens
    output_per_1m: Decimal  # USD per 1M completion tokens

    def __post_init__(self):
        """Validate prices are non-negative."""
        if self.input_per_1m < 0:
            raise ValueError("input_per_1m cannot be negative")
        if self.output_per_1m < 0:
            raise ValueError("output_per_1m cannot be negative")


@dataclass(frozen=True)
class PricingTable:
    """Fixed pricing table for supported models."""
    prices: Dict[str, ModelPricing]

    def get_pricing(self, model: str) -> ModelPricing:
        """Get pricing for a specific model.

        Args:
            model: Model identifier

        Returns:
            ModelPricing for the model

        Raises:
            ValueError: If model is not supported
        """
        if model not in self.prices:
            raise ValueError(f"Unsupported model: {model}")
        return self.prices[model]


# Fixed pricing table - no dynamic fetching
PRICING_TABLE = PricingTable({
    "gpt-4o-mini": ModelPricing(
        input_per_1m=Decimal("0.15"),
        output_per_1m=Decimal("0.60")
    ),
    "gpt-4o": ModelPricing(
        input_per_1m=Decimal("2.50"),
        output_per_1m=Decimal("10.00")
    ),
    "gpt-4.1-mini": ModelPricing(
        input_per_1m=Decimal("0.40"),
        output_per_1m=Decimal("1.60")
    ),
})


def round_cost(amount: Decimal) -> Decimal:
    """Round a currency amount to the ledger precision (6 decimal places)."""
    return amount.quantize(COST_QUANTUM, rounding=ROUND_HALF_UP)


def calculate_cost(
    pricing: ModelPricing,
    prompt_tokens: int,
    completion_tokens: int
) -> Decimal:
    """Calculate the cost of a single completion.

    Args:
        pricing: Per-million-token prices of the model used
        prompt_tokens: Tokens sent to the model
        completion_tokens: Tokens generated by the model

    Returns:
        Cost in USD rounded half-up to 6 decimal places
    """
    input_cost = (Decimal(prompt_tokens) / ONE_MILLION) * pricing.input_per_1m
    output_cost = (Decimal(completion_tokens) / ONE_MILLION) * pricing.output_per_1m
    return round_cost(input_cost + output_cost)
