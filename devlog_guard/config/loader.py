"""
Configuration management and loading.

Loads guard settings from a YAML file with strict validation. Every section
is optional; omitted values fall back to the defaults below.
"""

import os
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from devlog_guard.core.pricing import PRICING_TABLE, ModelPricing

CONFIG_ENV_VAR = "DEVLOG_GUARD_CONFIG"


@dataclass(frozen=True)
class RateLimitConfig:
    """Per-client sliding-window quota."""
    max_requests: int = 3
    window_seconds: int = 3600

    def __post_init__(self):
        if self.max_requests <= 0:
            raise ValueError("max_requests must be > 0")
        if self.window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")


@dataclass(frozen=True)
class BudgetConfig:
    """Monthly spend and token ceilings."""
    monthly_limit_usd: Decimal = Decimal("10")
    max_monthly_tokens: int = 3_000_000

    def __post_init__(self):
        if self.monthly_limit_usd <= 0:
            raise ValueError("monthly_limit_usd must be > 0")
        if self.max_monthly_tokens <= 0:
            raise ValueError("max_monthly_tokens must be > 0")


@dataclass(frozen=True)
class ModelConfig:
    """Generation model and its per-million-token prices.

    Prices come from PRICING_TABLE for the named model. Either price may be
    overridden; a model missing from the table must override both.
    """
    name: str = "gpt-4o-mini"
    input_per_1m: Optional[Decimal] = None
    output_per_1m: Optional[Decimal] = None
    temperature: float = 0.7
    timeout_seconds: float = 30.0

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValueError("model name cannot be empty")
        if not 0 <= self.temperature <= 2:
            raise ValueError("temperature must be between 0 and 2")
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")
        # Resolve eagerly so an unknown model fails at load time
        self.pricing

    @property
    def pricing(self) -> ModelPricing:
        if self.input_per_1m is not None and self.output_per_1m is not None:
            return ModelPricing(input_per_1m=self.input_per_1m, output_per_1m=self.output_per_1m)
        listed = PRICING_TABLE.get_pricing(self.name)
        return ModelPricing(
            input_per_1m=listed.input_per_1m if self.input_per_1m is None else self.input_per_1m,
            output_per_1m=listed.output_per_1m if self.output_per_1m is None else self.output_per_1m,
        )


@dataclass(frozen=True)
class ExtractionConfig:
    """Bounds on recovered code fragments."""
    max_fragments: int = 3
    max_lines: int = 20

    def __post_init__(self):
        if self.max_fragments <= 0:
            raise ValueError("max_fragments must be > 0")
        if self.max_lines <= 0:
            raise ValueError("max_lines must be > 0")


@dataclass(frozen=True)
class StorageConfig:
    db_path: str = "devlog_guard.db"


def _default_platform_tokens() -> Dict[str, int]:
    return {"linkedin": 1000, "x": 500}


@dataclass(frozen=True)
class GuardConfig:
    """Complete guard configuration."""
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)
    budget: BudgetConfig = field(default_factory=BudgetConfig)
    model: ModelConfig = field(default_factory=ModelConfig)
    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    platform_max_tokens: Dict[str, int] = field(default_factory=_default_platform_tokens)


_SECTION_KEYS = {
    "rate_limit": {"max_requests", "window_seconds"},
    "budget": {"monthly_limit_usd", "max_monthly_tokens"},
    "model": {"name", "input_per_1m", "output_per_1m", "temperature", "timeout_seconds"},
    "extraction": {"max_fragments", "max_lines"},
    "storage": {"db_path"},
    "platforms": {"linkedin", "x"},
}


def load_guard_config(path: Optional[str] = None) -> GuardConfig:
    """Load and validate guard configuration from a YAML file.

    Strict validation rejects unknown keys so a typo cannot silently leave
    a ceiling at its default.

    Args:
        path: Path to YAML configuration file. If None, the path named by
            DEVLOG_GUARD_CONFIG is used; if that is unset too, defaults
            are returned.

    Returns:
        Validated GuardConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ValueError: If configuration is invalid
    """
    path = path or os.environ.get(CONFIG_ENV_VAR)
    if not path:
        return GuardConfig()

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Guard config file not found: {path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML in config file {path}: {e}")

    if raw_config is None:
        return GuardConfig()
    if not isinstance(raw_config, dict):
        raise ValueError("Configuration root must be a dictionary")

    unknown_keys = set(raw_config.keys()) - set(_SECTION_KEYS)
    if unknown_keys:
        raise ValueError(f"Unknown configuration keys: {unknown_keys}")

    sections = {name: _section(raw_config, name) for name in _SECTION_KEYS}

    rate = sections["rate_limit"]
    budget = sections["budget"]
    model = sections["model"]
    extraction = sections["extraction"]
    defaults = GuardConfig()

    platform_tokens = dict(defaults.platform_max_tokens)
    for platform, data in sections["platforms"].items():
        if not isinstance(data, dict) or set(data.keys()) != {"max_tokens"}:
            raise ValueError(f"'platforms.{platform}' must contain only 'max_tokens'")
        platform_tokens[platform] = _positive_int(data["max_tokens"], f"platforms.{platform}.max_tokens")

    return GuardConfig(
        rate_limit=RateLimitConfig(
            max_requests=_positive_int(rate.get("max_requests", defaults.rate_limit.max_requests), "rate_limit.max_requests"),
            window_seconds=_positive_int(rate.get("window_seconds", defaults.rate_limit.window_seconds), "rate_limit.window_seconds"),
        ),
        budget=BudgetConfig(
            monthly_limit_usd=_decimal(budget.get("monthly_limit_usd", defaults.budget.monthly_limit_usd), "budget.monthly_limit_usd"),
            max_monthly_tokens=_positive_int(budget.get("max_monthly_tokens", defaults.budget.max_monthly_tokens), "budget.max_monthly_tokens"),
        ),
        model=ModelConfig(
            name=str(model.get("name", defaults.model.name)),
            input_per_1m=_optional_decimal(model.get("input_per_1m"), "model.input_per_1m"),
            output_per_1m=_optional_decimal(model.get("output_per_1m"), "model.output_per_1m"),
            temperature=float(model.get("temperature", defaults.model.temperature)),
            timeout_seconds=float(model.get("timeout_seconds", defaults.model.timeout_seconds)),
        ),
        extraction=ExtractionConfig(
            max_fragments=_positive_int(extraction.get("max_fragments", defaults.extraction.max_fragments), "extraction.max_fragments"),
            max_lines=_positive_int(extraction.get("max_lines", defaults.extraction.max_lines), "extraction.max_lines"),
        ),
        storage=StorageConfig(
            db_path=str(sections["storage"].get("db_path", defaults.storage.db_path)),
        ),
        platform_max_tokens=platform_tokens,
    )


def _section(raw_config: Dict[str, Any], name: str) -> Dict[str, Any]:
    """Fetch one optional section and reject unknown keys in it."""
    data = raw_config.get(name) or {}
    if not isinstance(data, dict):
        raise ValueError(f"'{name}' must be a dictionary")
    unknown_keys = set(data.keys()) - _SECTION_KEYS[name]
    if unknown_keys:
        raise ValueError(f"Unknown keys in {name}: {unknown_keys}")
    return data


def _positive_int(value: Any, path: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValueError(f"'{path}' must be a positive integer")
    return value


def _decimal(value: Any, path: str) -> Decimal:
    if isinstance(value, bool) or not isinstance(value, (int, float, str, Decimal)):
        raise ValueError(f"'{path}' must be a number")
    try:
        return Decimal(str(value))
    except ArithmeticError:
        raise ValueError(f"'{path}' must be a number")


def _optional_decimal(value: Any, path: str) -> Optional[Decimal]:
    if value is None:
        return None
    return _decimal(value, path)
