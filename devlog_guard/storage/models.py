"""
Data models for storage layer.

Defines the monthly usage ledger records and their serialized form.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List

from devlog_guard.core.pricing import round_cost


@dataclass(frozen=True)
class UsageEntry:
    """Immutable record of one completed generation.

    Entries are append-only; the monthly totals are derived from them.
    """
    timestamp: datetime
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int
    cost: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "total_tokens": self.total_tokens,
            "cost": str(self.cost),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UsageEntry":
        return cls(
            timestamp=datetime.fromisoformat(data["timestamp"]),
            prompt_tokens=int(data["prompt_tokens"]),
            completion_tokens=int(data["completion_tokens"]),
            total_tokens=int(data["total_tokens"]),
            cost=Decimal(str(data["cost"])),
        )


@dataclass
class MonthlyUsageRecord:
    """Cumulative usage for one calendar month ("YYYY-MM").

    Cumulative fields always equal the sum of entries: they are only
    changed through add(), and from_dict() rebuilds them from the entries.
    """
    month: str
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    estimated_cost: Decimal = Decimal("0")
    request_count: int = 0
    entries: List[UsageEntry] = field(default_factory=list)

    def add(self, entry: UsageEntry) -> None:
        """Append an entry and fold it into the cumulative fields."""
        self.prompt_tokens += entry.prompt_tokens
        self.completion_tokens += entry.completion_tokens
        self.total_tokens += entry.total_tokens
        self.estimated_cost = round_cost(self.estimated_cost + entry.cost)
        self.request_count += 1
        self.entries.append(entry)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "month": self.month,
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "total_tokens": self.total_tokens,
            "estimated_cost": str(self.estimated_cost),
            "request_count": self.request_count,
            "entries": [entry.to_dict() for entry in self.entries],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MonthlyUsageRecord":
        """Rebuild a record from its serialized form.

        Raises:
            KeyError, ValueError, TypeError, ArithmeticError: If the payload is malformed
        """
        record = cls(month=str(data["month"]))
        for raw_entry in data.get("entries", []):
            record.add(UsageEntry.from_dict(raw_entry))
        return record


@dataclass(frozen=True)
class BudgetStatus:
    """Snapshot of the current month's spend against the configured ceilings."""
    month: str
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int
    estimated_cost: Decimal
    request_count: int
    budget_limit: Decimal
    budget_remaining: Decimal
    max_monthly_tokens: int
    tokens_remaining: int
    is_exceeded: bool
    resets_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "month": self.month,
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "total_tokens": self.total_tokens,
            "estimated_cost_usd": float(self.estimated_cost),
            "request_count": self.request_count,
            "budget_limit_usd": float(self.budget_limit),
            "budget_remaining_usd": float(self.budget_remaining),
            "max_monthly_tokens": self.max_monthly_tokens,
            "tokens_remaining": self.tokens_remaining,
            "is_exceeded": self.is_exceeded,
            "resets_at": self.resets_at.isoformat(),
        }
