"""
Monthly usage ledger.

Accumulates token and cost usage per calendar month and answers budget
queries. The ledger is a safety ceiling, not a billing system of record:
storage failures are logged and the ledger keeps working from memory.
"""

import re
import sqlite3
import threading
from datetime import datetime, timezone
from decimal import Decimal
from typing import TYPE_CHECKING, Callable, Dict, Optional

from devlog_guard.observability.logger import get_logger
from devlog_guard.storage.models import BudgetStatus, MonthlyUsageRecord, UsageEntry
from devlog_guard.storage.repository import UsageRepository

from .pricing import ModelPricing, calculate_cost, round_cost

if TYPE_CHECKING:
    from devlog_guard.config.loader import GuardConfig

log = get_logger("ledger")

MONTH_PATTERN = r"^\d{4}-(?:0[1-9]|1[0-2])$"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def month_key(moment: datetime) -> str:
    """Format a moment as its calendar month key ("YYYY-MM")."""
    return f"{moment.year:04d}-{moment.month:02d}"


def next_month_start(moment: datetime) -> datetime:
    """First instant of the calendar month following the given moment."""
    if moment.month == 12:
        return moment.replace(year=moment.year + 1, month=1, day=1,
                              hour=0, minute=0, second=0, microsecond=0)
    return moment.replace(month=moment.month + 1, day=1,
                          hour=0, minute=0, second=0, microsecond=0)


class UsageLedger:
    """Durable per-month accumulator of generation usage.

    The month map is re-read from the repository on every operation, so
    other processes sharing the store (the operator CLI) are observed, and
    every mutation rewrites the full map. A single lock serializes each
    read-modify-persist cycle within the process.

    The last map seen is kept in memory. It is served instead of the store
    when a read fails, or when the last write failed and the store is
    behind.
    """

    def __init__(
        self,
        repository: UsageRepository,
        pricing: ModelPricing,
        monthly_limit: Decimal,
        max_monthly_tokens: int,
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize the ledger.

        Args:
            repository: Durable store for the month map
            pricing: Prices of the model whose usage is recorded
            monthly_limit: Monthly spend ceiling in USD
            max_monthly_tokens: Monthly total-token ceiling
            clock: Returns the current timezone-aware time
        """
        if monthly_limit <= 0:
            raise ValueError("monthly_limit must be > 0")
        if max_monthly_tokens <= 0:
            raise ValueError("max_monthly_tokens must be > 0")

        self.repository = repository
        self.pricing = pricing
        self.monthly_limit = Decimal(monthly_limit)
        self.max_monthly_tokens = max_monthly_tokens
        self._clock = clock
        self._lock = threading.Lock()
        self._records: Optional[Dict[str, MonthlyUsageRecord]] = None
        self._unsaved = False

    def current_month(self) -> str:
        return month_key(self._clock())

    def record_usage(
        self,
        prompt_tokens: int,
        completion_tokens: int,
        total_tokens: int
    ) -> UsageEntry:
        """Record one completed generation against the current month.

        Args:
            prompt_tokens: Prompt tokens reported by the provider
            completion_tokens: Completion tokens reported by the provider
            total_tokens: Total tokens reported by the provider

        Returns:
            The appended UsageEntry
        """
        if min(prompt_tokens, completion_tokens, total_tokens) < 0:
            raise ValueError("token counts cannot be negative")

        now = self._clock()
        entry = UsageEntry(
            timestamp=now,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=total_tokens,
            cost=calculate_cost(self.pricing, prompt_tokens, completion_tokens),
        )

        with self._lock:
            records = self._load()
            month = month_key(now)
            record = records.get(month)
            if record is None:
                record = MonthlyUsageRecord(month=month)
                records[month] = record
            record.add(entry)
            self._persist(records)

        log.info(
            "usage_recorded",
            month=month,
            total_tokens=total_tokens,
            cost_usd=str(entry.cost),
            month_total_tokens=record.total_tokens,
            month_cost_usd=str(record.estimated_cost),
        )
        return entry

    def get_monthly_usage(self, month: Optional[str] = None) -> MonthlyUsageRecord:
        """Return a copy of a month's record (empty if never used)."""
        target = month or self.current_month()
        with self._lock:
            record = self._load().get(target)
            if record is None:
                return MonthlyUsageRecord(month=target)
            return MonthlyUsageRecord.from_dict(record.to_dict())

    def get_budget_status(self) -> BudgetStatus:
        """Snapshot the current month against the configured ceilings."""
        now = self._clock()
        usage = self.get_monthly_usage(month_key(now))
        exceeded = (
            usage.estimated_cost >= self.monthly_limit
            or usage.total_tokens >= self.max_monthly_tokens
        )
        return BudgetStatus(
            month=usage.month,
            prompt_tokens=usage.prompt_tokens,
            completion_tokens=usage.completion_tokens,
            total_tokens=usage.total_tokens,
            estimated_cost=usage.estimated_cost,
            request_count=usage.request_count,
            budget_limit=self.monthly_limit,
            budget_remaining=round_cost(max(Decimal("0"), self.monthly_limit - usage.estimated_cost)),
            max_monthly_tokens=self.max_monthly_tokens,
            tokens_remaining=max(0, self.max_monthly_tokens - usage.total_tokens),
            is_exceeded=exceeded,
            resets_at=next_month_start(now),
        )

    def is_budget_exceeded(self) -> bool:
        return self.get_budget_status().is_exceeded

    def reset_monthly_usage(self, month: Optional[str] = None) -> None:
        """Replace a month's record with an empty one, discarding its entries.

        Args:
            month: Month to reset ("YYYY-MM"); defaults to the current month

        Raises:
            ValueError: If month is not a "YYYY-MM" key
        """
        target = month or self.current_month()
        if not re.match(MONTH_PATTERN, target):
            raise ValueError(f"Invalid month '{target}', expected YYYY-MM")
        with self._lock:
            records = self._load()
            records[target] = MonthlyUsageRecord(month=target)
            self._persist(records)
        log.info("monthly_usage_reset", month=target)

    def _load(self) -> Dict[str, MonthlyUsageRecord]:
        if self._records is not None and self._unsaved:
            return self._records
        try:
            self._records = self.repository.load_all()
        except (sqlite3.DatabaseError, OSError, ValueError) as e:
            log.warning("usage_store_unreadable", db_path=self.repository.db_path, error=str(e))
            if self._records is None:
                self._records = {}
        return self._records

    def _persist(self, records: Dict[str, MonthlyUsageRecord]) -> None:
        try:
            self.repository.save_all(records)
            self._unsaved = False
        except (sqlite3.Error, OSError) as e:
            log.warning("usage_store_write_failed", db_path=self.repository.db_path, error=str(e))
            self._unsaved = True


def build_ledger(config: "GuardConfig", clock: Callable[[], datetime] = utc_now) -> UsageLedger:
    """Construct the ledger described by a GuardConfig."""
    return UsageLedger(
        repository=UsageRepository(config.storage.db_path),
        pricing=config.model.pricing,
        monthly_limit=config.budget.monthly_limit_usd,
        max_monthly_tokens=config.budget.max_monthly_tokens,
        clock=clock,
    )
