"""Queries over materialized transaction statistics."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from bank_transactions.core.exceptions import BadRequestError
from bank_transactions.core.models import GroupedStat, StatsGroupBy, StatsSort, YearMonth
from bank_transactions.core.settings import Settings, get_settings
from bank_transactions.services.stats_store import StatsStore


class TransactionStatsRow(BaseModel):
    """One grouped row of a single month."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    key: str
    currency: str
    count: int
    total_amount: Decimal


class MonthlyStatsRow(BaseModel):
    """Grand total of one month and currency."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    year_month: str
    currency: str
    count: int
    total_amount: Decimal


def _parse_month(value: str, name: str) -> YearMonth:
    try:
        return YearMonth.parse(value)
    except ValueError as exc:
        msg = f"{name} must be yyyy-MM"
        raise BadRequestError(msg) from exc


def sort_stats(stats: list[GroupedStat], sort: StatsSort) -> list[GroupedStat]:
    """Order rows by total amount in the requested direction; ties break on key, then currency."""
    by_key = sorted(stats, key=lambda stat: (stat.key, stat.currency))
    return sorted(by_key, key=lambda stat: stat.total_amount, reverse=sort is StatsSort.TOTAL_DESC)


class TransactionStatsService:
    """Reads grouped statistics for one month or for a range of months."""

    def __init__(self, store: StatsStore, settings: Settings | None = None) -> None:
        """Initialize the service with the statistics store and the default and largest row limits."""
        settings = settings or get_settings()
        self.store = store
        self.default_limit = settings.stats_default_limit
        self.max_limit = settings.stats_max_limit

    def get_stats(
        self,
        year_month: str,
        group_by: StatsGroupBy,
        limit: int | None = None,
        sort: StatsSort = StatsSort.TOTAL_DESC,
    ) -> list[TransactionStatsRow]:
        """Return up to ``limit`` rows of one month and dimension, ordered by total."""
        _parse_month(year_month, "yearMonth")
        if limit is None:
            limit = self.default_limit
        if not 1 <= limit <= self.max_limit:
            msg = f"limit must be between 1 and {self.max_limit}"
            raise BadRequestError(msg)
        stats = sort_stats(self.store.find_by_month_and_group(year_month, group_by), sort)
        return [
            TransactionStatsRow(key=s.key, currency=s.currency, count=s.count, total_amount=s.total_amount)
            for s in stats[:limit]
        ]

    def get_monthly_stats(self, from_month: str, to_month: str) -> list[MonthlyStatsRow]:
        """Return the per-currency month totals for every month in ``[from_month, to_month]``."""
        if _parse_month(from_month, "from") > _parse_month(to_month, "to"):
            msg = "from must be <= to"
            raise BadRequestError(msg)
        return [
            MonthlyStatsRow(
                year_month=s.year_month, currency=s.currency, count=s.count, total_amount=s.total_amount
            )
            for s in self.store.find_by_group_between(StatsGroupBy.MONTH, from_month, to_month)
        ]
