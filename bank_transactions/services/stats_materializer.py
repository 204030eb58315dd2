"""Materialization of grouped transaction statistics for one month.

Every call recomputes the month from the full set of its transaction records and replaces the
stored rows wholesale. Three families of rows are produced, each partitioned by currency:

* ``CATEGORY`` - one row per (category, currency)
* ``IBAN`` - one row per (account IBAN, currency)
* ``MONTH`` - one grand-total row per currency, keyed ``TOTAL``

Sums use exact decimal arithmetic, so rerunning on unchanged records yields identical rows.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from decimal import MAX_PREC, Decimal, localcontext

from bank_transactions.core.models import MONTH_TOTAL_KEY, GroupedStat, StatsGroupBy, TransactionRecord
from bank_transactions.core.utils import get_logger
from bank_transactions.services.stats_store import StatsStore
from bank_transactions.services.transaction_store import TransactionStore

logger = get_logger("bank-transactions.stats")

GroupKey = Callable[[TransactionRecord], str]

GROUP_KEYS: dict[StatsGroupBy, GroupKey] = {
    StatsGroupBy.CATEGORY: lambda record: record.category,
    StatsGroupBy.IBAN: lambda record: record.iban,
    StatsGroupBy.MONTH: lambda record: MONTH_TOTAL_KEY,
}


@dataclass
class _Accumulator:
    count: int = 0
    total: Decimal = field(default_factory=Decimal)

    def add(self, amount: Decimal) -> None:
        self.count += 1
        self.total += amount


def aggregate(year_month: str, records: Iterable[TransactionRecord]) -> list[GroupedStat]:
    """Group ``records`` along every dimension and return one stat row per group and currency."""
    groups: dict[tuple[StatsGroupBy, str, str], _Accumulator] = {}
    # Sums are exact at any scale.
    with localcontext(prec=MAX_PREC):
        for record in records:
            for group_by, group_key in GROUP_KEYS.items():
                key = (group_by, group_key(record), record.currency)
                groups.setdefault(key, _Accumulator()).add(record.amount)
    return [
        GroupedStat(
            year_month=year_month,
            group_by=group_by,
            key=key,
            currency=currency,
            count=acc.count,
            total_amount=acc.total,
        )
        for (group_by, key, currency), acc in sorted(groups.items(), key=lambda item: item[0])
    ]


class TransactionStatsMaterializer:
    """Recomputes and replaces the grouped statistics of a month."""

    def __init__(self, transactions: TransactionStore, stats: StatsStore) -> None:
        """Initialize the materializer with the transaction and statistics stores."""
        self.transactions = transactions
        self.stats = stats

    def materialize_for_month(self, year_month: str) -> list[GroupedStat]:
        """Rebuild all statistics rows of ``year_month`` and return them."""
        stats = aggregate(year_month, self.transactions.iter_month(year_month))
        self.stats.replace_month(year_month, stats)
        logger.info(f"Materialized {len(stats)} stats rows for {year_month}")
        return stats
