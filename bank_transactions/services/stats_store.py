"""Persistence of materialized transaction statistics."""

from decimal import Decimal

from sqlalchemy import delete, insert, select
from sqlalchemy.orm import Session, sessionmaker

from bank_transactions.core.db import GroupedStatRow, new_id
from bank_transactions.core.models import GroupedStat, StatsGroupBy


def _stat_to_values(stat: GroupedStat) -> dict:
    return {
        "id": new_id(),
        "year_month": stat.year_month,
        "group_by": stat.group_by.value,
        "key": stat.key,
        "currency": stat.currency,
        "count": stat.count,
        "total_amount": str(stat.total_amount),
    }


def _row_to_stat(row: GroupedStatRow) -> GroupedStat:
    return GroupedStat(
        year_month=row.year_month,
        group_by=StatsGroupBy(row.group_by),
        key=row.key,
        currency=row.currency,
        count=row.count,
        total_amount=Decimal(row.total_amount),
    )


class StatsStore:
    """Store of grouped statistics rows, keyed by month, dimension, group key and currency."""

    def __init__(self, session_factory: sessionmaker) -> None:
        """Initialize the store with a SQLAlchemy session factory."""
        self.session_factory = session_factory

    def delete_for_month(self, year_month: str) -> None:
        """Delete every statistics row of ``year_month``."""
        with self.session_factory() as session, session.begin():
            self._delete_for_month(session, year_month)

    def insert_all(self, stats: list[GroupedStat]) -> None:
        """Bulk-insert ``stats``; nothing is written for an empty list."""
        with self.session_factory() as session, session.begin():
            self._insert_all(session, stats)

    def replace_month(self, year_month: str, stats: list[GroupedStat]) -> None:
        """Delete the month's rows and insert ``stats`` in the same database transaction."""
        with self.session_factory() as session, session.begin():
            self._delete_for_month(session, year_month)
            self._insert_all(session, stats)

    def find_by_month_and_group(self, year_month: str, group_by: StatsGroupBy) -> list[GroupedStat]:
        """All rows of one month and dimension, in storage order."""
        stmt = select(GroupedStatRow).where(
            GroupedStatRow.year_month == year_month,
            GroupedStatRow.group_by == group_by.value,
        )
        with self.session_factory() as session:
            return [_row_to_stat(row) for row in session.scalars(stmt)]

    def find_by_group_between(self, group_by: StatsGroupBy, from_month: str, to_month: str) -> list[GroupedStat]:
        """Rows of one dimension for months in ``[from_month, to_month]``, by month then currency."""
        stmt = (
            select(GroupedStatRow)
            .where(
                GroupedStatRow.group_by == group_by.value,
                GroupedStatRow.year_month.between(from_month, to_month),
            )
            .order_by(GroupedStatRow.year_month.asc(), GroupedStatRow.currency.asc())
        )
        with self.session_factory() as session:
            return [_row_to_stat(row) for row in session.scalars(stmt)]

    def _delete_for_month(self, session: Session, year_month: str) -> None:
        session.execute(delete(GroupedStatRow).where(GroupedStatRow.year_month == year_month))

    def _insert_all(self, session: Session, stats: list[GroupedStat]) -> None:
        if stats:
            session.execute(insert(GroupedStatRow), [_stat_to_values(stat) for stat in stats])
