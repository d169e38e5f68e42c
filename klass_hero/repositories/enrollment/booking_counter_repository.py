"""
Booking counter repository.

Implements the storage side of the monthly quota gate: an idempotent seed
of the (parent, month) row followed by a guarded compare-and-swap
increment. Both statements run inside the caller's transaction.
"""

from datetime import date
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from klass_hero.core.exceptions import RepositoryError
from klass_hero.models.base.base_model import generate_uuid
from klass_hero.models.enrollment.booking_counter import BookingCounter
from klass_hero.repositories.base.base_repository import BaseRepository

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class BookingCounterRepository(BaseRepository[BookingCounter]):
    """Data access for monthly booking counters."""

    def __init__(self, db: Session):
        super().__init__(BookingCounter, db)

    def get_used(self, parent_id: str, period_start: date) -> Optional[int]:
        stmt = (
            select(BookingCounter.used)
            .where(BookingCounter.parent_id == parent_id)
            .where(BookingCounter.period_start == period_start)
        )
        return self.db.scalar(stmt)

    def ensure_row(self, parent_id: str, period_start: date, seed_used: int) -> None:
        """
        Create the counter row for a month if it does not exist yet.

        Concurrent callers race on the unique (parent_id, period_start) key;
        the loser's insert is a no-op.
        """
        values = {
            "id": generate_uuid(),
            "parent_id": parent_id,
            "period_start": period_start,
            "used": seed_used,
        }
        dialect_name = self.db.get_bind().dialect.name
        insert_fn = _UPSERT_DIALECTS.get(dialect_name)

        try:
            if insert_fn is not None:
                stmt = insert_fn(BookingCounter).values(**values).on_conflict_do_nothing(
                    index_elements=["parent_id", "period_start"]
                )
                self.db.execute(stmt)
                return

            if self.get_used(parent_id, period_start) is not None:
                return
            try:
                with self.db.begin_nested():
                    self.db.add(BookingCounter(**values))
            except IntegrityError:
                # Another transaction created the row first
                pass
        except SQLAlchemyError as e:
            raise RepositoryError(f"Seed booking counter failed: {str(e)}") from e

    def try_increment(self, parent_id: str, period_start: date, cap: Optional[int]) -> bool:
        """
        Atomically add one booking to the month.

        With a cap the UPDATE only matches while used < cap; zero matched rows
        means the quota is exhausted and nothing changed. A None cap is
        unlimited.
        """
        stmt = (
            update(BookingCounter)
            .where(BookingCounter.parent_id == parent_id)
            .where(BookingCounter.period_start == period_start)
        )
        if cap is not None:
            stmt = stmt.where(BookingCounter.used < cap)
        stmt = stmt.values(used=BookingCounter.used + 1).execution_options(
            synchronize_session=False
        )
        try:
            result = self.db.execute(stmt)
        except SQLAlchemyError as e:
            raise RepositoryError(f"Increment booking counter failed: {str(e)}") from e
        return result.rowcount == 1

    def decrement(self, parent_id: str, period_start: date) -> bool:
        """Release one booking of the month, never going below zero."""
        stmt = (
            update(BookingCounter)
            .where(BookingCounter.parent_id == parent_id)
            .where(BookingCounter.period_start == period_start)
            .where(BookingCounter.used > 0)
            .values(used=BookingCounter.used - 1)
            .execution_options(synchronize_session=False)
        )
        try:
            result = self.db.execute(stmt)
        except SQLAlchemyError as e:
            raise RepositoryError(f"Decrement booking counter failed: {str(e)}") from e
        return result.rowcount == 1
