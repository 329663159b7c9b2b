"""Transactional allocator for per-series ticket folios.

Every method takes the caller's active ``Session``. The allocator never opens,
commits or rolls back a transaction itself: the increment becomes visible to
other transactions only when the caller commits, and disappears if the caller
rolls back.
"""

from __future__ import annotations

import logging
import uuid

from sqlalchemy import insert, select, text, update
from sqlalchemy.dialects.mysql import insert as mysql_insert
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from cobranza.core.settings import settings
from cobranza.db.time import utcnow
from cobranza.models import TicketSeries

logger = logging.getLogger(__name__)


class SequenceError(Exception):
    """Raised when a series counter cannot be created or advanced."""


def _dialect_name(session: Session) -> str:
    return session.get_bind().dialect.name


class FolioSequencer:
    """Hands out strictly increasing folio numbers per ticket series.

    Mutual exclusion comes from the database row lock on the counter row,
    held until the enclosing transaction ends. Multiple API processes can
    share one database safely.
    """

    def __init__(
        self,
        *,
        lock_timeout_seconds: int | None = None,
        default_header: str | None = None,
        default_footer: str | None = None,
    ) -> None:
        self.lock_timeout_seconds = lock_timeout_seconds or settings.lock_timeout_seconds
        self.default_header = default_header or settings.ticket_default_header
        self.default_footer = default_footer or settings.ticket_default_footer

    def apply_lock_timeout(self, session: Session) -> None:
        """Bound how long this transaction may wait for a counter lock.

        SQLite is covered by the connection busy timeout configured on the
        engine.
        """
        dialect = _dialect_name(session)
        if dialect == "postgresql":
            timeout_ms = int(self.lock_timeout_seconds * 1000)
            session.execute(text(f"SET LOCAL lock_timeout = '{timeout_ms}ms'"))
        elif dialect in {"mysql", "mariadb"}:
            session.execute(
                text(f"SET SESSION innodb_lock_wait_timeout = {int(self.lock_timeout_seconds)}")
            )

    def ensure_series(self, session: Session, series: str) -> None:
        """Create the counter row for ``series`` at 0 if it does not exist.

        Safe to call concurrently: the insert is skipped at the database when
        another transaction created the row first.
        """
        if not series:
            raise SequenceError("series is required")

        now = utcnow()
        values = {
            "uuid": str(uuid.uuid4()),
            "series": series,
            "current_number": 0,
            "header_name": self.default_header,
            "footer_legend": self.default_footer,
            "created_at": now,
            "updated_at": now,
        }

        dialect = _dialect_name(session)
        if dialect == "sqlite":
            stmt = (
                sqlite_insert(TicketSeries)
                .values(**values)
                .on_conflict_do_nothing(index_elements=["series"])
            )
        elif dialect == "postgresql":
            stmt = (
                pg_insert(TicketSeries)
                .values(**values)
                .on_conflict_do_nothing(index_elements=["series"])
            )
        elif dialect in {"mysql", "mariadb"}:
            stmt = mysql_insert(TicketSeries).values(**values).prefix_with("IGNORE")
        else:
            exists = session.execute(
                select(TicketSeries.id).where(TicketSeries.series == series)
            ).first()
            if exists is not None:
                return
            stmt = insert(TicketSeries).values(**values)

        result = session.connection().execute(stmt)
        if result.rowcount:
            logger.info("Created ticket series %s", series)

    def next_number(self, session: Session, series: str) -> int:
        """Advance the counter for ``series`` and return the new folio.

        The ``UPDATE`` takes the exclusive row lock before anything is read,
        so the read-back always observes this transaction's own increment.
        """
        result = session.connection().execute(
            update(TicketSeries)
            .where(TicketSeries.series == series)
            .values(
                current_number=TicketSeries.current_number + 1,
                updated_at=utcnow(),
            )
        )
        if result.rowcount != 1:
            raise SequenceError(f"ticket series {series!r} does not exist")

        current = session.execute(
            select(TicketSeries.current_number)
            .where(TicketSeries.series == series)
            .with_for_update()
        ).scalar_one()
        return int(current)

    def current_number(self, session: Session, series: str) -> int | None:
        """Return the last folio issued for ``series``, or None if unused."""
        return session.execute(
            select(TicketSeries.current_number).where(TicketSeries.series == series)
        ).scalar_one_or_none()
