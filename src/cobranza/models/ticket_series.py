"""Per-series folio counters and receipt header configuration."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import BigInteger, CheckConstraint, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from cobranza.db.session import Base
from cobranza.db.time import utcnow


class TicketSeries(Base):
    """Counter row for one ticket series.

    ``current_number`` holds the last folio issued. It only grows, and only
    inside the payment registration transaction.
    """

    __tablename__ = "tickets_config"
    __table_args__ = (
        CheckConstraint("current_number >= 0", name="ck_tickets_config_current_number"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    uuid: Mapped[str] = mapped_column(
        String(36), unique=True, nullable=False, default=lambda: str(uuid.uuid4())
    )
    series: Mapped[str] = mapped_column(String(8), unique=True, nullable=False)
    current_number: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    # Receipt header. header_rfc is printed as the web site line.
    header_name: Mapped[str | None] = mapped_column(String(160), nullable=True)
    header_rfc: Mapped[str | None] = mapped_column(String(160), nullable=True)
    header_address: Mapped[str | None] = mapped_column(Text, nullable=True)
    header_phone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    footer_legend: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
