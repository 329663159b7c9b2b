"""Payment records and their ticket folios."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cobranza.db.session import Base
from cobranza.db.time import utcnow

from .client import Client
from .user import User

SYNC_STATE_SYNCED = "SYNCED"
ORIGIN_APP = "APP"


class Payment(Base):
    """A collected payment. Never updated after insertion."""

    __tablename__ = "payments"
    __table_args__ = (
        UniqueConstraint("ticket_series", "ticket_number", name="uq_payments_folio"),
        UniqueConstraint("idempotency_key", name="uq_payments_idempotency_key"),
        CheckConstraint("amount > 0", name="ck_payments_amount_positive"),
        Index("ix_payments_client_id", "client_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    uuid: Mapped[str] = mapped_column(
        String(36), unique=True, nullable=False, default=lambda: str(uuid.uuid4())
    )
    client_id: Mapped[int] = mapped_column(Integer, ForeignKey("clients.id"), nullable=False)
    collector_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    device_local_ts: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    server_ts: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    ticket_series: Mapped[str] = mapped_column(String(8), nullable=False)
    ticket_number: Mapped[int] = mapped_column(BigInteger, nullable=False)
    sync_state: Mapped[str] = mapped_column(String(16), nullable=False, default=SYNC_STATE_SYNCED)
    origin: Mapped[str] = mapped_column(String(16), nullable=False, default=ORIGIN_APP)
    idempotency_key: Mapped[str] = mapped_column(String(128), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    client: Mapped[Client] = relationship("Client")
    collector: Mapped[User] = relationship("User")

    @property
    def ticket_folio(self) -> str:
        """Return the human-facing folio, e.g. ``A-6``."""
        return f"{self.ticket_series}-{self.ticket_number}"
