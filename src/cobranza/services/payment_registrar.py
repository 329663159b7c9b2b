"""Idempotent payment registration.

A registration allocates the next folio of the configured series and inserts
the payment row in one transaction. The caller-supplied idempotency key is
unique at the database, so a retried request can never create a second
payment: the retry's transaction is rolled back and the original payment is
returned instead.

A retry that reaches the insert has already advanced the counter inside its
own transaction. Rolling that transaction back discards the increment, so a
retry costs no folio. Only when two attempts with the same key race through
the counter at once can the loser's rollback leave a one-number gap; the
folio is never re-derived from the existing row before rollback.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session, sessionmaker

from cobranza.core.errors import (
    ApiError,
    ConflictError,
    InternalError,
    NotFoundError,
    TransientError,
    ValidationError,
)
from cobranza.core.settings import settings
from cobranza.db.time import utcnow
from cobranza.models import Payment
from cobranza.models.payment import ORIGIN_APP, SYNC_STATE_SYNCED

from .client_directory import ClientDirectory, ResolvedClient
from .folio_sequencer import FolioSequencer

logger = logging.getLogger(__name__)

IDEMPOTENCY_KEY_MAX_LENGTH = 128
IDEMPOTENCY_CONSTRAINT = "uq_payments_idempotency_key"


@dataclass(frozen=True)
class PaymentCommand:
    """Validated input for one registration attempt."""

    client_uuid: str
    amount: Decimal
    idempotency_key: str
    device_local_ts: datetime
    notes: str | None = None


@dataclass(frozen=True)
class Created:
    """The payment row was inserted by this transaction."""

    payment_uuid: str
    ticket_series: str
    ticket_number: int


@dataclass(frozen=True)
class AlreadyExists:
    """A payment with this idempotency key is already stored."""

    idempotency_key: str


InsertOutcome = Created | AlreadyExists


@dataclass(frozen=True)
class RegistrationResult:
    """Outcome returned to the API layer."""

    payment_uuid: str
    ticket_series: str
    ticket_number: int
    replayed: bool

    @property
    def ticket_folio(self) -> str:
        return f"{self.ticket_series}-{self.ticket_number}"


def _is_idempotency_violation(err: IntegrityError) -> bool:
    message = str(err.orig)
    return IDEMPOTENCY_CONSTRAINT in message or "payments.idempotency_key" in message


def validate_command(command: PaymentCommand) -> None:
    """Reject malformed input before any database work happens."""
    key = (command.idempotency_key or "").strip()
    if not key:
        raise ValidationError("Missing Idempotency-Key header")
    if len(key) > IDEMPOTENCY_KEY_MAX_LENGTH:
        raise ValidationError("Idempotency-Key is too long")
    try:
        uuid.UUID(str(command.client_uuid))
    except ValueError as err:
        raise ValidationError("Invalid payment payload") from err
    if command.amount is None or not command.amount.is_finite() or command.amount <= 0:
        raise ValidationError("Invalid payment payload")


class PaymentRegistrar:
    """Registers payments exactly once per idempotency key."""

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        *,
        series: str | None = None,
        sequencer: FolioSequencer | None = None,
        directory: ClientDirectory | None = None,
    ) -> None:
        self._session_factory = session_factory
        self.series = series or settings.ticket_series
        self.sequencer = sequencer or FolioSequencer()
        self.directory = directory or ClientDirectory()

    def register(self, command: PaymentCommand) -> RegistrationResult:
        """Register ``command`` or return the payment stored for its key.

        Raises:
            ValidationError: Malformed input. Nothing was written.
            NotFoundError: The client does not exist. No folio was consumed.
            ConflictError: The key collided but its payment cannot be found.
            TransientError: Lock timeout or deadlock. Retry with the same key.
            InternalError: Anything else. The transaction was rolled back.
        """
        validate_command(command)

        session = self._session_factory()
        try:
            outcome = self._allocate_and_insert(session, command)
            if isinstance(outcome, Created):
                session.commit()
                logger.info(
                    "Registered payment %s with folio %s-%s",
                    outcome.payment_uuid,
                    outcome.ticket_series,
                    outcome.ticket_number,
                )
                return RegistrationResult(
                    payment_uuid=outcome.payment_uuid,
                    ticket_series=outcome.ticket_series,
                    ticket_number=outcome.ticket_number,
                    replayed=False,
                )
            session.rollback()
        except ApiError:
            session.rollback()
            raise
        except OperationalError as err:
            session.rollback()
            logger.warning("Payment registration hit a lock timeout or deadlock: %s", err)
            raise TransientError() from err
        except Exception as err:
            session.rollback()
            logger.exception("Payment registration failed")
            raise InternalError() from err
        finally:
            session.close()

        return self._replay(outcome.idempotency_key)

    def _allocate_and_insert(self, session: Session, command: PaymentCommand) -> InsertOutcome:
        self.sequencer.apply_lock_timeout(session)
        self.sequencer.ensure_series(session, self.series)
        number = self.sequencer.next_number(session, self.series)

        client = self.directory.resolve(session, command.client_uuid)
        if client is None:
            raise NotFoundError("Client not found")

        return self.insert_payment(session, command, client, number)

    def insert_payment(
        self,
        session: Session,
        command: PaymentCommand,
        client: ResolvedClient,
        number: int,
    ) -> InsertOutcome:
        """Insert the payment row unless its idempotency key is already taken."""
        now = utcnow()
        payment_uuid = str(uuid.uuid4())
        values = {
            "uuid": payment_uuid,
            "client_id": client.internal_id,
            "collector_id": client.collector_id,
            "amount": command.amount,
            "notes": command.notes or None,
            "device_local_ts": command.device_local_ts,
            "server_ts": now,
            "ticket_series": self.series,
            "ticket_number": number,
            "sync_state": SYNC_STATE_SYNCED,
            "origin": ORIGIN_APP,
            "idempotency_key": command.idempotency_key,
            "created_at": now,
            "updated_at": now,
        }

        dialect = session.get_bind().dialect.name
        if dialect in {"sqlite", "postgresql"}:
            dialect_insert = sqlite_insert if dialect == "sqlite" else pg_insert
            stmt = (
                dialect_insert(Payment)
                .values(**values)
                .on_conflict_do_nothing(index_elements=["idempotency_key"])
            )
            result = session.connection().execute(stmt)
            if result.rowcount == 0:
                return AlreadyExists(command.idempotency_key)
            return Created(payment_uuid, self.series, number)

        session.add(Payment(**values))
        try:
            session.flush()
        except IntegrityError as err:
            if _is_idempotency_violation(err):
                return AlreadyExists(command.idempotency_key)
            raise
        return Created(payment_uuid, self.series, number)

    def _replay(self, idempotency_key: str) -> RegistrationResult:
        """Return the payment already stored under ``idempotency_key``."""
        try:
            payment = self.find_by_key(idempotency_key)
        except OperationalError as err:
            raise TransientError() from err
        if payment is None:
            logger.warning("Idempotency key %s collided but no payment was found", idempotency_key)
            raise ConflictError()
        logger.info(
            "Replayed payment %s with folio %s for idempotency key %s",
            payment.payment_uuid,
            payment.ticket_folio,
            idempotency_key,
        )
        return payment

    def find_by_key(self, idempotency_key: str) -> RegistrationResult | None:
        """Look up a stored payment by idempotency key in a fresh transaction."""
        with self._session_factory() as session:
            row = session.execute(
                select(Payment.uuid, Payment.ticket_series, Payment.ticket_number)
                .where(Payment.idempotency_key == idempotency_key)
                .limit(1)
            ).first()
        if row is None:
            return None
        return RegistrationResult(
            payment_uuid=row.uuid,
            ticket_series=row.ticket_series,
            ticket_number=int(row.ticket_number),
            replayed=True,
        )
