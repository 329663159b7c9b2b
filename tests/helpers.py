"""Builders shared by the test modules."""
from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal

from cobranza.services.payment_registrar import PaymentCommand

TEST_PASSWORD = "secret123"
DEVICE_TS = datetime(2025, 10, 20, 10, 30, tzinfo=UTC)


def make_command(
    client_uuid: str,
    key: str,
    amount: str | Decimal = "100.00",
    notes: str | None = None,
) -> PaymentCommand:
    """Build a registration command with a fixed device timestamp."""
    return PaymentCommand(
        client_uuid=client_uuid,
        amount=Decimal(amount),
        idempotency_key=key,
        device_local_ts=DEVICE_TS,
        notes=notes,
    )


def payment_body(client_uuid: str, amount: object = 100, **extra: object) -> dict[str, object]:
    """Build a JSON body for POST /api/v1/payments."""
    body: dict[str, object] = {
        "client_uuid": client_uuid,
        "amount": amount,
        "device_local_ts": DEVICE_TS.isoformat(),
    }
    body.update(extra)
    return body
