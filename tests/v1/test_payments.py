# tests/v1/test_payments.py
"""Tests for payment registration over HTTP."""

from __future__ import annotations

import uuid
from concurrent.futures import ThreadPoolExecutor

import pytest
from fastapi import status
from sqlalchemy import func, select

from cobranza.api.v1.endpoints.payments import get_registrar
from cobranza.core.errors import TransientError
from cobranza.core.settings import settings
from cobranza.models import Payment, TicketSeries
from tests.helpers import payment_body

URL = "/api/v1/payments"


def _headers(auth_headers: dict[str, str], key: str | None) -> dict[str, str]:
    headers = dict(auth_headers)
    if key is not None:
        headers["Idempotency-Key"] = key
    return headers


def _state(session_factory) -> tuple[int | None, int]:
    with session_factory() as session:
        counter = session.execute(
            select(TicketSeries.current_number).where(TicketSeries.series == "A")
        ).scalar_one_or_none()
        payments = session.execute(select(func.count()).select_from(Payment)).scalar_one()
    return counter, payments


def test_register_payment_returns_folio_and_links(client, auth_headers, client_record) -> None:
    response = client.post(
        URL,
        json=payment_body(client_record.uuid, "150.50", notes="Abono"),
        headers=_headers(auth_headers, "k1"),
    )
    assert response.status_code == status.HTTP_201_CREATED

    data = response.json()
    assert data["ticket_folio"] == "A-1"
    assert data["ticket_pdf_url"] == "/api/v1/tickets/folio/A/1/pdf"
    assert data["ticket_print_url"] == "/api/v1/tickets/folio/A/1/print"
    uuid.UUID(data["payment_uuid"])


def test_folio_sequence_with_replay_and_concurrency(
    client, auth_headers, client_record, series_counter, session_factory
) -> None:
    series_counter(5)

    first = client.post(URL, json=payment_body(client_record.uuid), headers=_headers(auth_headers, "k1"))
    assert first.status_code == status.HTTP_201_CREATED
    assert first.json()["ticket_folio"] == "A-6"

    replay = client.post(URL, json=payment_body(client_record.uuid), headers=_headers(auth_headers, "k1"))
    assert replay.status_code == status.HTTP_200_OK
    assert replay.json() == first.json()

    def post(key: str):
        return client.post(URL, json=payment_body(client_record.uuid, 50), headers=_headers(auth_headers, key))

    with ThreadPoolExecutor(max_workers=2) as pool:
        responses = list(pool.map(post, ["k2", "k3"]))

    assert {r.status_code for r in responses} == {status.HTTP_201_CREATED}
    assert sorted(r.json()["ticket_folio"] for r in responses) == ["A-7", "A-8"]
    assert _state(session_factory) == (8, 3)


def test_missing_idempotency_key_writes_nothing(
    client, auth_headers, client_record, series_counter, session_factory
) -> None:
    series_counter(5)

    response = client.post(URL, json=payment_body(client_record.uuid), headers=_headers(auth_headers, None))

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {
        "error": {"code": "VALIDATION_ERROR", "message": "Missing Idempotency-Key header"}
    }
    assert _state(session_factory) == (5, 0)


@pytest.mark.parametrize(
    "body",
    [
        {"amount": 100},
        {"client_uuid": "not-a-uuid", "amount": 100, "device_local_ts": "2025-10-20T10:30:00Z"},
        {"client_uuid": str(uuid.uuid4()), "amount": 0, "device_local_ts": "2025-10-20T10:30:00Z"},
        {"client_uuid": str(uuid.uuid4()), "amount": "abc", "device_local_ts": "2025-10-20T10:30:00Z"},
        {"client_uuid": str(uuid.uuid4()), "amount": 10, "device_local_ts": "ayer"},
    ],
)
def test_invalid_body_is_rejected(client, auth_headers, session_factory, body) -> None:
    response = client.post(URL, json=body, headers=_headers(auth_headers, "k1"))

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"
    assert _state(session_factory) == (None, 0)


def test_amount_as_numeric_string(client, auth_headers, client_record, session_factory) -> None:
    response = client.post(
        URL,
        json=payment_body(client_record.uuid, "99.90"),
        headers=_headers(auth_headers, "k1"),
    )
    assert response.status_code == status.HTTP_201_CREATED

    with session_factory() as session:
        amount = session.execute(select(Payment.amount)).scalar_one()
    assert str(amount) == "99.90"


def test_unknown_client_consumes_no_folio(client, auth_headers, collector, series_counter, session_factory) -> None:
    series_counter(5)

    response = client.post(
        URL,
        json=payment_body(str(uuid.uuid4())),
        headers=_headers(auth_headers, "k1"),
    )

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["error"] == {"code": "NOT_FOUND", "message": "Client not found"}
    assert _state(session_factory) == (5, 0)


def test_requires_authentication(client, client_record, session_factory) -> None:
    response = client.post(
        URL,
        json=payment_body(client_record.uuid),
        headers={"Idempotency-Key": "k1"},
    )
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert _state(session_factory) == (None, 0)


def test_transient_failure_asks_for_retry(app, client, auth_headers, client_record, mocker) -> None:
    registrar = mocker.Mock()
    registrar.register.side_effect = TransientError()
    app.dependency_overrides[get_registrar] = lambda: registrar
    try:
        response = client.post(URL, json=payment_body(client_record.uuid), headers=_headers(auth_headers, "k1"))
    finally:
        app.dependency_overrides.pop(get_registrar, None)

    assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
    assert response.headers["Retry-After"] == "1"
    assert response.json()["error"]["code"] == "TRANSIENT_ERROR"


def test_auto_open_print_only_for_new_payments(
    client, auth_headers, client_record, monkeypatch, mocker
) -> None:
    monkeypatch.setattr(settings, "auto_open_print", True)
    opener = mocker.patch("cobranza.api.v1.endpoints.payments.open_print_page", return_value=True)

    created = client.post(URL, json=payment_body(client_record.uuid), headers=_headers(auth_headers, "k1"))
    replay = client.post(URL, json=payment_body(client_record.uuid), headers=_headers(auth_headers, "k1"))

    assert created.status_code == status.HTTP_201_CREATED
    assert replay.status_code == status.HTTP_200_OK
    opener.assert_called_once_with("A", 1)


def test_auto_open_print_disabled_by_default(client, auth_headers, client_record, mocker) -> None:
    opener = mocker.patch("cobranza.api.v1.endpoints.payments.open_print_page")

    response = client.post(URL, json=payment_body(client_record.uuid), headers=_headers(auth_headers, "k1"))

    assert response.status_code == status.HTTP_201_CREATED
    opener.assert_not_called()


def test_amount_beyond_centavos_is_rejected(client, auth_headers, client_record, session_factory) -> None:
    response = client.post(
        URL,
        json=payment_body(client_record.uuid, "100.555"),
        headers=_headers(auth_headers, "k1"),
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error"] == {
        "code": "VALIDATION_ERROR",
        "message": "Invalid request: amount",
    }
    assert _state(session_factory) == (None, 0)
