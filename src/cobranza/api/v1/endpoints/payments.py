"""Payment registration endpoint."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, Header, Response, status

from cobranza.api.v1.dependencies import CurrentUserDep, SessionFactoryDep
from cobranza.core.settings import settings
from cobranza.schemas.common import ErrorResponse
from cobranza.schemas.payment import PaymentCreate, PaymentResponse
from cobranza.services.payment_registrar import PaymentCommand, PaymentRegistrar
from cobranza.services.print_launcher import open_print_page
from cobranza.services.receipts import ticket_links

router = APIRouter(prefix="/payments", tags=["payments"])


def get_registrar(session_factory: SessionFactoryDep) -> PaymentRegistrar:
    """Return a registrar bound to the request's session factory."""
    return PaymentRegistrar(session_factory, series=settings.ticket_series)


RegistrarDep = Annotated[PaymentRegistrar, Depends(get_registrar)]


@router.post(
    "",
    response_model=PaymentResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        status.HTTP_200_OK: {"model": PaymentResponse, "description": "Replayed registration"},
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_401_UNAUTHORIZED: {"model": ErrorResponse},
        status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
        status.HTTP_409_CONFLICT: {"model": ErrorResponse},
        status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ErrorResponse},
    },
)
def create_payment(
    payload: PaymentCreate,
    response: Response,
    background_tasks: BackgroundTasks,
    current_user: CurrentUserDep,
    registrar: RegistrarDep,
    idempotency_key: Annotated[str | None, Header(alias="Idempotency-Key")] = None,
) -> PaymentResponse:
    """Register a payment and return its ticket folio.

    Declared as a plain function so it runs in the worker thread pool: a
    client disconnect cannot interrupt the transaction half way.
    """
    result = registrar.register(
        PaymentCommand(
            client_uuid=str(payload.client_uuid),
            amount=payload.amount,
            idempotency_key=idempotency_key or "",
            device_local_ts=payload.device_local_ts,
            notes=payload.notes,
        )
    )

    if result.replayed:
        response.status_code = status.HTTP_200_OK
    elif settings.auto_open_print:
        background_tasks.add_task(open_print_page, result.ticket_series, result.ticket_number)

    links = ticket_links(result.ticket_series, result.ticket_number)
    return PaymentResponse(
        payment_uuid=result.payment_uuid,
        ticket_folio=result.ticket_folio,
        ticket_pdf_url=links.pdf_url,
        ticket_print_url=links.print_url,
    )
