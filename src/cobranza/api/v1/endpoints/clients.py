"""Client listing endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Query

from cobranza.api.v1.dependencies import CurrentUserDep, SessionDep
from cobranza.schemas.client import ClientResponse
from cobranza.services.client_directory import ClientDirectory

router = APIRouter(prefix="/clients", tags=["clients"])
directory = ClientDirectory()


@router.get("", response_model=list[ClientResponse])
def list_clients(
    current_user: CurrentUserDep,
    db: SessionDep,
    mine: bool = Query(False, description="Only clients assigned to the caller"),
) -> list[ClientResponse]:
    """List clients, optionally restricted to the caller's portfolio."""
    clients = directory.list_clients(
        db,
        collector_uuid=current_user.uuid if mine else None,
    )
    return [ClientResponse.model_validate(client) for client in clients]
