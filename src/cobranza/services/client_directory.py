"""Read-only lookups over the client portfolio."""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.orm import Session

from cobranza.models import Client, User

__all__ = ["ClientDirectory", "ResolvedClient"]


@dataclass(frozen=True)
class ResolvedClient:
    """Internal identity of a client and the collector it is assigned to."""

    internal_id: int
    collector_id: int


class ClientDirectory:
    """Resolve client references and list collector portfolios."""

    def resolve(self, session: Session, client_uuid: str) -> ResolvedClient | None:
        """Return the client's internal ids, or None when it does not exist."""
        row = session.execute(
            select(Client.id, Client.collector_id)
            .join(User, User.id == Client.collector_id)
            .where(Client.uuid == client_uuid)
            .limit(1)
        ).first()
        if row is None:
            return None
        return ResolvedClient(internal_id=row.id, collector_id=row.collector_id)

    def list_clients(
        self,
        session: Session,
        *,
        collector_uuid: str | None = None,
    ) -> Sequence[Client]:
        """Return clients ordered by name, optionally only one collector's."""
        stmt = select(Client).order_by(Client.name, Client.id)
        if collector_uuid is not None:
            stmt = stmt.join(User, User.id == Client.collector_id).where(
                User.uuid == collector_uuid
            )
        return session.execute(stmt).scalars().all()
