"""Create tables and seed a collector with sample clients for local use.

Usage:
    python -m cobranza.scripts.seed --username cobrador1 --password secreto
"""
from __future__ import annotations

import argparse
import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from cobranza.core.logging import configure_logging
from cobranza.core.security import hash_password
from cobranza.core.settings import settings
from cobranza.db.session import SessionLocal, create_tables
from cobranza.models import Client, TicketSeries, User
from cobranza.models.user import ROLE_COLLECTOR

logger = logging.getLogger(__name__)

SAMPLE_CLIENTS = (
    ("María López Hernández", "C-0001", "Av. Juárez 120, Centro", "555-0101"),
    ("José Ramírez Torres", "C-0002", "Calle Morelos 45, San Juan", "555-0102"),
    ("Guadalupe Sánchez Ruiz", "C-0003", "Privada Hidalgo 8, La Loma", None),
)


def ensure_collector(db: Session, username: str, password: str, name: str) -> User:
    """Return the collector ``username``, creating it when missing."""
    user = db.execute(select(User).where(User.username == username)).scalar_one_or_none()
    if user is None:
        user = User(
            username=username,
            password_hash=hash_password(password),
            name=name,
            role=ROLE_COLLECTOR,
        )
        db.add(user)
        db.flush()
        logger.info("Created collector %s (%s)", username, user.uuid)
    return user


def ensure_clients(db: Session, collector: User) -> int:
    """Create the sample clients for ``collector``. Returns how many were added."""
    existing = set(
        db.execute(
            select(Client.contract_number).where(Client.collector_id == collector.id)
        ).scalars()
    )
    added = 0
    for name, contract, address, phone in SAMPLE_CLIENTS:
        if contract in existing:
            continue
        db.add(
            Client(
                name=name,
                contract_number=contract,
                address=address,
                phone=phone,
                collector_id=collector.id,
            )
        )
        added += 1
    return added


def ensure_series_header(db: Session, series: str) -> TicketSeries:
    """Create the series row with the default receipt header if missing."""
    config = db.execute(
        select(TicketSeries).where(TicketSeries.series == series)
    ).scalar_one_or_none()
    if config is None:
        config = TicketSeries(
            series=series,
            current_number=0,
            header_name=settings.ticket_default_header,
            footer_legend=settings.ticket_default_footer,
        )
        db.add(config)
    return config


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the collection database")
    parser.add_argument("--username", default="cobrador1")
    parser.add_argument("--password", default="cobrador1")
    parser.add_argument("--name", default="Cobrador Uno")
    parser.add_argument("--series", default=settings.ticket_series)
    args = parser.parse_args()

    configure_logging()
    create_tables()
    with SessionLocal() as db:
        collector = ensure_collector(db, args.username, args.password, args.name)
        added = ensure_clients(db, collector)
        ensure_series_header(db, args.series)
        db.commit()
    logger.info("Seed complete: %d client(s) added for %s", added, args.username)


if __name__ == "__main__":
    main()
