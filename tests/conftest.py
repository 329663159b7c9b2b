# tests/conftest.py
from __future__ import annotations

import os
import tempfile
from collections.abc import Callable, Generator, Iterator
from itertools import count
from pathlib import Path

import pytest

_TEST_DIR = Path(tempfile.mkdtemp(prefix="cobranza-tests-"))
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["DATABASE_URL"] = f"sqlite:///{_TEST_DIR / 'app.db'}"
os.environ["TICKET_LOGO_PATH"] = str(_TEST_DIR / "no-logo.png")
os.environ["TICKET_TIMEZONE"] = "UTC"
os.environ["AUTO_OPEN_PRINT"] = "false"

from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from cobranza.core.security import hash_password
from cobranza.db.session import Base
from cobranza.db.session import get_db as app_get_session
from cobranza.db.session import get_session_factory as app_get_session_factory
from cobranza.main import app as fastapi_app
from cobranza.models import Client, TicketSeries, User
from cobranza.services.auth_service import issue_token
from cobranza.services.payment_registrar import PaymentRegistrar
from tests.helpers import TEST_PASSWORD

TEST_DB_URL = f"sqlite:///{_TEST_DIR / 'tests.db'}"

_CONTRACT_COUNTER = count(1)
_PASSWORD_HASH = hash_password(TEST_PASSWORD)


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> Iterator[sessionmaker[Session]]:
    factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    try:
        yield factory
    finally:
        # Registrations commit for real; every test starts from empty tables.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture()
def db_session(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(
    app: FastAPI,
    session_factory: sessionmaker[Session],
) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[app_get_session] = _get_session_override
    app.dependency_overrides[app_get_session_factory] = lambda: session_factory
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)
        app.dependency_overrides.pop(app_get_session_factory, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


def _create_user(db: Session, username: str, name: str, *, active: bool = True) -> User:
    user = User(
        username=username,
        password_hash=_PASSWORD_HASH,
        name=name,
        role="collector",
        active=active,
    )
    db.add(user)
    db.commit()
    return user


def _create_client(db: Session, collector: User, name: str) -> Client:
    record = Client(
        name=name,
        contract_number=f"C-{next(_CONTRACT_COUNTER):04d}",
        address="Av. Juárez 120, Centro",
        phone="555-0101",
        collector_id=collector.id,
    )
    db.add(record)
    db.commit()
    return record


@pytest.fixture()
def collector(db_session: Session) -> User:
    """Create and return the primary collector."""
    return _create_user(db_session, "cobrador1", "Cobrador Uno")


@pytest.fixture()
def other_collector(db_session: Session) -> User:
    """Create and return a second collector."""
    return _create_user(db_session, "cobrador2", "Cobrador Dos")


@pytest.fixture()
def client_record(db_session: Session, collector: User) -> Client:
    """Create a client assigned to the primary collector."""
    return _create_client(db_session, collector, "María López Hernández")


@pytest.fixture()
def other_client_record(db_session: Session, other_collector: User) -> Client:
    """Create a client assigned to the second collector."""
    return _create_client(db_session, other_collector, "José Ramírez Torres")


@pytest.fixture()
def auth_headers(collector: User) -> dict[str, str]:
    """Return authorization headers for the primary collector."""
    return {"Authorization": f"Bearer {issue_token(collector)}"}


@pytest.fixture()
def series_counter(db_session: Session) -> Callable[..., TicketSeries]:
    """Return a helper that creates a series row at a given counter value."""

    def _set(current_number: int, series: str = "A", **header: str) -> TicketSeries:
        config = TicketSeries(
            series=series,
            current_number=current_number,
            header_name=header.pop("header_name", "FUNERALES CÁRDENAS"),
            **header,
        )
        db_session.add(config)
        db_session.commit()
        return config

    return _set


@pytest.fixture()
def registrar(session_factory: sessionmaker[Session]) -> PaymentRegistrar:
    """Return a registrar for series A bound to the test database."""
    return PaymentRegistrar(session_factory, series="A")
