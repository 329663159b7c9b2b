"""Tests for ticket PDF and print page rendering."""

from datetime import UTC, datetime
from decimal import Decimal

import pytest

from cobranza.core.errors import NotFoundError
from cobranza.services.receipts import (
    Receipt,
    ReceiptRenderer,
    normalize_text,
    render_print_page,
    ticket_links,
)
from tests.helpers import make_command


def _receipt(**overrides) -> Receipt:
    values = {
        "series": "A",
        "number": 6,
        "issued_at": datetime(2025, 10, 20, 10, 30, tzinfo=UTC),
        "collector": "Cobrador Uno",
        "client_name": "María López Hernández",
        "amount": Decimal("100.00"),
        "header_name": "FUNERALES CÁRDENAS",
        "footer_legend": "Gracias por su preferencia",
    }
    values.update(overrides)
    return Receipt(**values)


def test_ticket_links_are_relative_to_api() -> None:
    links = ticket_links("A", 6)
    assert links.pdf_url == "/api/v1/tickets/folio/A/6/pdf"
    assert links.print_url == "/api/v1/tickets/folio/A/6/print"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (None, ""),
        ("  Calle 5  ", "Calle 5"),
        ("Linea 1\\nLinea 2", "Linea 1\nLinea 2"),
    ],
)
def test_normalize_text(raw, expected) -> None:
    assert normalize_text(raw) == expected


def test_receipt_filename_pads_folio() -> None:
    receipt = _receipt(number=42)
    assert receipt.padded_folio == "000042"
    assert receipt.filename == "ticket-A-000042.pdf"


def test_render_pdf_without_logo(tmp_path) -> None:
    renderer = ReceiptRenderer(logo_path=str(tmp_path / "missing.png"), timezone="UTC")
    content = renderer.render_pdf(_receipt(header_address="Av. Juárez 120\\nCentro"))

    assert content.startswith(b"%PDF")
    assert content.rstrip().endswith(b"%%EOF")


def test_render_pdf_ignores_unreadable_logo(tmp_path) -> None:
    logo = tmp_path / "logo.png"
    logo.write_bytes(b"not an image")
    renderer = ReceiptRenderer(logo_path=str(logo), timezone="UTC")

    assert renderer.render_pdf(_receipt()).startswith(b"%PDF")


def test_load_unknown_folio_raises(db_session) -> None:
    renderer = ReceiptRenderer(timezone="UTC")
    with pytest.raises(NotFoundError):
        renderer.load(db_session, "A", 999)


def test_load_uses_series_header_and_local_time(
    db_session, registrar, client_record, collector, series_counter
) -> None:
    series_counter(5, header_name="FUNERALES CÁRDENAS", header_phone="555-0000")
    result = registrar.register(make_command(client_record.uuid, "k1", "250.50"))

    receipt = ReceiptRenderer(timezone="America/Mexico_City").load(
        db_session, result.ticket_series, result.ticket_number
    )

    assert receipt.number == 6
    assert receipt.collector == collector.name
    assert receipt.client_name == client_record.name
    assert receipt.amount == Decimal("250.50")
    assert receipt.header_phone == "555-0000"
    assert receipt.footer_legend == "Gracias por su preferencia"
    assert receipt.issued_at.utcoffset() is not None


def test_load_falls_back_to_default_header(db_session, registrar, client_record) -> None:
    result = registrar.register(make_command(client_record.uuid, "k1"))

    receipt = ReceiptRenderer(timezone="UTC").load(db_session, "A", result.ticket_number)

    assert receipt.header_name == "FUNERALES CÁRDENAS"


def test_print_page_embeds_pdf_and_prints() -> None:
    page = render_print_page("A", 6)

    assert 'src="/api/v1/tickets/folio/A/6/pdf"' in page
    assert "window.print()" in page
    assert "Imprimiendo ticket A-6" in page
