"""Receipt artifacts for issued folios: ticket PDF and auto-print page.

Receipts are located by ``(series, folio)`` only, so the renderer works from
the stored payment and never from registration state.
"""

from __future__ import annotations

import html
import io
import logging
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal
from pathlib import Path
from zoneinfo import ZoneInfo

from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfgen import canvas
from sqlalchemy import select
from sqlalchemy.orm import Session

from cobranza.core.errors import NotFoundError
from cobranza.core.settings import settings
from cobranza.models import Client, Payment, TicketSeries, User

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1/tickets/folio"

# Thermal roll, roughly 80 mm wide.
PAGE_WIDTH = 226.77
PAGE_HEIGHT = 600
MARGIN = 10
CONTENT_WIDTH = PAGE_WIDTH - 2 * MARGIN
LOGO_BOX = (200, 110)

FONT = "Helvetica"
FONT_BOLD = "Helvetica-Bold"
LEADING = 1.25


@dataclass(frozen=True)
class TicketLinks:
    """Relative URLs where a folio's receipt can be fetched."""

    pdf_url: str
    print_url: str


def ticket_links(series: str, number: int) -> TicketLinks:
    """Return the receipt locator for ``series``/``number``."""
    base = f"{API_PREFIX}/{series}/{number}"
    return TicketLinks(pdf_url=f"{base}/pdf", print_url=f"{base}/print")


def normalize_text(value: str | None) -> str:
    """Turn literal ``\\n`` sequences into line breaks and trim whitespace."""
    return (value or "").replace("\\n", "\n").strip()


@dataclass(frozen=True)
class Receipt:
    """Everything printed on one ticket."""

    series: str
    number: int
    issued_at: datetime
    collector: str
    client_name: str
    amount: Decimal
    header_name: str
    header_web: str = ""
    header_address: str = ""
    header_phone: str = ""
    footer_legend: str = ""
    payment_method: str = "Efectivo"
    concept: str = "Abono"

    @property
    def padded_folio(self) -> str:
        return str(self.number).zfill(6)

    @property
    def filename(self) -> str:
        return f"ticket-{self.series}-{self.padded_folio}.pdf"


class _TicketWriter:
    """Top-down text cursor over a reportlab canvas."""

    def __init__(self, pdf: canvas.Canvas) -> None:
        self.pdf = pdf
        self.y = PAGE_HEIGHT - MARGIN
        self.size = 8

    def font(self, size: int) -> None:
        self.size = size

    def space(self, lines: float) -> None:
        self.y -= self.size * LEADING * lines

    def line(self, text: str, *, align: str = "left", bold: bool = False) -> None:
        face = FONT_BOLD if bold else FONT
        for raw in text.split("\n"):
            for chunk in simpleSplit(raw, face, self.size, CONTENT_WIDTH) or [""]:
                self.y -= self.size * LEADING
                self.pdf.setFont(face, self.size)
                if align == "center":
                    self.pdf.drawCentredString(PAGE_WIDTH / 2, self.y, chunk)
                elif align == "right":
                    self.pdf.drawRightString(PAGE_WIDTH - MARGIN, self.y, chunk)
                else:
                    self.pdf.drawString(MARGIN, self.y, chunk)

    def columns(self, left: str, right: str) -> None:
        self.y -= self.size * LEADING
        self.pdf.setFont(FONT, self.size)
        self.pdf.drawString(MARGIN, self.y, left)
        self.pdf.drawRightString(PAGE_WIDTH - MARGIN, self.y, right)

    def rule(self) -> None:
        self.y -= 4
        self.pdf.setLineWidth(0.7)
        self.pdf.line(MARGIN, self.y, MARGIN + CONTENT_WIDTH, self.y)
        self.y -= 4

    def image(self, path: Path) -> None:
        reader = ImageReader(str(path))
        img_w, img_h = reader.getSize()
        scale = min(LOGO_BOX[0] / img_w, LOGO_BOX[1] / img_h)
        width, height = img_w * scale, img_h * scale
        self.y -= height
        self.pdf.drawImage(
            reader,
            (PAGE_WIDTH - width) / 2,
            self.y,
            width=width,
            height=height,
            mask="auto",
        )
        self.y -= 2


class ReceiptRenderer:
    """Load stored payments and render them as printable tickets."""

    def __init__(self, *, logo_path: str | None = None, timezone: str | None = None) -> None:
        self.logo_path = Path(logo_path if logo_path is not None else settings.ticket_logo_path)
        self.timezone = ZoneInfo(timezone or settings.ticket_timezone)

    def load(self, db: Session, series: str, number: int) -> Receipt:
        """Collect the receipt data for a folio.

        Raises:
            NotFoundError: If no payment carries that folio.
        """
        row = db.execute(
            select(Payment, Client, User, TicketSeries)
            .join(Client, Client.id == Payment.client_id)
            .join(User, User.id == Payment.collector_id)
            .outerjoin(TicketSeries, TicketSeries.series == Payment.ticket_series)
            .where(Payment.ticket_series == series, Payment.ticket_number == number)
            .limit(1)
        ).first()
        if row is None:
            raise NotFoundError("Ticket no encontrado")

        payment, client, collector, config = row
        return Receipt(
            series=payment.ticket_series,
            number=int(payment.ticket_number),
            issued_at=self._local_time(payment.server_ts),
            collector=collector.name or collector.username or "cobrador",
            client_name=client.name or "",
            amount=Decimal(payment.amount),
            header_name=normalize_text(
                (config.header_name if config else None) or settings.ticket_default_header
            ),
            header_web=normalize_text(config.header_rfc if config else None),
            header_address=normalize_text(config.header_address if config else None),
            header_phone=normalize_text(config.header_phone if config else None),
            footer_legend=normalize_text(
                (config.footer_legend if config else None) or settings.ticket_default_footer
            ),
        )

    def _local_time(self, value: datetime) -> datetime:
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(self.timezone)

    def render_pdf(self, receipt: Receipt) -> bytes:
        """Render ``receipt`` as a single-page PDF sized for a thermal roll."""
        started = time.perf_counter()
        buffer = io.BytesIO()
        pdf = canvas.Canvas(buffer, pagesize=(PAGE_WIDTH, PAGE_HEIGHT))
        pdf.setTitle(f"Ticket {receipt.series}-{receipt.padded_folio}")
        writer = _TicketWriter(pdf)

        if self.logo_path.is_file():
            try:
                writer.image(self.logo_path)
            except (OSError, ValueError) as err:
                logger.warning("Ticket logo %s could not be loaded: %s", self.logo_path, err)

        writer.font(10)
        writer.line(receipt.header_name, align="center", bold=True)
        writer.font(8)
        if receipt.header_web:
            writer.line(receipt.header_web, align="center")
        if receipt.header_phone:
            writer.line(f"Tel: {receipt.header_phone}", align="center")
        if receipt.header_address:
            writer.line(receipt.header_address, align="center")

        writer.space(0.3)
        writer.line(f"Serie/Folio: {receipt.series}-{receipt.padded_folio}")
        writer.line(f"Fecha: {receipt.issued_at:%Y-%m-%d %H:%M}")
        writer.line(f"Cobrador: {receipt.collector}")

        writer.space(0.3)
        if receipt.client_name:
            writer.line(f"Cliente: {receipt.client_name}")

        writer.space(0.3)
        writer.rule()
        writer.columns(receipt.concept, f"{receipt.amount:.2f}")
        writer.rule()
        writer.line(f"Subtotal: {receipt.amount:.2f}", align="right")
        writer.line(f"Total: {receipt.amount:.2f}", align="right", bold=True)

        writer.space(0.3)
        writer.line(f"Forma de pago: {receipt.payment_method}")
        writer.space(0.4)
        if receipt.footer_legend:
            writer.line(receipt.footer_legend, align="center")

        pdf.showPage()
        pdf.save()

        logger.info(
            "Rendered ticket %s-%s in %.0f ms",
            receipt.series,
            receipt.number,
            (time.perf_counter() - started) * 1000,
        )
        return buffer.getvalue()


def render_print_page(series: str, number: int) -> str:
    """Return an HTML page that loads the ticket PDF and opens the print dialog."""
    pdf_url = html.escape(ticket_links(series, number).pdf_url, quote=True)
    title = html.escape(f"{series}-{number}")
    return f"""<!doctype html>
<html>
<head>
  <meta charset="utf-8">
  <title>Imprimiendo ticket {title}</title>
  <style>
    html,body {{ height:100%; margin:0; }}
    iframe {{ width:100%; height:100%; border:0; }}
  </style>
</head>
<body>
  <iframe id="pdf" src="{pdf_url}" onload="
    setTimeout(() => {{
      try {{ window.frames[0].focus(); }} catch(e) {{}}
      window.print();
      setTimeout(() => {{ window.close(); }}, 1500);
    }}, 350);
  "></iframe>
</body>
</html>"""
