"""Receipt endpoints resolved by ticket folio.

These are opened directly by the browser print flow and therefore take no
bearer token.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Path, Response
from fastapi.responses import HTMLResponse

from cobranza.api.v1.dependencies import SessionDep
from cobranza.services.receipts import ReceiptRenderer, render_print_page

router = APIRouter(prefix="/tickets", tags=["tickets"])
renderer = ReceiptRenderer()

SeriesPath = Annotated[str, Path(pattern=r"^[A-Za-z0-9]{1,8}$")]
NumberPath = Annotated[int, Path(ge=1)]


@router.get("/folio/{series}/{number}/pdf", response_class=Response)
def ticket_pdf(series: SeriesPath, number: NumberPath, db: SessionDep) -> Response:
    """Return the ticket PDF for a folio."""
    receipt = renderer.load(db, series, number)
    content = renderer.render_pdf(receipt)
    return Response(
        content=content,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'inline; filename="{receipt.filename}"',
            "Content-Encoding": "identity",
        },
    )


@router.get("/folio/{series}/{number}/print", response_class=HTMLResponse)
def ticket_print(series: SeriesPath, number: NumberPath) -> HTMLResponse:
    """Return a page that embeds the PDF and opens the print dialog."""
    return HTMLResponse(render_print_page(series, number))
