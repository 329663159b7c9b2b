"""Payment-related Pydantic schemas."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field


class PaymentCreate(BaseModel):
    """Payment registration body. ``amount`` may arrive as a numeric string."""

    client_uuid: UUID = Field(..., description="Public id of the paying client")
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    notes: str | None = Field(None, max_length=1000)
    device_local_ts: datetime = Field(..., description="Collector device time, ISO-8601")


class PaymentResponse(BaseModel):
    """Folio issued for a payment, plus where to fetch its receipt."""

    payment_uuid: str
    ticket_folio: str = Field(..., description="Folio as <series>-<number>")
    ticket_pdf_url: str
    ticket_print_url: str
