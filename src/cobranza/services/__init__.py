"""Business logic services for the collection API."""

from .client_directory import ClientDirectory, ResolvedClient
from .folio_sequencer import FolioSequencer, SequenceError
from .payment_registrar import (
    AlreadyExists,
    Created,
    PaymentCommand,
    PaymentRegistrar,
    RegistrationResult,
)
from .receipts import ReceiptRenderer, ticket_links

__all__ = [
    "AlreadyExists",
    "ClientDirectory",
    "Created",
    "FolioSequencer",
    "PaymentCommand",
    "PaymentRegistrar",
    "ReceiptRenderer",
    "RegistrationResult",
    "ResolvedClient",
    "SequenceError",
    "ticket_links",
]
