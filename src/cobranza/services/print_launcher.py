"""Open a freshly issued ticket's print page on the server host.

Used by the single-workstation setup where the API runs on the machine wired
to the ticket printer. Disabled unless ``AUTO_OPEN_PRINT`` is set.
"""

from __future__ import annotations

import logging
import webbrowser

from cobranza.core.settings import settings

from .receipts import ticket_links

logger = logging.getLogger(__name__)


def print_url(series: str, number: int, *, base_url: str | None = None) -> str:
    """Return the absolute print page URL for a folio."""
    base = (base_url or settings.public_base_url).rstrip("/")
    return f"{base}{ticket_links(series, number).print_url}"


def open_print_page(series: str, number: int) -> bool:
    """Open the print page in the default browser. Returns True on success."""
    url = print_url(series, number)
    try:
        opened = webbrowser.open(url, new=2)
    except webbrowser.Error as err:
        logger.warning("Could not open print page %s: %s", url, err)
        return False
    if opened:
        logger.info("Sent ticket %s-%s to print via %s", series, number, url)
    else:
        logger.warning("No browser available to print ticket %s-%s", series, number)
    return opened
