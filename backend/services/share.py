"""Hand-off of invoice messages to the WhatsApp deep link."""
import logging
import re
from typing import Callable, Optional
from urllib.parse import quote

from utils.formatting import to_money

logger = logging.getLogger(__name__)

DEFAULT_COUNTRY_CODE = "+212"
DEFAULT_SHARE_DOMAIN = "wa.me"

# encodeURIComponent leaves these unescaped
_URI_COMPONENT_SAFE = "-_.!~*'()"


def normalize_phone(phone: str, country_code: str = DEFAULT_COUNTRY_CODE) -> str:
    """Strip whitespace and swap a leading national trunk 0 for the country code."""
    compact = re.sub(r"\s", "", phone or "")
    if compact.startswith("0"):
        compact = country_code + compact[1:]
    return compact


def build_share_link(
    phone: str,
    message: str,
    domain: str = DEFAULT_SHARE_DOMAIN,
    country_code: str = DEFAULT_COUNTRY_CODE,
) -> str:
    formatted_phone = normalize_phone(phone, country_code)
    return f"https://{domain}/{formatted_phone}?text={quote(message, safe=_URI_COMPONENT_SAFE)}"


def share_via_channel(
    phone: str,
    message: str,
    dispatch: Optional[Callable[[str], object]] = None,
    domain: str = DEFAULT_SHARE_DOMAIN,
    country_code: str = DEFAULT_COUNTRY_CODE,
) -> str:
    """
    Build the deep link and hand it to `dispatch`.

    The hand-off is fire-and-forget: there is no retry and no delivery
    confirmation, and a dispatcher failure is only logged. The link is always
    returned so the caller can open it client-side.
    """
    link = build_share_link(phone, message, domain=domain, country_code=country_code)
    if dispatch is not None:
        try:
            dispatch(link)
        except Exception:
            logger.warning(f"Share dispatch failed for {normalize_phone(phone, country_code)}", exc_info=True)
    return link


def invoice_share_message(client_name: str, invoice_number, total, currency: str = "MAD") -> str:
    return (
        f"Hello {client_name}, your invoice #{invoice_number} for "
        f"{to_money(total):.2f} {currency} is ready. Thank you for your business!"
    )
