"""UPI pay links and WhatsApp click-to-chat payment requests.

The UPI address (``pa``) and the amount (``am``) go into the URI exactly as
given: many UPI apps reject a percent-encoded payee address.
"""

import math
import re
from urllib.parse import quote

from ledgerwise.errors import ValidationError

DEFAULT_UPI_NOTE = "Split expense payment"

# Characters JavaScript's encodeURIComponent leaves untouched
_URI_COMPONENT_SAFE = "-_.!~*'()"

INVALID_UPI_MESSAGE = "Invalid UPI ID format. Must include @ symbol (e.g., user@paytm)"
INVALID_PHONE_MESSAGE = (
    "Invalid phone number format. Include country code (e.g., 919876543210)"
)

REQUEST_TEMPLATE = """Hi {receiver_name}!

{requester_name} is requesting a payment.

Amount: ₹{amount}
Reason: {reason}

UPI ID to pay:
{upi_id}

Please copy this UPI ID and pay using Google Pay / PhonePe / any UPI app.

Thank you!"""


def encode_component(value: str) -> str:
    return quote(value, safe=_URI_COMPONENT_SAFE)


def _encode_with_plus(value: str) -> str:
    return encode_component(value).replace("%20", "+")


def _format_amount(amount) -> str:
    try:
        value = float(amount)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid amount: {amount!r}") from None
    if not math.isfinite(value):
        raise ValidationError(f"Invalid amount: {amount!r}")
    return f"{value:.2f}"


def _check_upi_id(upi_id: str | None) -> str:
    if not upi_id or "@" not in upi_id:
        raise ValidationError(INVALID_UPI_MESSAGE)
    return upi_id.strip()


def normalize_phone(phone_number: str) -> str:
    """Digits only; at least 10 of them (country code expected, not verified)."""
    digits = re.sub(r"\D", "", phone_number or "")
    if len(digits) < 10:
        raise ValidationError(INVALID_PHONE_MESSAGE)
    return digits


def build_upi_payment_link(upi_id: str, name: str, amount, note: str = "") -> str:
    upi_id = _check_upi_id(upi_id)
    formatted_amount = _format_amount(amount)
    encoded_name = _encode_with_plus(name.strip())
    encoded_note = _encode_with_plus(note.strip() or DEFAULT_UPI_NOTE)
    return (
        f"upi://pay?pa={upi_id}&pn={encoded_name}"
        f"&am={formatted_amount}&cu=INR&tn={encoded_note}"
    )


def build_request_message(
    receiver_name: str, requester_name: str, amount, reason: str, upi_id: str
) -> str:
    """Plain-text request body. The UPI ID is copyable text, never a upi:// link."""
    return REQUEST_TEMPLATE.format(
        receiver_name=receiver_name,
        requester_name=requester_name,
        amount=_format_amount(amount),
        reason=reason,
        upi_id=upi_id.strip(),
    )


def build_whatsapp_request_link(
    phone_number: str,
    receiver_name: str,
    requester_name: str,
    amount,
    reason: str,
    requester_upi_id: str,
) -> str:
    phone = normalize_phone(phone_number)
    upi_id = _check_upi_id(requester_upi_id)
    message = build_request_message(
        receiver_name, requester_name, amount, reason, upi_id
    )
    return f"https://wa.me/{phone}?text={encode_component(message)}"
