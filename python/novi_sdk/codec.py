"""
Location: python/novi_sdk/codec.py

Summary:
    Payment link wire format. Encodes a PaymentIntent as a shareable
    ``<origin>/pay?recipient=..&amount=..`` link and decodes links back
    into validated intents, failing with a specific DecodeErrorKind.
    Also renders Solana Pay deep links for wallet hand-off.

Usage:
    Used by request.py to produce links and by client.py to open them.
    Decoding never touches the network.

Example:
    from novi_sdk.codec import encode, decode

    link = encode(intent, origin="https://novi.cash")
    assert decode(link) == intent
"""

import re
from decimal import Decimal
from typing import Mapping, Optional, Union
from urllib.parse import parse_qsl, quote, urlencode, urlsplit

from pydantic import ValidationError

from .accounts import is_valid_address
from .errors import DecodeError, DecodeErrorKind
from .types import PaymentIntent


# Link query parameter names
LINK_PARAMS = {
    "RECIPIENT": "recipient",
    "AMOUNT": "amount",
    "LABEL": "label",
    "MESSAGE": "message",
    "TOTAL": "total",
    "SPLIT_COUNT": "splitCount",
    "SHARE_INDEX": "shareIndex",
}

# Stable order of parameters in encoded links
PARAM_ORDER = (
    ("recipient", "recipient"),
    ("amount", "amount"),
    ("label", "label"),
    ("message", "message"),
    ("total", "total"),
    ("split_count", "splitCount"),
    ("share_index", "shareIndex"),
)

DEFAULT_ORIGIN = "https://novi.cash"
DEFAULT_PATH = "/pay"

_DECIMAL_RE = re.compile(r"^\d+(\.\d+)?$")
_INT_RE = re.compile(r"^\d+$")


def encode(
    intent: PaymentIntent,
    origin: str = DEFAULT_ORIGIN,
    path: str = DEFAULT_PATH,
) -> str:
    """
    Encode an intent as a fully-qualified payment link.

    Only non-empty fields are emitted, in PARAM_ORDER, with standard
    form encoding.

    Args:
        intent: The intent to encode
        origin: Scheme and host, e.g. "https://novi.cash"
        path: Path of the pay page

    Returns:
        The shareable link
    """
    return f"{origin.rstrip('/')}/{path.lstrip('/')}?{encode_query(intent)}"


def encode_query(intent: PaymentIntent) -> str:
    """Encode an intent's fields as a form-encoded query string."""
    pairs = []
    for field, param in PARAM_ORDER:
        value = getattr(intent, field)
        if value is None or value == "":
            continue
        pairs.append((param, _format_value(value)))
    return urlencode(pairs)


def _format_value(value: object) -> str:
    if isinstance(value, Decimal):
        return format(value, "f")
    return str(value)


def decode(link: Union[str, Mapping[str, str]]) -> PaymentIntent:
    """
    Decode a payment link into a validated PaymentIntent.

    Args:
        link: A full link, a bare query string (with or without the
            leading "?"), or an already-parsed parameter mapping

    Returns:
        The decoded PaymentIntent

    Raises:
        DecodeError: With kind MissingRecipient, InvalidRecipient,
            MissingAmount, InvalidAmount, MissingLabel or InvalidSplit
    """
    params = parse_link_params(link)

    recipient = _single(params, LINK_PARAMS["RECIPIENT"], DecodeErrorKind.INVALID_RECIPIENT)
    if recipient is None or not recipient.strip():
        raise DecodeError(DecodeErrorKind.MISSING_RECIPIENT)
    recipient = recipient.strip()
    if not is_valid_address(recipient):
        raise DecodeError(DecodeErrorKind.INVALID_RECIPIENT, value=recipient)

    raw_amount = _single(params, LINK_PARAMS["AMOUNT"], DecodeErrorKind.INVALID_AMOUNT)
    if raw_amount is None or not raw_amount.strip():
        raise DecodeError(DecodeErrorKind.MISSING_AMOUNT)
    amount = _parse_decimal(raw_amount.strip())
    if amount is None or amount <= 0:
        raise DecodeError(DecodeErrorKind.INVALID_AMOUNT, value=raw_amount)

    label = _first(params, LINK_PARAMS["LABEL"])
    if label is None or not label.strip():
        raise DecodeError(DecodeErrorKind.MISSING_LABEL)

    fields: dict[str, object] = {
        "recipient": recipient,
        "amount": amount,
        "label": label,
    }

    message = _first(params, LINK_PARAMS["MESSAGE"])
    if message:
        fields["message"] = message

    raw_total = _first(params, LINK_PARAMS["TOTAL"])
    if raw_total:
        total = _parse_decimal(raw_total.strip())
        if total is None:
            raise DecodeError(DecodeErrorKind.INVALID_SPLIT, reason=f"total={raw_total!r}")
        fields["total"] = total

    for field, param in (("split_count", "SPLIT_COUNT"), ("share_index", "SHARE_INDEX")):
        raw = _first(params, LINK_PARAMS[param])
        if raw:
            if not _INT_RE.match(raw.strip()):
                raise DecodeError(
                    DecodeErrorKind.INVALID_SPLIT,
                    reason=f"{LINK_PARAMS[param]}={raw!r}",
                )
            fields[field] = int(raw.strip())

    try:
        return PaymentIntent(**fields)
    except ValidationError as e:
        reason = "; ".join(err["msg"] for err in e.errors())
        raise DecodeError(DecodeErrorKind.INVALID_SPLIT, reason=reason) from e


def parse_link_params(link: Union[str, Mapping[str, str]]) -> dict[str, list[str]]:
    """
    Parse link query parameters, keeping every value of repeated keys.

    Args:
        link: A full link, bare query string, or mapping

    Returns:
        Mapping of parameter name to the list of its values
    """
    if isinstance(link, Mapping):
        return {
            key: list(value) if isinstance(value, (list, tuple)) else [value]
            for key, value in link.items()
        }

    query = link
    if "?" in link:
        query = urlsplit(link).query
    params: dict[str, list[str]] = {}
    for key, value in parse_qsl(query, keep_blank_values=True):
        params.setdefault(key, []).append(value)
    return params


def _first(params: dict[str, list[str]], name: str) -> Optional[str]:
    values = params.get(name)
    return values[0] if values else None


def _single(
    params: dict[str, list[str]],
    name: str,
    conflict_kind: DecodeErrorKind,
) -> Optional[str]:
    """Return the only value of a parameter; repeated values are treated as tampering."""
    values = params.get(name)
    if not values:
        return None
    if len(set(values)) > 1:
        raise DecodeError(conflict_kind, value=", ".join(values))
    return values[0]


def _parse_decimal(raw: str) -> Optional[Decimal]:
    if not _DECIMAL_RE.match(raw):
        return None
    return Decimal(raw)


def to_solana_pay_url(intent: PaymentIntent, spl_token: Optional[str] = None) -> str:
    """
    Render a Solana Pay transfer request URL for wallet hand-off.

    Args:
        intent: The intent to pay
        spl_token: Mint of the SPL token to pay in; native SOL if omitted

    Returns:
        A ``solana:<recipient>?...`` URL
    """
    pairs = [("amount", format(intent.amount, "f"))]
    if spl_token:
        pairs.append(("spl-token", spl_token))
    pairs.append(("label", intent.label))
    if intent.message:
        pairs.append(("message", intent.message))
    return f"solana:{intent.recipient}?{urlencode(pairs, quote_via=quote)}"
