"""
Location: python/novi_sdk/preview.py

Summary:
    Link preview text for social crawlers. Derives the title and
    description shown when a payment link is pasted into a chat app.

Usage:
    Called by whatever serves preview documents to crawlers. Works on raw
    query parameters without validating them, because a preview must
    render even for a link the pay page would reject.

Example:
    from novi_sdk.preview import describe_preview

    text = describe_preview("https://novi.cash/pay?amount=5&label=Pizza&...")
    text.title  # "$5 payment for Pizza"
"""

from typing import Mapping, Union

from .codec import LINK_PARAMS, parse_link_params
from .types import PaymentIntent, PreviewText


def describe_preview(
    link: Union[str, Mapping[str, str], PaymentIntent],
    asset_symbol: str = "USDC",
    network_name: str = "Solana",
) -> PreviewText:
    """
    Build preview title and description for a payment link.

    A link is a split payment when both ``total`` and ``splitCount`` are
    present, the same rule PaymentIntent uses.

    Args:
        link: Link, query string, parameter mapping, or a decoded intent
        asset_symbol: Asset named in the description
        network_name: Network named in the description

    Returns:
        PreviewText with title and description
    """
    if isinstance(link, PaymentIntent):
        amount = format(link.amount, "f")
        label = link.label
        total = format(link.total, "f") if link.total is not None else None
        split_count = str(link.split_count) if link.split_count is not None else None
    else:
        params = parse_link_params(link)
        amount = _get(params, LINK_PARAMS["AMOUNT"]) or "0"
        label = _get(params, LINK_PARAMS["LABEL"]) or "payment"
        total = _get(params, LINK_PARAMS["TOTAL"])
        split_count = _get(params, LINK_PARAMS["SPLIT_COUNT"])

    if total and split_count:
        title = f"${amount} split payment for {label}"
        description = (
            f"Pay ${amount} instantly in {asset_symbol} on {network_name} for {label}. "
            f"Your share of ${total} split among {split_count} people."
        )
    else:
        title = f"${amount} payment for {label}"
        description = f"Pay ${amount} instantly in {asset_symbol} on {network_name} for {label}"

    return PreviewText(title=title, description=description)


def _get(params: dict[str, list[str]], name: str) -> str:
    values = params.get(name)
    return values[0] if values else ""
