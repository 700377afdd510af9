"""
Location: python/novi_sdk/request.py

Summary:
    Requester side of the flow. Turns "collect this total, split N ways"
    into PaymentIntents and shareable links, in either shared-link or
    per-participant-link mode.

Usage:
    Used by NoviClient.create_request, or directly:

        from novi_sdk.request import plan_request
        from novi_sdk.types import LinkConfig

        plan = plan_request(owner, "10.00", "Dinner", split_count=3,
                            config=LinkConfig(per_participant_links=True))
        plan.links      # three links: 3.34, 3.33, 3.33
"""

import logging
from typing import Optional

from .codec import encode
from .split import Number, allocate, cents_to_amount, to_cents
from .types import LinkConfig, PaymentIntent, RequestPlan

logger = logging.getLogger(__name__)


def plan_request(
    recipient: str,
    total: Number,
    label: str,
    message: Optional[str] = None,
    split_count: int = 1,
    config: Optional[LinkConfig] = None,
) -> RequestPlan:
    """
    Plan the intents and links for a payment request.

    With ``split_count == 1`` a plain intent for the full total is
    produced. Otherwise the total is allocated in cents; the link mode in
    ``config.per_participant_links`` decides whether every participant
    shares one link for the base share (possible shortfall of up to
    ``split_count - 1`` cents) or gets a link for their exact share.

    Args:
        recipient: Wallet address receiving every payment
        total: Total amount in whole units
        label: What the request is for
        message: Note for payers, defaults to "Payment for <label>" or
            "Split payment for <label>"
        split_count: Number of shares including the requester
        config: Link settings, defaults to LinkConfig()

    Returns:
        RequestPlan with intents, links and the collection shortfall

    Raises:
        ValueError: If the total is not positive or is too small to give
            every share at least one cent
    """
    config = config or LinkConfig()
    total_cents = to_cents(total)
    if total_cents <= 0:
        raise ValueError(f"total must be positive, got {total}")

    if split_count == 1:
        intent = PaymentIntent(
            recipient=recipient,
            amount=cents_to_amount(total_cents),
            label=label,
            message=message or f"Payment for {label}",
        )
        return _plan(total_cents, [total_cents], [intent], config)

    shares = allocate(total, split_count)
    if min(shares) == 0:
        raise ValueError(
            f"total {total} is too small to split among {split_count} participants"
        )

    split_total = cents_to_amount(total_cents)
    message = message or f"Split payment for {label}"

    if config.per_participant_links:
        intents = [
            PaymentIntent(
                recipient=recipient,
                amount=cents_to_amount(share),
                label=label,
                message=message,
                total=split_total,
                split_count=split_count,
                share_index=index,
            )
            for index, share in enumerate(shares)
        ]
    else:
        intents = [
            PaymentIntent(
                recipient=recipient,
                amount=cents_to_amount(min(shares)),
                label=label,
                message=message,
                total=split_total,
                split_count=split_count,
            )
        ]

    return _plan(total_cents, shares, intents, config)


def _plan(
    total_cents: int,
    shares: list[int],
    intents: list[PaymentIntent],
    config: LinkConfig,
) -> RequestPlan:
    if len(intents) == len(shares):
        collected = sum(intent.amount_cents for intent in intents)
    else:
        collected = intents[0].amount_cents * len(shares)

    plan = RequestPlan(
        total_cents=total_cents,
        shares=shares,
        intents=intents,
        links=[encode(intent, config.origin, config.path) for intent in intents],
        per_participant_links=config.per_participant_links,
        collected_cents=collected,
        shortfall_cents=total_cents - collected,
    )
    if plan.shortfall_cents:
        logger.info(
            "Shared split link collects %d of %d cents (%d short)",
            collected, total_cents, plan.shortfall_cents,
        )
    return plan
