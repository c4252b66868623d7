"""
Equal-split calculation for pooled gift costs.

All amounts are integer subunits. The per-person share is rounded half up and
the remainder is NOT redistributed, so the shares may sum to up to
``participant_count - 1`` subunits away from the total.
"""
from decimal import Decimal
from typing import Iterable, List, Optional
from giftbuddy.core.exceptions import LedgerValidationError
from giftbuddy.core.utils import round_half_up, percentage


def total_gift_amount(gift_amounts: Iterable[int]) -> int:
    """Sum of gift costs in subunits."""
    return sum(gift_amounts)


def per_person_amount(total: int, participant_count: int) -> int:
    """Share of ``total`` owed by each of ``participant_count`` participants."""
    if participant_count <= 0:
        raise LedgerValidationError("At least one user must participate in cost splitting")
    if total < 0:
        raise LedgerValidationError("Gift total cannot be negative")
    return round_half_up(Decimal(total) / Decimal(participant_count))


def select_participants(
    all_user_ids: Iterable[str],
    birthday_person_id: str,
    excluded_user_ids: Iterable[str] = (),
    participant_ids: Optional[Iterable[str]] = None
) -> List[str]:
    """
    Resolve the participant set for an event.

    Starts from ``participant_ids`` when given, otherwise from every known
    user, then drops the birthday person and excluded ids. Order is kept and
    duplicates are removed.
    """
    excluded = set(excluded_user_ids)
    excluded.add(birthday_person_id)
    candidates = participant_ids if participant_ids is not None else all_user_ids

    selected = []
    seen = set()
    for user_id in candidates:
        if user_id in excluded or user_id in seen:
            continue
        seen.add(user_id)
        selected.append(user_id)
    return selected


def gift_breakdown(gifts: list, participant_count: int) -> List[dict]:
    """
    Per-gift view of a pooled split.

    ``gifts`` are objects with ``id``, ``gift_name`` and ``total_amount``.
    """
    total = total_gift_amount(g.total_amount for g in gifts)
    breakdown = []
    for gift in gifts:
        breakdown.append({
            "gift_id": gift.id,
            "gift_name": gift.gift_name,
            "total_amount": gift.total_amount,
            "share_of_total": percentage(gift.total_amount, total),
            "per_person_amount": (
                per_person_amount(gift.total_amount, participant_count)
                if participant_count > 0 else 0
            ),
        })
    return breakdown
