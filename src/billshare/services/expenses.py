from __future__ import annotations

from fractions import Fraction
from typing import Iterable, Union

from billshare.errors import InvalidSplitError
from billshare.models import (
    Expense,
    LineItem,
    Participant,
    ParticipantId,
    ParticipantShare,
    Payment,
    SplitPolicy,
)
from billshare.services.balances import known_ids
from billshare.services.rounding import largest_remainder, ordered, percentages, require_amount
from billshare.services.split import allocate_items, owed_totals

ADJUSTMENT_SUFFIX = "adjustment"


def expense_line_items(
    expense: Expense, participants: Iterable[Union[Participant, ParticipantId]]
) -> list[LineItem]:
    amount = require_amount(expense.amount, f"amount of expense {expense.id!r}", positive=True)
    if expense.items:
        return [
            LineItem(
                id=f"{expense.id}:{item.id}",
                price=item.price,
                quantity=item.quantity,
                split_policy=SplitPolicy.EQUAL,
                included_participants=tuple(item.participants),
                label=item.label,
            )
            for item in expense.items
        ]

    included = list(expense.participants) or known_ids(participants)
    return [
        LineItem(
            id=expense.id,
            price=amount,
            split_policy=SplitPolicy.EQUAL,
            included_participants=tuple(included),
            label=expense.description,
        )
    ]


def allocate_expense(
    expense: Expense, participants: Iterable[Union[Participant, ParticipantId]]
) -> list[ParticipantShare]:
    """Shares of one expense, adjustment for tax/service/tip included.

    The part of the amount not covered by receipt items is spread over the
    item consumers in proportion to what they already owe.
    """
    items = expense_line_items(expense, participants)
    shares = allocate_items(items)

    items_total = sum(item.total for item in items)
    adjustment = expense.amount - items_total
    if adjustment < 0:
        raise InvalidSplitError(
            f"receipt items of expense {expense.id!r} total {items_total}, more than the amount {expense.amount}"
        )
    if adjustment == 0:
        return shares

    subtotals = owed_totals(shares)
    weights = {pid: Fraction(subtotal) for pid, subtotal in subtotals.items()}
    extra = largest_remainder(adjustment, weights)
    line_item_id = f"{expense.id}:{ADJUSTMENT_SUFFIX}"
    shares.extend(
        ParticipantShare(line_item_id=line_item_id, participant_id=pid, amount=extra[pid])
        for pid in ordered(extra)
    )
    return shares


def expense_payment(expense: Expense) -> Payment:
    return Payment(participant_id=expense.payer_id, amount=expense.amount, timestamp=expense.created_at)


def share_percentages(shares: Iterable[ParticipantShare]) -> dict[ParticipantId, int]:
    return percentages(owed_totals(shares))
