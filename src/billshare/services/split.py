from __future__ import annotations

from fractions import Fraction
from typing import Iterable, Sequence

from billshare.errors import InvalidSplitError
from billshare.models import LineItem, ParticipantId, ParticipantShare, ShareAssignment, SplitPolicy
from billshare.services.rounding import largest_remainder, ordered, require_amount, split_evenly, to_fraction

MAX_WEIGHT = Fraction(100)


def allocate(item: LineItem, assignments: Iterable[ShareAssignment] = ()) -> list[ParticipantShare]:
    """Divide one line item among its included participants.

    Shares are returned in ascending participant id order and always add up to
    ``item.price * item.quantity``.
    """
    participants = _included(item)
    price = require_amount(item.price, f"price of line item {item.id!r}", positive=True)
    quantity = require_amount(item.quantity, f"quantity of line item {item.id!r}", positive=True)
    total = price * quantity
    by_participant = _assignments_by_participant(item, participants, assignments)

    try:
        policy = SplitPolicy(item.split_policy)
    except ValueError as exc:
        raise InvalidSplitError(f"unknown split policy {item.split_policy!r}") from exc

    if policy is SplitPolicy.EQUAL:
        amounts = split_evenly(total, participants)
    elif policy is SplitPolicy.PERCENTAGE:
        amounts = _split_by_percentage(item, total, participants, by_participant)
    else:
        amounts = _split_by_fixed_amount(item, total, participants, by_participant)

    return [
        ParticipantShare(line_item_id=item.id, participant_id=pid, amount=amounts[pid])
        for pid in participants
    ]


def allocate_items(
    items: Iterable[LineItem], assignments: Iterable[ShareAssignment] = ()
) -> list[ParticipantShare]:
    items = list(items)
    per_item: dict[str, list[ShareAssignment]] = {item.id: [] for item in items}
    if len(per_item) != len(items):
        raise InvalidSplitError("line item ids must be unique")
    for assignment in assignments:
        if assignment.line_item_id not in per_item:
            raise InvalidSplitError(f"assignment references unknown line item {assignment.line_item_id!r}")
        per_item[assignment.line_item_id].append(assignment)

    shares: list[ParticipantShare] = []
    for item in items:
        shares.extend(allocate(item, per_item[item.id]))
    return shares


def owed_totals(shares: Iterable[ParticipantShare]) -> dict[ParticipantId, int]:
    result: dict[ParticipantId, int] = {}
    for share in shares:
        result[share.participant_id] = result.get(share.participant_id, 0) + share.amount
    return result


def _included(item: LineItem) -> list[ParticipantId]:
    participants = list(item.included_participants)
    if not participants:
        raise InvalidSplitError(f"line item {item.id!r} has no included participants")
    if len(set(participants)) != len(participants):
        raise InvalidSplitError(f"line item {item.id!r} lists a participant more than once")
    return ordered(participants)


def _assignments_by_participant(
    item: LineItem,
    participants: Sequence[ParticipantId],
    assignments: Iterable[ShareAssignment],
) -> dict[ParticipantId, ShareAssignment]:
    included = set(participants)
    result: dict[ParticipantId, ShareAssignment] = {}
    for assignment in assignments:
        if assignment.line_item_id != item.id:
            raise InvalidSplitError(
                f"assignment for line item {assignment.line_item_id!r} passed with line item {item.id!r}"
            )
        if assignment.participant_id not in included:
            raise InvalidSplitError(
                f"participant {assignment.participant_id!r} is not included in line item {item.id!r}"
            )
        if assignment.participant_id in result:
            raise InvalidSplitError(
                f"participant {assignment.participant_id!r} is assigned twice in line item {item.id!r}"
            )
        result[assignment.participant_id] = assignment
    return result


def _split_by_percentage(
    item: LineItem,
    total: int,
    participants: Sequence[ParticipantId],
    by_participant: dict[ParticipantId, ShareAssignment],
) -> dict[ParticipantId, int]:
    weights: dict[ParticipantId, Fraction] = {}
    for pid in participants:
        assignment = by_participant.get(pid)
        if assignment is None or assignment.weight is None:
            raise InvalidSplitError(f"participant {pid!r} has no weight in line item {item.id!r}")
        weight = to_fraction(assignment.weight, f"weight of {pid!r}")
        if weight < 0:
            raise InvalidSplitError(f"weight of {pid!r} in line item {item.id!r} is negative")
        if weight > MAX_WEIGHT:
            raise InvalidSplitError(f"weight of {pid!r} in line item {item.id!r} exceeds 100")
        weights[pid] = weight

    if sum(weights.values()) == 0:
        raise InvalidSplitError(f"weights in line item {item.id!r} sum to zero")
    # weights that do not sum to 100 are normalised implicitly: amount_i = total * w_i / sum(w)
    return largest_remainder(total, weights)


def _split_by_fixed_amount(
    item: LineItem,
    total: int,
    participants: Sequence[ParticipantId],
    by_participant: dict[ParticipantId, ShareAssignment],
) -> dict[ParticipantId, int]:
    amounts: dict[ParticipantId, int] = {}
    for pid in participants:
        assignment = by_participant.get(pid)
        if assignment is None or assignment.amount is None:
            raise InvalidSplitError(f"participant {pid!r} has no amount in line item {item.id!r}")
        amounts[pid] = require_amount(assignment.amount, f"amount of {pid!r} in line item {item.id!r}")

    # the last participant in id order absorbs any discrepancy
    absorber = participants[-1]
    discrepancy = total - sum(amounts.values())
    adjusted = amounts[absorber] + discrepancy
    if adjusted < 0:
        raise InvalidSplitError(
            f"fixed amounts in line item {item.id!r} exceed the total by {-discrepancy}, "
            f"more than {absorber!r} can absorb"
        )
    amounts[absorber] = adjusted
    return amounts
