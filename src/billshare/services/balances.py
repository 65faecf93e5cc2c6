from __future__ import annotations

from typing import Iterable, Mapping, Union

from billshare.errors import InvalidPaymentError, UnbalancedInputError, UnknownParticipantError
from billshare.models import Participant, ParticipantId, ParticipantShare, Payment, Transfer
from billshare.services.rounding import is_whole_amount, ordered, require_amount


def known_ids(participants: Iterable[Union[Participant, ParticipantId]]) -> list[ParticipantId]:
    ids = [p.id if isinstance(p, Participant) else p for p in participants]
    return ordered(set(ids))


def compute_net_positions(
    shares: Iterable[ParticipantShare],
    payments: Iterable[Payment],
    participants: Iterable[Union[Participant, ParticipantId]],
    epsilon: int = 0,
) -> dict[ParticipantId, int]:
    """Paid minus owed for every known participant.

    Positive means the participant is owed money, negative means they owe.
    Raises ``UnbalancedInputError`` when total paid and total owed differ by
    more than ``epsilon``.
    """
    if epsilon < 0:
        raise ValueError("epsilon must be non-negative")
    balances: dict[ParticipantId, int] = {pid: 0 for pid in known_ids(participants)}

    for share in shares:
        if share.participant_id not in balances:
            raise UnknownParticipantError(share.participant_id, f"share of line item {share.line_item_id!r}")
        balances[share.participant_id] -= require_amount(
            share.amount, f"share of {share.participant_id!r} in line item {share.line_item_id!r}"
        )

    for payment in payments:
        if payment.participant_id not in balances:
            raise UnknownParticipantError(payment.participant_id, "payment")
        amount = require_amount(
            payment.amount, f"payment by {payment.participant_id!r}", error=InvalidPaymentError
        )
        balances[payment.participant_id] += amount

    imbalance = sum(balances.values())
    if abs(imbalance) > epsilon:
        raise UnbalancedInputError(imbalance, epsilon)
    return balances


def apply_settled_transfers(
    positions: Mapping[ParticipantId, int], transfers: Iterable[Transfer]
) -> dict[ParticipantId, int]:
    """Net positions after recorded settlement payments.

    A recorded transfer moves its debtor up and its creditor down by the same
    amount, so the total stays unchanged.
    """
    result = dict(positions)
    for transfer in transfers:
        for pid in (transfer.debtor_id, transfer.creditor_id):
            if pid not in result:
                raise UnknownParticipantError(pid, "recorded transfer")
        if transfer.debtor_id == transfer.creditor_id:
            raise InvalidPaymentError(f"transfer from {transfer.debtor_id!r} to itself")
        amount = require_amount(
            transfer.amount,
            f"transfer from {transfer.debtor_id!r} to {transfer.creditor_id!r}",
            positive=True,
            error=InvalidPaymentError,
        )
        result[transfer.debtor_id] += amount
        result[transfer.creditor_id] -= amount
    return result


def outstanding_debt(positions: Mapping[ParticipantId, int]) -> int:
    for pid, position in positions.items():
        if not is_whole_amount(position):
            raise InvalidPaymentError(f"position of {pid!r} must be an integer amount, got {position!r}")
    return -sum(position for position in positions.values() if position < 0)


def settled_percentage(before: Mapping[ParticipantId, int], after: Mapping[ParticipantId, int]) -> int:
    """Share of the debt in ``before`` that is cleared in ``after``, 0 to 100."""
    owed = outstanding_debt(before)
    if owed == 0:
        return 100
    remaining = outstanding_debt(after)
    cleared = max(0, min(owed, owed - remaining))
    return cleared * 100 // owed
