from __future__ import annotations

import heapq
from dataclasses import dataclass
from typing import Iterable, List, Mapping

from billshare.errors import InvalidPaymentError, UnbalancedInputError, UnknownParticipantError
from billshare.models import Participant, ParticipantId, Transfer
from billshare.services.rounding import is_whole_amount


@dataclass(frozen=True, slots=True)
class TransferLine:
    transfer: Transfer
    debtor_name: str
    creditor_name: str

    def __str__(self) -> str:
        return f"{self.debtor_name} -> {self.creditor_name}: {self.transfer.amount}"


def simplify(positions: Mapping[ParticipantId, int], epsilon: int = 0) -> List[Transfer]:
    """Greedy minimum cash-flow settlement.

    The most indebted participant always pays the participant owed the most,
    ties going to the lower id. Produces at most ``n - 1`` transfers for ``n``
    participants with a non-zero position.
    """
    if epsilon < 0:
        raise ValueError("epsilon must be non-negative")
    for pid, position in positions.items():
        if not is_whole_amount(position):
            raise InvalidPaymentError(f"position of {pid!r} must be an integer amount, got {position!r}")

    imbalance = sum(positions.values())
    if abs(imbalance) > epsilon:
        raise UnbalancedInputError(imbalance, epsilon)

    # heap entries are (-outstanding, id) so the largest amount pops first
    debtors: list[tuple[int, ParticipantId]] = []
    creditors: list[tuple[int, ParticipantId]] = []
    for pid, position in positions.items():
        if position < 0:
            debtors.append((position, pid))
        elif position > 0:
            creditors.append((-position, pid))
    heapq.heapify(debtors)
    heapq.heapify(creditors)

    transfers: list[Transfer] = []
    while debtors and creditors:
        debt, debtor_id = heapq.heappop(debtors)
        credit, creditor_id = heapq.heappop(creditors)

        amount = min(-debt, -credit)
        transfers.append(Transfer(debtor_id=debtor_id, creditor_id=creditor_id, amount=amount))

        debt += amount
        credit += amount
        if debt != 0:
            heapq.heappush(debtors, (debt, debtor_id))
        if credit != 0:
            heapq.heappush(creditors, (credit, creditor_id))

    return transfers


def describe_transfers(
    transfers: Iterable[Transfer], participants: Iterable[Participant]
) -> list[TransferLine]:
    names = {participant.id: participant.name for participant in participants}
    lines: list[TransferLine] = []
    for transfer in transfers:
        for pid in (transfer.debtor_id, transfer.creditor_id):
            if pid not in names:
                raise UnknownParticipantError(pid, "transfer")
        lines.append(
            TransferLine(
                transfer=transfer,
                debtor_name=names[transfer.debtor_id],
                creditor_name=names[transfer.creditor_id],
            )
        )
    return lines
