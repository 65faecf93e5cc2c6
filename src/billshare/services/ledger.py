from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Optional, Union

from billshare.config import get_settings
from billshare.errors import BillShareError
from billshare.logging import get_logger
from billshare.models import (
    Expense,
    LineItem,
    Participant,
    ParticipantId,
    Payment,
    SessionSettlement,
    ShareAssignment,
    Transfer,
)
from billshare.services.balances import apply_settled_transfers, compute_net_positions, settled_percentage
from billshare.services.expenses import allocate_expense, expense_payment
from billshare.services.settlement import simplify
from billshare.services.split import allocate_items


def settle_session(
    participants: Iterable[Union[Participant, ParticipantId]],
    items: Iterable[LineItem] = (),
    assignments: Iterable[ShareAssignment] = (),
    payments: Iterable[Payment] = (),
    expenses: Iterable[Expense] = (),
    settled: Iterable[Transfer] = (),
    epsilon: Optional[int] = None,
) -> SessionSettlement:
    """Recompute a session from scratch: shares, net positions and transfers.

    ``settled`` holds settlement payments already made between participants;
    they are applied before the remaining debts are simplified.
    """
    log = get_logger(__name__)
    participants = list(participants)
    expenses = list(expenses)
    settled = list(settled)
    if epsilon is None:
        epsilon = get_settings().settlement_epsilon

    try:
        shares = allocate_items(items, assignments)
        all_payments = list(payments)
        for expense in expenses:
            shares.extend(allocate_expense(expense, participants))
            all_payments.append(expense_payment(expense))

        before = compute_net_positions(shares, all_payments, participants, epsilon=epsilon)
        positions = apply_settled_transfers(before, settled)
        transfers = simplify(positions, epsilon=epsilon)
    except BillShareError as exc:
        log.warning("ledger.rejected", error=type(exc).__name__, detail=str(exc))
        raise

    result = SessionSettlement(
        shares=tuple(shares),
        positions=MappingProxyType(dict(positions)),
        transfers=tuple(transfers),
        settled_percentage=settled_percentage(before, positions),
    )
    log.info(
        "ledger.settled",
        participants=len(positions),
        shares=len(shares),
        payments=len(all_payments),
        recorded_transfers=len(settled),
        transfers=len(transfers),
        settled_percentage=result.settled_percentage,
    )
    return result
