"""Share allocation and debt settlement for bill-splitting sessions."""

from billshare.errors import (
    BillShareError,
    InvalidPaymentError,
    InvalidSplitError,
    UnbalancedInputError,
    UnknownParticipantError,
)
from billshare.models import (
    Expense,
    LineItem,
    Participant,
    ParticipantShare,
    Payment,
    ReceiptItem,
    SessionSettlement,
    ShareAssignment,
    SplitPolicy,
    Transfer,
)
from billshare.services.balances import apply_settled_transfers, compute_net_positions, settled_percentage
from billshare.services.expenses import allocate_expense, share_percentages
from billshare.services.ledger import settle_session
from billshare.services.settlement import describe_transfers, simplify
from billshare.services.split import allocate, allocate_items

__all__ = [
    "BillShareError",
    "Expense",
    "InvalidPaymentError",
    "InvalidSplitError",
    "LineItem",
    "Participant",
    "ParticipantShare",
    "Payment",
    "ReceiptItem",
    "SessionSettlement",
    "ShareAssignment",
    "SplitPolicy",
    "Transfer",
    "UnbalancedInputError",
    "UnknownParticipantError",
    "allocate",
    "allocate_expense",
    "allocate_items",
    "apply_settled_transfers",
    "compute_net_positions",
    "describe_transfers",
    "settle_session",
    "settled_percentage",
    "share_percentages",
    "simplify",
]
