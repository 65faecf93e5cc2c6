from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from fractions import Fraction
from types import MappingProxyType
from typing import Mapping, Optional, Sequence, Union

ParticipantId = str
Weight = Union[int, float, Decimal, Fraction]


class SplitPolicy(str, Enum):
    EQUAL = "equal"
    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed_amount"


@dataclass(frozen=True, slots=True)
class Participant:
    id: ParticipantId
    name: str


@dataclass(frozen=True, slots=True)
class LineItem:
    id: str
    price: int
    included_participants: Sequence[ParticipantId]
    quantity: int = 1
    split_policy: SplitPolicy = SplitPolicy.EQUAL
    label: Optional[str] = None

    @property
    def total(self) -> int:
        return self.price * self.quantity


@dataclass(frozen=True, slots=True)
class ShareAssignment:
    line_item_id: str
    participant_id: ParticipantId
    weight: Optional[Weight] = None
    amount: Optional[int] = None


@dataclass(frozen=True, slots=True)
class ParticipantShare:
    line_item_id: str
    participant_id: ParticipantId
    amount: int


@dataclass(frozen=True, slots=True)
class Payment:
    participant_id: ParticipantId
    amount: int
    timestamp: Optional[datetime] = None


@dataclass(frozen=True, slots=True)
class Transfer:
    debtor_id: ParticipantId
    creditor_id: ParticipantId
    amount: int


@dataclass(frozen=True, slots=True)
class ReceiptItem:
    id: str
    price: int
    participants: Sequence[ParticipantId]
    quantity: int = 1
    label: Optional[str] = None


@dataclass(frozen=True, slots=True)
class Expense:
    """A charge paid in full by one participant.

    Without receipt items the amount is split equally among ``participants``
    (or the whole group when empty). With receipt items each item is split
    among its own consumers, and whatever the items do not cover (tax,
    service, tip) is spread in proportion to each consumer's item subtotal.
    """

    id: str
    payer_id: ParticipantId
    amount: int
    items: Sequence[ReceiptItem] = ()
    participants: Sequence[ParticipantId] = ()
    created_at: Optional[datetime] = None
    description: Optional[str] = None


@dataclass(frozen=True, slots=True)
class SessionSettlement:
    shares: tuple[ParticipantShare, ...] = ()
    positions: Mapping[ParticipantId, int] = field(default_factory=lambda: MappingProxyType({}))
    transfers: tuple[Transfer, ...] = ()
    settled_percentage: int = 100
