"""Validation of raw document-store records at the library boundary.

Records arrive as loosely typed mappings using the application's camelCase
field names. They are validated here and converted to the frozen value types
in :mod:`billshare.models`; the computation never sees raw records.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Iterable, Literal, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, StrictInt, ValidationError, field_validator

from billshare.errors import InvalidPaymentError, InvalidSplitError
from billshare.models import (
    Expense,
    LineItem,
    Participant,
    Payment,
    ReceiptItem,
    ShareAssignment,
    SplitPolicy,
    Transfer,
)

# split modes as stored by the split-bill page
SPLIT_MODE_ALIASES = {
    "equal": SplitPolicy.EQUAL,
    "percentage": SplitPolicy.PERCENTAGE,
    "manual": SplitPolicy.FIXED_AMOUNT,
    "fixed_amount": SplitPolicy.FIXED_AMOUNT,
}


class Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")


class ParticipantRecord(Record):
    id: str = Field(min_length=1)
    name: str = ""

    def to_domain(self) -> Participant:
        return Participant(id=self.id, name=self.name or self.id)


class LineItemRecord(Record):
    id: str = Field(min_length=1)
    name: Optional[str] = None
    price: StrictInt = Field(gt=0)
    quantity: StrictInt = Field(1, gt=0)
    split_mode: SplitPolicy = Field(SplitPolicy.EQUAL, alias="splitMode")
    participants: list[str] = Field(min_length=1)

    @field_validator("split_mode", mode="before")
    @classmethod
    def _split_mode(cls, value: Any) -> Any:
        if isinstance(value, str) and value.lower() in SPLIT_MODE_ALIASES:
            return SPLIT_MODE_ALIASES[value.lower()]
        return value

    def to_domain(self) -> LineItem:
        return LineItem(
            id=self.id,
            price=self.price,
            quantity=self.quantity,
            split_policy=self.split_mode,
            included_participants=tuple(self.participants),
            label=self.name,
        )


class AssignmentRecord(Record):
    line_item_id: str = Field(alias="itemId")
    participant_id: str = Field(alias="participantId")
    weight: Optional[Decimal] = Field(None, ge=0, le=100)
    amount: Optional[StrictInt] = Field(None, ge=0)

    def to_domain(self) -> ShareAssignment:
        return ShareAssignment(
            line_item_id=self.line_item_id,
            participant_id=self.participant_id,
            weight=self.weight,
            amount=self.amount,
        )


class PaymentRecord(Record):
    participant_id: str = Field(alias="paidBy")
    amount: StrictInt = Field(ge=0)
    date: Optional[datetime] = None

    def to_domain(self) -> Payment:
        return Payment(participant_id=self.participant_id, amount=self.amount, timestamp=self.date)


class SettlementPaymentRecord(Record):
    from_user_id: str = Field(alias="fromUserId")
    to_user_id: str = Field(alias="toUserId")
    amount: StrictInt = Field(gt=0)
    status: Literal["pending", "completed", "cancelled"] = "pending"
    date: Optional[datetime] = None

    @property
    def is_completed(self) -> bool:
        return self.status == "completed"

    def to_domain(self) -> Transfer:
        return Transfer(debtor_id=self.from_user_id, creditor_id=self.to_user_id, amount=self.amount)


class ReceiptItemRecord(Record):
    id: str = Field(min_length=1)
    name: Optional[str] = None
    price: StrictInt = Field(gt=0)
    quantity: StrictInt = Field(1, gt=0)
    participants: list[str] = Field(min_length=1)

    def to_domain(self) -> ReceiptItem:
        return ReceiptItem(
            id=self.id,
            price=self.price,
            quantity=self.quantity,
            participants=tuple(self.participants),
            label=self.name,
        )


class ExpenseRecord(Record):
    id: str = Field(min_length=1)
    paid_by: str = Field(alias="paidBy")
    amount: StrictInt = Field(gt=0)
    description: Optional[str] = None
    receipt_items: list[ReceiptItemRecord] = Field(default_factory=list, alias="receiptItems")
    participants: list[str] = Field(default_factory=list)
    created_at: Optional[datetime] = Field(None, alias="createdAt")

    def to_domain(self) -> Expense:
        return Expense(
            id=self.id,
            payer_id=self.paid_by,
            amount=self.amount,
            items=tuple(item.to_domain() for item in self.receipt_items),
            participants=tuple(self.participants),
            created_at=self.created_at,
            description=self.description,
        )


R = TypeVar("R", bound=Record)


def _validate(model: Type[R], doc: Mapping[str, Any], error: Type[Exception]) -> R:
    try:
        return model.model_validate(doc)
    except ValidationError as exc:
        raise error(f"invalid {model.__name__}: {exc}") from exc


def parse_participant(doc: Mapping[str, Any]) -> Participant:
    return _validate(ParticipantRecord, doc, InvalidSplitError).to_domain()


def parse_line_item(doc: Mapping[str, Any]) -> LineItem:
    return _validate(LineItemRecord, doc, InvalidSplitError).to_domain()


def parse_assignment(doc: Mapping[str, Any]) -> ShareAssignment:
    return _validate(AssignmentRecord, doc, InvalidSplitError).to_domain()


def parse_expense(doc: Mapping[str, Any]) -> Expense:
    return _validate(ExpenseRecord, doc, InvalidSplitError).to_domain()


def parse_payment(doc: Mapping[str, Any]) -> Payment:
    return _validate(PaymentRecord, doc, InvalidPaymentError).to_domain()


def parse_settled_transfers(docs: Iterable[Mapping[str, Any]]) -> list[Transfer]:
    """Completed settlement payments as transfers; pending and cancelled ones are skipped."""
    records = [_validate(SettlementPaymentRecord, doc, InvalidPaymentError) for doc in docs]
    return [record.to_domain() for record in records if record.is_completed]
