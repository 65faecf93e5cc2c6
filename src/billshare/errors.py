from __future__ import annotations

from typing import Hashable


class BillShareError(Exception):
    pass


class InvalidSplitError(BillShareError, ValueError):
    pass


class InvalidPaymentError(BillShareError, ValueError):
    pass


class UnknownParticipantError(BillShareError, LookupError):
    def __init__(self, participant_id: Hashable, context: str = "") -> None:
        self.participant_id = participant_id
        message = f"unknown participant {participant_id!r}"
        if context:
            message = f"{message} in {context}"
        super().__init__(message)


class UnbalancedInputError(BillShareError, ValueError):
    def __init__(self, imbalance: int, epsilon: int = 0) -> None:
        self.imbalance = imbalance
        self.epsilon = epsilon
        super().__init__(f"net positions sum to {imbalance}, tolerance is {epsilon}")
