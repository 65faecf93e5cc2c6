from decimal import Decimal
from fractions import Fraction

import pytest

from billshare.errors import InvalidPaymentError, InvalidSplitError
from billshare.services.rounding import largest_remainder, percentages, require_amount, split_evenly, to_fraction


def test_split_evenly_orders_by_id():
    assert split_evenly(1001, ["c", "b", "a"]) == {"a": 334, "b": 334, "c": 333}


def test_split_evenly_smaller_than_count():
    assert split_evenly(2, ["a", "b", "c", "d"]) == {"a": 1, "b": 1, "c": 0, "d": 0}


def test_split_evenly_needs_participants():
    with pytest.raises(InvalidSplitError):
        split_evenly(100, [])


def test_largest_remainder_prefers_largest_fraction():
    # exact parts are 14.28..., 28.57..., 57.14...
    result = largest_remainder(100, {"a": Fraction(1), "b": Fraction(2), "c": Fraction(4)})
    assert result == {"a": 14, "b": 29, "c": 57}
    assert sum(result.values()) == 100


def test_largest_remainder_rejects_zero_weights():
    with pytest.raises(InvalidSplitError):
        largest_remainder(100, {"a": Fraction(0), "b": Fraction(0)})


def test_percentages_sum_to_hundred():
    assert percentages({"a": 1, "b": 1, "c": 1}) == {"a": 34, "b": 33, "c": 33}
    assert percentages({"a": 0, "b": 0}) == {"a": 0, "b": 0}


def test_require_amount():
    assert require_amount(0, "amount") == 0
    with pytest.raises(InvalidSplitError):
        require_amount(True, "amount")
    with pytest.raises(InvalidSplitError):
        require_amount(0, "amount", positive=True)
    with pytest.raises(InvalidPaymentError):
        require_amount(-5, "amount", error=InvalidPaymentError)


def test_to_fraction():
    assert to_fraction(0.1, "w") == Fraction(1, 10)
    assert to_fraction(Decimal("12.5"), "w") == Fraction(25, 2)
    assert to_fraction(Fraction(1, 3), "w") == Fraction(1, 3)
    for value in (float("nan"), Decimal("Infinity"), "40", None):
        with pytest.raises(InvalidSplitError):
            to_fraction(value, "w")
