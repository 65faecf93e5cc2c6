import random

import pytest

from billshare.errors import InvalidPaymentError, UnbalancedInputError, UnknownParticipantError
from billshare.models import Participant, Transfer
from billshare.services.settlement import describe_transfers, simplify


def apply(positions, transfers):
    after = dict(positions)
    for t in transfers:
        after[t.creditor_id] -= t.amount
        after[t.debtor_id] += t.amount
    return after


def test_simplify_two_debtors_one_creditor():
    positions = {"A": -500, "B": -300, "C": 800}

    transfers = simplify(positions)

    assert transfers == [
        Transfer(debtor_id="A", creditor_id="C", amount=500),
        Transfer(debtor_id="B", creditor_id="C", amount=300),
    ]


def test_simplify_one_creditor_many_debtors():
    balances = {
        "u1": 500,
        "u2": -300,
        "u3": -200,
    }

    transfers = simplify(balances)

    assert transfers == [
        Transfer(debtor_id="u2", creditor_id="u1", amount=300),
        Transfer(debtor_id="u3", creditor_id="u1", amount=200),
    ]
    assert sum(t.amount for t in transfers) == 500
    assert all(value == 0 for value in apply(balances, transfers).values())


def test_simplify_already_settled():
    assert simplify({"a": 0, "b": 0, "c": 0}) == []
    assert simplify({}) == []


def test_simplify_ties_broken_by_id():
    transfers = simplify({"b": -100, "a": -100, "d": 100, "c": 100})

    assert transfers == [
        Transfer(debtor_id="a", creditor_id="c", amount=100),
        Transfer(debtor_id="b", creditor_id="d", amount=100),
    ]


def test_simplify_rematches_largest_remaining():
    transfers = simplify({"a": -600, "b": -400, "c": 500, "d": 500})

    assert transfers == [
        Transfer(debtor_id="a", creditor_id="c", amount=500),
        Transfer(debtor_id="b", creditor_id="d", amount=400),
        Transfer(debtor_id="a", creditor_id="d", amount=100),
    ]


def test_simplify_skips_zero_positions():
    transfers = simplify({"a": -100, "b": 0, "c": 100})

    assert transfers == [Transfer(debtor_id="a", creditor_id="c", amount=100)]


def test_simplify_rejects_unbalanced():
    with pytest.raises(UnbalancedInputError) as excinfo:
        simplify({"a": -500, "b": 499})
    assert excinfo.value.imbalance == -1


def test_simplify_within_epsilon():
    transfers = simplify({"a": -500, "b": 499}, epsilon=1)
    assert transfers == [Transfer(debtor_id="a", creditor_id="b", amount=499)]


def test_simplify_rejects_bad_input():
    with pytest.raises(ValueError):
        simplify({"a": 0}, epsilon=-1)
    with pytest.raises(InvalidPaymentError):
        simplify({"a": -0.5, "b": 0.5})


@pytest.mark.parametrize("seed", range(25))
def test_simplify_properties(seed):
    rng = random.Random(seed)
    size = rng.randint(2, 30)
    positions = {f"p{index:02d}": rng.randint(-50000, 50000) for index in range(size - 1)}
    positions["zz"] = -sum(positions.values())

    transfers = simplify(positions)

    nonzero = sum(1 for value in positions.values() if value != 0)
    assert len(transfers) <= max(0, nonzero - 1)
    assert all(t.amount > 0 for t in transfers)
    assert all(value == 0 for value in apply(positions, transfers).values())
    for pid, position in positions.items():
        received = sum(t.amount for t in transfers if t.creditor_id == pid)
        paid = sum(t.amount for t in transfers if t.debtor_id == pid)
        assert received - paid == position
    assert simplify(dict(reversed(list(positions.items())))) == transfers


def test_describe_transfers():
    participants = [Participant(id="a", name="Alice"), Participant(id="c", name="Carol")]
    lines = describe_transfers([Transfer(debtor_id="a", creditor_id="c", amount=500)], participants)

    assert lines[0].debtor_name == "Alice"
    assert str(lines[0]) == "Alice -> Carol: 500"

    with pytest.raises(UnknownParticipantError):
        describe_transfers([Transfer(debtor_id="a", creditor_id="z", amount=1)], participants)
