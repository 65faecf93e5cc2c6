"""Integer currency helpers shared by the allocator and the aggregator.

Amounts are always ``int`` in the smallest currency unit. Anything that has to
be divided is computed with :class:`fractions.Fraction` and apportioned back to
whole units so that the parts add up to the whole exactly.
"""

from __future__ import annotations

import math
from decimal import Decimal
from fractions import Fraction
from numbers import Rational
from typing import Hashable, Iterable, Mapping, Sequence, Type, TypeVar, cast

from billshare.errors import InvalidSplitError

K = TypeVar("K", bound=Hashable)


def is_whole_amount(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def require_amount(
    value: object,
    name: str,
    *,
    positive: bool = False,
    error: Type[Exception] = InvalidSplitError,
) -> int:
    if not is_whole_amount(value):
        raise error(f"{name} must be an integer amount in the smallest currency unit, got {value!r}")
    value = cast(int, value)
    if positive and value <= 0:
        raise error(f"{name} must be positive, got {value}")
    if value < 0:
        raise error(f"{name} must be non-negative, got {value}")
    return value


def to_fraction(value: object, name: str) -> Fraction:
    if isinstance(value, bool) or value is None:
        raise InvalidSplitError(f"{name} must be a number, got {value!r}")
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise InvalidSplitError(f"{name} must be finite, got {value}")
        return Fraction(value)
    if isinstance(value, Rational):
        return Fraction(value.numerator, value.denominator)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise InvalidSplitError(f"{name} must be finite, got {value}")
        # decimal text keeps 33.3 as 333/10 instead of its binary expansion
        return Fraction(str(value))
    raise InvalidSplitError(f"{name} must be a number, got {value!r}")


def ordered(ids: Iterable[K]) -> list[K]:
    return sorted(ids)  # type: ignore[type-var]


def split_evenly(total: int, ids: Sequence[K]) -> dict[K, int]:
    """Split ``total`` into ``len(ids)`` near-equal whole parts.

    Every id gets ``total // n``; the first ``total % n`` ids in ascending
    order get one extra unit.
    """
    if not ids:
        raise InvalidSplitError("cannot split an amount among zero participants")
    order = ordered(ids)
    n = len(order)
    base = total // n
    remainder = total - base * n
    return {pid: base + (1 if index < remainder else 0) for index, pid in enumerate(order)}


def largest_remainder(total: int, weights: Mapping[K, Fraction]) -> dict[K, int]:
    """Apportion ``total`` proportionally to ``weights`` in whole units.

    Each part is floored, then the units left over go one at a time to the
    parts with the largest fractional remainder, ties broken by ascending id.
    """
    if not weights:
        raise InvalidSplitError("cannot apportion an amount among zero participants")
    weight_sum = sum(weights.values(), Fraction(0))
    if weight_sum <= 0:
        raise InvalidSplitError("weights must sum to a positive value")

    floors: dict[K, int] = {}
    fractions: dict[K, Fraction] = {}
    for pid in ordered(weights):
        exact = total * weights[pid] / weight_sum
        floor = exact.numerator // exact.denominator
        floors[pid] = floor
        fractions[pid] = exact - floor

    leftover = total - sum(floors.values())
    ranking = sorted(floors, key=lambda pid: -fractions[pid])
    for pid in ranking[:leftover]:
        floors[pid] += 1
    return floors


def percentages(amounts: Mapping[K, int]) -> dict[K, int]:
    """Whole percentages of each amount in the total, summing to exactly 100."""
    total = sum(amounts.values())
    if total <= 0:
        return {pid: 0 for pid in ordered(amounts)}
    return largest_remainder(100, {pid: Fraction(amount) for pid, amount in amounts.items()})
