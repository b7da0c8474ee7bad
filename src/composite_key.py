from __future__ import annotations
from dataclasses import dataclass
from typing import Sequence, Tuple

from errors import ValidationError


Point = Tuple[float, float]  # (x, y)

NEG_INF = float("-inf")
POS_INF = float("inf")


@dataclass(frozen=True, order=True)
class CompositeKey:
    """Κλειδί σύγκρισης δύο επιπέδων: πρώτα το primary, μετά το secondary.

Και τα δύο είναι tuples ίδιου μήκους και συγκρίνονται λεξικογραφικά,
οπότε δύο διαφορετικά σημεία δεν έχουν ποτέ ίσο κλειδί."""

    primary: Tuple[float, float]
    secondary: Tuple[float, float]

    def __str__(self) -> str:
        return f"<{self.primary[0]}, {self.primary[1]} | {self.secondary[0]}, {self.secondary[1]}>"


def check_axis(axis: int) -> int:
    "Ελέγχει ότι ο άξονας είναι 0 ή 1."
    if axis not in (0, 1):
        raise ValidationError(f"Axis must be 0 or 1, got {axis!r}")
    return axis


def composite_key(point: Sequence[float], axis: int) -> CompositeKey:
    "Φτιάχνει το CompositeKey του σημείου για τον άξονα axis."
    x, y = float(point[0]), float(point[1])
    if check_axis(axis) == 0:
        return CompositeKey(primary=(x, y), secondary=(y, x))
    return CompositeKey(primary=(y, x), secondary=(x, y))


def lower_bound(value: float) -> CompositeKey:
    "Κάτω όριο range query: μικρότερο από κάθε σημείο με συντεταγμένη >= value."
    return CompositeKey(primary=(float(value), NEG_INF), secondary=(NEG_INF, NEG_INF))


def upper_bound(value: float) -> CompositeKey:
    "Άνω όριο range query: μεγαλύτερο από κάθε σημείο με συντεταγμένη <= value."
    return CompositeKey(primary=(float(value), POS_INF), secondary=(POS_INF, POS_INF))


#ta akra tou xorou, gia to bounding box tis rizas
MIN_KEY = CompositeKey(primary=(NEG_INF, NEG_INF), secondary=(NEG_INF, NEG_INF))
MAX_KEY = CompositeKey(primary=(POS_INF, POS_INF), secondary=(POS_INF, POS_INF))
