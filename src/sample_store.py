from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from composite_key import Point
from errors import DuplicateError, StateError, ValidationError


@dataclass(frozen=True)
class SampleEntry:
    "Ένα σημείο του δείγματος μαζί με τα κειμενικά του attributes."

    point: Point                      #(x, y), oi dio arithmitikoi axones
    attributes: Tuple[str, ...] = ()  #ena string gia kathe kritirio meta ta dio prota


def _has_whitespace(value: str) -> bool:
    return any(ch.isspace() for ch in value)


def validate_criteria_names(names: Sequence[str]) -> Tuple[str, ...]:
    "Ελέγχει τα ονόματα κριτηρίων: τουλάχιστον 2, μοναδικά, χωρίς κενά."
    names = tuple(str(n).strip() for n in names)

    if len(names) < 2:
        raise ValidationError(f"At least 2 criteria are required, got {len(names)}")

    for name in names:
        if not name or _has_whitespace(name):
            raise ValidationError(f"Invalid criterion name: {name!r}")

    if len(set(names)) != len(names):
        raise ValidationError(f"Criterion names must be unique: {list(names)}")

    return names


def make_entry(
    point: Sequence[float],
    attributes: Sequence[str],
    criteria_names: Sequence[str],
) -> SampleEntry:
    "Μετατρέπει και ελέγχει ένα σημείο πριν μπει στο δείγμα."
    if len(point) != 2:
        raise ValidationError(f"A point needs exactly 2 coordinates, got {len(point)}")

    try:
        coords = np.asarray(point, dtype=float)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Coordinates must be numeric: {list(point)!r}") from exc

    if not np.all(np.isfinite(coords)):
        raise ValidationError(f"Coordinates must be finite: {coords.tolist()}")

    expected = len(criteria_names) - 2
    if isinstance(attributes, str):
        attributes = (attributes,)    #ena sketo string einai mia timi, oxi xaraktires
    attributes = tuple(str(a) for a in attributes)
    if len(attributes) != expected:
        raise ValidationError(
            f"Expected {expected} attribute value(s) ({', '.join(criteria_names[2:]) or 'none'}), "
            f"got {len(attributes)}"
        )

    #to arxeio einai whitespace-delimited, ara den epitrepontai kena
    for name, value in zip(criteria_names[2:], attributes):
        if not value or _has_whitespace(value):
            raise ValidationError(f"Invalid value for {name}: {value!r}")

    return SampleEntry(point=(float(coords[0]), float(coords[1])), attributes=attributes)


@dataclass(frozen=True)
class SampleStore:
    """Το δείγμα: ονόματα κριτηρίων και λίστα σημείων με τη σειρά εισαγωγής.

Είναι η πηγή της αλήθειας· το KD-Tree ξαναχτίζεται από εδώ σε κάθε αλλαγή.
Οι αλλαγές δίνουν νέο store ώστε ένα αποτυχημένο insert να μην αφήνει ίχνη."""

    criteria_names: Tuple[str, ...]
    entries: Tuple[SampleEntry, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "criteria_names", validate_criteria_names(self.criteria_names))
        object.__setattr__(self, "entries", tuple(self.entries))

    def __len__(self) -> int:
        return len(self.entries)

    def is_empty(self) -> bool:
        return not self.entries

    @property
    def axis_names(self) -> Tuple[str, str]:
        return self.criteria_names[0], self.criteria_names[1]

    @property
    def attribute_names(self) -> Tuple[str, ...]:
        return self.criteria_names[2:]

    def find(self, point: Sequence[float]) -> Optional[SampleEntry]:
        "Επιστρέφει την εγγραφή με ακριβώς αυτές τις συντεταγμένες, αν υπάρχει."
        x, y = float(point[0]), float(point[1])
        for entry in self.entries:
            if entry.point[0] == x and entry.point[1] == y:
                return entry
        return None

    def with_entry(self, entry: SampleEntry) -> "SampleStore":
        "Νέο store με το entry στο τέλος· DuplicateError αν οι συντεταγμένες υπάρχουν ήδη."
        if self.find(entry.point) is not None:
            raise DuplicateError(f"A point with coordinates {entry.point} already exists")
        return SampleStore(self.criteria_names, self.entries + (entry,))

    def to_frame(self) -> pd.DataFrame:
        "Το δείγμα ως DataFrame με μία στήλη ανά κριτήριο."
        return entries_to_frame(self.entries, self.criteria_names)


def entries_to_frame(entries: Sequence[SampleEntry], criteria_names: Sequence[str]) -> pd.DataFrame:
    rows: List[list] = [[e.point[0], e.point[1], *e.attributes] for e in entries]
    df = pd.DataFrame(rows, columns=list(criteria_names))
    df[list(criteria_names[:2])] = df[list(criteria_names[:2])].astype(float)
    return df


def build_store(
    criteria_names: Sequence[str],
    rows: Sequence[Tuple[Sequence[float], Sequence[str]]],
) -> SampleStore:
    "Χτίζει store από (point, attributes) ζεύγη, με τους ίδιους ελέγχους με το insert."
    names = validate_criteria_names(criteria_names)
    seen = set()
    entries: List[SampleEntry] = []

    for point, attributes in rows:
        entry = make_entry(point, attributes, names)
        if entry.point in seen:
            raise DuplicateError(f"A point with coordinates {entry.point} already exists")
        seen.add(entry.point)
        entries.append(entry)

    return SampleStore(names, tuple(entries))


def require_non_empty(store: SampleStore, action: str) -> None:
    if store.is_empty():
        raise StateError(f"Cannot {action}: the sample is empty")
