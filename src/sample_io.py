from __future__ import annotations
from pathlib import Path
from typing import List, Sequence, Tuple

import numpy as np

from errors import ValidationError
from sample_store import SampleStore, build_store, require_non_empty
from settings import IndexSettings


def default_sample_path() -> Path:
    return IndexSettings().sample_path


def _parse_count(line: str | None, what: str, line_no: int) -> int:
    if line is None:
        raise ValidationError(f"Line {line_no}: {what} is missing")
    try:
        return int(line.strip())
    except ValueError as exc:
        raise ValidationError(f"Line {line_no}: {what} is not a valid integer: {line.strip()!r}") from exc


def parse_sample(lines: Sequence[str]) -> SampleStore:
    """Διαβάζει το κείμενο ενός δείγματος και επιστρέφει νέο SampleStore.

Μορφή: M, M ονόματα κριτηρίων, N, και N γραμμές `x y [attr ...]`.
Όλο το αρχείο ελέγχεται πριν φτιαχτεί το store, οπότε ένα λάθος δεν αφήνει μισό δείγμα."""

    lines = [line.rstrip("\r\n") for line in lines]

    def line_at(idx: int) -> str | None:
        return lines[idx] if idx < len(lines) else None

    pos = 0
    m = _parse_count(line_at(pos), "number of criteria (M)", pos + 1)
    if m < 2:
        raise ValidationError(f"Line {pos + 1}: number of criteria (M) must be >= 2, got {m}")

    names: List[str] = []
    for _ in range(m):
        pos += 1
        line = line_at(pos)
        if line is None:
            raise ValidationError(f"Line {pos + 1}: criterion name is missing")
        names.append(line.strip())

    pos += 1
    n = _parse_count(line_at(pos), "number of points (N)", pos + 1)
    if n < 0:
        raise ValidationError(f"Line {pos + 1}: number of points (N) must be >= 0, got {n}")

    rows: List[Tuple[Tuple[float, float], List[str]]] = []
    for _ in range(n):
        pos += 1
        line = line_at(pos)
        if line is None:
            raise ValidationError(f"Line {pos + 1}: point is missing")

        tokens = line.split()
        if len(tokens) != m:
            raise ValidationError(f"Line {pos + 1}: expected {m} values, got {len(tokens)}")

        try:
            coords = np.array(tokens[:2], dtype=float)
        except ValueError as exc:
            raise ValidationError(f"Line {pos + 1}: invalid numeric value in {tokens[:2]}") from exc
        if not np.all(np.isfinite(coords)):
            raise ValidationError(f"Line {pos + 1}: coordinates must be finite, got {tokens[:2]}")

        rows.append(((float(coords[0]), float(coords[1])), tokens[2:]))

    return build_store(names, rows)


def load_sample(path: str | Path) -> SampleStore:
    "Φορτώνει δείγμα από αρχείο κειμένου."
    path = Path(path)
    with path.open("r", encoding="utf-8") as fh:
        try:
            lines = fh.readlines()
        except UnicodeDecodeError as exc:
            raise ValidationError(f"{path.name}: file is not valid UTF-8 ({exc.reason} at byte {exc.start})") from exc
    store = parse_sample(lines)
    print(f"[DATA] Loaded {len(store)} points, criteria: {', '.join(store.criteria_names)} ({path.name})")
    return store


def format_sample(store: SampleStore) -> str:
    "Το δείγμα στη μορφή αρχείου."
    out: List[str] = [str(len(store.criteria_names))]
    out.extend(store.criteria_names)
    out.append(str(len(store)))
    for entry in store.entries:
        out.append(" ".join([str(entry.point[0]), str(entry.point[1]), *entry.attributes]))
    return "\n".join(out) + "\n"


def save_sample(store: SampleStore, path: str | Path) -> Path:
    "Αποθηκεύει το δείγμα· StateError αν είναι άδειο (δεν γράφεται αρχείο)."
    require_non_empty(store, "save")

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(format_sample(store), encoding="utf-8")
    print(f"[DATA] Saved {len(store)} points to {path}")
    return path
