from __future__ import annotations
import math
import re
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple

import pandas as pd

from composite_key import NEG_INF, POS_INF
from errors import ValidationError
from kd_tree import KDTree
from sample_store import SampleEntry, entries_to_frame


_QUERY_RE = re.compile(
    r"^\s*SELECT\s+(?P<columns>.+?)\s+FROM\s+(?P<table>\S+)\s+WHERE\s+(?P<where>.+?)\s*;?\s*$",
    re.IGNORECASE | re.DOTALL,
)
_AND_RE = re.compile(r"\s+AND\s+", re.IGNORECASE)
_RANGE_RE = re.compile(r"^\[\s*(?P<low>[^,\]]+?)\s*,\s*(?P<high>[^,\]]+?)\s*\]$")

NUMERIC_OPERATORS = ("=", "<=", ">=", "in")
ATTRIBUTE_OPERATORS = ("=",)


@dataclass
class ParsedQuery:

    "Ένα αναλυμένο SELECT: στήλες, αριθμητικά όρια και φίλτρα ισότητας στα attributes."
    columns: Tuple[str, ...]
    table: str
    low: List[float] = field(default_factory=lambda: [NEG_INF, NEG_INF])
    high: List[float] = field(default_factory=lambda: [POS_INF, POS_INF])
    attribute_filters: List[Tuple[str, str]] = field(default_factory=list)


def _to_float(text: str, condition: str) -> float:
    try:
        number = float(text)
    except ValueError as exc:
        raise ValidationError(f"Invalid numeric value {text!r} in condition: {condition}") from exc
    if math.isnan(number):
        raise ValidationError(f"Invalid numeric value {text!r} in condition: {condition}")
    return number


def _parse_columns(text: str, criteria_names: Sequence[str]) -> Tuple[str, ...]:
    if text.strip() == "*":
        return tuple(criteria_names)

    columns = tuple(c.strip() for c in text.split(","))
    for column in columns:
        if not column:
            raise ValidationError(f"Empty column name in SELECT list: {text!r}")
        if column not in criteria_names:
            raise ValidationError(f"Unknown column: {column}")
    return tuple(dict.fromkeys(columns))


def _apply_condition(parsed: ParsedQuery, condition: str, criteria_names: Sequence[str]) -> None:
    "Στενεύει τα όρια ή προσθέτει φίλτρο attribute για μία συνθήκη."
    parts = condition.split(None, 2)
    if len(parts) < 3:
        raise ValidationError(f"Invalid condition: {condition}")

    criterion, operator, value = parts[0], parts[1].lower(), parts[2].strip()
    if criterion not in criteria_names:
        raise ValidationError(f"Unknown criterion: {criterion}")

    index = list(criteria_names).index(criterion)

    if index >= 2:
        if operator not in ATTRIBUTE_OPERATORS:
            raise ValidationError(f"Unsupported operator for {criterion}: {parts[1]}")
        parsed.attribute_filters.append((criterion, value))
        return

    if operator not in NUMERIC_OPERATORS:
        raise ValidationError(f"Unsupported operator for {criterion}: {parts[1]}")

    #oles oi synthikes enonontai me AND, ara ta oria mono stenevoun
    if operator == "in":
        match = _RANGE_RE.match(value)
        if match is None:
            raise ValidationError(f"Expected [low,high] after 'in': {condition}")
        low = _to_float(match.group("low"), condition)
        high = _to_float(match.group("high"), condition)
    else:
        number = _to_float(value, condition)
        low = number if operator in ("=", ">=") else NEG_INF
        high = number if operator in ("=", "<=") else POS_INF

    parsed.low[index] = max(parsed.low[index], low)
    parsed.high[index] = min(parsed.high[index], high)


def parse_query(text: str, criteria_names: Sequence[str]) -> ParsedQuery:
    """Αναλύει `SELECT c1,c2 FROM T WHERE cond [AND cond ...]`.

Τα δύο πρώτα κριτήρια είναι αριθμητικοί άξονες (=, <=, >=, in [a,b]),
τα υπόλοιπα δέχονται μόνο =."""

    match = _QUERY_RE.match(text or "")
    if match is None:
        raise ValidationError(f"Invalid query, expected SELECT ... FROM ... WHERE ...: {text!r}")

    parsed = ParsedQuery(
        columns=_parse_columns(match.group("columns"), criteria_names),
        table=match.group("table"),
    )

    for condition in _AND_RE.split(match.group("where")):
        _apply_condition(parsed, condition.strip(), criteria_names)

    return parsed


def filter_and_project(
    entries: Sequence[SampleEntry],
    parsed: ParsedQuery,
    criteria_names: Sequence[str],
) -> List[Dict[str, str]]:
    "Εφαρμόζει τα φίλτρα ισότητας με pandas και κρατά μόνο τις ζητούμενες στήλες."
    df = entries_to_frame(entries, criteria_names)
    if df.empty:
        return []

    mask = pd.Series(True, index=df.index)
    for column, value in parsed.attribute_filters:
        mask &= df[column] == value

    selected = df.loc[mask, list(parsed.columns)]
    return selected.astype(str).to_dict(orient="records")


def execute_query(tree: KDTree, parsed: ParsedQuery, criteria_names: Sequence[str]) -> List[Dict[str, str]]:
    "Range search με τα αριθμητικά όρια και μετά φιλτράρισμα/προβολή."
    hits = tree.range_query(parsed.low, parsed.high)
    entries = [SampleEntry(point=leaf.point, attributes=leaf.attributes) for leaf in hits]
    return filter_and_project(entries, parsed, criteria_names)


def run_query(tree: KDTree, text: str, criteria_names: Sequence[str]) -> List[Dict[str, str]]:
    return execute_query(tree, parse_query(text, criteria_names), criteria_names)
