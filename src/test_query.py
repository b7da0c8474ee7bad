from __future__ import annotations

import numpy as np
import pytest

from errors import ValidationError
from kd_tree import KDTree
from query import parse_query, run_query
from sample_store import build_store


NAMES = ("year", "height", "department")
ROWS = [
    ((1.0, 164.63), ("chimie",)),
    ((2.0, 167.45), ("math",)),
    ((3.0, 182.0), ("informatique",)),
    ((4.0, 176.33), ("physique",)),
    ((4.0, 181.13), ("biologie",)),
]


def make_tree():
    store = build_store(NAMES, ROWS)
    return KDTree(store.entries, axis_names=store.axis_names)


def test_parse_bounds():
    parsed = parse_query("SELECT department FROM P WHERE year = 3 AND height in [170,190]", NAMES)
    assert parsed.columns == ("department",)
    assert parsed.table == "P"
    assert parsed.low == [3.0, 170.0]
    assert parsed.high == [3.0, 190.0]
    assert parsed.attribute_filters == []


def test_parse_one_sided_and_repeated_conditions():
    parsed = parse_query("select year from T where height >= 170 and height <= 180 and height >= 172", NAMES)
    assert parsed.low == [float("-inf"), 172.0]
    assert parsed.high == [float("inf"), 180.0]


def test_parse_attribute_filters():
    parsed = parse_query("SELECT year FROM P WHERE department = math AND year <= 3", NAMES)
    assert parsed.attribute_filters == [("department", "math")]
    assert parsed.high[0] == 3.0


def test_scenario_query():
    results = run_query(make_tree(), "SELECT department FROM P WHERE year = 3 AND height in [170,190]", NAMES)
    assert results == [{"department": "informatique"}]


def test_query_multiple_columns():
    results = run_query(make_tree(), "SELECT department,year FROM P WHERE height >= 170 AND height <= 180", NAMES)
    assert results == [{"department": "physique", "year": "4.0"}]


def test_query_one_sided_operators():
    tree = make_tree()
    results = run_query(tree, "SELECT department FROM P WHERE height >= 180", NAMES)
    assert {r["department"] for r in results} == {"informatique", "biologie"}

    results = run_query(tree, "SELECT department FROM P WHERE height <= 165", NAMES)
    assert results == [{"department": "chimie"}]

    results = run_query(tree, "SELECT department FROM P WHERE year = 1 AND height <= 170", NAMES)
    assert results == [{"department": "chimie"}]


def test_query_attribute_equality():
    tree = make_tree()
    results = run_query(tree, "SELECT * FROM P WHERE department = math", NAMES)
    assert results == [{"year": "2.0", "height": "167.45", "department": "math"}]

    results = run_query(tree, "SELECT year FROM P WHERE department = math AND year >= 3", NAMES)
    assert results == []

    results = run_query(tree, "SELECT year FROM P WHERE department = nobody", NAMES)
    assert results == []


def test_query_in_with_spaces():
    results = run_query(make_tree(), "SELECT height FROM P WHERE year in [4, 4]", NAMES)
    assert sorted(r["height"] for r in results) == ["176.33", "181.13"]


@pytest.mark.parametrize(
    "text",
    [
        "SELECT department FROM P WHERE salary = 3",
        "SELECT salary FROM P WHERE year = 3",
        "SELECT department FROM P WHERE year < 3",
        "SELECT department FROM P WHERE year != 3",
        "SELECT year FROM P WHERE department >= math",
        "SELECT year FROM P WHERE department in [a,b]",
        "SELECT year FROM P WHERE year = abc",
        "SELECT year FROM P WHERE year = nan",
        "SELECT year FROM P WHERE year in [1]",
        "SELECT year FROM P WHERE year",
        "SELECT year FROM P",
        "DELETE FROM P WHERE year = 1",
        "",
    ],
)
def test_invalid_queries(text):
    with pytest.raises(ValidationError):
        run_query(make_tree(), text, NAMES)


@pytest.mark.parametrize("seed", range(5))
def test_numeric_query_matches_range_search(seed):
    rng = np.random.default_rng(seed)
    tree = make_tree()

    for _ in range(20):
        years = np.sort(rng.integers(0, 6, size=2)).astype(float)
        heights = np.sort(rng.uniform(160.0, 190.0, size=2)).round(2)
        text = (
            f"SELECT year,height FROM P WHERE year in [{years[0]},{years[1]}] "
            f"AND height >= {heights[0]} AND height <= {heights[1]}"
        )
        from_query = {(float(r["year"]), float(r["height"])) for r in run_query(tree, text, NAMES)}
        from_range = {leaf.point for leaf in tree.range_query([years[0], heights[0]], [years[1], heights[1]])}
        assert from_query == from_range


if __name__ == "__main__":
    raise SystemExit(pytest.main([__file__]))
