from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Tuple

import numpy as np
import pandas as pd

from errors import SampleIndexError
from index import SampleIndex
from kd_tree import KDTree
from sample_io import save_sample
from sample_store import SampleStore, build_store
from settings import IndexSettings


@dataclass
class RangeParams:

    "Όρια ενός ορθογωνίου για range search."
    x_min: float
    x_max: float
    y_min: float
    y_max: float


def make_random_store(n_points: int, seed: int = 42) -> SampleStore:
    "Τυχαίο δείγμα n σημείων (year, height, department) για benchmark."
    rng = np.random.default_rng(seed)
    departments = np.array(["chimie", "math", "informatique", "physique", "biologie"])

    #akeraia xronia me polla koina x gia na doulevei to tie-break
    years = rng.integers(1, 6, size=n_points).astype(float)
    heights = np.round(rng.uniform(150.0, 200.0, size=n_points), 2)
    depts = rng.choice(departments, size=n_points)

    df = pd.DataFrame({"year": years, "height": heights, "department": depts})
    df = df.drop_duplicates(subset=["year", "height"])

    rows = [((r.year, r.height), (r.department,)) for r in df.itertuples(index=False)]
    return build_store(["year", "height", "department"], rows)


#measure to build time + index
def build_kd_index(store: SampleStore) -> Tuple[KDTree, float]:
    t0 = time.perf_counter()
    kd_tree = KDTree(store.entries, axis_names=store.axis_names)
    t1 = time.perf_counter()
    return kd_tree, t1 - t0


def range_candidates_kdtree(kd_tree: KDTree, params: RangeParams, repeats: int = 1) -> Tuple[int, float]:
    t0 = time.perf_counter()
    for _ in range(repeats):
        hits = kd_tree.range_query([params.x_min, params.y_min], [params.x_max, params.y_max])
    t1 = time.perf_counter()
    return len(hits), (t1 - t0) / repeats


def range_candidates_pandas(df: pd.DataFrame, params: RangeParams, repeats: int = 1) -> Tuple[int, float]:
    "Brute-force baseline με pandas masks."
    x_col, y_col = df.columns[0], df.columns[1]
    t0 = time.perf_counter()
    for _ in range(repeats):
        mask = df[x_col].between(params.x_min, params.x_max) & df[y_col].between(params.y_min, params.y_max)
        result = df[mask]
    t1 = time.perf_counter()
    return len(result), (t1 - t0) / repeats


def evaluate_index(settings: IndexSettings) -> Dict[str, Dict[str, float | int]]:
    store = make_random_store(settings.bench_points, settings.bench_seed)
    df = store.to_frame()
    print(f"[BENCH] Random sample: {len(store)} points")

    kd_tree, build_time = build_kd_index(store)

    summary: Dict[str, Dict[str, float | int]] = {}
    queries = {
        "narrow": RangeParams(2.0, 3.0, 170.0, 172.0),
        "wide": RangeParams(1.0, 5.0, 150.0, 200.0),
        "empty": RangeParams(10.0, 20.0, 0.0, 10.0),
    }
    for name, params in queries.items():
        kd_count, kd_time = range_candidates_kdtree(kd_tree, params, settings.bench_repeats)
        pd_count, pd_time = range_candidates_pandas(df, params, settings.bench_repeats)
        if kd_count != pd_count:
            print(f"[BENCH] Mismatch on '{name}': kd-tree {kd_count} vs pandas {pd_count}")
        summary[name] = {
            "build": build_time,
            "kd": kd_time,
            "pandas": pd_time,
            "count": kd_count,
        }
    return summary


def print_summary(summary: Dict[str, Dict[str, float | int]]) -> None:
    print("\n")
    print("RANGE SEARCH PERFORMANCE (seconds)")
    print(f"{'Query':<8} {'Build':>8} {'KD-Tree':>10} {'Pandas':>10} {'Count':>8}")
    for name, stats in summary.items():
        print(
            f"{name:<8} "
            f"{stats['build']:8.4f} "
            f"{stats['kd']:10.6f} "
            f"{stats['pandas']:10.6f} "
            f"{stats['count']:8d}"
        )


#console
def ask(prompt: str) -> str:
    return input(prompt).strip()


def ask_float(prompt: str) -> float:
    while True:
        text = ask(prompt)
        try:
            return float(text)
        except ValueError:
            print("Invalid input, please enter a number.")


def ask_int(prompt: str, min_value: int) -> int:
    while True:
        text = ask(prompt)
        try:
            value = int(text)
        except ValueError:
            print("Invalid input, please enter an integer.")
            continue
        if value < min_value:
            print(f"Value must be >= {min_value}.")
        else:
            return value


def ask_axis(index: SampleIndex) -> int:
    names = index.criteria_names
    while True:
        axis = ask_int(f"Criterion (0 for {names[0]}, 1 for {names[1]}): ", 0)
        if axis in (0, 1):
            return axis
        print("Please enter 0 or 1.")


class ConsoleApp:

    "Απλό μενού κονσόλας γύρω από το SampleIndex."
    def __init__(self, settings: IndexSettings | None = None):
        self.settings = settings or IndexSettings()
        self.index = SampleIndex()
        self.actions: Dict[str, Tuple[str, Callable[[], None]]] = {
            "1": ("Load a sample from a file", self.load),
            "2": ("Save the sample to a file", self.save),
            "3": ("Add a point", self.add_point),
            "4": ("Display the tree", self.show_tree),
            "5": ("Find the minimum for a criterion", lambda: self.find_extreme(maximum=False)),
            "6": ("Find the maximum for a criterion", lambda: self.find_extreme(maximum=True)),
            "7": ("Range search", self.range_search),
            "8": ("Build a sample interactively", self.build_sample),
            "9": ("Run a SQL query", self.run_query),
            "10": ("Benchmark KD-Tree vs pandas", self.benchmark),
        }

    def load(self) -> None:
        name = ask(f"File name [{self.settings.sample_file}]: ") or self.settings.sample_file
        self.index.load(self.settings.resolve(name))
        print("[INFO] Sample loaded.")

    def save(self) -> None:
        name = ask("File name: ")
        path = self.index.save(self.settings.resolve(name))
        print(f"[INFO] Sample saved to {path}.")

    def add_point(self) -> None:
        names = self.index.criteria_names
        if not names:
            print("[INFO] Load or build a sample first.")
            return
        point = [ask_float(f"Value for {names[0]}: "), ask_float(f"Value for {names[1]}: ")]
        attributes = [ask(f"Value for {name}: ") for name in names[2:]]
        self.index.insert(point, attributes)
        print("[INFO] Point added and KD-Tree rebuilt.")

    def show_tree(self) -> None:
        print(self.index.render())

    def find_extreme(self, maximum: bool) -> None:
        self.index.require_points("find the maximum" if maximum else "find the minimum")
        axis = ask_axis(self.index)
        point = self.index.find_extreme(axis, maximum)
        label = "Maximum" if maximum else "Minimum"
        print(f"{label} for {self.index.criteria_names[axis]}: {point[axis]}  (point {point})")

    def range_search(self) -> None:
        self.index.require_points("run a range search")
        names = self.index.criteria_names
        low: List[float] = []
        high: List[float] = []
        for name in names[:2]:
            low.append(ask_float(f"Low value for {name}: "))
            high.append(ask_float(f"High value for {name}: "))

        hits = self.index.range_query(low, high)
        if not hits:
            print("No point found in the given range.")
            return
        print("Points in range:")
        for leaf in hits:
            print(f"  {leaf.point} {list(leaf.attributes)}")

    def build_sample(self) -> None:
        print("Interactive sample construction")
        m = ask_int("Number of criteria: ", 2)
        names = [ask(f"Name of criterion {i + 1}: ") for i in range(m)]
        n = ask_int("Number of points: ", 1)

        rows = []
        for i in range(n):
            print(f"Point {i + 1}:")
            point = (ask_float(f"  {names[0]}: "), ask_float(f"  {names[1]}: "))
            attributes = [ask(f"  {name}: ") for name in names[2:]]
            rows.append((point, attributes))

        store = build_store(names, rows)
        name = ask("File name for the sample: ")
        path = save_sample(store, self.settings.resolve(name))
        self.index.load(path)
        print("[INFO] Sample built and loaded.")

    def run_query(self) -> None:
        text = ask("SQL query: ")
        results = self.index.run_query(text)
        if not results:
            print("No result for the given query.")
            return
        print("Query results:")
        for record in results:
            print(f"  {record}")

    def benchmark(self) -> None:
        print_summary(evaluate_index(self.settings))

    def run(self) -> None:
        while True:
            print("\nOptions:")
            for key, (label, _) in self.actions.items():
                print(f"{key:>2}. {label}")
            print(" 0. Quit")

            choice = ask("Choose an option: ")
            if choice == "0":
                print("Bye!")
                return

            action = self.actions.get(choice)
            if action is None:
                print("Invalid option.")
                continue

            try:
                action[1]()
            except (SampleIndexError, OSError) as e:
                print(f"[ERROR] {e}")


#i main
def main():
    settings = IndexSettings()
    app = ConsoleApp(settings)

    if settings.sample_path.exists():
        try:
            app.index.load(settings.sample_path)
        except (SampleIndexError, OSError) as e:
            print(f"[ERROR] Default sample not loaded: {e}")

    try:
        app.run()
    except (EOFError, KeyboardInterrupt):
        print("\nBye!")


if __name__ == "__main__":
    main()
