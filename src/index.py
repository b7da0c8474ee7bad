from __future__ import annotations
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from composite_key import Point, check_axis
from errors import StateError
from kd_tree import KDLeaf, KDTree
from query import run_query
from sample_io import load_sample, save_sample
from sample_store import SampleEntry, SampleStore, make_entry, require_non_empty


class SampleIndex:
    """Το δείγμα μαζί με το KD-Tree που προκύπτει από αυτό.

Κάθε αλλαγή (insert, load) χτίζει πρώτα ολόκληρο νέο δέντρο και μετά
αντικαθιστά store και δέντρο μαζί, οπότε ένα σφάλμα δεν αλλάζει τίποτα."""

    def __init__(self, criteria_names: Optional[Sequence[str]] = None):
        self._store: Optional[SampleStore] = None
        self._tree = KDTree([])
        if criteria_names is not None:
            self._publish(SampleStore(tuple(criteria_names)))

    def _publish(self, store: SampleStore) -> None:
        #prota to neo dentro, meta i antikatastasi
        tree = KDTree(store.entries, axis_names=store.axis_names)
        self._store, self._tree = store, tree

    @classmethod
    def from_file(cls, path: str | Path) -> "SampleIndex":
        index = cls()
        index.load(path)
        return index

    @property
    def criteria_names(self) -> Tuple[str, ...]:
        return self._store.criteria_names if self._store is not None else ()

    @property
    def tree(self) -> KDTree:
        return self._tree

    @property
    def store(self) -> Optional[SampleStore]:
        return self._store

    @property
    def entries(self) -> Tuple[SampleEntry, ...]:
        return self._store.entries if self._store is not None else ()

    def __len__(self) -> int:
        return len(self.entries)

    def is_empty(self) -> bool:
        "Επιστρέφει True αν δεν υπάρχει κανένα σημείο."
        return self._tree.is_empty()

    def require_points(self, action: str) -> SampleStore:
        if self._store is None:
            raise StateError(f"Cannot {action}: no sample has been loaded")
        require_non_empty(self._store, action)
        return self._store

    def insert(self, point: Sequence[float], attributes: Sequence[str] = ()) -> SampleEntry:
        "Προσθέτει σημείο και ξαναχτίζει το δέντρο· DuplicateError για ίδιες συντεταγμένες."
        if self._store is None:
            raise StateError("Cannot insert a point: the criteria names are unknown (load a sample first)")

        entry = make_entry(point, attributes, self._store.criteria_names)
        self._publish(self._store.with_entry(entry))
        return entry

    def find_extreme(self, axis: int, maximum: bool = False) -> Optional[Point]:
        check_axis(axis)
        self.require_points("find the maximum" if maximum else "find the minimum")
        return self._tree.find_extreme(axis, maximum)

    def find_min(self, axis: int) -> Optional[Point]:
        return self.find_extreme(axis, maximum=False)

    def find_max(self, axis: int) -> Optional[Point]:
        return self.find_extreme(axis, maximum=True)

    def range_query(self, low: Sequence[float], high: Sequence[float]) -> List[KDLeaf]:
        "Σημεία με low[i] <= p[i] <= high[i] και στους δύο άξονες."
        self.require_points("run a range search")
        return self._tree.range_query(low, high)

    def run_query(self, text: str) -> List[Dict[str, str]]:
        "Εκτελεί SELECT ... WHERE ... και επιστρέφει λίστα από column -> value."
        store = self.require_points("run a query")
        return run_query(self._tree, text, store.criteria_names)

    def render(self) -> str:
        self.require_points("display the tree")
        return self._tree.render()

    def load(self, path: str | Path) -> None:
        "Αντικαθιστά όλο το δείγμα με το περιεχόμενο του αρχείου."
        self._publish(load_sample(path))

    def save(self, path: str | Path) -> Path:
        store = self.require_points("save")
        return save_sample(store, path)
