from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from composite_key import (
    MAX_KEY,
    MIN_KEY,
    CompositeKey,
    Point,
    check_axis,
    composite_key,
    lower_bound,
    upper_bound,
)
from errors import DuplicateError, ValidationError
from sample_store import SampleEntry


Box = Tuple[Tuple[CompositeKey, CompositeKey], Tuple[CompositeKey, CompositeKey]]  # (mins, maxs)


@dataclass(frozen=True)
class KDLeaf:
    "Φύλλο του KD-Tree: ένα σημείο και τα attributes του."

    point: Point
    attributes: Tuple[str, ...]


@dataclass(frozen=True)
class KDInternal:
    "Εσωτερικός κόμβος: άξονας, split key και τα δύο υποδέντρα."

    axis: int                       #0 gia x, 1 gia y
    split: CompositeKey             #aristera < split <= dexia ston axona axis
    pivot: Point                    #oi pragmatikes syntetagmenes tou median
    left: Optional["KDNode"] = None
    right: Optional["KDNode"] = None


KDNode = Union[KDLeaf, KDInternal]


class KDTree:
    """KD-Tree δύο διαστάσεων με median split πάνω στο CompositeKey.

Τα σημεία ταξινομούνται μία φορά ανά άξονα και σε κάθε επίπεδο χωρίζονται
και οι δύο λίστες χωρίς νέα ταξινόμηση. Τα σημεία βρίσκονται μόνο στα φύλλα.
Το δέντρο δεν αλλάζει μετά την κατασκευή."""

    def __init__(self, entries: Sequence[SampleEntry], axis_names: Sequence[str] = ("x", "y")):
        "Χτίζει το δέντρο από τα entries του δείγματος."

        self.n_points = len(entries)
        self.axis_names = (axis_names[0], axis_names[1])

        if self.n_points == 0:
            self.root: Optional[KDNode] = None
        else:
            by_x, by_y = self._presort(entries)
            self.root = self._build(by_x, by_y, depth=0)

    @staticmethod
    def _presort(entries: Sequence[SampleEntry]) -> Tuple[List[SampleEntry], List[SampleEntry]]:
        "Ταξινομεί μία φορά ανά άξονα με τη σειρά του CompositeKey."
        coords = np.array([e.point for e in entries], dtype=float)

        #np.lexsort: to teleutaio kleidi einai to kyrio
        order_x = np.lexsort((coords[:, 1], coords[:, 0]))
        order_y = np.lexsort((coords[:, 0], coords[:, 1]))

        #idia simeia den xorizontai pote apo to median split
        ordered = coords[order_x]
        same = np.all(ordered[1:] == ordered[:-1], axis=1)
        if np.any(same):
            x, y = ordered[1:][same][0]
            raise DuplicateError(f"Point ({x}, {y}) appears more than once")

        return [entries[i] for i in order_x], [entries[i] for i in order_y]

    def _build(
        self,
        by_x: List[SampleEntry],
        by_y: List[SampleEntry],
        depth: int,
    ) -> Optional[KDNode]:
        "Αναδρομική κατασκευή: median του τρέχοντος άξονα και διαμέριση των δύο λιστών."
        if not by_x:
            return None

        if len(by_x) == 1:
            entry = by_x[0]
            return KDLeaf(point=entry.point, attributes=entry.attributes)

        axis = depth % 2
        ordered = by_x if axis == 0 else by_y

        median = ordered[len(ordered) // 2]
        split = composite_key(median.point, axis)

        left_x, right_x = self._partition(by_x, axis, split)
        left_y, right_y = self._partition(by_y, axis, split)

        return KDInternal(
            axis=axis,
            split=split,
            pivot=median.point,
            left=self._build(left_x, left_y, depth + 1),
            right=self._build(right_x, right_y, depth + 1),
        )

    @staticmethod
    def _partition(
        entries: List[SampleEntry],
        axis: int,
        split: CompositeKey,
    ) -> Tuple[List[SampleEntry], List[SampleEntry]]:
        "Χωρίζει σε < split και >= split κρατώντας τη σχετική σειρά."
        lower: List[SampleEntry] = []
        upper: List[SampleEntry] = []
        for entry in entries:
            if composite_key(entry.point, axis) < split:
                lower.append(entry)
            else:
                upper.append(entry)
        return lower, upper

    def is_empty(self) -> bool:
        "Επιστρέφει True αν το δέντρο είναι άδειο."
        return self.root is None

    def __len__(self) -> int:
        "Επιστρέφει πόσα σημεία περιέχει το δέντρο."
        return self.n_points

    def leaves(self) -> List[KDLeaf]:
        "Όλα τα φύλλα, από αριστερά προς τα δεξιά."
        results: List[KDLeaf] = []
        self._collect(self.root, results)
        return results

    def depth(self) -> int:
        "Ύψος του δέντρου (0 για άδειο, 1 για ένα φύλλο)."

        def height(node: Optional[KDNode]) -> int:
            if node is None:
                return 0
            if isinstance(node, KDLeaf):
                return 1
            return 1 + max(height(node.left), height(node.right))

        return height(self.root)

    def _collect(self, node: Optional[KDNode], results: List[KDLeaf]) -> None:
        #mazema olon ton fyllon xoris elegxo orion
        if node is None:
            return
        if isinstance(node, KDLeaf):
            results.append(node)
            return
        self._collect(node.left, results)
        self._collect(node.right, results)

    # min / max
    def find_min(self, dim: int) -> Optional[Point]:
        "Το σημείο με την ελάχιστη τιμή στον άξονα dim."
        return self.find_extreme(dim, maximum=False)

    def find_max(self, dim: int) -> Optional[Point]:
        "Το σημείο με τη μέγιστη τιμή στον άξονα dim."
        return self.find_extreme(dim, maximum=True)

    def find_extreme(self, dim: int, maximum: bool = False) -> Optional[Point]:
        """Ακραίο σημείο στον άξονα dim (ισοπαλίες με CompositeKey(·, dim)).
Επιστρέφει None για άδειο δέντρο."""
        check_axis(dim)
        return self._extreme(self.root, dim, maximum)

    def _extreme(self, node: Optional[KDNode], dim: int, maximum: bool) -> Optional[Point]:
        if node is None:
            return None

        if isinstance(node, KDLeaf):
            return node.point

        if node.axis == dim:
            #pruning: to min einai aristera i o pivot, to max dexia i o pivot
            child = node.right if maximum else node.left
            candidates = [self._extreme(child, dim, maximum), node.pivot]
        else:
            candidates = [
                self._extreme(node.left, dim, maximum),
                self._extreme(node.right, dim, maximum),
                node.pivot,
            ]

        found = [p for p in candidates if p is not None]
        if maximum:
            return max(found, key=lambda p: composite_key(p, dim))
        return min(found, key=lambda p: composite_key(p, dim))

    # range query
    def range_query(
        self,
        lower_bounds: Sequence[float],
        upper_bounds: Sequence[float],
    ) -> List[KDLeaf]:
        "Επιστρέφει τα φύλλα εντός του ορθογωνίου [lower_bounds, upper_bounds] (κλειστά όρια)."

        if len(lower_bounds) != 2 or len(upper_bounds) != 2:
            raise ValidationError("Bounds must have length 2")

        bounds = np.array([*lower_bounds, *upper_bounds], dtype=float)
        if np.any(np.isnan(bounds)):
            raise ValidationError(f"Bounds must not be NaN: {bounds.tolist()}")

        results: List[KDLeaf] = []
        if self.root is None:
            return results

        low = (lower_bound(bounds[0]), lower_bound(bounds[1]))
        high = (upper_bound(bounds[2]), upper_bound(bounds[3]))

        root_box: Box = ((MIN_KEY, MIN_KEY), (MAX_KEY, MAX_KEY))
        self._visit(self.root, root_box, low, high, results)
        return results

    def _visit(self, node: Optional[KDNode], box: Box, low, high, results: List[KDLeaf]) -> None:
        "Αποφασίζει για ένα υποδέντρο με βάση το bounding box του."
        if node is None:
            return

        if self._contained(box, low, high):
            #olo to kouti einai mesa, mazevoume ta fylla xoris elegxo
            self._collect(node, results)
        elif self._intersects(box, low, high):
            self._search(node, box, low, high, results)

    def _search(self, node: KDNode, box: Box, low, high, results: List[KDLeaf]) -> None:
        "Αναδρομική συνάρτηση για range query."
        if isinstance(node, KDLeaf):
            if self._leaf_inside(node, low, high):
                results.append(node)
            return

        mins, maxs = box
        axis = node.axis

        left_maxs = tuple(node.split if i == axis else maxs[i] for i in range(2))
        right_mins = tuple(node.split if i == axis else mins[i] for i in range(2))

        self._visit(node.left, (mins, left_maxs), low, high, results)
        self._visit(node.right, (right_mins, maxs), low, high, results)

    @staticmethod
    def _leaf_inside(leaf: KDLeaf, low, high) -> bool:
        for i in range(2):
            key = composite_key(leaf.point, i)
            if key < low[i] or key > high[i]:
                return False
        return True

    @staticmethod
    def _contained(box: Box, low, high) -> bool:
        "Το box είναι ολόκληρο μέσα στο [low, high]."
        mins, maxs = box
        return all(low[i] <= mins[i] and maxs[i] <= high[i] for i in range(2))

    @staticmethod
    def _intersects(box: Box, low, high) -> bool:
        "Το box τέμνει το [low, high]."
        mins, maxs = box
        return all(maxs[i] >= low[i] and mins[i] <= high[i] for i in range(2))

    # apeikonisi
    def render(self) -> str:
        "Το δέντρο ως κείμενο, στραμμένο στο πλάι (δεξί υποδέντρο πάνω)."
        lines: List[str] = []
        if self.root is not None:
            self._render_node(self.root, "", "root", lines)
        return "\n".join(lines)

    def _render_node(self, node: KDNode, prefix: str, position: str, lines: List[str]) -> None:
        if isinstance(node, KDInternal) and node.right is not None:
            up_prefix = prefix + ("|   " if position == "down" else "    ")
            self._render_node(node.right, up_prefix, "up", lines)

        label = {"root": "Root ", "up": "/-- ", "down": "\\-- "}[position]
        lines.append(prefix + label + self._describe(node))

        if isinstance(node, KDInternal) and node.left is not None:
            down_prefix = prefix + ("|   " if position == "up" else "    ")
            self._render_node(node.left, down_prefix, "down", lines)

    def _describe(self, node: KDNode) -> str:
        if isinstance(node, KDInternal):
            return f"Split {self.axis_names[node.axis]} = {node.split.primary[0]}"
        x, y = node.point
        return f"({x}, {y}) [{', '.join(node.attributes)}]"
