# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Knee tree of the distance-based Pareto exploration.

Every node stands for a knee point ``g`` of the staircase separating the
known-infeasible region from the unknown one. ``g`` is the meet of ``n``
UNSAT witnesses, one per dimension. A leaf carries the radius ``r`` of the
largest unexplored cube anchored at ``g``; interior nodes summarize their
subtrees.

Nodes live in an arena keyed by integer id. Each node has one descendant
slot per dimension holding a child id or None.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator, Optional, Sequence

from costexplorer.exceptions import KneeInvariantError
from costexplorer.exploration.point import Point, meet_all

logger = logging.getLogger(__name__)


def threshold_vector(witnesses: Sequence[Point]) -> Point:
    """``h[i] = min(witnesses[j][i] for j != i)``.

    A leaf may only split in dimension ``i`` for UNSAT points below ``h[i]``.
    """
    dims = len(witnesses)
    return Point(tuple(
        min(witnesses[j][i] for j in range(dims) if j != i) for i in range(dims)
    ))


@dataclass
class KneeNode:
    """One knee of the tree.

    Attributes:
        generator: Knee point g, the meet of the witnesses
        bound: Outer bound b; g + r for a leaf, the join of child bounds otherwise
        radius: Distance r to the nearest SAT point (max over children)
        threshold: Split threshold h
        witnesses: UNSAT generators, one per dimension
        descendants: Child id per dimension, or None
        parent: Id of the parent node, None for the root
    """

    generator: Point
    bound: Point
    radius: float
    threshold: Point
    witnesses: tuple[Point, ...]
    descendants: list[Optional[int]] = field(default_factory=list)
    parent: Optional[int] = None

    def __post_init__(self) -> None:
        if not self.descendants:
            self.descendants = [None] * self.generator.dim

    @property
    def is_leaf(self) -> bool:
        return all(d is None for d in self.descendants)

    def children(self) -> Iterator[tuple[int, int]]:
        """(slot, child id) pairs in dimension order."""
        for slot, child in enumerate(self.descendants):
            if child is not None:
                yield slot, child

    def check_generators(self) -> bool:
        return self.generator == meet_all(self.witnesses)


class KneeTree:
    """Arena of knee nodes rooted at the origin of the unit cube."""

    def __init__(self, dimensions: int):
        if dimensions < 2:
            raise ValueError(f"A knee tree needs at least 2 dimensions, got {dimensions}")
        self.dimensions = dimensions
        self._nodes: dict[int, KneeNode] = {}
        self._next_id = 0

        ones = Point.filled(dimensions, 1.0)
        witnesses = tuple(ones.with_coordinate(j, 0.0) for j in range(dimensions))
        root = KneeNode(
            generator=meet_all(witnesses),
            bound=ones,
            radius=1.0,
            threshold=ones,
            witnesses=witnesses,
        )
        self.root_id: Optional[int] = self._insert(root)

    def _insert(self, node: KneeNode) -> int:
        if not node.check_generators():
            raise KneeInvariantError(
                f"Generator {node.generator} is not the meet of its witnesses "
                f"{', '.join(str(w) for w in node.witnesses)}"
            )
        node_id = self._next_id
        self._next_id += 1
        self._nodes[node_id] = node
        return node_id

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: int) -> bool:
        return node_id in self._nodes

    @property
    def is_empty(self) -> bool:
        return self.root_id is None

    @property
    def root(self) -> Optional[KneeNode]:
        return self._nodes[self.root_id] if self.root_id is not None else None

    def node(self, node_id: int) -> KneeNode:
        return self._nodes[node_id]

    def add_child(self, parent_id: int, slot: int, node: KneeNode) -> int:
        """Attach ``node`` to ``parent_id``'s slot.

        Raises:
            KneeInvariantError: If the node's generator is not the meet of its witnesses
        """
        parent = self._nodes[parent_id]
        if parent.descendants[slot] is not None:
            raise ValueError(f"Slot {slot} of node {parent_id} is already taken")
        node.parent = parent_id
        node_id = self._insert(node)
        parent.descendants[slot] = node_id
        return node_id

    def prune(self, node_id: int) -> None:
        """Detach a node from its parent and drop its subtree from the arena."""
        node = self._nodes[node_id]
        if node.parent is None:
            self.root_id = None
        else:
            parent = self._nodes[node.parent]
            parent.descendants = [None if d == node_id else d for d in parent.descendants]

        stack = [node_id]
        while stack:
            current = self._nodes.pop(stack.pop())
            stack.extend(child for _, child in current.children())
        logger.debug(f"Pruned knee {node.generator}")

    def walk(self) -> Iterator[int]:
        """Node ids in pre-order, children in dimension order."""
        if self.root_id is None:
            return
        stack = [self.root_id]
        while stack:
            node_id = stack.pop()
            yield node_id
            children = [child for _, child in self._nodes[node_id].children()]
            stack.extend(reversed(children))

    def leaves(self) -> Iterator[int]:
        for node_id in self.walk():
            if self._nodes[node_id].is_leaf:
                yield node_id

    def check_generators(self) -> bool:
        """True if every node satisfies the generator invariant."""
        return all(self._nodes[node_id].check_generators() for node_id in self.walk())

    # Propagation

    def propagate_sat(self, s: Point) -> None:
        """Shrink the unexplored cubes that contain the SAT point ``s``."""
        if self.root_id is not None:
            self._propagate_sat(self.root_id, s)

    def _propagate_sat(self, node_id: int, s: Point) -> None:
        node = self._nodes[node_id]
        if not s.less_than_or_equals(node.bound):
            return

        if node.is_leaf:
            node.radius = min(node.radius, node.generator.distance(s))
            node.bound = node.generator.plus(node.radius)
            return

        radius = 0.0
        bound = None
        for _, child_id in node.children():
            self._propagate_sat(child_id, s)
            child = self._nodes[child_id]
            radius = max(radius, child.radius)
            bound = child.bound if bound is None else bound.join(child.bound)
        node.radius = radius
        node.bound = bound

    def propagate_unsat(self, s: Point, sat_points: Sequence[Point]) -> None:
        """Split the knees strictly below the UNSAT point ``s``.

        New knees get their radius from the distance to the nearest point of
        ``sat_points``. Knees left without a split are pruned.
        """
        if self.root_id is not None and not self._propagate_unsat(self.root_id, s, sat_points):
            self.prune(self.root_id)

    def _propagate_unsat(self, node_id: int, s: Point, sat_points: Sequence[Point]) -> bool:
        """Returns False if the node has to be pruned."""
        node = self._nodes[node_id]
        if not node.generator.less_than(s):
            return True

        radius = 0.0
        bound = None

        if node.is_leaf:
            for i in range(self.dimensions):
                if s[i] >= node.threshold[i]:
                    continue
                child_id = self._split(node_id, i, s, sat_points)
                child = self._nodes[child_id]
                radius = max(radius, child.radius)
                bound = child.bound if bound is None else bound.join(child.bound)
        else:
            for _, child_id in list(node.children()):
                if self._propagate_unsat(child_id, s, sat_points):
                    child = self._nodes[child_id]
                    radius = max(radius, child.radius)
                    bound = child.bound if bound is None else bound.join(child.bound)
                else:
                    self.prune(child_id)

        if bound is None:
            return False

        node.radius = radius
        node.bound = bound
        return True

    def _split(self, node_id: int, slot: int, s: Point, sat_points: Sequence[Point]) -> int:
        parent = self._nodes[node_id]
        witnesses = tuple(s if j == slot else w for j, w in enumerate(parent.witnesses))
        generator = meet_all(witnesses)
        radius = min((generator.distance(p) for p in sat_points), default=float("inf"))

        child = KneeNode(
            generator=generator,
            bound=generator.plus(radius),
            radius=radius,
            threshold=threshold_vector(witnesses),
            witnesses=witnesses,
        )
        child_id = self.add_child(node_id, slot, child)
        logger.debug(f"New knee {generator} (r={radius:.4f}) below {parent.generator}")
        return child_id
