"""Guarantee non-overlapping nodes inside the canvas."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from diagram_engine.config import CanvasConfig, ResolverConfig
from diagram_engine.domain.errors import LayoutInfeasible
from diagram_engine.domain.layout import Layout, Node
from diagram_engine.utils.logging import get_logger

logger = get_logger(__name__)

# Direction step for coincident centers (radians)
GOLDEN_ANGLE = math.pi * (3 - math.sqrt(5))
_EPS = 1e-9


def count_overlaps(nodes: Sequence[Node]) -> int:
    """Number of node pairs whose rectangles overlap."""
    total = 0
    for i in range(len(nodes)):
        for j in range(i + 1, len(nodes)):
            if nodes[i].intersects(nodes[j]):
                total += 1
    return total


@dataclass(frozen=True)
class ResolutionResult:
    """Outcome of collision resolution."""

    nodes: Tuple[Node, ...]
    overlap_count: int
    iterations: int
    feasible: bool
    used_grid_fallback: bool = False
    width: float = 0.0
    height: float = 0.0

    def raise_for_infeasible(self) -> None:
        """Raise LayoutInfeasible if overlaps could not be removed."""
        if not self.feasible:
            raise LayoutInfeasible(len(self.nodes), self.overlap_count, self.width, self.height)


class CollisionResolver:
    """Clamps nodes into the canvas and pushes overlapping nodes apart.

    Greedy and deterministic: pairs are visited in array order and the later
    node of an overlapping pair is the one that moves. When the greedy passes
    stall, nodes are re-tiled on a grid if the canvas can hold them.
    """

    def __init__(
        self,
        canvas: Optional[CanvasConfig] = None,
        config: Optional[ResolverConfig] = None,
    ):
        self.canvas = canvas or CanvasConfig()
        self.config = config or ResolverConfig()

    def clamp(self, node: Node) -> Node:
        x = max(0.0, min(node.x, self.canvas.width - node.w))
        y = max(0.0, min(node.y, self.canvas.height - node.h))
        if x == node.x and y == node.y:
            return node
        return node.moved_to(x, y)

    def _separate(self, anchor: Node, mover: Node, index: int) -> Node:
        """Move ``mover`` away from ``anchor`` until their rectangles clear."""
        delta = np.subtract(mover.center, anchor.center)
        distance = float(np.linalg.norm(delta))
        if distance < _EPS:
            angle = index * GOLDEN_ANGLE
            direction = np.array([math.cos(angle), math.sin(angle)])
            distance = 0.0
        else:
            direction = delta / distance

        gap = self.canvas.min_gap
        required = (
            (anchor.w + mover.w) / 2 + gap,
            (anchor.h + mover.h) / 2 + gap,
        )
        # Travel along the direction needed to clear either axis; take the shorter
        candidates = [
            req / abs(component) - distance
            for req, component in zip(required, direction)
            if abs(component) > _EPS
        ]
        step = max(0.0, min(candidates))
        x, y = np.array([mover.x, mover.y]) + step * direction
        return self.clamp(mover.moved_to(float(x), float(y)))

    def _grid_fallback(self, nodes: List[Node]) -> Optional[List[Node]]:
        """Row-major grid of node-sized cells, or None if it cannot fit."""
        n = len(nodes)
        gap = self.canvas.min_gap
        cell_w = max(node.w for node in nodes) + gap
        cell_h = max(node.h for node in nodes) + gap
        max_columns = int((self.canvas.width + gap) // cell_w)
        max_rows = int((self.canvas.height + gap) // cell_h)
        if max_columns < 1 or max_rows < 1 or max_columns * max_rows < n:
            return None

        columns = min(max_columns, max(math.ceil(math.sqrt(n)), math.ceil(n / max_rows)))
        rows = math.ceil(n / columns)
        x0 = (self.canvas.width - (columns * cell_w - gap)) / 2
        y0 = (self.canvas.height - (rows * cell_h - gap)) / 2
        return [
            self.clamp(node.moved_to(x0 + (i % columns) * cell_w, y0 + (i // columns) * cell_h))
            for i, node in enumerate(nodes)
        ]

    def resolve(self, nodes: Sequence[Node]) -> ResolutionResult:
        """Remove overlaps.

        Args:
            nodes: Raw placement

        Returns:
            ResolutionResult; ``feasible`` is False only when overlaps remain
        """
        width, height = self.canvas.width, self.canvas.height
        current = [self.clamp(node) for node in nodes]

        if count_overlaps(current) == 0:
            return ResolutionResult(tuple(current), 0, 0, True, width=width, height=height)

        iterations = 0
        while iterations < self.config.max_iterations:
            iterations += 1
            changed = False
            for i in range(len(current)):
                for j in range(i + 1, len(current)):
                    if not current[i].intersects(current[j]):
                        continue
                    moved = self._separate(current[i], current[j], j)
                    if moved != current[j]:
                        current[j] = moved
                        changed = True
            if not changed or count_overlaps(current) == 0:
                break

        overlaps = count_overlaps(current)
        if overlaps == 0:
            logger.debug(f"Resolved {len(current)} nodes in {iterations} passes")
            return ResolutionResult(tuple(current), 0, iterations, True, width=width, height=height)

        grid = self._grid_fallback(current)
        if grid is not None:
            logger.debug(
                f"Greedy passes left {overlaps} overlaps; re-tiled {len(grid)} nodes on a grid"
            )
            return ResolutionResult(
                tuple(grid), 0, iterations, True, True, width=width, height=height
            )

        error = LayoutInfeasible(len(current), overlaps, width, height)
        logger.warning(f"{error}; returning best-effort layout")
        return ResolutionResult(
            tuple(current), overlaps, iterations, False, width=width, height=height
        )

    def resolve_layout(self, layout: Layout) -> Tuple[Layout, ResolutionResult]:
        """Resolve a layout's nodes, keeping its edges and bounds."""
        result = self.resolve(layout.nodes)
        return layout.with_nodes(list(result.nodes)), result
