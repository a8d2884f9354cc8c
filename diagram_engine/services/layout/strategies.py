"""Type-specific placement algorithms.

Every strategy is a pure function ``(nodes, edges, canvas) -> list[Node]``
that assigns the fixed node size from the canvas config. Placements aim to
stay on the canvas but do not guarantee it; the collision resolver clamps
and separates afterwards.
"""

from __future__ import annotations

import math
from typing import Callable, Dict, List, Optional, Sequence

import numpy as np

from diagram_engine.config import CanvasConfig
from diagram_engine.domain.diagram import DiagramType
from diagram_engine.domain.layout import Bounds, DiagramAnalysis, Edge, Layout, Node, NodeSpec
from diagram_engine.utils.logging import get_logger

logger = get_logger(__name__)

PlacementFunction = Callable[[Sequence[NodeSpec], Sequence[Edge], CanvasConfig], List[Node]]


def _node(spec: NodeSpec, x: float, y: float, canvas: CanvasConfig) -> Node:
    return Node(
        id=spec.id,
        label=spec.label,
        x=float(x),
        y=float(y),
        w=canvas.node_width,
        h=canvas.node_height,
    )


def _centered_start(extent: float, available: float, fallback: float) -> float:
    """Offset that centers ``extent`` in ``available``, or ``fallback`` if it does not fit."""
    if extent <= available:
        return (available - extent) / 2
    return fallback


def _ring(
    nodes: Sequence[NodeSpec],
    canvas: CanvasConfig,
    radius: float,
    start_angle: float,
) -> List[Node]:
    cx, cy = canvas.center
    n = len(nodes)
    angles = start_angle + 2 * np.pi * np.arange(n) / n
    xs = cx + radius * np.cos(angles) - canvas.node_width / 2
    ys = cy + radius * np.sin(angles) - canvas.node_height / 2
    return [_node(spec, x, y, canvas) for spec, x, y in zip(nodes, xs, ys)]


def hierarchical_layout(
    nodes: Sequence[NodeSpec], edges: Sequence[Edge], canvas: CanvasConfig
) -> List[Node]:
    """Root centered at the top, remaining nodes in centered rows below it."""
    if not nodes:
        return []

    nw, nh = canvas.node_width, canvas.node_height
    placed = [_node(nodes[0], (canvas.width - nw) / 2, canvas.margin, canvas)]

    children = nodes[1:]
    if not children:
        return placed

    per_row = math.ceil(math.sqrt(len(children)))
    for start in range(0, len(children), per_row):
        row = children[start : start + per_row]
        row_index = start // per_row
        row_width = len(row) * nw + (len(row) - 1) * canvas.spacing
        x0 = (canvas.width - row_width) / 2
        y = canvas.margin + (row_index + 1) * (nh + canvas.spacing)
        for j, spec in enumerate(row):
            placed.append(_node(spec, x0 + j * (nw + canvas.spacing), y, canvas))
    return placed


def radial_layout(
    nodes: Sequence[NodeSpec], edges: Sequence[Edge], canvas: CanvasConfig
) -> List[Node]:
    """Fixed-radius circle around the canvas center."""
    if not nodes:
        return []
    if len(nodes) == 1:
        cx, cy = canvas.center
        return [_node(nodes[0], cx - canvas.node_width / 2, cy - canvas.node_height / 2, canvas)]

    radius = max(
        0.0,
        min(canvas.width, canvas.height) / 2
        - max(canvas.node_width, canvas.node_height)
        - canvas.margin,
    )
    return _ring(nodes, canvas, radius, start_angle=0.0)


def linear_timeline_layout(
    nodes: Sequence[NodeSpec], edges: Sequence[Edge], canvas: CanvasConfig
) -> List[Node]:
    """Single left-to-right row, vertically centered."""
    step = canvas.node_width + canvas.spacing
    total = len(nodes) * canvas.node_width + max(0, len(nodes) - 1) * canvas.spacing
    x0 = _centered_start(total, canvas.width, canvas.margin)
    y = (canvas.height - canvas.node_height) / 2
    return [_node(spec, x0 + i * step, y, canvas) for i, spec in enumerate(nodes)]


def grid_matrix_layout(
    nodes: Sequence[NodeSpec], edges: Sequence[Edge], canvas: CanvasConfig
) -> List[Node]:
    """Centered grid with ceil(sqrt(n)) columns."""
    if not nodes:
        return []

    columns = math.ceil(math.sqrt(len(nodes)))
    rows = math.ceil(len(nodes) / columns)
    cell_w = canvas.node_width + canvas.spacing
    cell_h = canvas.node_height + canvas.spacing
    grid_w = columns * cell_w - canvas.spacing
    grid_h = rows * cell_h - canvas.spacing
    x0 = _centered_start(grid_w, canvas.width, canvas.margin)
    y0 = _centered_start(grid_h, canvas.height, canvas.margin)

    return [
        _node(spec, x0 + (i % columns) * cell_w, y0 + (i // columns) * cell_h, canvas)
        for i, spec in enumerate(nodes)
    ]


def circular_cycle_layout(
    nodes: Sequence[NodeSpec], edges: Sequence[Edge], canvas: CanvasConfig
) -> List[Node]:
    """Ring starting at the top whose radius grows with the node count.

    The radius keeps neighbouring nodes' bounding circles apart and never
    drops below a quarter of the shorter canvas side.
    """
    if not nodes:
        return []
    if len(nodes) == 1:
        cx, cy = canvas.center
        return [_node(nodes[0], cx - canvas.node_width / 2, cy - canvas.node_height / 2, canvas)]

    n = len(nodes)
    diagonal = math.hypot(canvas.node_width, canvas.node_height)
    radius = max(
        (diagonal + canvas.min_gap) / (2 * math.sin(math.pi / n)),
        min(canvas.width, canvas.height) / 4,
    )
    return _ring(nodes, canvas, radius, start_angle=-math.pi / 2)


def vertical_flow_layout(
    nodes: Sequence[NodeSpec], edges: Sequence[Edge], canvas: CanvasConfig
) -> List[Node]:
    """Single top-to-bottom column, horizontally centered."""
    step = canvas.node_height + canvas.spacing
    total = len(nodes) * canvas.node_height + max(0, len(nodes) - 1) * canvas.spacing
    x = (canvas.width - canvas.node_width) / 2
    y0 = _centered_start(total, canvas.height, canvas.margin)
    return [_node(spec, x, y0 + i * step, canvas) for i, spec in enumerate(nodes)]


LAYOUT_STRATEGIES: Dict[DiagramType, PlacementFunction] = {
    DiagramType.FLOWCHART: vertical_flow_layout,
    DiagramType.TREE: hierarchical_layout,
    DiagramType.TIMELINE: linear_timeline_layout,
    DiagramType.COMPARISON: grid_matrix_layout,
    DiagramType.NETWORK: radial_layout,
    DiagramType.CONCEPT_MAP: circular_cycle_layout,
}

_missing = set(DiagramType) - set(LAYOUT_STRATEGIES)
if _missing:
    raise RuntimeError(
        "No layout strategy for: " + ", ".join(sorted(t.value for t in _missing))
    )


class LayoutStrategySelector:
    """Dispatches a diagram analysis to its placement algorithm."""

    def __init__(self, canvas: Optional[CanvasConfig] = None):
        self.canvas = canvas or CanvasConfig()

    @staticmethod
    def strategy_for(diagram_type: DiagramType) -> PlacementFunction:
        return LAYOUT_STRATEGIES[diagram_type]

    def place(self, analysis: DiagramAnalysis) -> Layout:
        """Produce the raw (unresolved) layout for an analysis."""
        strategy = self.strategy_for(analysis.type)
        nodes = strategy(analysis.nodes, analysis.edges, self.canvas)
        logger.debug(
            f"Placed {len(nodes)} nodes with {strategy.__name__} "
            f"on {self.canvas.width:g}x{self.canvas.height:g}"
        )
        return Layout(
            nodes=tuple(nodes),
            edges=analysis.edges,
            bounds=Bounds(self.canvas.width, self.canvas.height),
            type=analysis.type,
        )
