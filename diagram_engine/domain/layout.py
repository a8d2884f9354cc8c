"""Geometry and layout domain models."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple

from .diagram import DetectionResult, DiagramType

# Rectangles sharing only a border are not considered overlapping
OVERLAP_EPSILON = 1e-6


@dataclass(frozen=True)
class NodeSpec:
    """A node before placement."""

    id: str
    label: str


@dataclass(frozen=True)
class Edge:
    """Directed connection between two nodes, referenced by id."""

    id: str
    source: str
    target: str
    label: Optional[str] = None

    def to_dict(self) -> dict:
        data = {"id": self.id, "source": self.source, "target": self.target}
        if self.label is not None:
            data["label"] = self.label
        return data


@dataclass(frozen=True)
class Node:
    """A placed node: axis-aligned rectangle with its top-left corner at (x, y)."""

    id: str
    label: str
    x: float
    y: float
    w: float
    h: float

    @property
    def right(self) -> float:
        return self.x + self.w

    @property
    def bottom(self) -> float:
        return self.y + self.h

    @property
    def center(self) -> Tuple[float, float]:
        return self.x + self.w / 2, self.y + self.h / 2

    @property
    def area(self) -> float:
        return self.w * self.h

    def overlap_extent(self, other: Node) -> Tuple[float, float]:
        """Overlap along x and y (non-positive values mean separated)."""
        dx = min(self.right, other.right) - max(self.x, other.x)
        dy = min(self.bottom, other.bottom) - max(self.y, other.y)
        return dx, dy

    def intersects(self, other: Node) -> bool:
        """Check whether the interiors of two rectangles overlap."""
        dx, dy = self.overlap_extent(other)
        return dx > OVERLAP_EPSILON and dy > OVERLAP_EPSILON

    def moved_to(self, x: float, y: float) -> Node:
        return replace(self, x=x, y=y)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "label": self.label,
            "x": self.x,
            "y": self.y,
            "width": self.w,
            "height": self.h,
        }


@dataclass(frozen=True)
class Bounds:
    """Canvas extent."""

    width: float
    height: float

    def contains(self, node: Node, tolerance: float = OVERLAP_EPSILON) -> bool:
        return (
            node.x >= -tolerance
            and node.y >= -tolerance
            and node.right <= self.width + tolerance
            and node.bottom <= self.height + tolerance
        )


@dataclass(frozen=True)
class DiagramAnalysis:
    """Unplaced graph for a classified segment."""

    type: DiagramType
    nodes: Tuple[NodeSpec, ...]
    edges: Tuple[Edge, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "nodes", tuple(self.nodes))
        object.__setattr__(self, "edges", tuple(self.edges))
        ids = {node.id for node in self.nodes}
        if len(ids) != len(self.nodes):
            raise ValueError("Node ids must be unique")
        for edge in self.edges:
            if edge.source not in ids or edge.target not in ids:
                raise ValueError(f"Edge {edge.id} references an unknown node")


@dataclass(frozen=True)
class Layout:
    """Placed diagram ready for rendering."""

    nodes: Tuple[Node, ...]
    edges: Tuple[Edge, ...]
    bounds: Bounds
    type: Optional[DiagramType] = None

    def __post_init__(self):
        object.__setattr__(self, "nodes", tuple(self.nodes))
        object.__setattr__(self, "edges", tuple(self.edges))

    def with_nodes(self, nodes: List[Node]) -> Layout:
        return replace(self, nodes=tuple(nodes))

    def to_dict(self) -> dict:
        return {
            "type": self.type.value if self.type else None,
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [edge.to_dict() for edge in self.edges],
            "bounds": {"width": self.bounds.width, "height": self.bounds.height},
        }


@dataclass(frozen=True)
class QualityMetrics:
    """Aesthetic evaluation of a layout."""

    overlap_count: int
    edge_crossings: int
    compactness: float
    symmetry: float
    aesthetic_score: float

    def __post_init__(self):
        if self.overlap_count < 0 or self.edge_crossings < 0:
            raise ValueError("Overlap and crossing counts must be >= 0")
        if not 0.0 <= self.aesthetic_score <= 1.0:
            raise ValueError(f"Aesthetic score out of range: {self.aesthetic_score}")

    def to_dict(self) -> dict:
        return {
            "overlapCount": self.overlap_count,
            "edgeCrossings": self.edge_crossings,
            "compactness": self.compactness,
            "symmetry": self.symmetry,
            "aestheticScore": self.aesthetic_score,
        }


@dataclass(frozen=True)
class ProcessedSegment:
    """Everything the renderer needs for one segment."""

    segment_id: str
    detection: DetectionResult
    layout: Layout
    quality: QualityMetrics
    degraded: bool = False
    notes: Tuple[str, ...] = field(default=())

    def to_dict(self) -> dict:
        return {
            "segmentId": self.segment_id,
            "detection": self.detection.to_dict(),
            "layout": self.layout.to_dict(),
            "quality": self.quality.to_dict(),
            "degraded": self.degraded,
            "notes": list(self.notes),
        }
