"""Count edge-edge intersections in a placed diagram."""

from __future__ import annotations

from typing import Dict, List, Sequence, Tuple

from diagram_engine.domain.layout import Edge, Node

Point = Tuple[float, float]

RELATIVE_TOLERANCE = 1e-9


def _orientation(p: Point, q: Point, r: Point, tolerance: float) -> int:
    """Sign of the turn p -> q -> r (0 when collinear within tolerance)."""
    cross = (q[0] - p[0]) * (r[1] - p[1]) - (q[1] - p[1]) * (r[0] - p[0])
    if abs(cross) <= tolerance:
        return 0
    return 1 if cross > 0 else -1


def _on_segment(p: Point, q: Point, r: Point, tolerance: float) -> bool:
    """Whether collinear point q lies within the bounding box of segment pr."""
    return (
        min(p[0], r[0]) - tolerance <= q[0] <= max(p[0], r[0]) + tolerance
        and min(p[1], r[1]) - tolerance <= q[1] <= max(p[1], r[1]) + tolerance
    )


def segments_intersect(p1: Point, p2: Point, p3: Point, p4: Point) -> bool:
    """Test whether segment p1p2 intersects segment p3p4.

    Uses orientation (cross-product sign) tests. Collinear segments that
    overlap count as intersecting.
    """
    scale = max(
        1.0,
        max(abs(c) for point in (p1, p2, p3, p4) for c in point),
    )
    area_tol = RELATIVE_TOLERANCE * scale * scale
    coord_tol = RELATIVE_TOLERANCE * scale

    o1 = _orientation(p1, p2, p3, area_tol)
    o2 = _orientation(p1, p2, p4, area_tol)
    o3 = _orientation(p3, p4, p1, area_tol)
    o4 = _orientation(p3, p4, p2, area_tol)

    if o1 != o2 and o3 != o4 and 0 not in (o1, o2, o3, o4):
        return True

    # Collinear and touching cases
    if o1 == 0 and _on_segment(p1, p3, p2, coord_tol):
        return True
    if o2 == 0 and _on_segment(p1, p4, p2, coord_tol):
        return True
    if o3 == 0 and _on_segment(p3, p1, p4, coord_tol):
        return True
    if o4 == 0 and _on_segment(p3, p2, p4, coord_tol):
        return True
    return False


def count_crossings(nodes: Sequence[Node], edges: Sequence[Edge]) -> int:
    """Number of edge pairs that cross.

    Edges are straight segments between node centers. Pairs sharing an
    endpoint are not tested; self-loops and edges to unknown nodes are
    skipped.
    """
    centers: Dict[str, Point] = {node.id: node.center for node in nodes}
    segments: List[Tuple[Edge, Point, Point]] = [
        (edge, centers[edge.source], centers[edge.target])
        for edge in edges
        if edge.source != edge.target and edge.source in centers and edge.target in centers
    ]

    crossings = 0
    for i in range(len(segments)):
        edge_a, a1, a2 = segments[i]
        for j in range(i + 1, len(segments)):
            edge_b, b1, b2 = segments[j]
            if {edge_a.source, edge_a.target} & {edge_b.source, edge_b.target}:
                continue
            if segments_intersect(a1, a2, b1, b2):
                crossings += 1
    return crossings
