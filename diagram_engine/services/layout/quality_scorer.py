"""Aesthetic quality metrics for a placed diagram."""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from diagram_engine.domain.layout import Layout, Node, QualityMetrics

from .collision_resolver import count_overlaps
from .edge_crossings import count_crossings

# Any overlap caps the score below this value
OVERLAP_CEILING = 0.5


def compute_compactness(nodes: Sequence[Node]) -> float:
    """Ratio of total node area to the area of their bounding box."""
    if not nodes:
        return 0.0
    left = min(node.x for node in nodes)
    top = min(node.y for node in nodes)
    right = max(node.right for node in nodes)
    bottom = max(node.bottom for node in nodes)
    box_area = (right - left) * (bottom - top)
    if box_area <= 0:
        return 0.0
    used = sum(node.area for node in nodes)
    return float(min(1.0, max(0.0, used / box_area)))


def compute_symmetry(nodes: Sequence[Node]) -> float:
    """Mirror symmetry about the vertical axis through the centroid.

    Each center is reflected across that axis and matched to its nearest
    center; the mean mismatch is measured in node diagonals.
    """
    if not nodes:
        return 1.0
    centers = np.array([node.center for node in nodes], dtype=float)
    mirrored = centers.copy()
    mirrored[:, 0] = 2 * centers[:, 0].mean() - centers[:, 0]

    distances = np.linalg.norm(mirrored[:, None, :] - centers[None, :, :], axis=2)
    mismatch = distances.min(axis=1).mean()
    diagonal = float(np.mean([np.hypot(node.w, node.h) for node in nodes]))
    if diagonal <= 0:
        return 1.0
    return float(1.0 - min(1.0, mismatch / diagonal))


class LayoutQualityScorer:
    """Combines overlap, crossings, compactness and symmetry into one score."""

    def score(self, layout: Layout, crossings: Optional[int] = None) -> QualityMetrics:
        """Score a layout.

        Args:
            layout: Placed layout
            crossings: Precomputed crossing count (computed if None)

        Returns:
            QualityMetrics with aesthetic_score in [0, 1]
        """
        nodes = layout.nodes
        overlaps = count_overlaps(nodes)
        if crossings is None:
            crossings = count_crossings(nodes, layout.edges)

        compactness = compute_compactness(nodes)
        symmetry = compute_symmetry(nodes)
        normalized_crossings = min(1.0, crossings / max(1, len(layout.edges)))

        base = 0.3 * (1 - normalized_crossings) + 0.1 * compactness + 0.1 * symmetry
        if overlaps:
            normalized_overlaps = min(1.0, overlaps / max(1, len(nodes)))
            aesthetic = 0.98 * base * (1 - normalized_overlaps)
        else:
            aesthetic = OVERLAP_CEILING + base

        return QualityMetrics(
            overlap_count=overlaps,
            edge_crossings=crossings,
            compactness=compactness,
            symmetry=symmetry,
            aesthetic_score=float(min(1.0, max(0.0, aesthetic))),
        )


def score_layout(layout: Layout, crossings: Optional[int] = None) -> QualityMetrics:
    return LayoutQualityScorer().score(layout, crossings)
