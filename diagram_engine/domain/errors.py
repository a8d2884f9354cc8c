"""Exception taxonomy for the diagram engine.

Classification and layout never propagate these to callers of the public
processing entry points; they are raised internally and converted into
degraded results.
"""

from __future__ import annotations

from typing import Optional


class DiagramEngineError(Exception):
    """Base class for all diagram engine errors."""


class ClassificationError(DiagramEngineError):
    """A segment could not be classified."""


class InputError(ClassificationError):
    """Segment text is empty or malformed."""

    def __init__(self, message: str, segment_id: Optional[str] = None):
        super().__init__(message)
        self.segment_id = segment_id


class LayoutInfeasible(DiagramEngineError):
    """Nodes cannot be placed on the canvas without overlap."""

    def __init__(self, node_count: int, overlap_count: int, width: float, height: float):
        super().__init__(
            f"Cannot place {node_count} nodes on a {width:g}x{height:g} canvas "
            f"without overlap ({overlap_count} overlaps remain)"
        )
        self.node_count = node_count
        self.overlap_count = overlap_count
        self.width = width
        self.height = height


class TimeoutExceeded(DiagramEngineError):
    """Processing of one segment exceeded its wall-clock budget."""

    def __init__(self, segment_id: str, elapsed_s: float, budget_s: float):
        super().__init__(
            f"Segment {segment_id} took {elapsed_s:.3f}s (budget {budget_s:.3f}s)"
        )
        self.segment_id = segment_id
        self.elapsed_s = elapsed_s
        self.budget_s = budget_s
