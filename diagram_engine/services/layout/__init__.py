"""Layout generation, collision resolution and quality scoring."""

from .collision_resolver import CollisionResolver, ResolutionResult, count_overlaps
from .edge_crossings import count_crossings, segments_intersect
from .quality_scorer import LayoutQualityScorer, score_layout
from .strategies import LAYOUT_STRATEGIES, LayoutStrategySelector

__all__ = [
    "CollisionResolver",
    "LAYOUT_STRATEGIES",
    "LayoutQualityScorer",
    "LayoutStrategySelector",
    "ResolutionResult",
    "count_crossings",
    "count_overlaps",
    "score_layout",
    "segments_intersect",
]
