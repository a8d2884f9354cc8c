"""Four independent diagram-type signals.

Each signal is a pure function ``(segment, features) -> SignalResult`` and
may run in any order or in parallel.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Tuple

from diagram_engine.domain.diagram import (
    DetectionMethod,
    DiagramType,
    SemanticFeatures,
    SignalResult,
)
from diagram_engine.domain.segment import ContentSegment
from diagram_engine.utils.logging import get_logger

from .patterns import NETWORK_KEYWORDS, match_markers, normalize_for_pattern

logger = get_logger(__name__)

SignalFunction = Callable[[ContentSegment, SemanticFeatures], SignalResult]


# ---------------------------------------------------------------------------
# Rule-based cascade
# ---------------------------------------------------------------------------

DEFAULT_RULE_CONFIDENCE = 0.60


def classify_rule_based(
    segment: ContentSegment, features: SemanticFeatures
) -> SignalResult:
    """First satisfied rule wins, in fixed priority order."""
    method = DetectionMethod.RULE_BASED

    n = len(features.process_indicators)
    if n >= 3:
        return SignalResult(DiagramType.FLOWCHART, min(0.95, 0.70 + 0.05 * n), method)

    n = len(features.hierarchical_markers)
    if n >= 2:
        return SignalResult(DiagramType.TREE, min(0.92, 0.75 + 0.04 * n), method)

    n = len(features.temporal_markers)
    if n >= 2:
        return SignalResult(DiagramType.TIMELINE, min(0.90, 0.72 + 0.04 * n), method)

    n = len(features.comparison_markers)
    if n >= 2:
        return SignalResult(DiagramType.COMPARISON, min(0.88, 0.70 + 0.04 * n), method)

    text = segment.text if isinstance(segment.text, str) else ""
    n = len(match_markers(NETWORK_KEYWORDS, normalize_for_pattern(text)))
    if n >= 2:
        return SignalResult(DiagramType.NETWORK, min(0.85, 0.65 + 0.05 * n), method)

    return SignalResult(DiagramType.CONCEPT_MAP, DEFAULT_RULE_CONFIDENCE, method)


# ---------------------------------------------------------------------------
# Statistical (weighted marker frequencies)
# ---------------------------------------------------------------------------

# type -> ([(category, weight), ...], threshold)
STATISTICAL_MODELS: Dict[DiagramType, Tuple[List[Tuple[str, float]], float]] = {
    DiagramType.FLOWCHART: (
        [("process", 0.6), ("structural", 0.3), ("temporal", 0.1)],
        0.7,
    ),
    DiagramType.TREE: ([("hierarchy", 0.7), ("structural", 0.3)], 0.65),
    DiagramType.TIMELINE: ([("temporal", 0.8), ("process", 0.2)], 0.6),
    DiagramType.COMPARISON: ([("comparison", 1.0)], 0.6),
    DiagramType.NETWORK: ([("structural", 1.0)], 0.5),
    DiagramType.CONCEPT_MAP: ([("structural", 0.5)], 0.3),
}


def normalized_counts(features: SemanticFeatures) -> Dict[str, float]:
    """Category counts scaled into [0, 1]."""
    return {
        "process": min(1.0, len(features.process_indicators) / 5),
        "hierarchy": min(1.0, len(features.hierarchical_markers) / 5),
        "temporal": min(1.0, len(features.temporal_markers) / 5),
        "comparison": min(1.0, len(features.comparison_markers) / 3),
        "structural": min(1.0, len(features.structural_indicators) / 5),
    }


def statistical_scores(features: SemanticFeatures) -> Dict[DiagramType, float]:
    counts = normalized_counts(features)
    return {
        diagram_type: sum(counts[category] * weight for category, weight in terms)
        for diagram_type, (terms, _) in STATISTICAL_MODELS.items()
    }


def classify_statistical(
    segment: ContentSegment, features: SemanticFeatures
) -> SignalResult:
    """Highest-scoring type strictly above its own threshold.

    When no type clears its threshold the signal votes concept-map with zero
    confidence, i.e. it carries no weight in the ensemble.
    """
    method = DetectionMethod.STATISTICAL
    best_type = None
    best_score = 0.0
    for diagram_type, score in statistical_scores(features).items():
        threshold = STATISTICAL_MODELS[diagram_type][1]
        if score > threshold and (best_type is None or score > best_score):
            best_type = diagram_type
            best_score = score

    if best_type is None:
        return SignalResult(DiagramType.CONCEPT_MAP, 0.0, method)
    return SignalResult(best_type, min(0.95, best_score), method)


# ---------------------------------------------------------------------------
# Semantic similarity
# ---------------------------------------------------------------------------


def classify_semantic(
    segment: ContentSegment, features: SemanticFeatures
) -> SignalResult:
    """Type with the highest pattern-table similarity."""
    best_type = DiagramType.CONCEPT_MAP
    best_similarity = 0.0
    for diagram_type in DiagramType:
        similarity = features.semantic_similarity.get(diagram_type, 0.0)
        if similarity > best_similarity:
            best_type = diagram_type
            best_similarity = similarity
    return SignalResult(
        best_type, min(0.90, best_similarity + 0.1), DetectionMethod.SEMANTIC
    )


# ---------------------------------------------------------------------------
# Contextual
# ---------------------------------------------------------------------------


def classify_contextual(
    segment: ContentSegment, features: SemanticFeatures
) -> SignalResult:
    method = DetectionMethod.CONTEXTUAL
    if features.contextual_relevance > 0.8 and features.structural_indicators:
        return SignalResult(DiagramType.FLOWCHART, 0.85, method)
    return SignalResult(
        DiagramType.CONCEPT_MAP, 0.5 + 0.3 * features.contextual_relevance, method
    )


SIGNAL_CLASSIFIERS: Dict[DetectionMethod, SignalFunction] = {
    DetectionMethod.RULE_BASED: classify_rule_based,
    DetectionMethod.STATISTICAL: classify_statistical,
    DetectionMethod.SEMANTIC: classify_semantic,
    DetectionMethod.CONTEXTUAL: classify_contextual,
}


def run_signals(
    segment: ContentSegment, features: SemanticFeatures
) -> List[SignalResult]:
    """Run every signal, in DetectionMethod order."""
    results = [SIGNAL_CLASSIFIERS[method](segment, features) for method in DetectionMethod]
    logger.debug(
        f"Segment {segment.id} signals: "
        + ", ".join(
            f"{r.method.value}={r.type.value}@{r.confidence:.2f}" for r in results
        )
    )
    return results
