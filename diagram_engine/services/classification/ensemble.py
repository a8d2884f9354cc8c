"""Fuse independent signals into one explainable decision."""

from __future__ import annotations

from typing import Dict, List, Sequence, Tuple

from diagram_engine.domain.diagram import (
    Alternative,
    DetectionResult,
    DiagramType,
    SemanticFeatures,
    SignalResult,
)
from diagram_engine.utils.logging import get_logger

logger = get_logger(__name__)

MAX_CONFIDENCE = 0.98
AGREEMENT_BONUS = 0.1  # Added per agreeing method beyond the first
MAX_ALTERNATIVES = 3

# Winning type -> (reasoning prefix, feature attribute holding its markers)
MARKER_REASONS: Dict[DiagramType, Tuple[str, str]] = {
    DiagramType.FLOWCHART: ("Process indicators detected", "process_indicators"),
    DiagramType.TREE: ("Hierarchical structure markers", "hierarchical_markers"),
    DiagramType.TIMELINE: ("Temporal sequence markers", "temporal_markers"),
    DiagramType.COMPARISON: ("Comparison indicators", "comparison_markers"),
    DiagramType.NETWORK: ("Network structure indicators", "structural_indicators"),
    DiagramType.CONCEPT_MAP: ("Conceptual structure elements", "structural_indicators"),
}


def confidence_tier(confidence: float) -> str:
    if confidence > 0.9:
        return "High confidence due to strong signal patterns"
    if confidence > 0.7:
        return "Good confidence with clear indicators"
    return "Moderate confidence, some ambiguity detected"


class EnsembleFusion:
    """Weighted voting over the four signal classifiers.

    Each method's vote counts ``confidence x weight`` towards the type it
    proposes. The type with the highest total wins; ties go to the type
    listed first in DiagramType.
    """

    def fuse(
        self, signals: Sequence[SignalResult], features: SemanticFeatures
    ) -> DetectionResult:
        """Combine signals into a DetectionResult.

        Args:
            signals: One result per detection method
            features: Features the signals were computed from

        Returns:
            DetectionResult with alternatives, uncertainty and reasoning
        """
        if not signals:
            raise ValueError("At least one signal is required")

        scores: Dict[DiagramType, float] = {}
        weights: Dict[DiagramType, float] = {}
        votes: Dict[DiagramType, int] = {}
        for signal in signals:
            weight = signal.method.weight
            scores[signal.type] = scores.get(signal.type, 0.0) + signal.confidence * weight
            weights[signal.type] = weights.get(signal.type, 0.0) + weight
            votes[signal.type] = votes.get(signal.type, 0) + 1

        proposed = [t for t in DiagramType if t in scores]
        winner = proposed[0]
        for diagram_type in proposed[1:]:
            if scores[diagram_type] > scores[winner]:
                winner = diagram_type

        base = scores[winner] / weights[winner]
        confidence = base + AGREEMENT_BONUS * (votes[winner] - 1)
        confidence = max(0.0, min(MAX_CONFIDENCE, confidence))

        alternatives = self._alternatives(proposed, winner, scores, weights, confidence)
        uncertainty = self._uncertainty(signals, confidence)
        reasoning = self._reasoning(winner, confidence, votes[winner], len(signals), features)

        logger.debug(
            f"Fused {len(signals)} signals -> {winner.value} "
            f"(confidence={confidence:.3f}, uncertainty={uncertainty:.3f})"
        )

        return DetectionResult(
            type=winner,
            confidence=confidence,
            reasoning=reasoning,
            alternatives=tuple(alternatives),
            features=features,
            uncertainty=uncertainty,
        )

    @staticmethod
    def _alternatives(
        proposed: List[DiagramType],
        winner: DiagramType,
        scores: Dict[DiagramType, float],
        weights: Dict[DiagramType, float],
        confidence: float,
    ) -> List[Alternative]:
        alternatives = [
            Alternative(t, min(confidence, scores[t] / weights[t]))
            for t in proposed
            if t is not winner
        ]
        # Stable sort keeps DiagramType order among equal confidences
        alternatives.sort(key=lambda alt: alt.confidence, reverse=True)
        return alternatives[:MAX_ALTERNATIVES]

    @staticmethod
    def _uncertainty(signals: Sequence[SignalResult], confidence: float) -> float:
        raw = [signal.confidence for signal in signals]
        distinct = len({signal.type for signal in signals})
        disagreement = (distinct - 1) / 4
        spread = max(raw) - min(raw)
        uncertainty = (disagreement + spread + (1 - confidence)) / 3
        return max(0.0, min(1.0, uncertainty))

    @staticmethod
    def _reasoning(
        winner: DiagramType,
        confidence: float,
        agreeing: int,
        total: int,
        features: SemanticFeatures,
    ) -> str:
        parts = []
        prefix, attribute = MARKER_REASONS[winner]
        markers = getattr(features, attribute)
        if markers:
            parts.append(f"{prefix}: {', '.join(markers)}")
        parts.append(confidence_tier(confidence))
        if agreeing >= 3:
            parts.append(f"Multiple detection methods agree ({agreeing}/{total})")
        return ". ".join(parts) + "."
