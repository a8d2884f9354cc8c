"""Data models for diagram-type detection."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Tuple


class DiagramType(Enum):
    """Diagram archetypes a segment can be rendered as.

    Member order is the tie-break order used by classification.
    """

    FLOWCHART = "flowchart"  # Sequential process with steps
    TREE = "tree"  # Hierarchy rooted at one node
    TIMELINE = "timeline"  # Events ordered in time
    COMPARISON = "comparison"  # Items contrasted in a matrix
    NETWORK = "network"  # Interconnected entities
    CONCEPT_MAP = "concept-map"  # Ideas around a central concept

    @classmethod
    def from_string(cls, value: str) -> DiagramType:
        """Convert string to DiagramType."""
        normalized = value.strip().lower().replace("_", "-")
        try:
            return cls(normalized)
        except ValueError:
            raise ValueError(f"Invalid diagram type: {value}")


class DetectionMethod(Enum):
    """Independent signal used to vote on the diagram type."""

    RULE_BASED = "rule_based"  # Marker-count cascade
    STATISTICAL = "statistical"  # Weighted marker frequencies
    SEMANTIC = "semantic"  # Pattern-table similarity
    CONTEXTUAL = "contextual"  # Marker density over the whole text

    @property
    def weight(self) -> float:
        """Ensemble weight of this method."""
        return METHOD_WEIGHTS[self]


METHOD_WEIGHTS: Dict[DetectionMethod, float] = {
    DetectionMethod.RULE_BASED: 0.30,
    DetectionMethod.STATISTICAL: 0.25,
    DetectionMethod.SEMANTIC: 0.25,
    DetectionMethod.CONTEXTUAL: 0.20,
}


@dataclass(frozen=True)
class SemanticFeatures:
    """Lexical and statistical features extracted from one segment."""

    keyword_density: Dict[str, float]
    semantic_similarity: Dict[DiagramType, float]
    contextual_relevance: float
    structural_indicators: Tuple[str, ...] = ()
    temporal_markers: Tuple[str, ...] = ()
    hierarchical_markers: Tuple[str, ...] = ()
    process_indicators: Tuple[str, ...] = ()
    comparison_markers: Tuple[str, ...] = ()

    @classmethod
    def empty(cls) -> SemanticFeatures:
        """Features of a segment with no usable text."""
        return cls(
            keyword_density={},
            semantic_similarity={t: 0.0 for t in DiagramType},
            contextual_relevance=0.0,
        )

    @property
    def total_markers(self) -> int:
        """Number of matched markers across all categories."""
        return (
            len(self.structural_indicators)
            + len(self.temporal_markers)
            + len(self.hierarchical_markers)
            + len(self.process_indicators)
            + len(self.comparison_markers)
        )

    def to_dict(self) -> dict:
        return {
            "keywordDensity": dict(self.keyword_density),
            "semanticSimilarity": {
                t.value: score for t, score in self.semantic_similarity.items()
            },
            "contextualRelevance": self.contextual_relevance,
            "structuralIndicators": list(self.structural_indicators),
            "temporalMarkers": list(self.temporal_markers),
            "hierarchicalMarkers": list(self.hierarchical_markers),
            "processIndicators": list(self.process_indicators),
            "comparisonMarkers": list(self.comparison_markers),
        }


@dataclass(frozen=True)
class SignalResult:
    """A single classifier's vote."""

    type: DiagramType
    confidence: float
    method: DetectionMethod

    def __post_init__(self):
        # Clamp confidence to valid range
        object.__setattr__(self, "confidence", max(0.0, min(1.0, self.confidence)))


@dataclass(frozen=True)
class Alternative:
    """A runner-up diagram type."""

    type: DiagramType
    confidence: float


FALLBACK_CONFIDENCE = 0.5
FALLBACK_REASONING = "Classification unavailable; defaulting to concept map."


@dataclass(frozen=True)
class DetectionResult:
    """Fused classification decision for one segment.

    The primary confidence is never below any alternative's confidence.
    """

    type: DiagramType
    confidence: float
    reasoning: str
    alternatives: Tuple[Alternative, ...] = ()
    features: SemanticFeatures = field(default_factory=SemanticFeatures.empty)
    uncertainty: float = 0.0
    degraded: bool = False  # Produced by a fallback path

    def __post_init__(self):
        """Validate ranges and ordering."""
        if not isinstance(self.alternatives, tuple):
            object.__setattr__(self, "alternatives", tuple(self.alternatives))
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"Confidence out of range: {self.confidence}")
        if not 0.0 <= self.uncertainty <= 1.0:
            raise ValueError(f"Uncertainty out of range: {self.uncertainty}")
        if len(self.alternatives) > 3:
            raise ValueError(f"At most 3 alternatives, got {len(self.alternatives)}")
        for alt in self.alternatives:
            if alt.confidence > self.confidence:
                raise ValueError(
                    f"Alternative {alt.type.value} ({alt.confidence:.3f}) exceeds "
                    f"primary confidence ({self.confidence:.3f})"
                )

    @classmethod
    def fallback(cls, reasoning: str = FALLBACK_REASONING) -> DetectionResult:
        """Default result used when classification cannot run."""
        return cls(
            type=DiagramType.CONCEPT_MAP,
            confidence=FALLBACK_CONFIDENCE,
            reasoning=reasoning,
            alternatives=(),
            features=SemanticFeatures.empty(),
            uncertainty=1.0,
            degraded=True,
        )

    def to_dict(self) -> dict:
        """Convert to the renderer's JSON shape."""
        return {
            "type": self.type.value,
            "confidence": self.confidence,
            "reasoning": self.reasoning,
            "alternatives": [
                {"type": alt.type.value, "confidence": alt.confidence}
                for alt in self.alternatives
            ],
            "features": self.features.to_dict(),
            "uncertainty": self.uncertainty,
            "degraded": self.degraded,
        }
