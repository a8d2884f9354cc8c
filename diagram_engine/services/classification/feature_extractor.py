"""Extract lexical and statistical features from a content segment."""

from __future__ import annotations

from typing import Dict, Iterable

from diagram_engine.domain.diagram import DiagramType, SemanticFeatures
from diagram_engine.domain.segment import ContentSegment
from diagram_engine.utils.logging import get_logger

from .patterns import (
    COMPARISON_MARKERS,
    CONTEXT_WEIGHT,
    HIERARCHY_MARKERS,
    KEYWORD_WEIGHT,
    PATTERN_WEIGHT,
    PROCESS_MARKERS,
    SEMANTIC_PATTERNS,
    STRUCTURAL_MARKERS,
    TEMPORAL_MARKERS,
    compile_pattern,
    count_occurrences,
    first_occurrence,
    match_markers,
    normalize_for_pattern,
)

logger = get_logger(__name__)


def compute_keyword_density(
    keywords: Iterable[str], normalized_text: str, word_count: int
) -> Dict[str, float]:
    """Occurrences of each keyword per word of text."""
    density: Dict[str, float] = {}
    denominator = max(1, word_count)
    for keyword in keywords:
        key = keyword.strip()
        if not key or key in density:
            continue
        density[key] = count_occurrences(key, normalized_text) / denominator
    return density


def compute_semantic_similarity(normalized_text: str) -> Dict[DiagramType, float]:
    """Score the text against each type's pattern table.

    Every matched keyword, regex and context marker adds a fixed amount; the
    total is capped at 1.0.
    """
    similarity: Dict[DiagramType, float] = {}
    for diagram_type in DiagramType:
        table = SEMANTIC_PATTERNS[diagram_type]
        score = 0.0
        for keyword in table["keywords"]:
            if first_occurrence(keyword, normalized_text) >= 0:
                score += KEYWORD_WEIGHT
        for pattern in table["patterns"]:
            if compile_pattern(pattern).search(normalized_text):
                score += PATTERN_WEIGHT
        for marker in table["context"]:
            if first_occurrence(marker, normalized_text) >= 0:
                score += CONTEXT_WEIGHT
        similarity[diagram_type] = min(1.0, round(score, 10))
    return similarity


class SemanticFeatureExtractor:
    """Turns segment text into a closed set of features.

    Stateless and deterministic; identical text always yields identical
    features.
    """

    def extract(self, segment: ContentSegment) -> SemanticFeatures:
        """Extract features from a segment.

        Args:
            segment: Segment with non-empty text

        Returns:
            Frozen SemanticFeatures
        """
        normalized = normalize_for_pattern(segment.text)
        word_count = len(normalized.split())

        process = match_markers(PROCESS_MARKERS, normalized)
        temporal = match_markers(TEMPORAL_MARKERS, normalized)
        hierarchy = match_markers(HIERARCHY_MARKERS, normalized)
        comparison = match_markers(COMPARISON_MARKERS, normalized)
        structural = match_markers(STRUCTURAL_MARKERS, normalized)

        total = len(process) + len(temporal) + len(hierarchy) + len(comparison) + len(
            structural
        )
        if word_count == 0:
            relevance = 0.0
        else:
            relevance = min(1.0, total / (word_count / 10))

        features = SemanticFeatures(
            keyword_density=compute_keyword_density(
                segment.keywords, normalized, word_count
            ),
            semantic_similarity=compute_semantic_similarity(normalized),
            contextual_relevance=relevance,
            structural_indicators=structural,
            temporal_markers=temporal,
            hierarchical_markers=hierarchy,
            process_indicators=process,
            comparison_markers=comparison,
        )

        logger.debug(
            f"Segment {segment.id}: {word_count} words, {total} markers "
            f"(process={len(process)}, temporal={len(temporal)}, "
            f"hierarchy={len(hierarchy)}, comparison={len(comparison)}, "
            f"structural={len(structural)})"
        )
        return features


_default_extractor = SemanticFeatureExtractor()


def extract_features(segment: ContentSegment) -> SemanticFeatures:
    """Extract features with the shared stateless extractor."""
    return _default_extractor.extract(segment)
