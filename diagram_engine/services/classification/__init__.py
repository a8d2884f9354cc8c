"""Diagram-type classification."""

from .classifier import ClassifierContext, DiagramClassifier, cache_key, validate_segment
from .ensemble import EnsembleFusion
from .feature_extractor import SemanticFeatureExtractor, extract_features
from .signal_classifiers import (
    classify_contextual,
    classify_rule_based,
    classify_semantic,
    classify_statistical,
    run_signals,
)

__all__ = [
    "ClassifierContext",
    "DiagramClassifier",
    "EnsembleFusion",
    "SemanticFeatureExtractor",
    "cache_key",
    "classify_contextual",
    "classify_rule_based",
    "classify_semantic",
    "classify_statistical",
    "extract_features",
    "run_signals",
    "validate_segment",
]
