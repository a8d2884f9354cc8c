"""Diagram-type classification and layout engine for narrated content."""

from diagram_engine.config import CanvasConfig, EngineConfig
from diagram_engine.services.classification import ClassifierContext, DiagramClassifier
from diagram_engine.services.pipeline import (
    SegmentProcessor,
    process_segment,
    process_segments,
)

__all__ = [
    "CanvasConfig",
    "ClassifierContext",
    "DiagramClassifier",
    "EngineConfig",
    "SegmentProcessor",
    "process_segment",
    "process_segments",
]
