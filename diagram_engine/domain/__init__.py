"""Domain models - pure data structures with no external dependencies.

These models represent the core entities and are shared across services.
"""

from .segment import ContentSegment
from .diagram import (
    Alternative,
    DetectionMethod,
    DetectionResult,
    DiagramType,
    METHOD_WEIGHTS,
    SemanticFeatures,
    SignalResult,
)
from .layout import (
    Bounds,
    DiagramAnalysis,
    Edge,
    Layout,
    Node,
    NodeSpec,
    ProcessedSegment,
    QualityMetrics,
)
from .errors import (
    ClassificationError,
    DiagramEngineError,
    InputError,
    LayoutInfeasible,
    TimeoutExceeded,
)

__all__ = [
    # Input
    "ContentSegment",
    # Detection models
    "Alternative",
    "DetectionMethod",
    "DetectionResult",
    "DiagramType",
    "METHOD_WEIGHTS",
    "SemanticFeatures",
    "SignalResult",
    # Layout models
    "Bounds",
    "DiagramAnalysis",
    "Edge",
    "Layout",
    "Node",
    "NodeSpec",
    "ProcessedSegment",
    "QualityMetrics",
    # Errors
    "ClassificationError",
    "DiagramEngineError",
    "InputError",
    "LayoutInfeasible",
    "TimeoutExceeded",
]
