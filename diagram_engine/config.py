"""Centralized configuration management for the diagram engine.

All environment variables and tunable settings are managed here.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import Optional

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"Invalid value for {name}: {raw!r} (expected a number)")


def _env_int(name: str, default: int) -> int:
    value = _env_float(name, default)
    return int(value) if value is not None else default


@dataclass
class CanvasConfig:
    """Drawing surface and fixed node geometry used by every layout."""

    width: float = 1920
    height: float = 1080
    node_width: float = 150
    node_height: float = 80
    spacing: float = 50  # Gap between neighbouring nodes in a placement
    margin: float = 50  # Distance kept from the canvas border by placements
    min_gap: float = 10  # Extra clearance added when separating overlapping nodes

    def __post_init__(self):
        """Validate geometry."""
        for name in ("width", "height", "node_width", "node_height"):
            if getattr(self, name) <= 0:
                raise ValueError(f"Canvas {name} must be positive, got {getattr(self, name)}")
        for name in ("spacing", "margin", "min_gap"):
            if getattr(self, name) < 0:
                raise ValueError(f"Canvas {name} must be >= 0, got {getattr(self, name)}")

    @property
    def center(self) -> tuple[float, float]:
        """Canvas center point."""
        return self.width / 2, self.height / 2

    @classmethod
    def from_env(cls) -> CanvasConfig:
        """Load canvas settings from environment variables (all optional)."""
        defaults = cls()
        return cls(
            width=_env_float("DIAGRAM_CANVAS_WIDTH", defaults.width),
            height=_env_float("DIAGRAM_CANVAS_HEIGHT", defaults.height),
            node_width=_env_float("DIAGRAM_NODE_WIDTH", defaults.node_width),
            node_height=_env_float("DIAGRAM_NODE_HEIGHT", defaults.node_height),
        )


@dataclass
class ClassifierConfig:
    """Configuration for the diagram-type classifier."""

    cache_enabled: bool = True
    history_size: int = 5  # Results remembered per cache key
    cache_key_chars: int = 100  # Leading characters of the text that form the cache key

    def __post_init__(self):
        if self.history_size < 1:
            raise ValueError(f"history_size must be >= 1, got {self.history_size}")
        if self.cache_key_chars < 1:
            raise ValueError(f"cache_key_chars must be >= 1, got {self.cache_key_chars}")


@dataclass
class ResolverConfig:
    """Configuration for the collision resolver."""

    max_iterations: int = 200  # Greedy passes before falling back

    def __post_init__(self):
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1, got {self.max_iterations}")


@dataclass
class ProcessingConfig:
    """Configuration for single and batch segment processing."""

    max_workers: int = 4
    segment_timeout_s: Optional[float] = None  # Wall-clock budget per segment
    max_nodes: int = 8  # Upper bound on nodes built per diagram

    def __post_init__(self):
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")
        if self.max_nodes < 1:
            raise ValueError(f"max_nodes must be >= 1, got {self.max_nodes}")
        if self.segment_timeout_s is not None and self.segment_timeout_s < 0:
            raise ValueError(
                f"segment_timeout_s must be >= 0, got {self.segment_timeout_s}"
            )

    @classmethod
    def from_env(cls) -> ProcessingConfig:
        """Load processing settings from environment variables (all optional)."""
        defaults = cls()
        return cls(
            max_workers=_env_int("DIAGRAM_MAX_WORKERS", defaults.max_workers),
            segment_timeout_s=_env_float("DIAGRAM_SEGMENT_TIMEOUT_S", None),
            max_nodes=_env_int("DIAGRAM_MAX_NODES", defaults.max_nodes),
        )


@dataclass
class EngineConfig:
    """Main configuration combining all sub-configs."""

    canvas: CanvasConfig = field(default_factory=CanvasConfig)
    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)
    resolver: ResolverConfig = field(default_factory=ResolverConfig)
    processing: ProcessingConfig = field(default_factory=ProcessingConfig)

    @classmethod
    def from_env(cls) -> EngineConfig:
        """Load complete configuration from environment variables."""
        return cls(
            canvas=CanvasConfig.from_env(),
            classifier=ClassifierConfig(),
            resolver=ResolverConfig(),
            processing=ProcessingConfig.from_env(),
        )

    def with_overrides(
        self,
        canvas_params: Optional[dict] = None,
        classifier_params: Optional[dict] = None,
        resolver_params: Optional[dict] = None,
        processing_params: Optional[dict] = None,
    ) -> EngineConfig:
        """Create a new config with parameter overrides."""
        return EngineConfig(
            canvas=replace(self.canvas, **(canvas_params or {})),
            classifier=replace(self.classifier, **(classifier_params or {})),
            resolver=replace(self.resolver, **(resolver_params or {})),
            processing=replace(self.processing, **(processing_params or {})),
        )
