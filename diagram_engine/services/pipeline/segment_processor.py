"""End-to-end processing: segment -> detection -> layout -> quality."""

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from typing import Any, Callable, List, Mapping, Optional, Sequence, Union

from diagram_engine.config import CanvasConfig, EngineConfig
from diagram_engine.domain.diagram import DetectionResult, DiagramType
from diagram_engine.domain.errors import InputError, TimeoutExceeded
from diagram_engine.domain.layout import Bounds, Layout, ProcessedSegment
from diagram_engine.domain.segment import ContentSegment
from diagram_engine.services.classification.classifier import (
    ClassifierContext,
    DiagramClassifier,
)
from diagram_engine.services.graph.graph_builder import GraphBuilder
from diagram_engine.services.layout.collision_resolver import CollisionResolver
from diagram_engine.services.layout.edge_crossings import count_crossings
from diagram_engine.services.layout.quality_scorer import LayoutQualityScorer
from diagram_engine.services.layout.strategies import (
    LayoutStrategySelector,
    vertical_flow_layout,
)
from diagram_engine.utils.logging import get_logger

logger = get_logger(__name__)

SegmentInput = Union[ContentSegment, Mapping[str, Any]]
Clock = Callable[[], float]


class SegmentProcessor:
    """Runs the full classification and layout pipeline for segments.

    Never raises for bad input or internal failures; those produce results
    flagged ``degraded`` with a concept-map classification and a
    single-column layout.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        context: Optional[ClassifierContext] = None,
        clock: Clock = time.perf_counter,
    ):
        """Initialize processor.

        Args:
            config: Engine configuration (defaults if None)
            context: Classifier cache/history shared by this processing run
            clock: Monotonic clock used to enforce the per-segment budget
        """
        self.config = config or EngineConfig()
        self.context = (
            context
            if context is not None
            else ClassifierContext(self.config.classifier.history_size)
        )
        self.clock = clock

        self.classifier = DiagramClassifier(self.config.classifier, self.context)
        self.graph_builder = GraphBuilder(self.config.processing.max_nodes)
        self.selector = LayoutStrategySelector(self.config.canvas)
        self.resolver = CollisionResolver(self.config.canvas, self.config.resolver)
        self.scorer = LayoutQualityScorer()

    def _to_segment(self, segment: SegmentInput) -> ContentSegment:
        if isinstance(segment, ContentSegment):
            return segment
        return ContentSegment.from_dict(segment)

    def _layout_and_score(self, segment: ContentSegment, detection: DetectionResult):
        analysis = self.graph_builder.build(segment, detection.type)
        raw = self.selector.place(analysis)
        layout, resolution = self.resolver.resolve_layout(raw)
        quality = self.scorer.score(layout, count_crossings(layout.nodes, layout.edges))
        return layout, resolution, quality

    def degraded_result(
        self,
        segment_id: str,
        segment: Optional[ContentSegment] = None,
        reason: str = "",
    ) -> ProcessedSegment:
        """Concept-map classification with a single-column layout."""
        detection = DetectionResult.fallback()
        text = segment.text if segment is not None else ""
        source = ContentSegment(
            id=segment_id,
            text=text if isinstance(text, str) else "",
            keywords=segment.keywords if segment is not None else (),
        )

        analysis = self.graph_builder.build(source, DiagramType.FLOWCHART)
        nodes = vertical_flow_layout(analysis.nodes, analysis.edges, self.config.canvas)
        resolution = self.resolver.resolve(nodes)
        layout = Layout(
            nodes=resolution.nodes,
            edges=analysis.edges,
            bounds=Bounds(self.config.canvas.width, self.config.canvas.height),
            type=DiagramType.FLOWCHART,
        )
        return ProcessedSegment(
            segment_id=segment_id,
            detection=detection,
            layout=layout,
            quality=self.scorer.score(layout),
            degraded=True,
            notes=(reason,) if reason else (),
        )

    def process(self, segment: SegmentInput, index: Optional[int] = None) -> ProcessedSegment:
        """Process one segment.

        The time budget is checked once the segment has been classified and
        laid out; it does not interrupt work that is still running.

        Args:
            segment: ContentSegment or upstream JSON dict
            index: Position in a batch, used to name segments without an id

        Returns:
            ProcessedSegment
        """
        fallback_id = f"segment-{index}" if index is not None else "unknown"
        try:
            content = self._to_segment(segment)
        except InputError as e:
            segment_id = e.segment_id or fallback_id
            logger.warning(f"Segment {segment_id}: {e}; using degraded result")
            return self.degraded_result(segment_id, reason=str(e))

        budget = self.config.processing.segment_timeout_s
        start = self.clock()
        try:
            detection = self.classifier.classify(content)
            layout, resolution, quality = self._layout_and_score(content, detection)
        except Exception as e:
            logger.error(f"Segment {content.id}: layout failed ({e})", exc_info=True)
            return self.degraded_result(content.id, content, reason=f"Layout failed: {e}")

        elapsed = self.clock() - start
        if budget is not None and elapsed > budget:
            error = TimeoutExceeded(content.id, elapsed, budget)
            logger.warning(f"{error}; using degraded result")
            return self.degraded_result(content.id, content, reason=str(error))

        notes = []
        if not resolution.feasible:
            notes.append(
                f"{resolution.overlap_count} overlaps remain after {resolution.iterations} passes"
            )
        if resolution.used_grid_fallback:
            notes.append("Nodes re-tiled on a grid")

        logger.info(
            f"Segment {content.id}: {detection.type.value} layout with "
            f"{len(layout.nodes)} nodes, aesthetic={quality.aesthetic_score:.2f} "
            f"({elapsed * 1000:.1f} ms)"
        )
        return ProcessedSegment(
            segment_id=content.id,
            detection=detection,
            layout=layout,
            quality=quality,
            degraded=detection.degraded or not resolution.feasible,
            notes=tuple(notes),
        )

    def process_many(self, segments: Sequence[SegmentInput]) -> List[ProcessedSegment]:
        """Process segments in parallel; results keep the input order."""
        segments = list(segments)
        workers = min(self.config.processing.max_workers, len(segments))
        if workers <= 1:
            return [self.process(segment, i) for i, segment in enumerate(segments)]

        logger.info(f"Processing {len(segments)} segments with {workers} workers")
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [
                pool.submit(self.process, segment, i) for i, segment in enumerate(segments)
            ]
            results = [future.result() for future in futures]

        degraded = sum(1 for result in results if result.degraded)
        logger.info(
            f"Processed {len(results)} segments ({degraded} degraded); "
            f"cache stats: {self.context.stats()}"
        )
        return results


def _build_config(
    config: Optional[EngineConfig],
    canvas_config: Optional[CanvasConfig],
    max_workers: Optional[int] = None,
    timeout_s: Optional[float] = None,
) -> EngineConfig:
    config = config or EngineConfig()
    processing = {}
    if max_workers is not None:
        processing["max_workers"] = max_workers
    if timeout_s is not None:
        processing["segment_timeout_s"] = timeout_s
    config = config.with_overrides(processing_params=processing)
    if canvas_config is not None:
        config = replace(config, canvas=canvas_config)
    return config


def process_segment(
    segment: SegmentInput,
    canvas_config: Optional[CanvasConfig] = None,
    *,
    context: Optional[ClassifierContext] = None,
    config: Optional[EngineConfig] = None,
) -> ProcessedSegment:
    """Classify and lay out a single segment."""
    processor = SegmentProcessor(_build_config(config, canvas_config), context)
    return processor.process(segment)


def process_segments(
    segments: Sequence[SegmentInput],
    canvas_config: Optional[CanvasConfig] = None,
    *,
    context: Optional[ClassifierContext] = None,
    max_workers: Optional[int] = None,
    timeout_s: Optional[float] = None,
    config: Optional[EngineConfig] = None,
) -> List[ProcessedSegment]:
    """Classify and lay out a batch of segments, preserving input order."""
    processor = SegmentProcessor(
        _build_config(config, canvas_config, max_workers, timeout_s), context
    )
    return processor.process_many(segments)
