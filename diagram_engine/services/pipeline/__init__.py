"""Segment processing entry points."""

from .segment_processor import SegmentProcessor, process_segment, process_segments

__all__ = ["SegmentProcessor", "process_segment", "process_segments"]
