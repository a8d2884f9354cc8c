"""Diagram classifier facade: features -> signals -> fusion, with caching."""

from __future__ import annotations

import hashlib
import threading
from collections import deque
from typing import Deque, Dict, Iterable, List, Optional

from diagram_engine.config import ClassifierConfig
from diagram_engine.domain.diagram import DetectionResult
from diagram_engine.domain.errors import InputError
from diagram_engine.domain.segment import ContentSegment
from diagram_engine.utils.logging import get_logger

from .ensemble import EnsembleFusion
from .feature_extractor import SemanticFeatureExtractor
from .signal_classifiers import run_signals

logger = get_logger(__name__)


def cache_key(text: str, prefix_chars: int = 100) -> str:
    """Stable cache key: SHA-256 of the leading characters, 16 hex chars."""
    return hashlib.sha256(text[:prefix_chars].encode("utf-8")).hexdigest()[:16]


def validate_segment(segment: ContentSegment) -> None:
    """Reject segments that cannot be classified.

    Raises:
        InputError: If the text is not a string or is blank
    """
    segment_id = getattr(segment, "id", None)
    text = getattr(segment, "text", None)
    if not isinstance(text, str):
        raise InputError(
            f"Segment text must be a string, got {type(text).__name__}",
            segment_id=segment_id,
        )
    if not text.strip():
        raise InputError("Segment text is empty", segment_id=segment_id)


class ClassifierContext:
    """Cache and bounded history for one processing session.

    Safe to share between worker threads.
    """

    def __init__(self, history_size: int = 5):
        self.history_size = history_size
        self._cache: Dict[str, DetectionResult] = {}
        self._history: Dict[str, Deque[DetectionResult]] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> Optional[DetectionResult]:
        with self._lock:
            result = self._cache.get(key)
            if result is None:
                self._misses += 1
            else:
                self._hits += 1
            return result

    def put(self, key: str, result: DetectionResult) -> None:
        """Store a computed result in the cache."""
        with self._lock:
            self._cache[key] = result

    def record(self, key: str, result: DetectionResult) -> None:
        """Append a result to the key's bounded history."""
        with self._lock:
            history = self._history.get(key)
            if history is None:
                history = deque(maxlen=self.history_size)
                self._history[key] = history
            history.append(result)

    def history(self, key: str) -> List[DetectionResult]:
        """Results recorded for a key, oldest first."""
        with self._lock:
            return list(self._history.get(key, ()))

    def stats(self) -> dict:
        with self._lock:
            lookups = self._hits + self._misses
            return {
                "size": len(self._cache),
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": self._hits / lookups if lookups else 0.0,
            }

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()
            self._history.clear()
            self._hits = 0
            self._misses = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)


class DiagramClassifier:
    """Classifies segments into diagram types.

    ``classify`` never raises: invalid input and internal failures produce
    the concept-map fallback result flagged as degraded.
    """

    def __init__(
        self,
        config: Optional[ClassifierConfig] = None,
        context: Optional[ClassifierContext] = None,
        extractor: Optional[SemanticFeatureExtractor] = None,
        fusion: Optional[EnsembleFusion] = None,
    ):
        """Initialize classifier.

        Args:
            config: Classifier configuration (defaults if None)
            context: Cache/history holder; a fresh one is created if None
            extractor: Feature extractor (defaults if None)
            fusion: Ensemble fusion (defaults if None)
        """
        self.config = config or ClassifierConfig()
        self.context = (
            context if context is not None else ClassifierContext(self.config.history_size)
        )
        self.extractor = extractor or SemanticFeatureExtractor()
        self.fusion = fusion or EnsembleFusion()

    def classify(self, segment: ContentSegment) -> DetectionResult:
        """Classify one segment.

        Args:
            segment: Segment to classify

        Returns:
            DetectionResult (degraded fallback on any failure)
        """
        segment_id = getattr(segment, "id", "?")
        try:
            validate_segment(segment)

            key = cache_key(segment.text, self.config.cache_key_chars)
            if self.config.cache_enabled:
                cached = self.context.get(key)
                if cached is not None:
                    logger.debug(f"Cache hit for segment {segment_id} ({key})")
                    return cached

            features = self.extractor.extract(segment)
            signals = run_signals(segment, features)
            result = self.fusion.fuse(signals, features)

            if self.config.cache_enabled:
                self.context.put(key, result)
            self.context.record(key, result)

            logger.info(
                f"Segment {segment_id}: {result.type.value} "
                f"(confidence={result.confidence:.2f}, "
                f"uncertainty={result.uncertainty:.2f})"
            )
            return result

        except InputError as e:
            logger.warning(f"Segment {segment_id}: invalid input ({e}); using fallback")
            return DetectionResult.fallback(f"Invalid input: {e}.")
        except Exception as e:
            logger.error(
                f"Segment {segment_id}: classification failed ({e}); using fallback",
                exc_info=True,
            )
            return DetectionResult.fallback()

    def classify_many(self, segments: Iterable[ContentSegment]) -> List[DetectionResult]:
        """Classify segments sequentially, preserving order."""
        return [self.classify(segment) for segment in segments]
