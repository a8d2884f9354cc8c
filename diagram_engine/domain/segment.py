"""Content segment domain model."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Tuple

from .errors import InputError


@dataclass(frozen=True)
class ContentSegment:
    """One narrated content chunk produced by the upstream segmenter."""

    id: str
    text: str
    keywords: Tuple[str, ...] = ()
    start_ms: int = 0  # Start time in milliseconds
    end_ms: int = 0  # End time in milliseconds

    def __post_init__(self):
        """Normalize keywords into an immutable tuple of strings.

        Non-string entries are dropped.
        """
        keywords = self.keywords
        if isinstance(keywords, str):
            keywords = (keywords,)
        object.__setattr__(
            self, "keywords", tuple(k for k in keywords or () if isinstance(k, str))
        )

    @property
    def duration_ms(self) -> int:
        """Duration in milliseconds."""
        return max(0, self.end_ms - self.start_ms)

    @property
    def word_count(self) -> int:
        """Number of whitespace-separated words in the text."""
        return len(self.text.split()) if isinstance(self.text, str) else 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ContentSegment:
        """Build a segment from upstream JSON.

        Accepts both camelCase (``startMs``) and snake_case (``start_ms``)
        timing keys.

        Raises:
            InputError: If ``id`` or ``text`` is missing, ``keywords`` is not
                a list, or the timing fields are not numeric
        """
        if not isinstance(data, Mapping):
            raise InputError(f"Segment must be a mapping, got {type(data).__name__}")

        segment_id = data.get("id")
        if segment_id is None:
            raise InputError("Segment is missing 'id'")
        if "text" not in data:
            raise InputError("Segment is missing 'text'", segment_id=str(segment_id))

        segment_id = str(segment_id)
        keywords = data.get("keywords") or ()
        if isinstance(keywords, str):
            keywords = (keywords,)
        elif not isinstance(keywords, (list, tuple)):
            raise InputError(
                f"Segment keywords must be a list, got {type(keywords).__name__}",
                segment_id=segment_id,
            )

        start = data.get("startMs", data.get("start_ms", 0)) or 0
        end = data.get("endMs", data.get("end_ms", start)) or start
        try:
            start_ms = int(start)
            end_ms = int(end)
        except (TypeError, ValueError, OverflowError):
            raise InputError(
                f"Segment timing must be numeric, got startMs={start!r}, endMs={end!r}",
                segment_id=segment_id,
            )

        return cls(
            id=segment_id,
            text=data["text"],
            keywords=tuple(keywords),
            start_ms=start_ms,
            end_ms=end_ms,
        )

    def to_dict(self) -> dict:
        """Convert to the upstream JSON shape."""
        return {
            "id": self.id,
            "text": self.text,
            "keywords": list(self.keywords),
            "startMs": self.start_ms,
            "endMs": self.end_ms,
        }
