"""Build the unplaced node/edge graph for a classified segment."""

from __future__ import annotations

import math
import re
from typing import Callable, Dict, List, Optional

from diagram_engine.domain.diagram import DetectionResult, DiagramType
from diagram_engine.domain.layout import DiagramAnalysis, Edge, NodeSpec
from diagram_engine.domain.segment import ContentSegment
from diagram_engine.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_LABEL = "Concept"
WORDS_PER_LABEL = 3

# Clause boundaries: punctuation and sequencing words
CLAUSE_SPLIT = re.compile(r"[.;:!?,]|\b(?:then|finally|next)\b", re.IGNORECASE)
WORD = re.compile(r"[A-Za-z0-9][A-Za-z0-9'\-]*")

STOP_WORDS = frozenset(
    {
        "a", "an", "the", "and", "or", "but", "of", "to", "in", "on", "for",
        "with", "is", "are", "was", "were", "be", "been", "this", "that",
        "these", "those", "it", "its", "each", "several", "some", "as", "by",
        "at", "from", "into", "we", "you", "they", "our", "your", "their",
        "can", "will", "so", "there", "here", "also", "then", "first",
        "second", "third", "next", "finally", "after", "before", "now",
    }
)

EDGE_LABELS: Dict[DiagramType, str] = {
    DiagramType.FLOWCHART: "then",
    DiagramType.TREE: "includes",
    DiagramType.TIMELINE: "next",
    DiagramType.COMPARISON: "vs",
    DiagramType.NETWORK: "connects",
    DiagramType.CONCEPT_MAP: "relates to",
}


def _title(word: str) -> str:
    return word[:1].upper() + word[1:]


def clause_heads(text: str) -> List[str]:
    """First meaningful words of each clause, title-cased."""
    heads = []
    for clause in CLAUSE_SPLIT.split(text):
        words = [w for w in WORD.findall(clause) if w.lower() not in STOP_WORDS]
        if words:
            heads.append(" ".join(_title(w) for w in words[:WORDS_PER_LABEL]))
    return heads


def candidate_labels(segment: ContentSegment, max_nodes: int) -> List[str]:
    """Keywords first, then clause heads, deduplicated case-insensitively."""
    labels: List[str] = []
    seen = set()
    text = segment.text if isinstance(segment.text, str) else ""

    for label in list(segment.keywords) + clause_heads(text):
        label = label.strip()
        if not label or label.lower() in seen:
            continue
        seen.add(label.lower())
        labels.append(label)
        if len(labels) >= max_nodes:
            break

    if not labels:
        words = WORD.findall(text)[:WORDS_PER_LABEL]
        labels.append(" ".join(_title(w) for w in words) if words else DEFAULT_LABEL)
    return labels


# ---------------------------------------------------------------------------
# Edge topologies (index pairs)
# ---------------------------------------------------------------------------


def chain_pairs(n: int) -> List[tuple[int, int]]:
    return [(i, i + 1) for i in range(n - 1)]


def root_pairs(n: int) -> List[tuple[int, int]]:
    return [(0, i) for i in range(1, n)]


def ring_pairs(n: int) -> List[tuple[int, int]]:
    """Ring through all nodes plus chords from the first node when n > 3."""
    if n < 2:
        return []
    if n == 2:
        return [(0, 1)]
    pairs = [(i, (i + 1) % n) for i in range(n)]
    if n > 3:
        pairs.extend((0, i) for i in range(2, n - 1))
    return pairs


def grid_row_pairs(n: int) -> List[tuple[int, int]]:
    """Each item linked to its right neighbour within a grid row."""
    columns = max(1, math.ceil(math.sqrt(n)))
    return [(i, i + 1) for i in range(n - 1) if (i + 1) % columns != 0]


TOPOLOGIES: Dict[DiagramType, Callable[[int], List[tuple[int, int]]]] = {
    DiagramType.FLOWCHART: chain_pairs,
    DiagramType.TREE: root_pairs,
    DiagramType.TIMELINE: chain_pairs,
    DiagramType.COMPARISON: grid_row_pairs,
    DiagramType.NETWORK: ring_pairs,
    DiagramType.CONCEPT_MAP: root_pairs,
}


class GraphBuilder:
    """Derives nodes and edges for a segment from its text and keywords."""

    def __init__(self, max_nodes: int = 8):
        if max_nodes < 1:
            raise ValueError(f"max_nodes must be >= 1, got {max_nodes}")
        self.max_nodes = max_nodes

    def build(
        self,
        segment: ContentSegment,
        diagram_type: DiagramType,
    ) -> DiagramAnalysis:
        """Build the graph for a segment rendered as ``diagram_type``."""
        labels = candidate_labels(segment, self.max_nodes)
        nodes = [NodeSpec(id=f"n{i}", label=label) for i, label in enumerate(labels)]

        edge_label = EDGE_LABELS[diagram_type]
        edges = [
            Edge(id=f"e{i}", source=nodes[a].id, target=nodes[b].id, label=edge_label)
            for i, (a, b) in enumerate(TOPOLOGIES[diagram_type](len(nodes)))
        ]

        logger.debug(
            f"Segment {segment.id}: {diagram_type.value} graph with "
            f"{len(nodes)} nodes, {len(edges)} edges"
        )
        return DiagramAnalysis(type=diagram_type, nodes=tuple(nodes), edges=tuple(edges))


def build_analysis(
    segment: ContentSegment,
    detection: DetectionResult,
    max_nodes: Optional[int] = None,
) -> DiagramAnalysis:
    """Build the graph for the detected diagram type."""
    return GraphBuilder(max_nodes or 8).build(segment, detection.type)
