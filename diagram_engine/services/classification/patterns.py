"""Static marker lists and pattern tables used by feature extraction."""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Dict, List

from diagram_engine.domain.diagram import DiagramType


# Marker lists per category. Sequencing words appear in both the process
# and the temporal lists.
PROCESS_MARKERS = [
    "process",
    "procedure",
    "method",
    "algorithm",
    "workflow",
    "flow",
    "step",
    "stage",
    "operation",
    "task",
    "action",
    "activity",
    "execution",
    "implementation",
    "first",
    "then",
    "next",
    "finally",
]

TEMPORAL_MARKERS = [
    "first",
    "second",
    "third",
    "next",
    "then",
    "finally",
    "before",
    "after",
    "during",
    "timeline",
    "sequence",
    "chronological",
    "order",
    "step",
    "phase",
]

HIERARCHY_MARKERS = [
    "hierarchy",
    "tree",
    "branch",
    "parent",
    "child",
    "children",
    "top",
    "bottom",
    "level",
    "tier",
    "category",
    "classification",
    "subdivision",
    "breakdown",
    # Organizational hierarchies
    "ceo",
    "manager",
    "manages",
    "managing",
    "director",
    "oversees",
    "supervisor",
    "reports to",
    "subordinate",
]

COMPARISON_MARKERS = [
    "compare",
    "compared",
    "contrast",
    "versus",
    "vs",
    "difference",
    "similarity",
    "alike",
    "different",
    "better",
    "worse",
    "advantage",
    "disadvantage",
    "pros",
    "cons",
]

STRUCTURAL_MARKERS = [
    "structure",
    "organization",
    "framework",
    "architecture",
    "component",
    "element",
    "part",
    "section",
]

NETWORK_KEYWORDS = [
    "network",
    "connection",
    "relationship",
    "link",
    "graph",
    "node",
    "edge",
]

# Per-type pattern table: plain keywords, regular expressions, context markers
SEMANTIC_PATTERNS: Dict[DiagramType, Dict[str, List[str]]] = {
    DiagramType.FLOWCHART: {
        "keywords": ["process", "flow", "step", "procedure", "workflow", "algorithm"],
        "patterns": [r"step \d+", r"then .* next", r"process of"],
        "context": ["input", "output", "decision", "action"],
    },
    DiagramType.TREE: {
        "keywords": ["hierarchy", "structure", "tree", "branch", "parent", "child"],
        "patterns": [r"top level", r"sub[- ]?category", r"breakdown"],
        "context": ["classification", "organization", "taxonomy"],
    },
    DiagramType.TIMELINE: {
        "keywords": ["timeline", "chronological", "sequence", "history", "evolution"],
        "patterns": [r"\d{4}", r"in \d+ (?:year|month|day)", r"\b(?:before|after)\b"],
        "context": ["date", "period", "era", "phase"],
    },
    DiagramType.COMPARISON: {
        "keywords": ["compare", "contrast", "versus", "difference", "similarity"],
        "patterns": [r"\bvs\.?", r"(?:better|worse) than", r"on one hand"],
        "context": ["advantage", "disadvantage", "pros", "cons"],
    },
    DiagramType.NETWORK: {
        "keywords": ["network", "connection", "relationship", "link", "graph"],
        "patterns": [r"connected to", r"relationship between", r"network of"],
        "context": ["node", "edge", "path", "connection"],
    },
    DiagramType.CONCEPT_MAP: {
        "keywords": ["concept", "idea", "notion", "principle", "theory"],
        "patterns": [r"concept of", r"idea that", r"principle behind"],
        "context": ["abstract", "conceptual", "theoretical"],
    },
}

# Similarity contribution per matched entry
KEYWORD_WEIGHT = 0.2
PATTERN_WEIGHT = 0.3
CONTEXT_WEIGHT = 0.1


def normalize_for_pattern(text: str) -> str:
    """Normalize text for pattern matching (lowercase, collapse whitespace)."""
    text = text.lower()
    text = re.sub(r"\s+", " ", text)
    return text.strip()


def create_term_regex(term: str) -> str:
    """Create regex pattern for a marker term with flexible matching.

    Handles:
    - Optional plural/possessive forms
    - Word boundaries
    - Multi-word terms separated by any whitespace
    """
    escaped = r"\s+".join(re.escape(part) for part in term.lower().split())
    # Allow optional s or 's at end (plural/possessive)
    escaped = escaped + r"(?:'?s)?"
    return r"\b" + escaped + r"\b"


@lru_cache(maxsize=1024)
def compile_term(term: str) -> re.Pattern:
    return re.compile(create_term_regex(term))


@lru_cache(maxsize=64)
def compile_pattern(pattern: str) -> re.Pattern:
    return re.compile(pattern)


def first_occurrence(term: str, normalized_text: str) -> int:
    """Index of the first whole-word match of ``term``, or -1."""
    match = compile_term(term).search(normalized_text)
    return match.start() if match else -1


def count_occurrences(term: str, normalized_text: str) -> int:
    return len(compile_term(term).findall(normalized_text))


def match_markers(markers: List[str], normalized_text: str) -> tuple[str, ...]:
    """Return the marker terms found in text, ordered by first occurrence.

    Ties (several terms matching at the same offset) keep list order.
    """
    found = []
    for order, term in enumerate(markers):
        position = first_occurrence(term, normalized_text)
        if position >= 0:
            found.append((position, order, term))
    found.sort()
    return tuple(term for _, _, term in found)
