"""Graph construction for classified segments."""

from .graph_builder import GraphBuilder, build_analysis, candidate_labels, clause_heads

__all__ = ["GraphBuilder", "build_analysis", "candidate_labels", "clause_heads"]
