import pytest

from diagram_engine.domain.diagram import DetectionResult, DiagramType
from diagram_engine.services.graph.graph_builder import (
    GraphBuilder,
    build_analysis,
    clause_heads,
)


def edge_pairs(analysis):
    return [(e.source, e.target) for e in analysis.edges]


def test_clause_heads_strip_sequencing_and_stop_words():
    text = "First, validate input. Then process the data. Finally, output results."
    assert clause_heads(text) == ["Validate Input", "Process Data", "Output Results"]


def test_flowchart_chain(flow_segment):
    analysis = GraphBuilder().build(flow_segment, DiagramType.FLOWCHART)

    assert [n.label for n in analysis.nodes] == [
        "Validate Input",
        "Process Data",
        "Output Results",
    ]
    assert [n.id for n in analysis.nodes] == ["n0", "n1", "n2"]
    assert edge_pairs(analysis) == [("n0", "n1"), ("n1", "n2")]
    assert [e.id for e in analysis.edges] == ["e0", "e1"]
    assert all(e.label == "then" for e in analysis.edges)


def test_keywords_come_first_and_are_deduplicated(make_segment):
    segment = make_segment("Input arrives. Data is stored.", keywords=["Data", "data", "Input"])
    labels = [n.label for n in GraphBuilder().build(segment, DiagramType.NETWORK).nodes]
    assert labels == ["Data", "Input", "Input Arrives", "Data Stored"]


def test_node_count_is_capped(make_segment):
    segment = make_segment("", keywords=[f"k{i}" for i in range(20)])
    analysis = GraphBuilder(max_nodes=5).build(segment, DiagramType.TREE)
    assert len(analysis.nodes) == 5


def test_empty_text_yields_single_default_node(make_segment):
    analysis = GraphBuilder().build(make_segment(""), DiagramType.CONCEPT_MAP)
    assert [n.label for n in analysis.nodes] == ["Concept"]
    assert analysis.edges == ()


def test_only_stop_words_fall_back_to_first_words(make_segment):
    analysis = GraphBuilder().build(make_segment("and then the"), DiagramType.FLOWCHART)
    assert [n.label for n in analysis.nodes] == ["And Then The"]


@pytest.mark.parametrize(
    "diagram_type, n, expected",
    [
        (DiagramType.TREE, 4, [(0, 1), (0, 2), (0, 3)]),
        (DiagramType.TIMELINE, 3, [(0, 1), (1, 2)]),
        (DiagramType.NETWORK, 5, [(0, 1), (1, 2), (2, 3), (3, 4), (4, 0), (0, 2), (0, 3)]),
        (DiagramType.NETWORK, 2, [(0, 1)]),
        (DiagramType.COMPARISON, 4, [(0, 1), (2, 3)]),
        (DiagramType.CONCEPT_MAP, 4, [(0, 1), (0, 2), (0, 3)]),
    ],
)
def test_edge_topologies(make_segment, diagram_type, n, expected):
    segment = make_segment("", keywords=[f"K{i}" for i in range(n)])
    analysis = GraphBuilder().build(segment, diagram_type)
    assert edge_pairs(analysis) == [(f"n{a}", f"n{b}") for a, b in expected]


def test_build_analysis_uses_detected_type(hierarchy_segment):
    detection = DetectionResult(type=DiagramType.TREE, confidence=0.9, reasoning="")
    analysis = build_analysis(hierarchy_segment, detection)
    assert analysis.type is DiagramType.TREE
    assert all(e.label == "includes" for e in analysis.edges)


def test_invalid_max_nodes():
    with pytest.raises(ValueError):
        GraphBuilder(max_nodes=0)
