import pytest

from diagram_engine.domain.diagram import DetectionMethod, DiagramType, SemanticFeatures
from diagram_engine.services.classification.feature_extractor import extract_features
from diagram_engine.services.classification.signal_classifiers import (
    classify_contextual,
    classify_rule_based,
    classify_semantic,
    classify_statistical,
    run_signals,
)


def features_with(**overrides):
    base = SemanticFeatures.empty()
    values = {
        "keyword_density": base.keyword_density,
        "semantic_similarity": base.semantic_similarity,
        "contextual_relevance": base.contextual_relevance,
    }
    values.update(overrides)
    return SemanticFeatures(**values)


class TestRuleBased:
    def test_process_markers_give_flowchart(self, flow_segment):
        result = classify_rule_based(flow_segment, extract_features(flow_segment))
        assert result.type is DiagramType.FLOWCHART
        assert result.confidence == pytest.approx(0.90)
        assert result.method is DetectionMethod.RULE_BASED

    def test_hierarchy_markers_give_tree(self, hierarchy_segment):
        result = classify_rule_based(hierarchy_segment, extract_features(hierarchy_segment))
        assert result.type is DiagramType.TREE
        assert result.confidence == pytest.approx(0.91)

    def test_comparison(self, make_segment):
        segment = make_segment("Compare cats versus dogs: the difference is clear.")
        result = classify_rule_based(segment, extract_features(segment))
        assert result.type is DiagramType.COMPARISON
        assert result.confidence == pytest.approx(0.82)

    def test_network_keywords(self, make_segment):
        segment = make_segment("The network has a link to every server.")
        result = classify_rule_based(segment, extract_features(segment))
        assert result.type is DiagramType.NETWORK
        assert result.confidence == pytest.approx(0.75)

    def test_default_concept_map(self, make_segment):
        segment = make_segment("Photosynthesis converts light into energy.")
        result = classify_rule_based(segment, extract_features(segment))
        assert result.type is DiagramType.CONCEPT_MAP
        assert result.confidence == pytest.approx(0.60)

    def test_confidence_caps(self, make_segment):
        features = features_with(process_indicators=tuple("abcdefgh"))
        result = classify_rule_based(make_segment("x"), features)
        assert result.confidence == pytest.approx(0.95)

    def test_priority_flowchart_before_tree(self, make_segment):
        features = features_with(
            process_indicators=("a", "b", "c"),
            hierarchical_markers=("d", "e", "f", "g"),
        )
        assert classify_rule_based(make_segment("x"), features).type is DiagramType.FLOWCHART


class TestStatistical:
    def test_no_support_votes_concept_map_with_zero(self, make_segment):
        result = classify_statistical(make_segment("x"), features_with())
        assert result.type is DiagramType.CONCEPT_MAP
        assert result.confidence == 0.0

    def test_process_text_favours_timeline(self, flow_segment):
        # timeline = 0.8 * 3/5 + 0.2 * 4/5 = 0.64 > 0.6; flowchart 0.54 < 0.7
        result = classify_statistical(flow_segment, extract_features(flow_segment))
        assert result.type is DiagramType.TIMELINE
        assert result.confidence == pytest.approx(0.64)

    def test_comparison_capped(self, make_segment):
        features = features_with(comparison_markers=("compare", "versus", "pros"))
        result = classify_statistical(make_segment("x"), features)
        assert result.type is DiagramType.COMPARISON
        assert result.confidence == pytest.approx(0.95)


class TestSemantic:
    def test_highest_similarity_wins_ties_keep_enum_order(self, make_segment):
        similarity = {t: 0.0 for t in DiagramType}
        similarity[DiagramType.NETWORK] = 0.5
        similarity[DiagramType.TREE] = 0.5
        result = classify_semantic(make_segment("x"), features_with(semantic_similarity=similarity))
        assert result.type is DiagramType.TREE
        assert result.confidence == pytest.approx(0.6)

    def test_all_zero_keeps_concept_map(self, make_segment):
        result = classify_semantic(make_segment("x"), features_with())
        assert result.type is DiagramType.CONCEPT_MAP
        assert result.confidence == pytest.approx(0.1)

    def test_confidence_capped(self, make_segment):
        similarity = {t: 0.0 for t in DiagramType}
        similarity[DiagramType.COMPARISON] = 1.0
        result = classify_semantic(make_segment("x"), features_with(semantic_similarity=similarity))
        assert result.confidence == pytest.approx(0.9)


class TestContextual:
    def test_dense_structural_text_gives_flowchart(self, make_segment):
        features = features_with(contextual_relevance=0.9, structural_indicators=("structure",))
        result = classify_contextual(make_segment("x"), features)
        assert result.type is DiagramType.FLOWCHART
        assert result.confidence == pytest.approx(0.85)

    def test_otherwise_concept_map(self, make_segment):
        features = features_with(contextual_relevance=0.9)
        result = classify_contextual(make_segment("x"), features)
        assert result.type is DiagramType.CONCEPT_MAP
        assert result.confidence == pytest.approx(0.77)


def test_run_signals_returns_one_per_method(flow_segment):
    results = run_signals(flow_segment, extract_features(flow_segment))
    assert [r.method for r in results] == list(DetectionMethod)
