import pytest

from diagram_engine.domain.diagram import (
    DetectionMethod,
    DiagramType,
    SemanticFeatures,
    SignalResult,
)
from diagram_engine.services.classification.ensemble import EnsembleFusion, confidence_tier
from diagram_engine.services.classification.feature_extractor import extract_features
from diagram_engine.services.classification.signal_classifiers import run_signals

RULE = DetectionMethod.RULE_BASED
STAT = DetectionMethod.STATISTICAL
SEM = DetectionMethod.SEMANTIC
CTX = DetectionMethod.CONTEXTUAL


def signals(*votes):
    return [SignalResult(t, c, m) for t, c, m in votes]


@pytest.fixture
def fusion():
    return EnsembleFusion()


def test_process_scenario(fusion, flow_segment):
    features = extract_features(flow_segment)
    result = fusion.fuse(run_signals(flow_segment, features), features)

    # (0.9*0.30 + 0.5*0.25) / 0.55 + 0.1
    assert result.type is DiagramType.FLOWCHART
    assert result.confidence == pytest.approx(0.395 / 0.55 + 0.1)
    assert result.confidence >= 0.70
    assert [a.type for a in result.alternatives] == [
        DiagramType.CONCEPT_MAP,
        DiagramType.TIMELINE,
    ]
    assert result.alternatives[0].confidence == pytest.approx(0.8)
    assert result.alternatives[1].confidence == pytest.approx(0.64)
    assert result.uncertainty == pytest.approx((0.5 + 0.4 + (1 - result.confidence)) / 3)
    assert result.reasoning == (
        "Process indicators detected: first, then, process, finally. "
        "Good confidence with clear indicators."
    )


def test_unanimous_vote_is_capped(fusion):
    votes = signals(
        (DiagramType.TREE, 0.9, RULE),
        (DiagramType.TREE, 0.9, STAT),
        (DiagramType.TREE, 0.9, SEM),
        (DiagramType.TREE, 0.9, CTX),
    )
    result = fusion.fuse(votes, SemanticFeatures.empty())

    assert result.type is DiagramType.TREE
    assert result.confidence == pytest.approx(0.98)
    assert result.alternatives == ()
    assert result.uncertainty == pytest.approx(0.02 / 3)
    assert "High confidence due to strong signal patterns" in result.reasoning
    assert "Multiple detection methods agree (4/4)" in result.reasoning


def test_tie_goes_to_earlier_type(fusion):
    votes = signals(
        (DiagramType.NETWORK, 0.0, RULE),
        (DiagramType.TREE, 0.8, STAT),
        (DiagramType.FLOWCHART, 0.8, SEM),
        (DiagramType.CONCEPT_MAP, 0.0, CTX),
    )
    result = fusion.fuse(votes, SemanticFeatures.empty())

    assert result.type is DiagramType.FLOWCHART
    assert result.confidence == pytest.approx(0.8)
    assert result.alternatives[0].type is DiagramType.TREE


def test_alternatives_never_exceed_primary(fusion):
    votes = signals(
        (DiagramType.TREE, 0.5, RULE),
        (DiagramType.TREE, 0.5, STAT),
        (DiagramType.NETWORK, 0.3, SEM),
        (DiagramType.CONCEPT_MAP, 0.95, CTX),
    )
    result = fusion.fuse(votes, SemanticFeatures.empty())

    assert result.type is DiagramType.TREE
    assert result.confidence == pytest.approx(0.6)
    assert result.alternatives[0].type is DiagramType.CONCEPT_MAP
    assert result.alternatives[0].confidence == pytest.approx(0.6)
    assert all(a.confidence <= result.confidence for a in result.alternatives)


def test_at_most_three_alternatives_sorted(fusion):
    votes = signals(
        (DiagramType.FLOWCHART, 0.9, RULE),
        (DiagramType.TREE, 0.5, STAT),
        (DiagramType.TIMELINE, 0.4, SEM),
        (DiagramType.CONCEPT_MAP, 0.6, CTX),
    )
    result = fusion.fuse(votes, SemanticFeatures.empty())

    assert result.type is DiagramType.FLOWCHART
    confidences = [a.confidence for a in result.alternatives]
    assert len(confidences) == 3
    assert confidences == sorted(confidences, reverse=True)
    assert result.uncertainty == pytest.approx((0.75 + 0.5 + 0.1) / 3)


def test_no_signals_rejected(fusion):
    with pytest.raises(ValueError):
        fusion.fuse([], SemanticFeatures.empty())


@pytest.mark.parametrize(
    "confidence, phrase",
    [
        (0.95, "High confidence"),
        (0.8, "Good confidence"),
        (0.7, "Moderate confidence"),
    ],
)
def test_confidence_tiers(confidence, phrase):
    assert confidence_tier(confidence).startswith(phrase)
