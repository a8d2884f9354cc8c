import pytest

from diagram_engine.config import CanvasConfig, EngineConfig
from diagram_engine.domain.diagram import DiagramType
from diagram_engine.domain.layout import Bounds
from diagram_engine.services.classification.classifier import ClassifierContext
from diagram_engine.services.layout.collision_resolver import count_overlaps
from diagram_engine.services.pipeline.segment_processor import (
    SegmentProcessor,
    process_segment,
    process_segments,
)


def fake_clock(*readings):
    values = iter(readings)
    return lambda: next(values)


def test_process_text_end_to_end(flow_segment):
    result = process_segment(flow_segment)

    assert result.segment_id == "s1"
    assert result.detection.type is DiagramType.FLOWCHART
    assert result.detection.confidence >= 0.70
    assert len(result.layout.nodes) == 3
    assert len(result.layout.edges) == 2
    assert result.quality.overlap_count == 0
    assert result.quality.aesthetic_score >= 0.5
    assert not result.degraded


def test_hierarchy_text_end_to_end(hierarchy_segment):
    result = process_segment(hierarchy_segment)
    assert result.detection.type is DiagramType.TREE
    assert result.layout.type is DiagramType.TREE


def test_empty_text_is_degraded_concept_map():
    result = process_segment({"id": "empty", "text": "", "startMs": 0, "endMs": 10})

    assert result.detection.type is DiagramType.CONCEPT_MAP
    assert result.detection.confidence == 0.5
    assert result.detection.uncertainty == 1.0
    assert result.degraded


def test_malformed_dict_is_degraded():
    result = process_segment({"id": "broken"})
    assert result.segment_id == "broken"
    assert result.degraded
    assert result.layout.type is DiagramType.FLOWCHART
    assert len(result.layout.nodes) == 1


def test_timeout_substitutes_single_column(flow_segment):
    config = EngineConfig().with_overrides(processing_params={"segment_timeout_s": 1.0})
    processor = SegmentProcessor(config, clock=fake_clock(0.0, 5.0))

    result = processor.process(flow_segment)

    assert result.degraded
    assert result.detection.type is DiagramType.CONCEPT_MAP
    assert result.detection.confidence == 0.5
    assert result.layout.type is DiagramType.FLOWCHART
    xs = {node.x for node in result.layout.nodes}
    assert len(xs) == 1
    assert "budget" in result.notes[0]


def test_within_budget_is_not_degraded(flow_segment):
    config = EngineConfig().with_overrides(processing_params={"segment_timeout_s": 1.0})
    processor = SegmentProcessor(config, clock=fake_clock(0.0, 0.5))
    assert not processor.process(flow_segment).degraded


def test_batch_keeps_input_order(flow_segment, hierarchy_segment):
    segments = [
        {"id": f"s{i}", "text": text, "startMs": i * 1000, "endMs": i * 1000 + 900}
        for i, text in enumerate(
            [
                flow_segment.text,
                hierarchy_segment.text,
                "",
                "Compare cats versus dogs: the difference is clear.",
                flow_segment.text,
            ]
        )
    ]
    results = process_segments(segments, max_workers=3)

    assert [r.segment_id for r in results] == ["s0", "s1", "s2", "s3", "s4"]
    assert [r.degraded for r in results] == [False, False, True, False, False]
    assert results[3].detection.type is DiagramType.COMPARISON
    assert all(count_overlaps(r.layout.nodes) == 0 for r in results)


def test_batch_shares_context(flow_segment):
    context = ClassifierContext()
    segments = [{"id": "a", "text": flow_segment.text}, {"id": "b", "text": flow_segment.text}]
    process_segments(segments, context=context, max_workers=1)

    assert context.stats()["hits"] == 1
    assert context.stats()["size"] == 1


def test_missing_id_in_batch_gets_positional_name():
    results = process_segments([{"text": "hello"}], max_workers=1)
    assert results[0].segment_id == "segment-0"
    assert results[0].degraded


def test_custom_canvas(flow_segment):
    canvas = CanvasConfig(width=800, height=600)
    result = process_segment(flow_segment, canvas)

    assert result.layout.bounds == Bounds(800, 600)
    assert all(Bounds(800, 600).contains(node) for node in result.layout.nodes)


def test_to_dict_shape(flow_segment):
    data = process_segment(flow_segment).to_dict()

    assert set(data) == {"segmentId", "detection", "layout", "quality", "degraded", "notes"}
    assert data["detection"]["type"] == "flowchart"
    assert data["layout"]["bounds"] == {"width": 1920, "height": 1080}
    assert {"x", "y", "width", "height"} <= set(data["layout"]["nodes"][0])


def test_processing_is_deterministic(flow_segment):
    assert process_segment(flow_segment) == process_segment(flow_segment)


def test_timeout_note_uses_exception_message(flow_segment):
    config = EngineConfig().with_overrides(processing_params={"segment_timeout_s": 0.0})
    processor = SegmentProcessor(config, clock=fake_clock(1.0, 1.25))
    result = processor.process(flow_segment)
    assert result.notes == ("Segment s1 took 0.250s (budget 0.000s)",)
    assert result.degraded
    assert result.quality.overlap_count == 0
    assert result.layout.bounds == Bounds(1920, 1080)
    assert result.detection.uncertainty == pytest.approx(1.0)


def test_processor_keeps_injected_empty_context():
    context = ClassifierContext()
    processor = SegmentProcessor(context=context)
    assert processor.context is context
    assert processor.classifier.context is context


def good_entry(flow_segment):
    return {"id": "good", "text": flow_segment.text, "startMs": 0, "endMs": 4000}


def test_non_string_keywords_do_not_abort_batch(flow_segment):
    segments = [good_entry(flow_segment), {"id": "bad", "text": "hello world", "keywords": [1, 2]}]
    results = process_segments(segments, max_workers=1)

    assert [r.segment_id for r in results] == ["good", "bad"]
    assert not results[0].degraded
    assert results[1].layout.nodes


@pytest.mark.parametrize(
    "entry, fragment",
    [
        ({"id": "bad", "text": "hello", "startMs": "abc"}, "timing"),
        ({"id": "bad", "text": "hello", "startMs": 0, "endMs": [5]}, "timing"),
        ({"id": "bad", "text": "hello", "keywords": 5}, "keywords"),
    ],
)
def test_malformed_fields_give_degraded_result(flow_segment, entry, fragment):
    results = process_segments([good_entry(flow_segment), entry], max_workers=1)

    assert len(results) == 2
    assert not results[0].degraded
    bad = results[1]
    assert bad.segment_id == "bad"
    assert bad.degraded
    assert fragment in bad.notes[0]


def test_multi_worker_batch_survives_bad_entries(flow_segment):
    segments = [
        good_entry(flow_segment),
        "not a segment",
        {"id": "t", "text": "hello", "endMs": "later"},
        {"id": "k", "text": "hello world", "keywords": [None, "Hello"]},
    ]
    results = process_segments(segments, max_workers=4)

    assert [r.segment_id for r in results] == ["good", "segment-1", "t", "k"]
    assert [r.degraded for r in results[:3]] == [False, True, True]
    assert all(count_overlaps(r.layout.nodes) == 0 for r in results)
