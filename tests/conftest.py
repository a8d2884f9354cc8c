import pytest

from diagram_engine.config import CanvasConfig
from diagram_engine.domain.layout import Node
from diagram_engine.domain.segment import ContentSegment
from diagram_engine.services.classification.classifier import ClassifierContext

PROCESS_TEXT = "First, validate input. Then process the data. Finally, output results."
HIERARCHY_TEXT = "The CEO oversees three VPs, each managing several directors."


@pytest.fixture
def canvas():
    return CanvasConfig()


@pytest.fixture
def context():
    return ClassifierContext()


@pytest.fixture
def flow_segment():
    return ContentSegment(id="s1", text=PROCESS_TEXT, start_ms=0, end_ms=4000)


@pytest.fixture
def hierarchy_segment():
    return ContentSegment(id="s2", text=HIERARCHY_TEXT, start_ms=4000, end_ms=9000)


@pytest.fixture
def make_segment():
    def _make(text, segment_id="seg", keywords=()):
        return ContentSegment(id=segment_id, text=text, keywords=tuple(keywords))

    return _make


@pytest.fixture
def make_node():
    def _make(node_id, x, y, w=150, h=80):
        return Node(id=node_id, label=node_id.upper(), x=x, y=y, w=w, h=h)

    return _make
