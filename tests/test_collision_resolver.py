import pytest

from diagram_engine.config import CanvasConfig, ResolverConfig
from diagram_engine.domain.errors import LayoutInfeasible
from diagram_engine.domain.layout import Bounds
from diagram_engine.services.layout.collision_resolver import CollisionResolver, count_overlaps


def in_bounds(nodes, canvas):
    bounds = Bounds(canvas.width, canvas.height)
    return all(bounds.contains(node) for node in nodes)


def test_six_stacked_nodes_are_separated(canvas, make_node):
    nodes = [make_node(f"n{i}", 885, 500) for i in range(6)]
    result = CollisionResolver(canvas).resolve(nodes)

    assert result.feasible
    assert result.overlap_count == 0
    assert count_overlaps(result.nodes) == 0
    assert in_bounds(result.nodes, canvas)
    assert [n.id for n in result.nodes] == [n.id for n in nodes]


def test_partial_overlap_moves_later_node(canvas, make_node):
    a = make_node("a", 100, 100)
    b = make_node("b", 150, 100)
    result = CollisionResolver(canvas).resolve([a, b])

    assert result.nodes[0] == a
    assert result.nodes[1].x > b.x
    assert not result.nodes[0].intersects(result.nodes[1])


def test_out_of_bounds_nodes_are_clamped(canvas, make_node):
    result = CollisionResolver(canvas).resolve([make_node("a", -100, 2000)])
    assert (result.nodes[0].x, result.nodes[0].y) == (0, 1000)


def test_resolved_layout_is_returned_unchanged(canvas, make_node):
    nodes = [make_node(f"n{i}", 0, 0) for i in range(6)]
    resolver = CollisionResolver(canvas)
    first = resolver.resolve(nodes)
    second = resolver.resolve(first.nodes)

    assert second.nodes == first.nodes
    assert second.iterations == 0


def test_crowded_canvas_still_feasible(make_node):
    canvas = CanvasConfig(width=500, height=300)
    nodes = [make_node(f"n{i}", 10, 10) for i in range(6)]
    result = CollisionResolver(canvas).resolve(nodes)

    assert result.feasible
    assert count_overlaps(result.nodes) == 0
    assert in_bounds(result.nodes, canvas)


def test_impossible_canvas_returns_best_effort(make_node):
    canvas = CanvasConfig(width=200, height=100)
    nodes = [make_node(f"n{i}", 0, 0) for i in range(4)]
    result = CollisionResolver(canvas, ResolverConfig(max_iterations=20)).resolve(nodes)

    assert not result.feasible
    assert result.overlap_count > 0
    assert result.iterations <= 20
    assert in_bounds(result.nodes, canvas)
    with pytest.raises(LayoutInfeasible):
        result.raise_for_infeasible()


def test_empty_input(canvas):
    result = CollisionResolver(canvas).resolve([])
    assert result.feasible
    assert result.nodes == ()


def test_resolution_is_deterministic(canvas, make_node):
    nodes = [make_node(f"n{i}", 900, 500) for i in range(8)]
    resolver = CollisionResolver(canvas)
    assert resolver.resolve(nodes) == resolver.resolve(nodes)
