"""Tests for per-frame edge paths and label anchors."""

from __future__ import annotations

import math

import pytest

from insight_explorer.geometry import (
    compute_frame,
    edge_path,
    label_anchor,
    label_bias,
    quadratic_point,
)
from insight_explorer.graph_model import GraphEdge


def make_edge(**overrides) -> GraphEdge:
    fields = dict(
        id="A->B-0",
        source="A",
        target="B",
        relation="learning loop",
        strength=0.8,
        color="#0ea5e9",
    )
    fields.update(overrides)
    return GraphEdge(**fields)


def finite(*points) -> bool:
    return all(math.isfinite(v) for p in points if p is not None for v in p)


class TestEdgePath:
    def test_plain_edge_is_straight(self):
        path = edge_path(make_edge(), (0.0, 0.0), (100.0, 0.0))
        assert path.kind == "line"
        assert path.to_svg() == "M 0.0 0.0 L 100.0 0.0"

    def test_multiple_with_zero_offset_is_straight(self):
        path = edge_path(make_edge(is_multiple=True, curve_offset=0.0), (0.0, 0.0), (100.0, 0.0))
        assert path.kind == "line"

    def test_parallel_edge_curves_perpendicular(self):
        edge = make_edge(is_multiple=True, curve_offset=30.0, group_total=2, group_index=1)
        path = edge_path(edge, (0.0, 0.0), (100.0, 0.0))
        assert path.kind == "quad"
        cx, cy = path.control
        assert cx == pytest.approx(50.0)
        assert cy == pytest.approx(30.0 * 1.6)
        assert path.to_svg().startswith("M 0.0 0.0 Q ")

    def test_opposite_offsets_bend_opposite_ways(self):
        up = edge_path(make_edge(is_multiple=True, curve_offset=30.0), (0.0, 0.0), (100.0, 0.0))
        down = edge_path(make_edge(is_multiple=True, curve_offset=-60.0), (0.0, 0.0), (100.0, 0.0))
        assert up.control[1] > 0 > down.control[1]

    def test_hub_edge_uses_hub_scale(self):
        edge = make_edge(is_multiple=True, is_hub=True, hub_total=4, curve_offset=20.0)
        path = edge_path(edge, (0.0, 0.0), (100.0, 0.0))
        assert path.control[0] == pytest.approx(50.0)
        assert path.control[1] == pytest.approx(20.0 * 1.2)

    def test_coincident_endpoints_give_point_path(self):
        edge = make_edge(is_multiple=True, curve_offset=30.0)
        path = edge_path(edge, (5.0, 5.0), (5.0, 5.0))
        assert path.kind == "point"
        assert path.control is None
        assert finite(path.start, path.end)
        assert "nan" not in path.to_svg().lower()

    def test_hub_coincident_endpoints_finite(self):
        edge = make_edge(is_multiple=True, is_hub=True, hub_total=5, curve_offset=-12.0)
        path = edge_path(edge, (1.0, 2.0), (1.0, 2.0))
        assert finite(path.start, path.end, path.control)

    def test_missing_position_skipped(self):
        assert edge_path(make_edge(), None, (1.0, 1.0)) is None
        assert edge_path(make_edge(), (float("nan"), 0.0), (1.0, 1.0)) is None


class TestLabelAnchor:
    def test_bias_values(self):
        assert label_bias(make_edge()) == 0.38
        assert label_bias(make_edge(is_multiple=True)) == 0.32
        assert label_bias(make_edge(is_multiple=True, is_hub=True)) == 0.26

    def test_straight_label_near_source(self):
        anchor = label_anchor(make_edge(), (0.0, 0.0), (100.0, 0.0))
        assert anchor == pytest.approx((38.0, 0.0))

    def test_curved_label_on_bezier(self):
        edge = make_edge(is_multiple=True, curve_offset=30.0)
        start, end = (0.0, 0.0), (100.0, 0.0)
        path = edge_path(edge, start, end)
        anchor = label_anchor(edge, start, end)
        assert anchor == pytest.approx(quadratic_point(start, path.control, end, 0.32))

    def test_hub_label_uses_label_scale(self):
        edge = make_edge(is_multiple=True, is_hub=True, hub_total=4, curve_offset=20.0)
        start, end = (0.0, 0.0), (100.0, 0.0)
        anchor = label_anchor(edge, start, end)
        expected = quadratic_point(start, (50.0, 20.0 * 1.05), end, 0.26)
        assert anchor == pytest.approx(expected)

    def test_degenerate_label_finite(self):
        edge = make_edge(is_multiple=True, curve_offset=30.0)
        anchor = label_anchor(edge, (3.0, 4.0), (3.0, 4.0))
        assert anchor == (3.0, 4.0)


class TestQuadraticPoint:
    def test_endpoints(self):
        assert quadratic_point((0, 0), (5, 5), (10, 0), 0) == (0, 0)
        assert quadratic_point((0, 0), (5, 5), (10, 0), 1) == (10, 0)

    def test_midpoint(self):
        assert quadratic_point((0, 0), (5, 10), (10, 0), 0.5) == pytest.approx((5.0, 5.0))


class TestComputeFrame:
    def test_skips_unplaced_edges(self):
        placed = make_edge()
        dangling = make_edge(id="A->ghost-0", target="ghost")
        frame = compute_frame([placed, dangling], {"A": (0.0, 0.0), "B": (10.0, 0.0)})
        assert set(frame) == {"A->B-0"}
        assert frame["A->B-0"].label == pytest.approx((3.8, 0.0))

    def test_all_finite_for_sample_graph(self, sample_dataset):
        from insight_explorer.graph_model import build_graph_model

        graph, _ = build_graph_model(sample_dataset)
        positions = {node.id: (float(i * 100), float(i * 50)) for i, node in enumerate(graph.nodes)}
        frame = compute_frame(graph.edges, positions)
        assert len(frame) == len(graph.resolvable_edges())
        for geometry in frame.values():
            assert finite(geometry.path.start, geometry.path.end, geometry.path.control, geometry.label)
