"""Tests for curve-offset disambiguation of overlapping relations."""

from __future__ import annotations

import math

import pytest

from insight_explorer.config_schema import DisambiguationConfig
from insight_explorer.disambiguation import (
    disambiguate,
    fan_offset,
    pair_offset,
    relation_multigraph,
)
from insight_explorer.models import Relation


def rels(*triples):
    return [Relation(source=s, target=t, relation=r) for s, t, r in triples]


class TestPairOffset:
    @pytest.mark.parametrize(
        "index,expected",
        [(0, 0.0), (1, 30.0), (2, -60.0), (3, 90.0), (4, -120.0)],
    )
    def test_alternating_sequence(self, index, expected):
        assert pair_offset(index, 30) == expected


class TestFanOffset:
    def test_narrow_arc_endpoints(self):
        config = DisambiguationConfig()
        first = fan_offset(0, 4, config)
        last = fan_offset(3, 4, config)
        assert first == pytest.approx(-math.pi / 8 * 60)
        assert last == pytest.approx(math.pi / 8 * 60)

    def test_wide_arc_above_six(self):
        config = DisambiguationConfig()
        assert fan_offset(0, 7, config) == pytest.approx(-math.pi / 6 * 60)

    def test_six_still_narrow(self):
        config = DisambiguationConfig()
        assert fan_offset(0, 6, config) == pytest.approx(-math.pi / 8 * 60)

    def test_symmetric(self):
        config = DisambiguationConfig()
        offsets = [fan_offset(i, 5, config) for i in range(5)]
        assert offsets[2] == pytest.approx(0.0)
        assert offsets[0] == pytest.approx(-offsets[4])


class TestDisambiguate:
    def test_same_pair_fan(self):
        layouts = disambiguate(rels(("A", "B", "r1"), ("A", "B", "r2"), ("A", "B", "r3")))
        assert [l.curve_offset for l in layouts] == [0.0, 30.0, -60.0]
        assert all(l.is_multiple for l in layouts)
        assert all(l.group_total == 3 for l in layouts)
        assert not any(l.is_hub for l in layouts)

    def test_hub_at_four(self):
        layouts = disambiguate(rels(
            ("H", "A", "r"), ("H", "B", "r"), ("H", "C", "r"), ("H", "D", "r"),
        ))
        assert all(l.is_hub for l in layouts)
        assert all(l.hub_total == 4 for l in layouts)
        assert [l.hub_index for l in layouts] == [0, 1, 2, 3]
        assert all(l.is_multiple for l in layouts)
        assert layouts[0].curve_offset < 0 < layouts[3].curve_offset

    def test_not_hub_at_three(self):
        layouts = disambiguate(rels(("H", "A", "r"), ("H", "B", "r"), ("H", "C", "r")))
        assert not any(l.is_hub for l in layouts)
        assert not any(l.is_multiple for l in layouts)
        assert all(l.curve_offset == 0.0 for l in layouts)

    def test_hub_threshold_configurable(self):
        config = DisambiguationConfig(hub_threshold=3)
        layouts = disambiguate(rels(("H", "A", "r"), ("H", "B", "r"), ("H", "C", "r")), config)
        assert all(l.is_hub for l in layouts)

    def test_pair_inside_hub_uses_pair_offset(self):
        layouts = disambiguate(rels(
            ("H", "A", "r1"), ("H", "A", "r2"), ("H", "B", "r"), ("H", "C", "r"),
        ))
        by_index = {l.relation_index: l for l in layouts}
        assert by_index[0].curve_offset == 0.0
        assert by_index[1].curve_offset == 30.0
        assert by_index[2].is_hub and by_index[2].curve_offset != 0.0

    def test_grouped_output_order(self):
        layouts = disambiguate(rels(("A", "B", "r1"), ("A", "C", "r2"), ("A", "B", "r3")))
        assert [l.relation_index for l in layouts] == [0, 2, 1]
        assert [l.group_key for l in layouts] == ["A->B", "A->B", "A->C"]
        assert [l.group_index for l in layouts] == [0, 1, 0]

    def test_hub_index_uses_first_matching_triple(self):
        layouts = disambiguate(rels(
            ("H", "A", "same"), ("H", "A", "same"), ("H", "B", "r"), ("H", "C", "r"),
        ))
        by_index = {l.relation_index: l for l in layouts}
        assert by_index[0].hub_index == 0
        assert by_index[1].hub_index == 0

    def test_deterministic(self):
        relations = rels(("A", "B", "r1"), ("B", "A", "r2"), ("A", "B", "r3"))
        assert disambiguate(relations) == disambiguate(relations)

    def test_empty(self):
        assert disambiguate([]) == []

    def test_dangling_endpoints_pass_through(self):
        layouts = disambiguate(rels(("A", "ghost", "r")))
        assert len(layouts) == 1
        assert layouts[0].curve_offset == 0.0


class TestRelationMultigraph:
    def test_parallel_edges_kept(self):
        graph = relation_multigraph(rels(("A", "B", "r1"), ("A", "B", "r2")))
        assert graph.number_of_edges("A", "B") == 2
        indices = sorted(d["index"] for _, _, d in graph.edges(data=True))
        assert indices == [0, 1]
