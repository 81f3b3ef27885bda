"""Tests for cluster colors, relation strengths and the edge palette cursor."""

from __future__ import annotations

from insight_explorer.palette import (
    DEFAULT_CLUSTER_COLOR,
    DEFAULT_RELATION_STRENGTH,
    EDGE_COLOR_PALETTE,
    PaletteCursor,
    assign_edge_colors,
    color_for_cluster,
    darken_color,
    lighten_color,
    strength_for_relation,
)


class TestLookups:
    """Fixed tables with neutral fallbacks."""

    def test_known_cluster_color(self):
        assert color_for_cluster("cx:cluster-witness-management") == "#ea580c"

    def test_unknown_cluster_is_gray(self):
        assert color_for_cluster("cx:cluster-nope") == DEFAULT_CLUSTER_COLOR == "#6b7280"

    def test_known_relation_strength(self):
        assert strength_for_relation("operational dependency") == 1.0
        assert strength_for_relation("learning loop") == 0.8

    def test_unknown_relation_strength(self):
        assert strength_for_relation("vibes") == DEFAULT_RELATION_STRENGTH == 0.5

    def test_strengths_in_unit_interval(self):
        for label in ("operational dependency", "tagging and retrieval", "anything"):
            assert 0 < strength_for_relation(label) <= 1


class TestAssignEdgeColors:
    """Round-robin palette with a cursor threaded between builds."""

    def test_round_robin_from_start(self):
        keys = [("a", "b", "r1"), ("a", "c", "r2"), ("b", "c", "r3")]
        colors, cursor = assign_edge_colors(keys)
        assert colors == list(EDGE_COLOR_PALETTE[:3])
        assert cursor.next_index == 3

    def test_duplicate_keys_share_color(self):
        keys = [("a", "b", "r"), ("a", "b", "r"), ("a", "c", "r")]
        colors, cursor = assign_edge_colors(keys)
        assert colors[0] == colors[1]
        assert colors[2] == EDGE_COLOR_PALETTE[1]
        assert cursor.next_index == 2

    def test_previous_colors_are_kept(self):
        first, cursor = assign_edge_colors([("a", "b", "r1"), ("a", "c", "r2")])
        second, cursor = assign_edge_colors(
            [("x", "y", "new"), ("a", "c", "r2"), ("a", "b", "r1")], cursor
        )
        assert second[1] == first[1]
        assert second[2] == first[0]
        assert second[0] == EDGE_COLOR_PALETTE[2]
        assert second[0] not in first

    def test_cursor_keeps_only_current_keys(self):
        _, cursor = assign_edge_colors([("a", "b", "r1"), ("a", "c", "r2")])
        _, cursor = assign_edge_colors([("a", "b", "r1")], cursor)
        assert set(cursor.used_colors) == {("a", "b", "r1")}
        assert cursor.next_index == 2

    def test_readded_key_draws_fresh_color(self):
        first, cursor = assign_edge_colors([("a", "b", "r1"), ("a", "c", "r2")])
        _, cursor = assign_edge_colors([("a", "b", "r1")], cursor)
        third, _ = assign_edge_colors([("a", "b", "r1"), ("a", "c", "r2")], cursor)
        assert third[0] == first[0]
        assert third[1] == EDGE_COLOR_PALETTE[2]

    def test_palette_wraps(self):
        keys = [("s", f"t{i}", "r") for i in range(len(EDGE_COLOR_PALETTE) + 1)]
        colors, _ = assign_edge_colors(keys)
        assert colors[-1] == EDGE_COLOR_PALETTE[0]

    def test_input_cursor_not_mutated(self):
        cursor = PaletteCursor(used_colors={("a", "b", "r"): "#123456"}, next_index=5)
        colors, new_cursor = assign_edge_colors([("a", "b", "r"), ("c", "d", "r")], cursor)
        assert colors == ["#123456", EDGE_COLOR_PALETTE[5]]
        assert cursor.next_index == 5
        assert new_cursor is not cursor


class TestColorAdjust:
    """lighten_color / darken_color shift every channel by a fraction of 255."""

    def test_darken_white(self):
        assert darken_color("#ffffff", 0.2) == "#cccccc"

    def test_lighten_black(self):
        assert lighten_color("#000000", 0.2) == "#333333"

    def test_clamped(self):
        assert lighten_color("#ffffff") == "#ffffff"
        assert darken_color("#000000") == "#000000"

    def test_short_hex(self):
        assert darken_color("#fff", 0.2) == "#cccccc"

    def test_invalid_hex_unchanged(self):
        assert darken_color("not-a-color") == "not-a-color"
        assert lighten_color("#12345") == "#12345"

    def test_negative_amount_uses_magnitude(self):
        assert darken_color("#ffffff", -0.2) == "#cccccc"
