"""Tests for the drawable primitives and figures of the three views."""

from __future__ import annotations

import math

import plotly.graph_objects as go
import pytest

from naics_ghg.charts import (
    BAR_COLORS,
    LEAF_COLOR,
    bar_figure,
    bar_primitives,
    bubble_figure,
    bubble_primitives,
    pie_figure,
    pie_primitives,
    selection_summary,
)
from naics_ghg.comparison import LevelRow
from naics_ghg.composition import GasAmount
from naics_ghg.hierarchy import build_hierarchy, find_node
from naics_ghg.layout import Viewport, pack_hierarchy, zoom_to
from naics_ghg.selection import Selection


@pytest.fixture
def packed(co2e_records):
    root = build_hierarchy(co2e_records)
    return root, pack_hierarchy(root)


class TestBubbles:
    def test_root_not_drawn(self, packed):
        root, layout = packed
        bubbles = bubble_primitives(root, layout, None)
        assert root.key not in {b.key for b in bubbles}

    def test_labels_on_focus_children(self, packed, labels):
        root, layout = packed
        focus = find_node(root, "110000", 1)
        bubbles = bubble_primitives(root, layout, focus, labels)
        labelled = {b.key for b in bubbles if b.show_label}
        assert labelled == {c.key for c in focus.children}

    def test_leaves_are_white(self, packed):
        root, layout = packed
        for b in bubble_primitives(root, layout, None):
            if b.depth == 5:
                assert b.color == LEAF_COLOR
            else:
                assert b.color != LEAF_COLOR

    def test_outside_focus_fades(self, packed):
        root, layout = packed
        focus = find_node(root, "110000", 1)
        by_key = {b.key: b for b in bubble_primitives(root, layout, focus)}
        assert by_key["5:212111"].opacity < 1
        assert by_key[focus.key].opacity == 1

    def test_figure_marker_sizes_follow_zoom(self, packed):
        root, layout = packed
        viewport = Viewport(600, 400)
        zoom = zoom_to(layout.circle_for(root), viewport, has_code=False)
        bubbles = bubble_primitives(root, layout, None)
        fig = bubble_figure(bubbles, zoom, viewport, transition_ms=300)
        assert isinstance(fig, go.Figure)
        sizes = list(fig.data[0].marker.size)
        assert sizes[0] == pytest.approx(2 * bubbles[0].r * zoom.scale)
        assert fig.layout.transition.duration == 300
        assert list(fig.data[0].customdata) == [b.key for b in bubbles]


class TestPie:
    def test_angles_cover_full_circle(self):
        slices = pie_primitives([GasAmount("a", 3), GasAmount("b", 1)])
        assert slices[0].start_angle == 0
        assert slices[-1].end_angle == pytest.approx(2 * math.pi)
        assert slices[0].end_angle == pytest.approx(1.5 * math.pi)
        assert slices[1].start_angle == pytest.approx(slices[0].end_angle)
        assert slices[0].share == pytest.approx(0.75)

    def test_empty(self):
        assert pie_primitives([]) == []
        assert pie_primitives([GasAmount("a", 0)]) == []

    def test_figure(self):
        fig = pie_figure(pie_primitives([GasAmount("a", 3), GasAmount("b", 1)]), radius=100)
        assert list(fig.data[0].labels) == ["a", "b"]
        assert fig.layout.height == 320


class TestBars:
    ROWS = [LevelRow("a", "Alpha", 3.0, 1.0), LevelRow("b", "Beta", 2.0, 0.5)]

    def test_total_has_two_segments_per_row(self):
        segments = bar_primitives(self.ROWS, "total")
        assert len(segments) == 4
        margins = [s for s in segments if s.series == "margin"]
        bases = [s for s in segments if s.series == "base"]
        assert [s.start for s in margins] == [0.0, 0.0]
        assert [s.start for s in bases] == [1.0, 0.5]
        assert all(s.color == BAR_COLORS["base"] for s in bases)
        assert [s.band for s in bases] == [0, 1]

    def test_single_kind(self):
        segments = bar_primitives(self.ROWS, "base")
        assert {s.series for s in segments} == {"base"}
        assert [s.width for s in segments] == [3.0, 2.0]

    def test_figure(self):
        fig = bar_figure(bar_primitives(self.ROWS, "total"), self.ROWS, "total")
        assert [t.name for t in fig.data] == ["margin", "base"]
        assert list(fig.layout.yaxis.ticktext) == ["Alpha", "Beta"]


def test_selection_summary():
    summary = selection_summary(Selection(naics="110000", depth=1, label="Agriculture", column="sector"))
    assert summary["Selected area"] == "110000"
    assert summary["Area title"] == "Agriculture"
    assert summary["Emissions"].startswith("Total")
