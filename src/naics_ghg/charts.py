# drawable primitives for the three views and the plotly figures built from them
import math
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional

import numpy as np
import plotly.colors as pc
import plotly.graph_objects as go

from naics_ghg.comparison import LevelRow, stack_keys, stack_series
from naics_ghg.composition import GasAmount
from naics_ghg.hierarchy import Branch, Node, walk
from naics_ghg.layout import PackLayout, Viewport, ZoomTransform
from naics_ghg.records import label_for
from naics_ghg.selection import Selection

# depth 0 -> light green, depth 5 -> slate blue; leaves are white
DEPTH_SCALE = [[0.0, "rgb(163,245,207)"], [1.0, "rgb(71,84,133)"]]
MAX_DEPTH = 5
LEAF_COLOR = "rgb(255,255,255)"
SERIES_COLORS = pc.qualitative.D3
BAR_COLORS = {"margin": SERIES_COLORS[0], "base": SERIES_COLORS[1]}
EMISSION_LABELS = {"total": "Total (base + margins)", "base": "Base (without margins)", "margin": "Margins only"}


def fmt_value(v) -> str:
    try:
        if v is None or math.isnan(v):
            return "N/A"
        return f"{v:,.3f}"
    except (TypeError, ValueError):
        return str(v)


# -- hierarchy ---------------------------------------------------------------

@dataclass(frozen=True)
class Bubble:
    key: str
    code: str
    label: str
    depth: int
    value: float
    x: float
    y: float
    r: float
    color: str
    opacity: float
    show_label: bool


def depth_color(node: Node) -> str:
    if node.is_leaf:
        return LEAF_COLOR
    return pc.sample_colorscale(DEPTH_SCALE, min(node.depth, MAX_DEPTH) / MAX_DEPTH)[0]


def bubble_primitives(root: Branch, layout: PackLayout, focus: Optional[Node],
                      labels: Optional[Mapping[str, str]] = None) -> List[Bubble]:
    """One circle per laid-out node below the root, parents before children."""
    focus = focus or root
    bubbles = []
    for node in walk(root):
        if node is root:
            continue
        circle = layout.circle_for(node)
        if circle is None:
            continue
        in_focus = node.parent is focus or (node is focus and node.is_leaf)
        # circles outside the focused subtree fade back
        inside = node is focus or focus in node.ancestors() or focus is root
        bubbles.append(Bubble(
            key=node.key,
            code=node.code,
            label=label_for(labels, node.code),
            depth=node.depth,
            value=node.value,
            x=circle.x,
            y=circle.y,
            r=circle.r,
            color=depth_color(node),
            opacity=1.0 if inside else 0.35,
            show_label=in_focus,
        ))
    return bubbles


def bubble_figure(bubbles: List[Bubble], zoom: ZoomTransform, viewport: Viewport,
                  transition_ms: int = 0) -> go.Figure:
    (x0, x1), (y0, y1) = zoom.window(viewport)
    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=[b.x for b in bubbles],
        y=[b.y for b in bubbles],
        mode="markers+text",
        text=[b.label if b.show_label else "" for b in bubbles],
        textposition="middle center",
        customdata=[b.key for b in bubbles],
        hovertext=[f"{b.label} ({b.code})<br>{fmt_value(b.value)} kg CO2e/USD" for b in bubbles],
        hoverinfo="text",
        marker=dict(
            size=[2 * b.r * zoom.scale for b in bubbles],
            sizemode="diameter",
            color=[b.color for b in bubbles],
            opacity=[b.opacity for b in bubbles],
            line=dict(color="rgba(40,40,40,0.35)", width=1),
        ),
        showlegend=False,
    ))
    fig.update_layout(
        width=int(viewport.width),
        height=int(viewport.height),
        margin=dict(l=0, r=0, t=0, b=0),
        xaxis=dict(range=[x0, x1], visible=False, fixedrange=True),
        yaxis=dict(range=[y0, y1], visible=False, fixedrange=True),
        plot_bgcolor="rgb(163,245,207)",
        dragmode=False,
        clickmode="event+select",
        template="plotly_white",
    )
    if transition_ms:
        fig.update_layout(transition=dict(duration=transition_ms, easing="cubic-in-out"))
    return fig


# -- gas composition -----------------------------------------------------------

@dataclass(frozen=True)
class PieSlice:
    gas: str
    amount: float
    share: float
    start_angle: float
    end_angle: float
    color: str


def pie_primitives(amounts: List[GasAmount]) -> List[PieSlice]:
    """Slices clockwise from 12 o'clock in input order, angles in radians."""
    if not amounts:
        return []
    values = np.array([a.amount for a in amounts], dtype=float)
    total = values.sum()
    if total <= 0:
        return []
    ends = np.cumsum(values) / total * 2 * math.pi
    starts = np.concatenate([[0.0], ends[:-1]])
    return [
        PieSlice(a.gas, a.amount, a.amount / total, float(s), float(e), SERIES_COLORS[i % len(SERIES_COLORS)])
        for i, (a, s, e) in enumerate(zip(amounts, starts, ends))
    ]


def pie_figure(slices: List[PieSlice], radius: float = 0.0, emissions: str = "total") -> go.Figure:
    margin = 40
    size = int(2 * radius + 2 * margin) if radius > 0 else 420
    fig = go.Figure(go.Pie(
        labels=[s.gas for s in slices],
        values=[s.amount for s in slices],
        sort=False,
        direction="clockwise",
        rotation=0,
        marker=dict(colors=[s.color for s in slices], line=dict(color="white", width=2)),
        hovertemplate="<b>Gas:</b> %{label}<br><b>Amount:</b> %{value:,.4f}<extra></extra>",
        textinfo="percent",
    ))
    fig.update_layout(
        height=max(size, 320),
        margin=dict(l=margin, r=margin, t=margin, b=margin),
        legend=dict(title=EMISSION_LABELS.get(emissions, emissions)),
        template="plotly_white",
    )
    return fig


# -- level comparison ------------------------------------------------------------

@dataclass(frozen=True)
class BarSegment:
    row_key: str
    label: str
    series: str
    start: float
    end: float
    band: int
    color: str

    @property
    def width(self) -> float:
        return self.end - self.start


def bar_primitives(rows: List[LevelRow], kind: str) -> List[BarSegment]:
    series = stack_series(rows, kind)
    segments = []
    for key in stack_keys(kind):
        for band, (row, (start, end)) in enumerate(zip(rows, series[key])):
            segments.append(BarSegment(row.key, row.label, key, start, end, band, BAR_COLORS[key]))
    return segments


def bar_figure(segments: List[BarSegment], rows: List[LevelRow], kind: str) -> go.Figure:
    fig = go.Figure()
    for key in stack_keys(kind):
        mine = [s for s in segments if s.series == key]
        fig.add_trace(go.Bar(
            name=key,
            orientation="h",
            y=[s.row_key for s in mine],
            x=[s.width for s in mine],
            base=[s.start for s in mine],
            marker_color=BAR_COLORS[key],
            customdata=[s.label for s in mine],
            hovertemplate="%{customdata} " + key + "<br>%{x:,.4f}<extra></extra>",
        ))
    height = len(rows) * 15 + 30 + 30
    fig.update_layout(
        barmode="overlay",
        height=max(height, 220),
        margin=dict(l=220, r=20, t=40, b=30),
        xaxis=dict(side="top", tickformat="~s"),
        yaxis=dict(
            tickmode="array",
            tickvals=[r.key for r in rows],
            ticktext=[r.label for r in rows],
            categoryorder="array",
            categoryarray=[r.key for r in rows],
            autorange="reversed",
        ),
        legend=dict(orientation="h", yanchor="bottom", y=1.02),
        template="plotly_white",
    )
    return fig


def selection_summary(selection: Selection) -> Dict[str, str]:
    return {
        "Selected area": selection.naics or "All",
        "Area title": selection.label,
        "Hierarchy depth (0 = all industries, 1 = sector, 2 = subsector, etc.)": str(selection.depth),
        "Emissions": EMISSION_LABELS.get(selection.selected_emissions, selection.selected_emissions),
    }
