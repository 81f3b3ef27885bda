"""Stroke and label styling for edges under the current selection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .graph_model import GraphEdge
from .palette import darken_color, lighten_color
from .selection import SelectionState

FALLBACK_EDGE_COLOR = "#64748b"
FALLBACK_HUB_EDGE_COLOR = "#52525b"
FALLBACK_LABEL_COLOR = "#334155"

HUB_DASH = "3,3"

LABEL_MAX_LENGTH = 42
LABEL_MAX_LENGTH_HOVERED = 60
LABEL_MAX_LENGTH_SELECTED = 70
ELLIPSIS = "…"


@dataclass(frozen=True)
class EdgeStyle:
    stroke: str
    width: float
    opacity: float
    dash: Optional[str]
    label: str
    label_color: str
    label_weight: int


def truncate_label(label: str, max_length: int) -> str:
    if len(label) > max_length:
        return label[:max_length] + ELLIPSIS
    return label


def edge_style(edge: GraphEdge, selection: Optional[SelectionState] = None) -> EdgeStyle:
    """Resolve stroke and label style for one edge.

    Selected edges are darker, wider and almost opaque. Hovered edges are
    lighter and a little less wide. Hub edges are dashed and fainter at rest.
    """
    selected = selection is not None and selection.selected_edge_id == edge.id
    hovered = selection is not None and not selected and selection.hovered_edge_id == edge.id

    base = edge.color or (FALLBACK_HUB_EDGE_COLOR if edge.is_hub else FALLBACK_EDGE_COLOR)
    label_base = edge.color or FALLBACK_LABEL_COLOR

    if selected:
        stroke = darken_color(base, 0.15)
        width = max(3.6, edge.strength * 3.3)
        opacity = 0.96
        label = truncate_label(edge.relation, LABEL_MAX_LENGTH_SELECTED)
        label_color = darken_color(label_base, 0.25)
    elif hovered:
        stroke = lighten_color(base, 0.2)
        width = max(2.8, edge.strength * 2.7)
        opacity = 0.86
        label = truncate_label(edge.relation, LABEL_MAX_LENGTH_HOVERED)
        label_color = lighten_color(label_base, 0.2)
    else:
        stroke = base
        width = max(1.25, edge.strength * 2)
        opacity = 0.55 if edge.is_hub else 0.65 if edge.is_multiple else 0.75
        label = truncate_label(edge.relation, LABEL_MAX_LENGTH)
        label_color = darken_color(label_base, 0.12)

    return EdgeStyle(
        stroke=stroke,
        width=width,
        opacity=opacity,
        dash=HUB_DASH if edge.is_hub else None,
        label=label,
        label_color=label_color,
        label_weight=700 if (selected or hovered) else 600,
    )
