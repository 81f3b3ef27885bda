"""Per-tick edge geometry: rendered paths and label anchors.

Given current endpoint positions and an edge's precomputed curve metadata,
compute either a straight segment or a quadratic curve whose control point
is pushed perpendicular to the segment, plus the point along that curve
where the edge label sits. Coincident endpoints yield a point path; edges
whose endpoints have no position yet are skipped for this frame.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Literal, Mapping, Optional, Sequence, Tuple

from .config_schema import GeometryConfig
from .graph_model import GraphEdge

Point = Tuple[float, float]

_DEFAULT_CONFIG = GeometryConfig()

# Endpoints closer than this are treated as coincident
MIN_EDGE_LENGTH = 1e-9


@dataclass(frozen=True)
class EdgePath:
    """Rendered shape of an edge."""

    kind: Literal["line", "quad", "point"]
    start: Point
    end: Point
    control: Optional[Point] = None

    def to_svg(self) -> str:
        sx, sy = self.start
        tx, ty = self.end
        if self.kind == "quad" and self.control is not None:
            mx, my = self.control
            return f"M {sx} {sy} Q {mx} {my} {tx} {ty}"
        return f"M {sx} {sy} L {tx} {ty}"


@dataclass(frozen=True)
class EdgeGeometry:
    edge_id: str
    path: EdgePath
    label: Point


def _finite(point: Optional[Point]) -> bool:
    return point is not None and all(
        isinstance(v, (int, float)) and math.isfinite(v) for v in point
    )


def _coincident(start: Point, end: Point) -> bool:
    return math.hypot(end[0] - start[0], end[1] - start[1]) < MIN_EDGE_LENGTH


def quadratic_point(start: Point, control: Point, end: Point, t: float) -> Point:
    """Point at parameter ``t`` on a quadratic Bezier curve."""
    u = 1 - t
    return (
        u * u * start[0] + 2 * u * t * control[0] + t * t * end[0],
        u * u * start[1] + 2 * u * t * control[1] + t * t * end[1],
    )


def _is_curved(edge: GraphEdge) -> bool:
    return edge.is_multiple and edge.curve_offset != 0


def _control_point(
    edge: GraphEdge,
    start: Point,
    end: Point,
    hub_scale: float,
    config: GeometryConfig,
) -> Point:
    sx, sy = start
    tx, ty = end
    dx = tx - sx
    dy = ty - sy
    mid_x = (sx + tx) / 2
    mid_y = (sy + ty) / 2

    if edge.is_hub and edge.hub_total >= config.hub_curve_min_total:
        perp = math.atan2(dy, dx) + math.pi / 2
        offset = edge.curve_offset * hub_scale
        return (mid_x + math.cos(perp) * offset, mid_y + math.sin(perp) * offset)

    ratio = edge.curve_offset * config.curve_scale_multi / math.hypot(dx, dy)
    return (mid_x - dy * ratio, mid_y + dx * ratio)


def edge_path(
    edge: GraphEdge,
    start: Optional[Point],
    end: Optional[Point],
    config: GeometryConfig = _DEFAULT_CONFIG,
) -> Optional[EdgePath]:
    """Path for an edge between two positions.

    Returns:
        The path, or None when either endpoint has no usable position
    """
    if not (_finite(start) and _finite(end)):
        return None
    if _coincident(start, end):
        return EdgePath(kind="point", start=start, end=end)
    if not _is_curved(edge):
        return EdgePath(kind="line", start=start, end=end)
    control = _control_point(edge, start, end, config.curve_scale_hub, config)
    return EdgePath(kind="quad", start=start, end=end, control=control)


def label_bias(edge: GraphEdge, config: GeometryConfig = _DEFAULT_CONFIG) -> float:
    """Fraction along the edge (0 = source) where its label sits."""
    if edge.is_hub:
        return config.label_bias_hub
    if edge.is_multiple:
        return config.label_bias_multi
    return config.label_bias_default


def label_anchor(
    edge: GraphEdge,
    start: Optional[Point],
    end: Optional[Point],
    config: GeometryConfig = _DEFAULT_CONFIG,
) -> Optional[Point]:
    """Label position for an edge, biased toward the source."""
    if not (_finite(start) and _finite(end)):
        return None
    if _coincident(start, end):
        return (start[0], start[1])

    bias = label_bias(edge, config)
    if not _is_curved(edge):
        return (
            start[0] + (end[0] - start[0]) * bias,
            start[1] + (end[1] - start[1]) * bias,
        )

    # Hub labels hug the curve a little less than the stroke does
    control = _control_point(edge, start, end, config.hub_label_offset_scale, config)
    return quadratic_point(start, control, end, bias)


def compute_frame(
    edges: Sequence[GraphEdge],
    positions: Mapping[str, Point],
    config: GeometryConfig = _DEFAULT_CONFIG,
) -> Dict[str, EdgeGeometry]:
    """Geometry for every edge whose endpoints are placed in ``positions``.

    Unplaced edges are left out of this frame and picked up on a later one.
    """
    frame: Dict[str, EdgeGeometry] = {}
    for edge in edges:
        start = positions.get(edge.source)
        end = positions.get(edge.target)
        path = edge_path(edge, start, end, config)
        if path is None:
            continue
        frame[edge.id] = EdgeGeometry(
            edge_id=edge.id,
            path=path,
            label=label_anchor(edge, start, end, config),
        )
    return frame
