"""Static HTML rendering of a laid-out graph with pyvis (vis.js wrapper).

The layout runs headless for a bounded number of frames, then the settled
positions are written into a pyvis Network with physics disabled so the
browser shows exactly the computed layout. Edge colors, widths, dashes and
labels follow ``styling.edge_style``; curved edges get a vis.js roundness
derived from their control point.

Usage:
    insight-explorer render data/insights.json --out graph.html
"""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Any, Dict, Optional

from pyvis.network import Network

from .config_schema import ExplorerConfig
from .geometry import EdgeGeometry, compute_frame
from .graph_model import GraphData, GraphEdge, GraphNode
from .layout import LayoutEngineAdapter, Viewport
from .observability import timeit
from .selection import SelectionState
from .styling import edge_style
from .transcript import author_initials, format_timestamp, messages_for_threads

logger = logging.getLogger(__name__)

DEFAULT_VIEWPORT = Viewport(1600, 1000)
DEFAULT_FRAME_BUDGET = 600
TOOLTIP_COMMENTS = 5
TOOLTIP_TEXT_LENGTH = 120

NETWORK_OPTIONS = """
{
    "physics": { "enabled": false },
    "nodes": {
        "font": { "size": 14, "face": "arial" },
        "borderWidth": 2,
        "borderWidthSelected": 4,
        "shadow": true
    },
    "edges": {
        "arrows": { "to": { "enabled": true, "scaleFactor": 0.5 } },
        "font": { "size": 11, "align": "middle", "strokeWidth": 3 },
        "shadow": false
    },
    "interaction": {
        "hover": true,
        "tooltipDelay": 100,
        "multiselect": false,
        "navigationButtons": true
    }
}
"""


def node_title(node: GraphNode) -> str:
    """Hover tooltip for a cluster node (plain text with newlines)."""
    parts = [
        f"═══ {node.name} ═══",
        node.description,
        f"Ideas: {len(node.ideas)}  Threads: {len(node.threads)}  Comments: {node.comment_count}",
    ]
    ordered = messages_for_threads(node.threads)
    if ordered:
        parts.append("───────────────────")
    for message in ordered[:TOOLTIP_COMMENTS]:
        text = message.text
        if len(text) > TOOLTIP_TEXT_LENGTH:
            text = text[:TOOLTIP_TEXT_LENGTH - 3] + "..."
        parts.append(f"[{format_timestamp(message.start_time)}] {author_initials(message.speaker)}: {text}")
    return "\n".join(parts)


def edge_smooth(geometry: Optional[EdgeGeometry]) -> Any:
    """vis.js ``smooth`` option for an edge's rendered path.

    Straight paths return False. Curved paths bend toward the side their
    control point lies on, with roundness proportional to how far the
    control point sits from the chord midpoint.
    """
    if geometry is None or geometry.path.kind != "quad" or geometry.path.control is None:
        return False
    (sx, sy), (tx, ty) = geometry.path.start, geometry.path.end
    cx, cy = geometry.path.control
    length = math.hypot(tx - sx, ty - sy)
    if length == 0:
        return False
    mx, my = (sx + tx) / 2, (sy + ty) / 2
    bulge = math.hypot(cx - mx, cy - my)
    cross = (tx - sx) * (cy - sy) - (ty - sy) * (cx - sx)
    return {
        "enabled": True,
        "type": "curvedCW" if cross > 0 else "curvedCCW",
        "roundness": round(min(1.0, 2 * bulge / length), 3),
    }


def edge_options(edge: GraphEdge, geometry: Optional[EdgeGeometry], selection: Optional[SelectionState]) -> Dict[str, Any]:
    style = edge_style(edge, selection)
    return {
        "id": edge.id,
        "label": style.label,
        "title": f"{edge.relation} (strength {edge.strength:g})",
        "color": {"color": style.stroke, "opacity": style.opacity},
        "width": style.width,
        "dashes": style.dash is not None,
        "smooth": edge_smooth(geometry),
    }


def create_network(
    graph: GraphData,
    config: Optional[ExplorerConfig] = None,
    viewport: Viewport = DEFAULT_VIEWPORT,
    max_frames: int = DEFAULT_FRAME_BUDGET,
    selection: Optional[SelectionState] = None,
    bgcolor: str = "#ffffff",
    font_color: str = "#1f2937",
) -> Network:
    """Lay out a graph and build a pyvis Network from the result.

    Args:
        graph: Graph model to draw
        config: Layout and geometry settings
        viewport: Canvas size used to seed and center the layout
        max_frames: Frame budget for the headless layout run
        selection: Selection/hover state to style edges with
        bgcolor: Background color
        font_color: Label font color

    Returns:
        Configured pyvis Network
    """
    config = config or ExplorerConfig()

    adapter = LayoutEngineAdapter(config.layout)
    adapter.start(graph.nodes, graph.edges, viewport)
    frames = adapter.advance(max_frames)
    positions = dict(adapter.positions())
    adapter.stop()
    logger.debug("Layout ran %d frames (settled=%s)", frames, frames < max_frames)

    frame = compute_frame(graph.edges, positions, config.geometry)

    net = Network(
        height=f"{int(viewport.height)}px",
        width="100%",
        bgcolor=bgcolor,
        font_color=font_color,
        directed=True,
        notebook=False,
        select_menu=False,
        filter_menu=False,
        cdn_resources="remote",
    )
    net.set_options(NETWORK_OPTIONS)

    for node in graph.nodes:
        x, y = positions.get(node.id, viewport.center)
        net.add_node(
            node.id,
            label=node.name,
            title=node_title(node),
            color=node.color,
            size=node.size,
            shape="dot",
            x=x,
            y=y,
            physics=False,
        )

    for edge in graph.resolvable_edges():
        net.add_edge(edge.source, edge.target, **edge_options(edge, frame.get(edge.id), selection))

    return net


def write_html(
    graph: GraphData,
    out_path: Path,
    config: Optional[ExplorerConfig] = None,
    viewport: Viewport = DEFAULT_VIEWPORT,
    max_frames: int = DEFAULT_FRAME_BUDGET,
    selection: Optional[SelectionState] = None,
) -> Path:
    """Render a graph to a standalone HTML page.

    Returns:
        Resolved output path

    Raises:
        ValueError: If the output path does not end in .html
    """
    output_path = Path(out_path).resolve()
    if output_path.suffix != ".html":
        raise ValueError(f"Output file must end in .html: {output_path}")
    with timeit("render_html", nodes=len(graph.nodes), edges=len(graph.edges)):
        net = create_network(graph, config, viewport, max_frames, selection)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        net.write_html(str(output_path))
    return output_path
