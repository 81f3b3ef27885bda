"""Graph model builder: clusters and relations to renderable nodes and edges.

Nodes carry a precomputed size and color; edges carry strength, color and
curve metadata from the disambiguator. The builder never drops an edge,
even one whose endpoints are unknown; renderers skip what they cannot
place.
"""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import networkx as nx

from .config_schema import DisambiguationConfig
from .disambiguation import disambiguate
from .models import Cluster, Dataset, Idea, Thread
from .observability import log_warning, timeit
from .palette import PaletteCursor, assign_edge_colors, color_for_cluster, strength_for_relation

logger = logging.getLogger(__name__)

BASE_NODE_SIZE = 20.0
NODE_SIZE_SCALE = 5.0


def node_size(comment_count: int) -> float:
    """Logarithmic node radius: 20 for no comments, growing sub-linearly."""
    return BASE_NODE_SIZE + NODE_SIZE_SCALE * math.log(max(0, comment_count) + 1)


@dataclass
class GraphNode:
    """One cluster as a graph node.

    ``x``/``y`` (and the drag pins ``fx``/``fy``) belong to the layout
    adapter once a simulation starts; everything else is fixed at build time.
    """

    id: str
    name: str
    description: str
    size: float
    color: str
    comment_count: int
    ideas: Tuple[Idea, ...] = ()
    threads: Tuple[Thread, ...] = ()
    x: Optional[float] = None
    y: Optional[float] = None
    fx: Optional[float] = None
    fy: Optional[float] = None

    def metadata(self) -> Dict[str, Any]:
        """Build-time fields only (no positions)."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "size": self.size,
            "color": self.color,
            "comment_count": self.comment_count,
            "idea_ids": [idea.id for idea in self.ideas],
            "thread_ids": [thread.id for thread in self.threads],
        }


@dataclass(frozen=True)
class GraphEdge:
    """One relation as a graph edge, with disambiguation metadata."""

    id: str
    source: str
    target: str
    relation: str
    strength: float
    color: str
    curve_offset: float = 0.0
    is_multiple: bool = False
    is_hub: bool = False
    group_index: int = 0
    group_total: int = 1
    hub_index: int = 0
    hub_total: int = 1

    @property
    def color_key(self) -> Tuple[str, str, str]:
        return (self.source, self.target, self.relation)

    def metadata(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class GraphData:
    """Nodes and edges of one build."""

    nodes: List[GraphNode] = field(default_factory=list)
    edges: List[GraphEdge] = field(default_factory=list)

    def node(self, node_id: str) -> Optional[GraphNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def edge(self, edge_id: str) -> Optional[GraphEdge]:
        for edge in self.edges:
            if edge.id == edge_id:
                return edge
        return None

    def edges_for(self, node_id: str) -> List[GraphEdge]:
        """Edges that start or end at a node."""
        return [e for e in self.edges if e.source == node_id or e.target == node_id]

    def resolvable_edges(self) -> List[GraphEdge]:
        """Edges whose endpoints both name a node."""
        ids = {node.id for node in self.nodes}
        return [e for e in self.edges if e.source in ids and e.target in ids]

    def to_dict(self, include_positions: bool = False) -> Dict[str, Any]:
        nodes = []
        for node in self.nodes:
            data = node.metadata()
            if include_positions:
                data.update(x=node.x, y=node.y)
            nodes.append(data)
        return {"nodes": nodes, "edges": [edge.metadata() for edge in self.edges]}

    def to_networkx(self) -> nx.MultiDiGraph:
        """Export as a MultiDiGraph keyed by edge id."""
        graph = nx.MultiDiGraph()
        for node in self.nodes:
            graph.add_node(node.id, **node.metadata())
        for edge in self.edges:
            graph.add_edge(edge.source, edge.target, key=edge.id, **edge.metadata())
        return graph


def _build_node(cluster: Cluster) -> GraphNode:
    count = cluster.comment_count
    return GraphNode(
        id=cluster.id,
        name=cluster.name,
        description=cluster.description,
        size=node_size(count),
        color=color_for_cluster(cluster.id),
        comment_count=count,
        ideas=cluster.ideas,
        threads=cluster.threads,
    )


def _unique_id(candidate: str, seen: Dict[str, int]) -> str:
    """Suffix ``#n`` onto an id that an earlier edge already took."""
    if candidate not in seen:
        seen[candidate] = 1
        return candidate
    n = seen[candidate]
    while True:
        n += 1
        unique = f"{candidate}#{n}"
        if unique not in seen:
            break
    seen[candidate] = n
    log_warning("Edge id collision", edge_id=candidate, renamed_to=unique)
    seen[unique] = 1
    return unique


def build_graph_model(
    dataset: Dataset,
    cursor: Optional[PaletteCursor] = None,
    config: Optional[DisambiguationConfig] = None,
) -> Tuple[GraphData, PaletteCursor]:
    """Build nodes and edges for a dataset.

    Args:
        dataset: Parsed dataset
        cursor: Palette cursor returned by the previous build, if any
        config: Disambiguation settings

    Returns:
        Tuple of (graph data, palette cursor to pass to the next build)
    """
    with timeit("build_graph_model", clusters=len(dataset.clusters), relations=len(dataset.relations)):
        nodes = [_build_node(cluster) for cluster in dataset.clusters]

        dangling = dataset.dangling_relations()
        if dangling:
            logger.debug("%d relations reference unknown clusters", len(dangling))

        layouts = disambiguate(dataset.relations, config)
        relations = [dataset.relations[layout.relation_index] for layout in layouts]
        colors, next_cursor = assign_edge_colors(
            ((r.source, r.target, r.relation) for r in relations),
            cursor,
        )

        seen_ids: Dict[str, int] = {}
        edges: List[GraphEdge] = []
        for layout, rel, color in zip(layouts, relations, colors):
            edges.append(GraphEdge(
                id=_unique_id(f"{layout.group_key}-{layout.group_index}", seen_ids),
                source=rel.source,
                target=rel.target,
                relation=rel.relation,
                strength=strength_for_relation(rel.relation),
                color=color,
                curve_offset=layout.curve_offset,
                is_multiple=layout.is_multiple,
                is_hub=layout.is_hub,
                group_index=layout.group_index,
                group_total=layout.group_total,
                hub_index=layout.hub_index,
                hub_total=layout.hub_total,
            ))

    return GraphData(nodes=nodes, edges=edges), next_cursor
