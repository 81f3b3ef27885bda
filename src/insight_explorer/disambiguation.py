"""Edge disambiguation: curve offsets for overlapping relations.

Relations that would overlap on screen get a signed curve offset:

- Several relations on one (source, target) pair fan apart with offsets
  0, +k, -2k, +3k, ... in relation-list order.
- A lone relation leaving a hub (a source with many outgoing relations)
  gets an offset from an even angular spread of the hub's fan-out.
- Everything else is drawn straight (offset 0).

The result depends only on the content and order of the relation list.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import networkx as nx

from .config_schema import DisambiguationConfig
from .models import Relation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EdgeLayout:
    """Disambiguation metadata for one relation.

    Attributes:
        relation_index: Position of the relation in the input list
        group_key: ``"{source}->{target}"``
        group_index: Rank within the same-pair group
        group_total: Size of the same-pair group
        hub_index: Rank within the source's fan-out
        hub_total: Source's outgoing relation count
        is_hub: Source fan-out reaches the hub threshold
        is_multiple: Shares its pair with another relation, or leaves a hub
        curve_offset: Signed pixel offset, 0 for a straight segment
    """

    relation_index: int
    group_key: str
    group_index: int
    group_total: int
    hub_index: int
    hub_total: int
    is_hub: bool
    is_multiple: bool
    curve_offset: float


def pair_offset(index: int, unit: float) -> float:
    """Offset of the index-th parallel edge: 0, +unit, -2*unit, +3*unit, ..."""
    if index == 0:
        return 0.0
    magnitude = index * unit
    return magnitude if index % 2 == 1 else -magnitude


def fan_offset(hub_index: int, hub_total: int, config: DisambiguationConfig) -> float:
    """Offset for one edge of a hub, spread evenly over the fan arc."""
    arc = config.wide_fan_arc if hub_total > config.wide_fan_threshold else config.narrow_fan_arc
    step = arc / max(1, hub_total - 1)
    angle = -arc / 2 + hub_index * step
    return angle * config.fan_offset_scale


def relation_multigraph(relations: Sequence[Relation]) -> nx.MultiDiGraph:
    """Multigraph with one keyed edge per relation.

    Edge keys count up from 0 within each (source, target) pair in list
    order, and each edge carries its list position as ``index``.
    """
    graph = nx.MultiDiGraph()
    for index, rel in enumerate(relations):
        graph.add_edge(rel.source, rel.target, index=index, relation=rel.relation)
    return graph


def disambiguate(
    relations: Sequence[Relation],
    config: Optional[DisambiguationConfig] = None,
) -> List[EdgeLayout]:
    """Compute curve offsets and group metadata for every relation.

    Args:
        relations: Raw relations in dataset order
        config: Thresholds and scales (defaults reproduce the published view)

    Returns:
        One EdgeLayout per relation, ordered by same-pair group (groups in
        order of first appearance, members in list order)
    """
    if config is None:
        config = DisambiguationConfig()

    graph = relation_multigraph(relations)

    # Source fan-out in relation-list order
    fan_out: Dict[str, List[Tuple[str, str]]] = {}
    for source in graph.nodes:
        outgoing = sorted(graph.out_edges(source, data=True), key=lambda e: e[2]["index"])
        if outgoing:
            fan_out[source] = [(target, data["relation"]) for _, target, data in outgoing]

    # Same-pair members keyed in first-appearance order
    groups: Dict[Tuple[str, str], List[int]] = {}
    for index, rel in enumerate(relations):
        groups.setdefault((rel.source, rel.target), []).append(index)

    layouts: List[EdgeLayout] = []
    for (source, target), members in groups.items():
        group_total = graph.number_of_edges(source, target)
        outgoing = fan_out[source]
        hub_total = len(outgoing)
        is_hub = hub_total >= config.hub_threshold

        for group_index, relation_index in enumerate(members):
            rel = relations[relation_index]
            hub_index = outgoing.index((target, rel.relation))

            if group_total > 1:
                offset = pair_offset(group_index, config.pair_offset_unit)
            elif is_hub and hub_total > 1:
                offset = fan_offset(hub_index, hub_total, config)
            else:
                offset = 0.0

            layouts.append(EdgeLayout(
                relation_index=relation_index,
                group_key=f"{source}->{target}",
                group_index=group_index,
                group_total=group_total,
                hub_index=hub_index,
                hub_total=hub_total,
                is_hub=is_hub,
                is_multiple=group_total > 1 or is_hub,
                curve_offset=offset,
            ))

    logger.debug(
        "Disambiguated %d relations into %d pair groups (%d hubs)",
        len(layouts), len(groups),
        sum(1 for edges in fan_out.values() if len(edges) >= config.hub_threshold),
    )
    return layouts
