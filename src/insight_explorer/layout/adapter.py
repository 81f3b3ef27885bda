"""Layout engine adapter: the single owner of node positions.

The adapter wraps a ForceSimulation with link, charge, centering and
collision forces, seeds node positions on a ring around the viewport
center, and advances one step per host frame. After every step it writes
positions back onto the GraphNodes and hands listeners a fresh snapshot;
no other component writes ``x``/``y``/``fx``/``fy``.

There is at most one simulation per adapter: ``start`` discards any
previous run, and ``reheat``/``resize`` act on the current one.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from ..config_schema import LayoutConfig
from ..graph_model import GraphEdge, GraphNode
from ..observability import log_action
from .forces import Body, CenterForce, CollideForce, LinkForce, ManyBodyForce
from .simulation import ForceSimulation

logger = logging.getLogger(__name__)

Point = Tuple[float, float]
PositionSnapshot = Mapping[str, Point]
TickListener = Callable[[PositionSnapshot], None]


@dataclass(frozen=True)
class Viewport:
    width: float
    height: float

    @property
    def center(self) -> Point:
        return (self.width / 2, self.height / 2)


class LayoutEngineAdapter:
    """Drives a force layout for one mounted graph view.

    Typical host loop::

        adapter = LayoutEngineAdapter()
        adapter.on_tick(redraw)
        adapter.start(graph.nodes, graph.edges, Viewport(1200, 800))
        while adapter.step():   # once per frame
            ...
        adapter.stop()
    """

    def __init__(self, config: Optional[LayoutConfig] = None):
        self.config = config or LayoutConfig()
        self._listeners: List[TickListener] = []
        self._simulation: Optional[ForceSimulation] = None
        self._nodes: Dict[str, GraphNode] = {}
        self._bodies: Dict[str, Body] = {}
        self._pinned: set[str] = set()
        self._viewport: Optional[Viewport] = None
        self.ticks = 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def running(self) -> bool:
        return self._simulation is not None

    @property
    def alpha(self) -> float:
        return self._simulation.alpha if self._simulation else 0.0

    def start(self, nodes: Sequence[GraphNode], edges: Sequence[GraphEdge], viewport: Viewport) -> None:
        """Seed positions and begin a new simulation, replacing any current one."""
        if self._simulation is not None:
            self.stop()

        cfg = self.config
        self._viewport = viewport
        self._nodes = {node.id: node for node in nodes}
        self._pinned = set()
        self.ticks = 0

        cx, cy = viewport.center
        radius = min(viewport.width, viewport.height) * cfg.seed_radius_fraction * cfg.seed_radius_scale
        count = len(nodes)
        bodies: List[Body] = []
        for index, node in enumerate(nodes):
            angle = (index / count) * math.pi * 2
            node.x = cx + math.cos(angle) * radius
            node.y = cy + math.sin(angle) * radius
            node.fx = node.fy = None
            bodies.append(Body(id=node.id, x=node.x, y=node.y, radius=node.size))
        self._bodies = {body.id: body for body in bodies}

        links = [(e.source, e.target) for e in edges if e.source in self._nodes and e.target in self._nodes]
        if len(links) < len(edges):
            logger.debug("Layout skipping %d edges with unknown endpoints", len(edges) - len(links))

        sim = ForceSimulation(
            bodies,
            alpha_min=cfg.alpha_min,
            alpha_decay=cfg.effective_alpha_decay,
            velocity_decay=cfg.velocity_decay,
        )
        sim.force("link", LinkForce(links, distance=cfg.link_distance, strength=cfg.link_strength))
        sim.force("charge", ManyBodyForce(
            cfg.charge_strength,
            distance_min=cfg.charge_distance_min,
            distance_max=cfg.charge_distance_max,
        ))
        sim.force("center", CenterForce(cx, cy))
        padding = cfg.collision_padding
        sim.force("collision", CollideForce(lambda body: body.radius + padding))
        sim.alpha = cfg.initial_alpha
        self._simulation = sim

        log_action("layout_start", nodes=count, links=len(links),
                   width=viewport.width, height=viewport.height)

    def stop(self) -> None:
        """Halt integration and drop the simulation state.

        Tick listeners stay registered so a later ``start`` reuses them.
        """
        if self._simulation is None:
            return
        log_action("layout_stop", ticks=self.ticks, alpha=round(self._simulation.alpha, 5))
        for node_id in list(self._pinned):
            self.release_fixed_position(node_id)
        self._simulation = None
        self._bodies = {}
        self._nodes = {}

    # ------------------------------------------------------------------
    # Stepping
    # ------------------------------------------------------------------

    def on_tick(self, listener: TickListener) -> Callable[[], None]:
        """Call ``listener(positions)`` after every step.

        Returns:
            A function that unregisters the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def step(self) -> bool:
        """Advance one integration step if the simulation is still warm.

        Returns:
            True if a step ran, False when stopped or settled
        """
        sim = self._simulation
        if sim is None or sim.settled:
            return False

        sim.tick()
        self.ticks += 1
        snapshot = self._write_back()
        for listener in list(self._listeners):
            listener(snapshot)
        return True

    def advance(self, max_frames: int) -> int:
        """Step up to ``max_frames`` times (a host frame budget), stopping early once settled."""
        frames = 0
        while frames < max_frames and self.step():
            frames += 1
        return frames

    def positions(self) -> Dict[str, Point]:
        return {body_id: (body.x, body.y) for body_id, body in self._bodies.items()}

    def _write_back(self) -> Dict[str, Point]:
        snapshot = {}
        for body_id, body in self._bodies.items():
            node = self._nodes[body_id]
            node.x = body.x
            node.y = body.y
            snapshot[body_id] = (body.x, body.y)
        return snapshot

    # ------------------------------------------------------------------
    # Disturbances
    # ------------------------------------------------------------------

    def reheat(self, partial: Optional[float] = None) -> None:
        """Raise alpha so the current run keeps moving (no restart)."""
        if self._simulation is None:
            logger.debug("reheat ignored: no running simulation")
            return
        self._simulation.alpha = self.config.reheat_alpha if partial is None else partial

    def resize(self, viewport: Viewport) -> None:
        """Re-center the existing run on a new viewport and reheat it."""
        self._viewport = viewport
        if self._simulation is None:
            return
        cx, cy = viewport.center
        self._simulation.force("center", CenterForce(cx, cy))
        self.reheat()

    def set_fixed_position(self, node_id: str, x: float, y: float) -> bool:
        """Pin a node (drag in progress); the simulation will not move it."""
        body = self._bodies.get(node_id)
        if body is None or self._simulation is None:
            logger.debug("set_fixed_position ignored for unknown node %s", node_id)
            return False
        if not self._pinned:
            self._simulation.alpha_target = self.config.drag_alpha_target
        self._pinned.add(node_id)
        body.fx, body.fy = x, y
        node = self._nodes[node_id]
        node.fx, node.fy = x, y
        return True

    def release_fixed_position(self, node_id: str) -> bool:
        """Unpin a node, handing it back to the simulation."""
        if node_id not in self._pinned:
            return False
        self._pinned.discard(node_id)
        body = self._bodies[node_id]
        body.fx = body.fy = None
        node = self._nodes[node_id]
        node.fx = node.fy = None
        if not self._pinned and self._simulation is not None:
            self._simulation.alpha_target = 0.0
        return True
