"""Forces for the layout simulation.

Each force is called once per tick with the current alpha and nudges body
velocities (or, for centering, positions). The formulas follow the
conventional velocity-Verlet force layout: links pull toward a rest
length, many-body charge repels within a clamped distance window,
centering shifts the mean position, and collision separates overlapping
circles.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple


@dataclass
class Body:
    """Mutable simulation state for one node."""

    id: str
    x: float = math.nan
    y: float = math.nan
    vx: float = 0.0
    vy: float = 0.0
    fx: Optional[float] = None
    fy: Optional[float] = None
    radius: float = 0.0


def jiggle(rng: random.Random) -> float:
    """Tiny non-zero displacement for coincident bodies."""
    return (rng.random() - 0.5) * 1e-6


class Force:
    """Base class; subclasses override ``initialize`` and ``__call__``."""

    def initialize(self, bodies: Sequence[Body], rng: random.Random) -> None:
        self.bodies = bodies
        self.rng = rng

    def __call__(self, alpha: float) -> None:
        raise NotImplementedError


class LinkForce(Force):
    """Spring between linked bodies toward a rest distance.

    Each end moves in proportion to the other end's degree, so well-connected
    bodies move less.
    """

    def __init__(self, links: Sequence[Tuple[str, str]], distance: float, strength: float,
                 iterations: int = 1):
        self.links = list(links)
        self.distance = distance
        self.strength = strength
        self.iterations = iterations
        self._pairs: List[Tuple[Body, Body, float]] = []

    def initialize(self, bodies: Sequence[Body], rng: random.Random) -> None:
        super().initialize(bodies, rng)
        by_id = {body.id: body for body in bodies}
        degree: Dict[str, int] = {}
        for source, target in self.links:
            degree[source] = degree.get(source, 0) + 1
            degree[target] = degree.get(target, 0) + 1

        self._pairs = []
        for source, target in self.links:
            if source not in by_id or target not in by_id:
                continue
            bias = degree[source] / (degree[source] + degree[target])
            self._pairs.append((by_id[source], by_id[target], bias))

    def __call__(self, alpha: float) -> None:
        for _ in range(self.iterations):
            for source, target, bias in self._pairs:
                x = target.x + target.vx - source.x - source.vx or jiggle(self.rng)
                y = target.y + target.vy - source.y - source.vy or jiggle(self.rng)
                length = math.sqrt(x * x + y * y)
                length = (length - self.distance) / length * alpha * self.strength
                x *= length
                y *= length
                target.vx -= x * bias
                target.vy -= y * bias
                source.vx += x * (1 - bias)
                source.vy += y * (1 - bias)


class ManyBodyForce(Force):
    """Pairwise charge; negative strength repels.

    Interaction distance is clamped below by ``distance_min`` (no runaway
    forces for near-coincident bodies) and cut off above ``distance_max``.
    """

    def __init__(self, strength: float, distance_min: float, distance_max: float):
        self.strength = strength
        self.distance_min2 = distance_min * distance_min
        self.distance_max2 = distance_max * distance_max

    def __call__(self, alpha: float) -> None:
        bodies = self.bodies
        for node in bodies:
            for other in bodies:
                if other is node:
                    continue
                x = other.x - node.x
                y = other.y - node.y
                l2 = x * x + y * y
                if l2 >= self.distance_max2:
                    continue
                if x == 0:
                    x = jiggle(self.rng)
                    l2 += x * x
                if y == 0:
                    y = jiggle(self.rng)
                    l2 += y * y
                if l2 < self.distance_min2:
                    l2 = math.sqrt(self.distance_min2 * l2)
                w = self.strength * alpha / l2
                node.vx += x * w
                node.vy += y * w


class CenterForce(Force):
    """Translate all bodies so their mean position sits on (x, y)."""

    def __init__(self, x: float, y: float, strength: float = 1.0):
        self.x = x
        self.y = y
        self.strength = strength

    def __call__(self, alpha: float) -> None:
        bodies = self.bodies
        if not bodies:
            return
        sx = sum(b.x for b in bodies) / len(bodies) - self.x
        sy = sum(b.y for b in bodies) / len(bodies) - self.y
        for body in bodies:
            body.x -= sx * self.strength
            body.y -= sy * self.strength


class CollideForce(Force):
    """Push apart bodies whose circles (``radius_of(body)``) overlap."""

    def __init__(self, radius_of: Callable[[Body], float], strength: float = 1.0,
                 iterations: int = 1):
        self.radius_of = radius_of
        self.strength = strength
        self.iterations = iterations

    def __call__(self, alpha: float) -> None:
        bodies = self.bodies
        radii = [self.radius_of(b) for b in bodies]
        for _ in range(self.iterations):
            for i, node in enumerate(bodies):
                ri = radii[i]
                ri2 = ri * ri
                xi = node.x + node.vx
                yi = node.y + node.vy
                for j in range(i + 1, len(bodies)):
                    other = bodies[j]
                    rj = radii[j]
                    r = ri + rj
                    x = xi - other.x - other.vx
                    y = yi - other.y - other.vy
                    l2 = x * x + y * y
                    if l2 >= r * r:
                        continue
                    if x == 0:
                        x = jiggle(self.rng)
                        l2 += x * x
                    if y == 0:
                        y = jiggle(self.rng)
                        l2 += y * y
                    length = math.sqrt(l2)
                    length = (r - length) / length * self.strength
                    x *= length
                    y *= length
                    w = (rj * rj) / (ri2 + rj * rj)
                    node.vx += x * w
                    node.vy += y * w
                    other.vx -= x * (1 - w)
                    other.vy -= y * (1 - w)
