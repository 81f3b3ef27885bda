"""Cooperatively stepped force simulation.

The simulation never runs on its own: the host calls ``tick()`` from its
frame clock, one integration step per call. Alpha cools toward
``alpha_target`` every tick; once it drops below ``alpha_min`` the
simulation reports itself settled until something reheats it.
"""

from __future__ import annotations

import math
import random
from typing import Dict, List, Optional, Sequence

from .forces import Body, Force

INITIAL_RADIUS = 10.0
INITIAL_ANGLE = math.pi * (3 - math.sqrt(5))


class ForceSimulation:
    """Integrates bodies under a set of named forces."""

    def __init__(
        self,
        bodies: Sequence[Body],
        *,
        alpha_min: float = 0.001,
        alpha_decay: Optional[float] = None,
        velocity_decay: float = 0.4,
        seed: int = 0x5EED,
    ):
        self.bodies: List[Body] = list(bodies)
        self.alpha = 1.0
        self.alpha_min = alpha_min
        self.alpha_decay = alpha_decay if alpha_decay is not None else 1 - alpha_min ** (1 / 300)
        self.alpha_target = 0.0
        self.velocity_factor = 1 - velocity_decay
        self.forces: Dict[str, Force] = {}
        self.rng = random.Random(seed)
        self._place_unpositioned()

    def _place_unpositioned(self) -> None:
        # Phyllotaxis spiral for bodies the caller did not seed
        for index, body in enumerate(self.bodies):
            if body.fx is not None:
                body.x = body.fx
            if body.fy is not None:
                body.y = body.fy
            if math.isnan(body.x) or math.isnan(body.y):
                radius = INITIAL_RADIUS * math.sqrt(0.5 + index)
                angle = index * INITIAL_ANGLE
                body.x = radius * math.cos(angle)
                body.y = radius * math.sin(angle)
            if math.isnan(body.vx) or math.isnan(body.vy):
                body.vx = body.vy = 0.0

    def force(self, name: str, force: Optional[Force] = None) -> Optional[Force]:
        """Register (or with None, remove) a named force and return it."""
        if force is None:
            return self.forces.pop(name, None)
        force.initialize(self.bodies, self.rng)
        self.forces[name] = force
        return force

    @property
    def settled(self) -> bool:
        return self.alpha < self.alpha_min and self.alpha_target < self.alpha_min

    def tick(self) -> None:
        """Advance one integration step."""
        self.alpha += (self.alpha_target - self.alpha) * self.alpha_decay

        for force in self.forces.values():
            force(self.alpha)

        for body in self.bodies:
            if body.fx is None:
                body.vx *= self.velocity_factor
                body.x += body.vx
            else:
                body.x = body.fx
                body.vx = 0.0
            if body.fy is None:
                body.vy *= self.velocity_factor
                body.y += body.vy
            else:
                body.y = body.fy
                body.vy = 0.0
