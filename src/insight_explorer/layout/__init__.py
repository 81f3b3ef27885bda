"""Force layout: simulation primitives and the adapter the view drives."""

from .adapter import LayoutEngineAdapter, PositionSnapshot, Viewport
from .forces import Body, CenterForce, CollideForce, LinkForce, ManyBodyForce
from .simulation import ForceSimulation

__all__ = [
    "LayoutEngineAdapter",
    "PositionSnapshot",
    "Viewport",
    "Body",
    "CenterForce",
    "CollideForce",
    "LinkForce",
    "ManyBodyForce",
    "ForceSimulation",
]
