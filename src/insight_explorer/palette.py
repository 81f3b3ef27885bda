"""Color and strength policy for clusters and relations.

Cluster colors and relation strengths come from fixed tables with neutral
fallbacks. Edge colors come from a round-robin palette whose cursor is
threaded explicitly through successive graph builds, so the same
(source, target, relation) triple keeps its color across rebuilds.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Tuple

ColorKey = Tuple[str, str, str]

DEFAULT_CLUSTER_COLOR = "#6b7280"
DEFAULT_RELATION_STRENGTH = 0.5

CLUSTER_COLORS: Dict[str, str] = {
    "cx:cluster-appropriations-intake": "#059669",
    "cx:cluster-hearings-modernization": "#7c3aed",
    "cx:cluster-witness-management": "#ea580c",
    "cx:cluster-data-standards": "#0891b2",
    "cx:cluster-transparency-oversight": "#dc2626",
    "cx:cluster-staff-capacity": "#4338ca",
    "cx:cluster-public-feedback": "#65a30d",
    "cx:cluster-joint-hearings-mra": "#be123c",
    "cx:cluster-committee-memory": "#a21caf",
}

RELATION_STRENGTHS: Dict[str, float] = {
    "operational dependency": 1.0,
    "learning loop": 0.8,
    "resource constraint": 0.9,
    "resourcing pressure": 0.9,
    "outputs and artifacts": 0.7,
    "reporting on outcomes": 0.7,
    "tagging and retrieval": 0.6,
    "cross-docket tagging": 0.6,
    "improved data structure": 0.7,
    "historical context indexing": 0.6,
}

EDGE_COLOR_PALETTE: Tuple[str, ...] = (
    "#0ea5e9",
    "#22c55e",
    "#f97316",
    "#a855f7",
    "#ec4899",
    "#14b8a6",
    "#facc15",
    "#ef4444",
    "#6366f1",
    "#8b5cf6",
    "#fb7185",
    "#2dd4bf",
)


def color_for_cluster(cluster_id: str) -> str:
    """Fixed display color for a cluster, gray for unknown ids."""
    return CLUSTER_COLORS.get(cluster_id, DEFAULT_CLUSTER_COLOR)


def strength_for_relation(label: str) -> float:
    """Visual weight in (0, 1] for a relation label, 0.5 when unknown."""
    return RELATION_STRENGTHS.get(label, DEFAULT_RELATION_STRENGTH)


@dataclass(frozen=True)
class PaletteCursor:
    """Edge color assignments carried from one build to the next.

    Attributes:
        used_colors: Color per (source, target, relation) key from the last build
        next_index: Palette position the next new key will take
    """

    used_colors: Dict[ColorKey, str] = field(default_factory=dict)
    next_index: int = 0


def assign_edge_colors(
    keys: Iterable[ColorKey],
    cursor: PaletteCursor | None = None,
    palette: Tuple[str, ...] = EDGE_COLOR_PALETTE,
) -> Tuple[List[str], PaletteCursor]:
    """Assign a palette color to every key, reusing prior assignments.

    Keys seen in the previous build keep their color. Keys new to this build
    take the next palette entry in round-robin order. The returned cursor
    holds only the keys of this build, while its index never rewinds.

    Args:
        keys: Color keys in edge order (duplicates share one color)
        cursor: Cursor returned by the previous build, or None
        palette: Colors to cycle through

    Returns:
        Tuple of (color per key in input order, updated cursor)
    """
    if cursor is None:
        cursor = PaletteCursor()

    next_index = cursor.next_index
    assigned: Dict[ColorKey, str] = {}
    colors: List[str] = []

    for key in keys:
        color = assigned.get(key) or cursor.used_colors.get(key)
        if color is None:
            color = palette[next_index % len(palette)]
            next_index += 1
        assigned[key] = color
        colors.append(color)

    return colors, PaletteCursor(used_colors=assigned, next_index=next_index)


def _adjust_hex_color(hex_color: str, amount: float) -> str:
    sanitized = hex_color.lstrip("#")
    if len(sanitized) == 3:
        sanitized = "".join(ch * 2 for ch in sanitized)
    if len(sanitized) != 6:
        return hex_color
    try:
        value = int(sanitized, 16)
    except ValueError:
        return hex_color

    def adjust(channel: int) -> int:
        return max(0, min(255, round(channel + amount * 255)))

    r = adjust((value >> 16) & 0xFF)
    g = adjust((value >> 8) & 0xFF)
    b = adjust(value & 0xFF)
    return f"#{r:02x}{g:02x}{b:02x}"


def lighten_color(hex_color: str, amount: float = 0.2) -> str:
    """Shift every RGB channel up by ``amount`` of the full range."""
    return _adjust_hex_color(hex_color, abs(amount))


def darken_color(hex_color: str, amount: float = 0.2) -> str:
    """Shift every RGB channel down by ``amount`` of the full range."""
    return _adjust_hex_color(hex_color, -abs(amount))
