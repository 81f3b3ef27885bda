"""Configuration schema for the insight explorer.

Defines all tunable constants with types, defaults, and validation.
Uses Pydantic for schema enforcement and clear error messages.

The hub threshold and fan arcs are visual tuning knobs rather than
semantic rules; the defaults reproduce the published explorer.
"""

from __future__ import annotations

import math
from typing import Literal

from pydantic import BaseModel, Field, model_validator


class DisambiguationConfig(BaseModel):
    """Edge disambiguation (curve offsets for parallel and hub edges)."""

    hub_threshold: int = Field(
        default=4,
        ge=2,
        description="Outgoing relation count at which a source becomes a hub",
    )
    pair_offset_unit: float = Field(
        default=30.0,
        gt=0,
        description="Pixel step between parallel edges of one (source, target) pair",
    )
    wide_fan_threshold: int = Field(
        default=6,
        ge=1,
        description="Fan-out above which the wide fan arc is used",
    )
    wide_fan_arc: float = Field(
        default=math.pi / 3,
        gt=0,
        le=math.pi,
        description="Fan arc (radians) for hubs above wide_fan_threshold",
    )
    narrow_fan_arc: float = Field(
        default=math.pi / 4,
        gt=0,
        le=math.pi,
        description="Fan arc (radians) for smaller hubs",
    )
    fan_offset_scale: float = Field(
        default=60.0,
        gt=0,
        description="Converts a fan angle (radians) into a pixel curve offset",
    )


class LayoutConfig(BaseModel):
    """Force simulation parameters."""

    link_distance: float = Field(default=620.0, gt=0)
    link_strength: float = Field(default=0.25, ge=0, le=1)
    charge_strength: float = Field(default=-2200.0)
    charge_distance_min: float = Field(default=120.0, gt=0)
    charge_distance_max: float = Field(default=1400.0, gt=0)
    collision_padding: float = Field(default=80.0, ge=0)
    seed_radius_fraction: float = Field(
        default=0.45,
        gt=0,
        description="Seed ring radius as a fraction of the smaller viewport side",
    )
    seed_radius_scale: float = Field(default=1.45, gt=0)
    initial_alpha: float = Field(default=0.6, gt=0, le=1)
    reheat_alpha: float = Field(default=0.15, gt=0, le=1)
    drag_alpha_target: float = Field(default=0.3, ge=0, le=1)
    alpha_min: float = Field(default=0.001, gt=0, lt=1)
    alpha_decay: float | None = Field(
        default=None,
        gt=0,
        lt=1,
        description="Per-tick cooling rate (default: reach alpha_min in ~300 ticks)",
    )
    velocity_decay: float = Field(default=0.4, ge=0, le=1)

    @model_validator(mode="after")
    def _check_charge_range(self) -> "LayoutConfig":
        if self.charge_distance_min >= self.charge_distance_max:
            raise ValueError("charge_distance_min must be below charge_distance_max")
        return self

    @property
    def effective_alpha_decay(self) -> float:
        if self.alpha_decay is not None:
            return self.alpha_decay
        return 1 - self.alpha_min ** (1 / 300)


class GeometryConfig(BaseModel):
    """Edge curve and label placement."""

    label_bias_default: float = Field(default=0.38, gt=0, lt=1)
    label_bias_multi: float = Field(default=0.32, gt=0, lt=1)
    label_bias_hub: float = Field(default=0.26, gt=0, lt=1)
    curve_scale_multi: float = Field(default=1.6, gt=0)
    curve_scale_hub: float = Field(default=1.2, gt=0)
    hub_label_offset_scale: float = Field(default=1.05, gt=0)
    hub_curve_min_total: int = Field(
        default=4,
        ge=1,
        description="Hub fan curves apply only when the source fan-out reaches this",
    )


class SearchConfig(BaseModel):
    """Full-text search tuning."""

    title_boost: float = Field(default=3.0, gt=0)
    text_boost: float = Field(default=2.0, gt=0)
    author_boost: float = Field(default=1.0, gt=0)
    fuzzy: float = Field(
        default=0.2,
        ge=0,
        lt=1,
        description="Edit distance tolerance as a fraction of query term length",
    )
    max_fuzzy: int = Field(default=6, ge=0)
    prefix: bool = True
    combine_with: Literal["AND", "OR"] = "AND"
    title_prefix_length: int = Field(default=60, ge=1)


class LoggingConfig(BaseModel):
    """Logging settings (mirrors the INSIGHT_EXPLORER_LOG_* variables)."""

    level: str = Field(default="INFO")
    dir: str = Field(default="", description="Log directory (empty = ~/.insight-explorer/logs)")
    max_bytes: int = Field(default=10 * 1024 * 1024, ge=0)
    backup_count: int = Field(default=5, ge=0)
    disable_file: bool = False


class ExplorerConfig(BaseModel):
    """Root configuration object."""

    disambiguation: DisambiguationConfig = Field(default_factory=DisambiguationConfig)
    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    geometry: GeometryConfig = Field(default_factory=GeometryConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
