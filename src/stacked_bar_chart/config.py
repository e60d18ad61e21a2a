from __future__ import annotations

import os
from dataclasses import asdict, dataclass, field
from typing import Any

from .models import Gutter


def read_env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in {"1", "true", "yes", "on"}:
        return True
    if value in {"0", "false", "no", "off"}:
        return False
    return default


def read_env_float(name: str, default: float | None = None) -> float | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


@dataclass(slots=True, frozen=True)
class ChartConfig:
    """Presentation constants for the chart layout.

    The defaults are the canonical chart geometry; changing them changes
    every rendered document.
    """

    gutter: Gutter = field(default_factory=lambda: Gutter(left=40.0, top=40.0, right=40.0, bottom=40.0))
    legend_gutter: Gutter = field(
        default_factory=lambda: Gutter(left=40.0, top=10.0, right=10.0, bottom=80.0)
    )
    x_axis_item_width: float = 30.0
    y_axis_height: float = 300.0
    legend_rect_size: float = 20.0
    legend_rect_corner_radius: float = 3.0
    min_interval: float = 1.0

    def __post_init__(self) -> None:
        if self.x_axis_item_width <= 0:
            raise ValueError("x_axis_item_width must be > 0")
        if self.y_axis_height <= 0:
            raise ValueError("y_axis_height must be > 0")
        if self.legend_rect_size < 0:
            raise ValueError("legend_rect_size must be >= 0")
        if self.min_interval <= 0:
            raise ValueError("min_interval must be > 0")

    @classmethod
    def from_env(cls) -> "ChartConfig":
        defaults = cls()
        return cls(
            x_axis_item_width=read_env_float(
                "STACKED_BAR_CHART_ITEM_WIDTH", defaults.x_axis_item_width
            ),
            y_axis_height=read_env_float(
                "STACKED_BAR_CHART_Y_AXIS_HEIGHT", defaults.y_axis_height
            ),
        )

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)
