from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

from .errors import ChartParseError


def _require_str(payload: dict[str, Any], key: str, *, context: str) -> str:
    if key not in payload:
        raise ChartParseError(f"{context} is missing required field '{key}'")
    value = payload[key]
    if not isinstance(value, str):
        raise ChartParseError(f"{context} field '{key}' must be a string")
    return value


def _require_list(payload: dict[str, Any], key: str, *, context: str) -> list[Any]:
    if key not in payload:
        raise ChartParseError(f"{context} is missing required field '{key}'")
    value = payload[key]
    if not isinstance(value, list):
        raise ChartParseError(f"{context} field '{key}' must be an array")
    return value


def _to_number(value: Any, *, context: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ChartParseError(f"{context} must be a number")
    number = float(value)
    if not math.isfinite(number):
        raise ChartParseError(f"{context} must be finite")
    return number


@dataclass(slots=True, frozen=True)
class ChartItem:
    key: str
    values: tuple[float, ...]

    @property
    def total(self) -> float:
        return math.fsum(self.values)

    def as_dict(self) -> dict[str, Any]:
        return {"key": self.key, "values": list(self.values)}

    @classmethod
    def from_dict(cls, payload: Any, *, index: int = 0) -> "ChartItem":
        context = f"items[{index}]"
        if not isinstance(payload, dict):
            raise ChartParseError(f"{context} must be an object")
        key = _require_str(payload, "key", context=context)
        raw_values = _require_list(payload, "values", context=context)
        values = tuple(
            _to_number(value, context=f"{context}.values[{position}]")
            for position, value in enumerate(raw_values)
        )
        return cls(key=key, values=values)


@dataclass(slots=True, frozen=True)
class ChartData:
    title: str
    units: str
    categories: tuple[str, ...]
    items: tuple[ChartItem, ...]

    def as_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "units": self.units,
            "categories": list(self.categories),
            "items": [item.as_dict() for item in self.items],
        }

    @classmethod
    def from_dict(cls, payload: Any) -> "ChartData":
        if not isinstance(payload, dict):
            raise ChartParseError("chart data must be an object")
        context = "chart data"
        categories = _require_list(payload, "categories", context=context)
        for position, category in enumerate(categories):
            if not isinstance(category, str):
                raise ChartParseError(f"categories[{position}] must be a string")
        items = _require_list(payload, "items", context=context)
        return cls(
            title=_require_str(payload, "title", context=context),
            units=_require_str(payload, "units", context=context),
            categories=tuple(categories),
            items=tuple(ChartItem.from_dict(item, index=index) for index, item in enumerate(items)),
        )


@dataclass(slots=True, frozen=True)
class Gutter:
    left: float
    top: float
    right: float
    bottom: float

    def as_dict(self) -> dict[str, float]:
        return {"left": self.left, "top": self.top, "right": self.right, "bottom": self.bottom}


@dataclass(slots=True, frozen=True)
class BarEntry:
    label: str
    values: tuple[float, ...]

    @property
    def total(self) -> float:
        return math.fsum(self.values)


@dataclass(slots=True, frozen=True)
class AxisRange:
    minimum: float
    maximum: float

    @property
    def span(self) -> float:
        return self.maximum - self.minimum


@dataclass(slots=True, frozen=True)
class RenderPlan:
    title: str
    units: str
    categories: tuple[str, ...]
    gutter: Gutter
    legend_gutter: Gutter
    y_axis_height: float
    y_axis_range: AxisRange
    y_axis_interval: float
    y_axis_decimal_places: int
    x_axis_item_width: float
    bars: tuple[BarEntry, ...]
    styles: tuple[str, ...]
    legend_rect_size: float
    legend_rect_corner_radius: float
    hues: tuple[float, ...] = field(default_factory=tuple)

    @property
    def bar_count(self) -> int:
        return len(self.bars)

    @property
    def tick_count(self) -> int:
        return int(round(self.y_axis_range.span / self.y_axis_interval)) + 1

    @property
    def canvas_width(self) -> float:
        return self.gutter.left + self.bar_count * self.x_axis_item_width + self.gutter.right

    @property
    def canvas_height(self) -> float:
        return (
            self.gutter.top
            + self.gutter.bottom
            + self.y_axis_height
            + self.legend_gutter.top
            + self.legend_gutter.bottom
            + self.legend_rect_size
        )

    def scale(self, value: float) -> float:
        return value * self.y_axis_height / self.y_axis_range.span

    def tick_values(self) -> list[float]:
        return [
            index * self.y_axis_interval + self.y_axis_range.minimum
            for index in range(self.tick_count)
        ]

    def as_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "units": self.units,
            "categories": list(self.categories),
            "canvas": {"width": self.canvas_width, "height": self.canvas_height},
            "gutter": self.gutter.as_dict(),
            "legend_gutter": self.legend_gutter.as_dict(),
            "y_axis": {
                "height": self.y_axis_height,
                "min": self.y_axis_range.minimum,
                "max": self.y_axis_range.maximum,
                "interval": self.y_axis_interval,
                "decimal_places": self.y_axis_decimal_places,
                "tick_count": self.tick_count,
            },
            "x_axis_item_width": self.x_axis_item_width,
            "bars": [{"label": bar.label, "values": list(bar.values)} for bar in self.bars],
            "styles": list(self.styles),
            "legend": {
                "rect_size": self.legend_rect_size,
                "corner_radius": self.legend_rect_corner_radius,
            },
            "hues": list(self.hues),
        }
