from __future__ import annotations

import colorsys
import json
import logging
import math
import random
from typing import Any

from .config import ChartConfig
from .errors import ChartRangeError, ChartValidationError
from .models import AxisRange, BarEntry, ChartData, RenderPlan


_LOGGER = logging.getLogger(__name__)

GOLDEN_RATIO_CONJUGATE = 0.618033988749895
COLOR_SATURATION = 0.5
COLOR_VALUE = 0.5
TICKS_PER_DECADE = 20
# Headroom for snapping the axis maximum up to the next interval.
MAX_STACKED_TOTAL = 1e300

_STRUCTURAL_STYLES: tuple[str, ...] = (
    ".axis { fill: none; stroke: #000000; stroke-width: 1; }",
    ".segment { stroke: none; }",
    ".x-label, .y-label, .units, .legend-label { font-family: sans-serif; font-size: 10px; fill: #000000; }",
    ".y-label { text-anchor: end; dominant-baseline: middle; }",
    ".title { font-family: sans-serif; font-size: 16px; font-weight: bold; fill: #000000; text-anchor: middle; }",
    ".legend-swatch { stroke: none; }",
)


def _log_layout_event(event: str, **fields: Any) -> None:
    if not _LOGGER.isEnabledFor(logging.DEBUG):
        return
    payload = {"event": event, **fields}
    _LOGGER.debug("chart_layout %s", json.dumps(payload, sort_keys=True, default=str))


def _stacked_total(values: tuple[float, ...]) -> float:
    try:
        return math.fsum(values)
    except OverflowError:
        return math.inf


def validate_chart_data(data: ChartData) -> None:
    expected = len(data.categories)
    for index, item in enumerate(data.items):
        if len(item.values) < expected:
            raise ChartValidationError(item_index=index, expected=expected, actual=len(item.values))
        if not abs(_stacked_total(item.values)) <= MAX_STACKED_TOTAL:
            raise ChartRangeError(item_index=index)


def random_hue_seed(rng: random.Random | None = None) -> float:
    source = rng if rng is not None else random.Random()
    return source.random()


def generate_hues(hue_seed: float, count: int) -> list[float]:
    """Spread ``count`` hues around the color wheel.

    Each hue is the previous one advanced by the golden-ratio conjugate,
    wrapped into [0, 1). The seed itself is not emitted.
    """
    if not 0.0 <= hue_seed < 1.0:
        raise ValueError("hue_seed must be in [0, 1)")
    hues: list[float] = []
    hue = hue_seed
    for _ in range(count):
        hue = (hue + GOLDEN_RATIO_CONJUGATE) % 1.0
        hues.append(hue)
    return hues


def hue_to_hex(hue: float) -> str:
    red, green, blue = colorsys.hsv_to_rgb(hue, COLOR_SATURATION, COLOR_VALUE)
    return "#{:02x}{:02x}{:02x}".format(
        int(round(red * 255)),
        int(round(green * 255)),
        int(round(blue * 255)),
    )


def category_class(index: int) -> str:
    return f"category-{index}"


def build_styles(hues: list[float]) -> list[str]:
    rules = list(_STRUCTURAL_STYLES)
    for index, hue in enumerate(hues):
        rules.append(f".{category_class(index)} {{ fill: {hue_to_hex(hue)}; }}")
    return rules


def _snap_quotient(quotient: float) -> float:
    nearest = round(quotient)
    if math.isclose(quotient, nearest, rel_tol=1e-9, abs_tol=1e-9):
        return float(nearest)
    return quotient


def decimal_places_for(interval: float) -> int:
    exponent = math.log10(interval)
    if exponent < 0:
        return int(math.ceil(abs(exponent)))
    return 0


def compute_axis(
    maximum: float,
    minimum: float = 0.0,
    *,
    min_interval: float = 1.0,
) -> tuple[AxisRange, float, int]:
    span = maximum - minimum
    if span <= 0:
        interval = min_interval
        return AxisRange(minimum=minimum, maximum=minimum + interval), interval, decimal_places_for(interval)

    interval = 10 ** math.ceil(math.log10(span)) / TICKS_PER_DECADE
    snapped_min = math.floor(_snap_quotient(minimum / interval)) * interval
    snapped_max = math.ceil(_snap_quotient(maximum / interval)) * interval
    return (
        AxisRange(minimum=snapped_min, maximum=snapped_max),
        interval,
        decimal_places_for(interval),
    )


def compute_render_plan(
    data: ChartData,
    hue_seed: float,
    config: ChartConfig | None = None,
) -> RenderPlan:
    cfg = config or ChartConfig()
    validate_chart_data(data)

    hues = generate_hues(hue_seed, len(data.items))
    styles = build_styles(hues)

    bars = tuple(BarEntry(label=item.key, values=item.values) for item in data.items)
    maximum = max((bar.total for bar in bars), default=0.0)
    axis_range, interval, decimal_places = compute_axis(
        maximum,
        0.0,
        min_interval=cfg.min_interval,
    )
    _log_layout_event(
        "axis_selected",
        bars=len(bars),
        categories=len(data.categories),
        max_total=maximum,
        range=[axis_range.minimum, axis_range.maximum],
        interval=interval,
        decimal_places=decimal_places,
    )

    return RenderPlan(
        title=data.title,
        units=data.units,
        categories=data.categories,
        gutter=cfg.gutter,
        legend_gutter=cfg.legend_gutter,
        y_axis_height=cfg.y_axis_height,
        y_axis_range=axis_range,
        y_axis_interval=interval,
        y_axis_decimal_places=decimal_places,
        x_axis_item_width=cfg.x_axis_item_width,
        bars=bars,
        styles=tuple(styles),
        legend_rect_size=cfg.legend_rect_size,
        legend_rect_corner_radius=cfg.legend_rect_corner_radius,
        hues=tuple(hues),
    )
