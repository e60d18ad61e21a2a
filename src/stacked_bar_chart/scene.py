from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .layout import category_class
from .models import RenderPlan


X_LABEL_OFFSET = 15.0
Y_LABEL_OFFSET = 5.0
LEGEND_LABEL_OFFSET = 5.0
UNITS_OFFSET = 10.0
LABEL_ROTATION = 45.0


@dataclass(slots=True, frozen=True)
class StyleSheet:
    rules: tuple[str, ...]


@dataclass(slots=True, frozen=True)
class PathElement:
    d: str
    css_class: str


@dataclass(slots=True, frozen=True)
class PolylineElement:
    points: tuple[tuple[float, float], ...]
    css_class: str


@dataclass(slots=True, frozen=True)
class TextElement:
    x: float
    y: float
    text: str
    css_class: str
    anchor: str | None = None
    rotate: float | None = None


@dataclass(slots=True, frozen=True)
class RectElement:
    x: float
    y: float
    width: float
    height: float
    css_class: str
    rx: float = 0.0


Primitive = Union[PathElement, PolylineElement, TextElement, RectElement, "Group"]


@dataclass(slots=True, frozen=True)
class Group:
    name: str
    children: tuple[Primitive, ...]


@dataclass(slots=True, frozen=True)
class Scene:
    width: float
    height: float
    style: StyleSheet
    groups: tuple[Group, ...]
    background: str = "#ffffff"

    def group(self, name: str) -> Group:
        for group in self.groups:
            if group.name == name:
                return group
        raise KeyError(f"Unknown scene group '{name}'")


def format_number(value: float) -> str:
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if text in {"", "-0"} else text


def _rect_path(x: float, y: float, width: float, height: float) -> str:
    return (
        f"M {format_number(x)} {format_number(y)} "
        f"h {format_number(width)} v {format_number(height)} h {format_number(-width)} Z"
    )


def _build_bars(plan: RenderPlan) -> Group:
    gutter = plan.gutter
    baseline = gutter.top + plan.y_axis_height
    bar_width = plan.x_axis_item_width / 2.0
    children: list[Primitive] = []
    for column, bar in enumerate(plan.bars):
        x = gutter.left + column * plan.x_axis_item_width + (plan.x_axis_item_width - bar_width) / 2.0
        cursor = baseline
        for segment, value in enumerate(bar.values):
            height = plan.scale(value)
            cursor -= height
            children.append(
                PathElement(
                    d=_rect_path(x, cursor, bar_width, height),
                    css_class=f"segment {category_class(segment)}",
                )
            )
    return Group(name="bars", children=tuple(children))


def _build_axis(plan: RenderPlan) -> Group:
    gutter = plan.gutter
    bottom = gutter.top + plan.y_axis_height
    points = (
        (gutter.left, gutter.top),
        (gutter.left, bottom),
        (plan.canvas_width - gutter.right, bottom),
    )
    return Group(name="axis", children=(PolylineElement(points=points, css_class="axis"),))


def _build_x_labels(plan: RenderPlan) -> Group:
    gutter = plan.gutter
    y = gutter.top + plan.y_axis_height + X_LABEL_OFFSET
    children: list[Primitive] = []
    for column, bar in enumerate(plan.bars):
        x = gutter.left + column * plan.x_axis_item_width + plan.x_axis_item_width / 2.0
        children.append(
            TextElement(x=x, y=y, text=bar.label, css_class="x-label", rotate=LABEL_ROTATION)
        )
    return Group(name="x-labels", children=tuple(children))


def _build_y_labels(plan: RenderPlan) -> Group:
    gutter = plan.gutter
    baseline = gutter.top + plan.y_axis_height
    x = gutter.left - Y_LABEL_OFFSET
    places = plan.y_axis_decimal_places
    children: list[Primitive] = []
    for tick in plan.tick_values():
        y = baseline - plan.scale(tick - plan.y_axis_range.minimum)
        children.append(
            TextElement(x=x, y=y, text=f"{tick:.{places}f}", css_class="y-label", anchor="end")
        )
    if plan.units:
        children.append(
            TextElement(
                x=gutter.left,
                y=gutter.top - UNITS_OFFSET,
                text=plan.units,
                css_class="units",
                anchor="middle",
            )
        )
    return Group(name="y-labels", children=tuple(children))


def _build_title(plan: RenderPlan) -> Group:
    title = TextElement(
        x=plan.canvas_width / 2.0,
        y=plan.gutter.top / 2.0,
        text=plan.title,
        css_class="title",
        anchor="middle",
    )
    return Group(name="title", children=(title,))


def _legend_spacing(plan: RenderPlan) -> float:
    available = plan.canvas_width - plan.legend_gutter.left - plan.legend_gutter.right
    # Legend density follows the bar count; only charts without bars fall back.
    divisor = plan.bar_count or len(plan.categories) or 1
    return available / divisor


def _build_legend(plan: RenderPlan) -> Group:
    legend = plan.legend_gutter
    size = plan.legend_rect_size
    top = plan.gutter.top + plan.y_axis_height + plan.gutter.bottom + legend.top
    spacing = _legend_spacing(plan)
    children: list[Primitive] = []
    for index, name in enumerate(plan.categories):
        x = legend.left + index * spacing
        children.append(
            RectElement(
                x=x,
                y=top,
                width=size,
                height=size,
                css_class=f"legend-swatch {category_class(index)}",
                rx=plan.legend_rect_corner_radius,
            )
        )
        children.append(
            TextElement(
                x=x + size / 2.0,
                y=top + size + LEGEND_LABEL_OFFSET,
                text=name,
                css_class="legend-label",
                rotate=LABEL_ROTATION,
            )
        )
    return Group(name="legend", children=tuple(children))


def build_scene(plan: RenderPlan) -> Scene:
    """Lay out every chart element in painter's order.

    Groups are emitted back to front: bars, axis, x labels, y labels, title,
    legend. The style sheet precedes all of them.
    """
    groups = (
        _build_bars(plan),
        _build_axis(plan),
        _build_x_labels(plan),
        _build_y_labels(plan),
        _build_title(plan),
        _build_legend(plan),
    )
    return Scene(
        width=plan.canvas_width,
        height=plan.canvas_height,
        style=StyleSheet(rules=plan.styles),
        groups=groups,
    )
