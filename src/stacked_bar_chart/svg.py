from __future__ import annotations

import re
from datetime import datetime
from pathlib import Path
from typing import Any

from .config import ChartConfig
from .layout import compute_render_plan
from .models import ChartData, RenderPlan
from .scene import (
    Group,
    PathElement,
    PolylineElement,
    Primitive,
    RectElement,
    Scene,
    TextElement,
    build_scene,
    format_number,
)
from .textio import write_text_output


_SAFE_NAME_RE = re.compile(r"[^A-Za-z0-9_-]+")


def _svg_escape(text: str) -> str:
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&#39;")
    )


def _sanitize_name(name: str) -> str:
    cleaned = _SAFE_NAME_RE.sub("_", name).strip("_")
    return cleaned or "chart"


def _resolve_image_output_path(
    *,
    workdir: Path,
    name: str,
    output_path: str | None,
) -> Path:
    if output_path:
        target = Path(output_path).expanduser()
        if not target.is_absolute():
            target = workdir / target
        return target.resolve()
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return (workdir / "images" / "charts" / f"{stamp}_{_sanitize_name(name)}.svg").resolve()


def _render_primitive(primitive: Primitive, lines: list[str], indent: str) -> None:
    if isinstance(primitive, Group):
        lines.append(f'{indent}<g class="{_svg_escape(primitive.name)}">')
        for child in primitive.children:
            _render_primitive(child, lines, indent + "  ")
        lines.append(f"{indent}</g>")
    elif isinstance(primitive, PathElement):
        lines.append(f'{indent}<path class="{primitive.css_class}" d="{primitive.d}"/>')
    elif isinstance(primitive, PolylineElement):
        points = " ".join(f"{format_number(x)},{format_number(y)}" for x, y in primitive.points)
        lines.append(f'{indent}<polyline class="{primitive.css_class}" points="{points}"/>')
    elif isinstance(primitive, RectElement):
        lines.append(
            f'{indent}<rect class="{primitive.css_class}" x="{format_number(primitive.x)}" y="{format_number(primitive.y)}" '
            f'width="{format_number(primitive.width)}" height="{format_number(primitive.height)}" '
            f'rx="{format_number(primitive.rx)}" ry="{format_number(primitive.rx)}"/>'
        )
    elif isinstance(primitive, TextElement):
        attrs = [
            f'class="{primitive.css_class}"',
            f'x="{format_number(primitive.x)}"',
            f'y="{format_number(primitive.y)}"',
        ]
        if primitive.anchor:
            attrs.append(f'text-anchor="{primitive.anchor}"')
        if primitive.rotate is not None:
            attrs.append(
                f'transform="rotate({format_number(primitive.rotate)} {format_number(primitive.x)} {format_number(primitive.y)})"'
            )
        lines.append(f"{indent}<text {' '.join(attrs)}>{_svg_escape(primitive.text)}</text>")
    else:
        raise TypeError(f"Unsupported scene primitive: {type(primitive).__name__}")


def render_scene_svg(scene: Scene) -> str:
    width = format_number(scene.width)
    height = format_number(scene.height)
    lines: list[str] = [
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{width}" height="{height}" viewBox="0 0 {width} {height}">',
        f'  <rect x="0" y="0" width="{width}" height="{height}" fill="{scene.background}"/>',
        "  <style>",
    ]
    for rule in scene.style.rules:
        lines.append(f"    {_svg_escape(rule)}")
    lines.append("  </style>")
    for group in scene.groups:
        _render_primitive(group, lines, "  ")
    lines.append("</svg>")
    return "\n".join(lines) + "\n"


def render_plan_svg(plan: RenderPlan) -> str:
    return render_scene_svg(build_scene(plan))


def render_chart_svg(
    data: ChartData,
    *,
    hue_seed: float,
    config: ChartConfig | None = None,
) -> str:
    return render_plan_svg(compute_render_plan(data, hue_seed, config))


def render_chart_file(
    *,
    workdir: Path,
    data: ChartData,
    hue_seed: float,
    output_path: str | None = None,
    config: ChartConfig | None = None,
) -> dict[str, Any]:
    plan = compute_render_plan(data, hue_seed, config)
    document = render_plan_svg(plan)

    target = _resolve_image_output_path(
        workdir=workdir,
        name=data.title,
        output_path=output_path,
    )
    write_text_output(document, target)

    return {
        "image_path": str(target),
        "format": "svg",
        "title": data.title,
        "width": plan.canvas_width,
        "height": plan.canvas_height,
        "bar_count": plan.bar_count,
        "category_count": len(plan.categories),
        "hue_seed": hue_seed,
        "y_axis": {
            "min": plan.y_axis_range.minimum,
            "max": plan.y_axis_range.maximum,
            "interval": plan.y_axis_interval,
            "decimal_places": plan.y_axis_decimal_places,
        },
    }
