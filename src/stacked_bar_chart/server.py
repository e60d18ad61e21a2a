from __future__ import annotations

import argparse
import base64
import json
import os
from pathlib import Path
from typing import Any

import mcp.types as types
from mcp.server.fastmcp import FastMCP

from .config import ChartConfig
from .errors import ChartError, ChartParseError, ChartRangeError, ChartValidationError
from .layout import compute_render_plan, random_hue_seed, validate_chart_data
from .parser import parse_chart_text
from .svg import render_chart_file


CallToolResult = types.CallToolResult

mcp = FastMCP("stacked-bar-chart")

_DEFAULT_WORKDIR = Path(os.getenv("STACKED_BAR_CHART_WORKDIR", os.getcwd()))

_workdir: Path = _DEFAULT_WORKDIR.expanduser().resolve()
_config: ChartConfig = ChartConfig()


def _image_tool_result(payload: dict[str, Any]) -> types.CallToolResult:
    image_path = payload.get("image_path")
    if not image_path:
        raise ValueError("image payload missing image_path")
    path = Path(str(image_path)).expanduser().resolve()
    if not path.exists():
        raise FileNotFoundError(f"image_path does not exist: {path}")

    data_b64 = base64.b64encode(path.read_bytes()).decode("ascii")
    content: list[types.TextContent | types.ImageContent] = [
        types.ImageContent(type="image", mimeType="image/svg+xml", data=data_b64),
        types.TextContent(type="text", text=json.dumps(payload, indent=2)),
    ]
    return types.CallToolResult(content=content, structuredContent=payload, isError=False)


def _error_payload(exc: ChartError) -> dict[str, Any]:
    payload: dict[str, Any] = {"valid": False, "error": str(exc), "kind": type(exc).__name__}
    if isinstance(exc, ChartValidationError):
        payload["item_index"] = exc.item_index
        payload["expected"] = exc.expected
        payload["actual"] = exc.actual
    elif isinstance(exc, ChartRangeError):
        payload["item_index"] = exc.item_index
    return payload


@mcp.tool()
def getChartDefaults() -> dict[str, Any]:
    """Return the chart geometry defaults and the output workdir."""
    return {
        "workdir": str(_workdir),
        "config": _config.as_dict(),
    }


@mcp.tool()
def validateChartData(chart_text: str) -> dict[str, Any]:
    """Parse JSON5 chart data and check every item has a value per category."""
    try:
        data = parse_chart_text(chart_text, source="chart_text")
        validate_chart_data(data)
    except (ChartParseError, ChartValidationError, ChartRangeError) as exc:
        return _error_payload(exc)
    return {
        "valid": True,
        "title": data.title,
        "bar_count": len(data.items),
        "category_count": len(data.categories),
    }


@mcp.tool()
def computeChartLayout(chart_text: str, hue_seed: float = 0.0) -> dict[str, Any]:
    """Compute the resolved render plan (axis range, interval, colors, geometry)."""
    data = parse_chart_text(chart_text, source="chart_text")
    return compute_render_plan(data, hue_seed, _config).as_dict()


@mcp.tool()
def renderStackedBarChart(
    chart_text: str,
    output_path: str | None = None,
    hue_seed: float | None = None,
) -> types.CallToolResult:
    """
    Render JSON5 chart data to an SVG stacked bar chart and return the image through MCP.

    The response includes both image content and structured metadata (image_path, y_axis, etc.).
    """
    data = parse_chart_text(chart_text, source="chart_text")
    seed = random_hue_seed() if hue_seed is None else hue_seed
    payload = render_chart_file(
        workdir=_workdir,
        data=data,
        hue_seed=seed,
        output_path=output_path,
        config=_config,
    )
    return _image_tool_result(payload)


def _configure(*, workdir: Path, config: ChartConfig | None = None) -> None:
    global _workdir, _config
    _workdir = workdir.expanduser().resolve()
    _config = config or ChartConfig.from_env()


def main() -> None:
    parser = argparse.ArgumentParser(description="MCP server rendering stacked bar charts as SVG")
    parser.add_argument(
        "--workdir",
        default=os.getenv("STACKED_BAR_CHART_WORKDIR", os.getcwd()),
        help="Directory where rendered charts are written",
    )
    parser.add_argument(
        "--transport",
        default="stdio",
        choices=["stdio", "sse"],
        help="MCP transport",
    )
    args = parser.parse_args()

    _configure(workdir=Path(args.workdir))
    mcp.run(transport=args.transport)


if __name__ == "__main__":
    main()
