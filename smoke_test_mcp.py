#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

import anyio
from mcp.client.session import ClientSession
from mcp.client.stdio import StdioServerParameters, stdio_client


SAMPLE_CHART = """
{
  // quarterly revenue per region
  title: "Revenue",
  units: "kUSD",
  categories: ["Q1", "Q2"],
  items: [
    { key: "North", values: [10, 20] },
    { key: "South", values: [5, 15] },
  ],
}
""".strip()


def _extract_call_result(payload: Any) -> Any:
    structured = getattr(payload, "structuredContent", None)
    if structured is not None:
        if isinstance(structured, dict) and "result" in structured:
            return structured["result"]
        return structured

    content = getattr(payload, "content", None) or []
    for entry in content:
        text = getattr(entry, "text", None)
        if text is not None:
            try:
                return json.loads(text)
            except json.JSONDecodeError:
                return text
    return None


def _require(condition: bool, message: str) -> None:
    if not condition:
        raise AssertionError(message)


async def _run_smoke_test(args: argparse.Namespace) -> None:
    workdir = Path(args.workdir).expanduser().resolve()
    workdir.mkdir(parents=True, exist_ok=True)

    server_params = StdioServerParameters(
        command=args.server_command,
        args=["--transport", "stdio", "--workdir", str(workdir)],
        cwd=str(Path(args.server_cwd).expanduser().resolve()),
    )

    async with stdio_client(server_params) as (read_stream, write_stream):
        async with ClientSession(read_stream, write_stream) as session:
            init = await session.initialize()
            print(f"Connected to {init.serverInfo.name} {init.serverInfo.version}")

            tools_result = await session.list_tools()
            tool_names = {tool.name for tool in tools_result.tools}
            required_tools = {
                "getChartDefaults",
                "validateChartData",
                "computeChartLayout",
                "renderStackedBarChart",
            }
            missing_tools = required_tools - tool_names
            _require(not missing_tools, f"Missing required tools: {sorted(missing_tools)}")
            print(f"Tool check passed ({len(tool_names)} tools)")

            validation = _extract_call_result(
                await session.call_tool("validateChartData", {"chart_text": SAMPLE_CHART})
            )
            _require(isinstance(validation, dict), "validateChartData did not return an object")
            _require(validation.get("valid") is True, f"Sample chart rejected: {validation}")
            print("Validation check passed")

            layout = _extract_call_result(
                await session.call_tool(
                    "computeChartLayout",
                    {"chart_text": SAMPLE_CHART, "hue_seed": 0.25},
                )
            )
            _require(isinstance(layout, dict), "computeChartLayout did not return an object")
            y_axis = layout.get("y_axis", {})
            _require(y_axis.get("max") == 30, f"Unexpected y-axis max: {y_axis}")
            _require(y_axis.get("interval") == 5, f"Unexpected y-axis interval: {y_axis}")
            print("Layout check passed")

            rendered = _extract_call_result(
                await session.call_tool(
                    "renderStackedBarChart",
                    {"chart_text": SAMPLE_CHART, "hue_seed": 0.25},
                )
            )
            _require(isinstance(rendered, dict), "renderStackedBarChart did not return an object")
            image_path = Path(str(rendered.get("image_path", "")))
            _require(image_path.exists(), f"Rendered chart missing: {image_path}")
            _require("<svg" in image_path.read_text(encoding="utf-8"), "Rendered file is not SVG")
            print(f"Render check passed ({image_path})")

    print("MCP smoke test passed")


def main() -> int:
    parser = argparse.ArgumentParser(
        description="End-to-end smoke test for stacked-bar-chart-mcp via MCP stdio transport"
    )
    parser.add_argument(
        "--server-command",
        default="stacked-bar-chart-mcp",
        help="Command used to launch the MCP server",
    )
    parser.add_argument(
        "--server-cwd",
        default=str(Path(__file__).resolve().parent),
        help="Working directory for launching the server",
    )
    parser.add_argument(
        "--workdir",
        default=str((Path(__file__).resolve().parent / ".tmp_smoke").resolve()),
        help="Chart output workdir used during the smoke test",
    )
    args = parser.parse_args()

    try:
        anyio.run(_run_smoke_test, args)
        return 0
    except Exception as exc:
        print(f"Smoke test failed: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
