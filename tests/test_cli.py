from __future__ import annotations

import io
import os
import random
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from stacked_bar_chart.cli import StackedBarChartTool, __version__
from stacked_bar_chart.log import ConsoleChartLog, MemoryChartLog


CHART = """
{
  title: "Revenue",
  units: "kUSD",
  categories: ["Q1", "Q2"],
  items: [
    {key: "A", values: [10, 20]},
    {key: "B", values: [5, 15]},
  ],
}
"""


class TestStackedBarChartTool(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = Path(tempfile.mkdtemp(prefix="stacked_bar_chart_cli_test_"))
        self.input_path = self.temp_dir / "chart.json5"
        self.input_path.write_text(CHART, encoding="utf-8")
        self.log = MemoryChartLog()
        env = {key: value for key, value in os.environ.items() if not key.startswith("STACKED_BAR_CHART_")}
        patcher = patch.dict(os.environ, env, clear=True)
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_help_succeeds(self) -> None:
        status = StackedBarChartTool(self.log).run(["--help"])
        self.assertEqual(status, 0)
        self.assertTrue(any("usage:" in line for line in self.log.outputs))
        self.assertEqual(self.log.errors, [])

    def test_version(self) -> None:
        status = StackedBarChartTool(self.log).run(["--version"])
        self.assertEqual(status, 0)
        self.assertIn(__version__, self.log.outputs[-1])

    def test_argument_errors_print_usage_and_succeed(self) -> None:
        status = StackedBarChartTool(self.log).run(["--bogus"])
        self.assertEqual(status, 0)
        self.assertTrue(any("unrecognized arguments" in line for line in self.log.outputs))

        status = StackedBarChartTool(self.log).run(["--hue-seed", "2.5"])
        self.assertEqual(status, 0)
        self.assertTrue(any("hue seed must be in [0, 1)" in line for line in self.log.outputs))

    def test_renders_file_to_file(self) -> None:
        output_path = self.temp_dir / "out" / "chart.svg"
        status = StackedBarChartTool(self.log).run(
            ["--hue-seed", "0.25", str(self.input_path), str(output_path)]
        )
        self.assertEqual(status, 0, self.log.errors)
        text = output_path.read_text(encoding="utf-8")
        self.assertTrue(text.startswith("<svg"))
        self.assertIn('viewBox="0 0 140 490"', text)

    def test_fixed_seed_is_reproducible(self) -> None:
        outputs = []
        for name in ("first.svg", "second.svg"):
            target = self.temp_dir / name
            StackedBarChartTool(self.log).run(["--hue-seed", "0.5", str(self.input_path), str(target)])
            outputs.append(target.read_text(encoding="utf-8"))
        self.assertEqual(outputs[0], outputs[1])

    def test_seed_from_environment_and_generator(self) -> None:
        with patch.dict(os.environ, {"STACKED_BAR_CHART_HUE_SEED": "0.5"}):
            StackedBarChartTool(self.log).run([str(self.input_path), str(self.temp_dir / "env.svg")])
        StackedBarChartTool(self.log).run(
            ["--hue-seed", "0.5", str(self.input_path), str(self.temp_dir / "flag.svg")]
        )
        self.assertEqual(
            (self.temp_dir / "env.svg").read_text(encoding="utf-8"),
            (self.temp_dir / "flag.svg").read_text(encoding="utf-8"),
        )

        for name in ("rng_a.svg", "rng_b.svg"):
            StackedBarChartTool(self.log, rng=random.Random(7)).run(
                [str(self.input_path), str(self.temp_dir / name)]
            )
        self.assertEqual(
            (self.temp_dir / "rng_a.svg").read_text(encoding="utf-8"),
            (self.temp_dir / "rng_b.svg").read_text(encoding="utf-8"),
        )

    def test_stdin_to_stdout(self) -> None:
        stdout = io.StringIO()
        with patch("sys.stdin", io.StringIO(CHART)), patch("sys.stdout", stdout):
            status = StackedBarChartTool(self.log).run(["--hue-seed", "0.1"])
        self.assertEqual(status, 0, self.log.errors)
        self.assertTrue(stdout.getvalue().startswith("<svg"))

    def test_missing_input_file_fails(self) -> None:
        missing = self.temp_dir / "missing.json5"
        status = StackedBarChartTool(self.log).run([str(missing)])
        self.assertEqual(status, 1)
        self.assertEqual(len(self.log.errors), 1)
        self.assertIn(f"Unable to open file '{missing}'", self.log.errors[0])

    def test_parse_error_fails(self) -> None:
        self.input_path.write_text("{title: ", encoding="utf-8")
        status = StackedBarChartTool(self.log).run([str(self.input_path)])
        self.assertEqual(status, 1)
        self.assertTrue(self.log.errors[0].startswith(str(self.input_path)))

    def test_validation_error_writes_nothing(self) -> None:
        self.input_path.write_text(
            '{title: "t", units: "u", categories: ["Q1", "Q2"], items: [{key: "A", values: [10]}]}',
            encoding="utf-8",
        )
        output_path = self.temp_dir / "never.svg"
        status = StackedBarChartTool(self.log).run([str(self.input_path), str(output_path)])
        self.assertEqual(status, 1)
        self.assertIn("Item 0", self.log.errors[0])
        self.assertIn("expected at least 2", self.log.errors[0])
        self.assertFalse(output_path.exists())

    def test_overflowing_totals_fail_cleanly(self) -> None:
        self.input_path.write_text(
            '{title: "t", units: "u", categories: ["Q1", "Q2"], items: [{key: "A", values: [1e308, 1e308]}]}',
            encoding="utf-8",
        )
        output_path = self.temp_dir / "never.svg"
        status = StackedBarChartTool(self.log).run(
            ["--hue-seed", "0", str(self.input_path), str(output_path)]
        )
        self.assertEqual(status, 1)
        self.assertEqual(len(self.log.errors), 1)
        self.assertIn("Item 0", self.log.errors[0])
        self.assertFalse(output_path.exists())

    def test_extra_values_warn(self) -> None:
        self.input_path.write_text(
            '{title: "t", units: "u", categories: ["Q1"], items: [{key: "A", values: [1, 2]}]}',
            encoding="utf-8",
        )
        status = StackedBarChartTool(self.log).run(
            ["--hue-seed", "0", str(self.input_path), str(self.temp_dir / "extra.svg")]
        )
        self.assertEqual(status, 0)
        self.assertEqual(len(self.log.warnings), 1)
        self.assertIn("Item 0", self.log.warnings[0])


class TestConsoleChartLog(unittest.TestCase):
    def test_prefixes_and_colors(self) -> None:
        stdout = io.StringIO()
        stderr = io.StringIO()
        log = ConsoleChartLog(color=True, stdout=stdout, stderr=stderr)
        log.output("plain")
        log.warning("careful")
        log.error("broken")
        self.assertEqual(stdout.getvalue(), "plain\n")
        lines = stderr.getvalue().splitlines()
        self.assertEqual(lines[0], "\x1b[33mwarning: careful\x1b[0m")
        self.assertEqual(lines[1], "\x1b[31merror: broken\x1b[0m")

    def test_no_color_flag_disables_ansi(self) -> None:
        stderr = io.StringIO()
        log = ConsoleChartLog(color=True, stdout=io.StringIO(), stderr=stderr)
        status = StackedBarChartTool(log).run(["-n", "/definitely/missing/chart.json5"])
        self.assertEqual(status, 1)
        self.assertTrue(stderr.getvalue().startswith("error: Unable to open file"))
        self.assertNotIn("\x1b[", stderr.getvalue())

    def test_no_color_environment(self) -> None:
        stderr = io.StringIO()
        log = ConsoleChartLog(color=True, stdout=io.StringIO(), stderr=stderr)
        with patch.dict(os.environ, {"NO_CLI_COLOR": "1"}):
            StackedBarChartTool(log).run(["/definitely/missing/chart.json5"])
        self.assertNotIn("\x1b[", stderr.getvalue())


if __name__ == "__main__":
    unittest.main()
