from __future__ import annotations

import argparse
import random
import sys
from pathlib import Path
from typing import NoReturn, Sequence, TextIO

from .config import ChartConfig, read_env_bool, read_env_float
from .errors import ChartError
from .layout import random_hue_seed
from .log import ChartLog, ConsoleChartLog
from .models import ChartData
from .parser import parse_chart_file
from .svg import render_chart_svg
from .textio import write_text_output


__version__ = "0.1.0"
PROG = "stacked-bar-chart"


class _ParserExit(Exception):
    def __init__(self, status: int) -> None:
        super().__init__(status)
        self.status = status


class _ToolArgumentParser(argparse.ArgumentParser):
    """Argument parser that reports through a ``ChartLog`` instead of exiting."""

    def __init__(self, *args, log: ChartLog, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._log = log

    def _print_message(self, message: str, file: TextIO | None = None) -> None:
        if message:
            self._log.output(message.rstrip("\n"))

    def exit(self, status: int = 0, message: str | None = None) -> NoReturn:
        if message:
            self._log.output(message.rstrip("\n"))
        raise _ParserExit(status)

    def error(self, message: str) -> NoReturn:
        self.print_usage()
        self.exit(2, f"{self.prog}: error: {message}")


def _hue_seed_arg(raw: str) -> float:
    try:
        value = float(raw)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid hue seed: {raw!r}") from exc
    if not 0.0 <= value < 1.0:
        raise argparse.ArgumentTypeError("hue seed must be in [0, 1)")
    return value


def _build_parser(log: ChartLog) -> _ToolArgumentParser:
    parser = _ToolArgumentParser(
        prog=PROG,
        description="Render a stacked bar chart from JSON5 data as an SVG document.",
        log=log,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-n",
        "--no-color",
        dest="no_color",
        action="store_true",
        default=read_env_bool("NO_CLI_COLOR", default=False),
        help="Disable colors in output (env: NO_CLI_COLOR)",
    )
    parser.add_argument(
        "--hue-seed",
        type=_hue_seed_arg,
        default=None,
        help="Starting hue in [0, 1) for category colors (env: STACKED_BAR_CHART_HUE_SEED); random when omitted",
    )
    parser.add_argument(
        "input_file",
        metavar="INPUT_FILE",
        nargs="?",
        type=Path,
        help="The input file (default: standard input)",
    )
    parser.add_argument(
        "output_file",
        metavar="OUTPUT_FILE",
        nargs="?",
        type=Path,
        help="The output file (default: standard output)",
    )
    return parser


class StackedBarChartTool:
    def __init__(
        self,
        log: ChartLog,
        *,
        rng: random.Random | None = None,
        config: ChartConfig | None = None,
    ) -> None:
        self.log = log
        self._rng = rng
        self._config = config

    def _resolve_hue_seed(self, explicit: float | None) -> float:
        if explicit is not None:
            return explicit
        from_env = read_env_float("STACKED_BAR_CHART_HUE_SEED")
        if from_env is not None:
            if not 0.0 <= from_env < 1.0:
                raise ValueError("STACKED_BAR_CHART_HUE_SEED must be in [0, 1)")
            return from_env
        return random_hue_seed(self._rng)

    def _warn_extra_values(self, data: ChartData) -> None:
        expected = len(data.categories)
        for index, item in enumerate(data.items):
            if len(item.values) > expected:
                self.log.warning(
                    f"Item {index} ('{item.key}') has {len(item.values)} values for {expected} categories; "
                    "extra values are stacked without a legend entry"
                )

    def run(self, argv: Sequence[str] | None = None) -> int:
        parser = _build_parser(self.log)
        try:
            args = parser.parse_args(list(argv) if argv is not None else sys.argv[1:])
        except _ParserExit:
            return 0

        if args.no_color and isinstance(self.log, ConsoleChartLog):
            self.log.set_color(False)

        try:
            config = self._config or ChartConfig.from_env()
            hue_seed = self._resolve_hue_seed(args.hue_seed)
            data = parse_chart_file(args.input_file)
            self._warn_extra_values(data)
            document = render_chart_svg(data, hue_seed=hue_seed, config=config)
            write_text_output(document, args.output_file)
        except (ChartError, ValueError) as exc:
            self.log.error(str(exc))
            return 1
        return 0


def main() -> None:
    log = ConsoleChartLog(color=not read_env_bool("NO_CLI_COLOR", default=False))
    sys.exit(StackedBarChartTool(log).run())


if __name__ == "__main__":
    main()
