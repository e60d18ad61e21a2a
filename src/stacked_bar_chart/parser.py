from __future__ import annotations

from pathlib import Path

import json5

from .errors import ChartParseError
from .models import ChartData
from .textio import read_text_input


def parse_chart_text(text: str, *, source: str = "<input>") -> ChartData:
    """Decode JSON5 chart text into a ``ChartData`` model.

    Syntax errors keep the decoder's own message; shape errors name the
    offending field.
    """
    try:
        payload = json5.loads(text)
    except ValueError as exc:
        raise ChartParseError(str(exc), source=source) from exc
    try:
        return ChartData.from_dict(payload)
    except ChartParseError as exc:
        raise ChartParseError(exc.detail, source=source) from exc


def parse_chart_file(path: str | Path | None = None) -> ChartData:
    source = str(path) if path is not None else "<stdin>"
    return parse_chart_text(read_text_input(path), source=source)
