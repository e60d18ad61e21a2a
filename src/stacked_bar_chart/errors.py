from __future__ import annotations

from pathlib import Path


class ChartError(Exception):
    pass


class InputAccessError(ChartError):
    def __init__(self, path: str | Path, reason: str | None = None) -> None:
        self.path = str(path)
        message = f"Unable to open file '{self.path}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ChartParseError(ChartError, ValueError):
    def __init__(self, message: str, *, source: str = "<input>") -> None:
        self.source = source
        self.detail = message
        super().__init__(f"{source}: {message}")


class ChartValidationError(ChartError, ValueError):
    def __init__(self, item_index: int, expected: int, actual: int) -> None:
        self.item_index = item_index
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Item {item_index} has {actual} values; expected at least {expected} (one per category)"
        )


class ChartRangeError(ChartError, ValueError):
    def __init__(self, item_index: int) -> None:
        self.item_index = item_index
        super().__init__(f"Item {item_index} values are too large to stack on one axis")


class OutputAccessError(ChartError):
    def __init__(self, path: str | Path, reason: str | None = None) -> None:
        self.path = str(path)
        message = f"Unable to create file '{self.path}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
