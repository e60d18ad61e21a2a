from __future__ import annotations

import sys
from pathlib import Path
from typing import TextIO

from .errors import InputAccessError, OutputAccessError


STDIN_SOURCE = "<stdin>"


def _decode_utf16_without_bom(blob: bytes) -> str:
    text_le = blob.decode("utf-16le", errors="replace")
    text_be = blob.decode("utf-16be", errors="replace")

    def score(text: str) -> int:
        printable = sum(1 for ch in text if ch.isprintable() or ch in "\n\r\t")
        replacement = text.count("\ufffd")
        return printable - replacement * 10

    return text_le if score(text_le) >= score(text_be) else text_be


def decode_text_bytes(blob: bytes) -> str:
    if blob.startswith(b"\xef\xbb\xbf"):
        return blob.decode("utf-8-sig", errors="replace")
    if blob.startswith(b"\xff\xfe"):
        return blob[2:].decode("utf-16le", errors="replace")
    if blob.startswith(b"\xfe\xff"):
        return blob[2:].decode("utf-16be", errors="replace")

    # Chart files saved by some Windows editors are UTF-16 without a BOM.
    null_ratio = blob.count(b"\x00") / max(len(blob), 1)
    if null_ratio > 0.10:
        return _decode_utf16_without_bom(blob)
    return blob.decode("utf-8", errors="replace")


def read_text_input(path: str | Path | None = None, stdin: TextIO | None = None) -> str:
    if path is None:
        stream = stdin if stdin is not None else sys.stdin
        buffer = getattr(stream, "buffer", None)
        try:
            if buffer is not None:
                return decode_text_bytes(buffer.read())
            return stream.read()
        except OSError as exc:
            raise InputAccessError(STDIN_SOURCE, exc.strerror or str(exc)) from exc

    file_path = Path(path).expanduser()
    try:
        blob = file_path.read_bytes()
    except OSError as exc:
        raise InputAccessError(file_path, exc.strerror or str(exc)) from exc
    return decode_text_bytes(blob)


def write_text_output(text: str, path: str | Path | None = None, stdout: TextIO | None = None) -> None:
    if path is None:
        stream = stdout if stdout is not None else sys.stdout
        try:
            stream.write(text)
            stream.flush()
        except OSError as exc:
            raise OutputAccessError("<stdout>", exc.strerror or str(exc)) from exc
        return

    file_path = Path(path).expanduser()
    tmp_path = file_path.with_name(file_path.name + ".tmp")
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path.write_text(text, encoding="utf-8")
        tmp_path.replace(file_path)
    except OSError as exc:
        try:
            tmp_path.unlink(missing_ok=True)
        except OSError:
            pass
        raise OutputAccessError(file_path, exc.strerror or str(exc)) from exc
