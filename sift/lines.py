"""
SecretSift line source: lazy, newline-stripped UTF-8 lines from a binary handle.
"""
import logging
from typing import BinaryIO, Iterator, NamedTuple, Tuple

_log = logging.getLogger("secretsift.lines")


class LineRecord(NamedTuple):
    path: str
    line_no: int  # 1-based, counts dropped lines too
    text: str


def strip_terminator(raw: bytes) -> bytes:
    if raw.endswith(b"\n"):
        raw = raw[:-1]
        if raw.endswith(b"\r"):
            raw = raw[:-1]
    return raw


def _decoded(fileobj: BinaryIO, name: str) -> Iterator[Tuple[int, str]]:
    line_no = 0
    try:
        for raw in fileobj:
            line_no += 1
            try:
                text = strip_terminator(raw).decode("utf-8")
            except UnicodeDecodeError:
                continue
            yield line_no, text
    except OSError as e:
        _log.debug("Read failed on %s after %d lines: %s", name, line_no, e)


def iter_lines(fileobj: BinaryIO) -> Iterator[str]:
    """
    Yield each line of fileobj decoded as UTF-8, terminator stripped.

    Lines that are not valid UTF-8 are skipped. An OSError while reading ends
    the sequence after the lines already produced.
    """
    for _, text in _decoded(fileobj, getattr(fileobj, "name", "?")):
        yield text


def iter_records(path: str, fileobj: BinaryIO) -> Iterator[LineRecord]:
    """Same as iter_lines, but each line carries its path and line number."""
    for line_no, text in _decoded(fileobj, path):
        yield LineRecord(path, line_no, text)
