"""
SecretSift file classifier: decides from a bounded prefix whether an entry is
scannable text.
"""
import enum
import logging
import os
import stat
from typing import BinaryIO, NamedTuple, Optional

_log = logging.getLogger("secretsift.classify")

SAMPLE_BYTES = 8000

# Opening a FIFO read-only blocks until a writer appears; O_NONBLOCK lets us
# reach the fstat check and reject it instead.
_OPEN_FLAGS = os.O_RDONLY | getattr(os, "O_NONBLOCK", 0) | getattr(os, "O_BINARY", 0)


class FileClassification(enum.Enum):
    BINARY = "binary"
    TEXT = "text"
    UNKNOWN = "unknown"


class ScanTarget(NamedTuple):
    # An open regular file owned by one worker; close via `with target.file:`
    path: str
    file: BinaryIO
    size: int


# ─── Opening ──────────────────────────────────────────────────────────────────

def open_target(path: str) -> Optional[ScanTarget]:
    """
    Open path read-only and stat it.
    Returns None if the open or fstat fails, or the entry is not a regular
    file (directory, FIFO, socket, device).
    """
    try:
        fd = os.open(path, _OPEN_FLAGS)
    except OSError as e:
        _log.debug("Cannot open %s: %s", path, e)
        return None

    try:
        st = os.fstat(fd)
    except OSError as e:
        _log.debug("Cannot stat %s: %s", path, e)
        os.close(fd)
        return None

    if not stat.S_ISREG(st.st_mode):
        os.close(fd)
        return None

    return ScanTarget(path, os.fdopen(fd, "rb"), st.st_size)


# ─── Classification ───────────────────────────────────────────────────────────

def read_sample(target: ScanTarget) -> bytes:
    """Read up to SAMPLE_BYTES from the start of target. Read errors yield b''."""
    try:
        return target.file.read(min(target.size, SAMPLE_BYTES)) or b""
    except OSError as e:
        _log.debug("Short read on %s: %s", target.path, e)
        return b""


def classify_sample(sample: bytes) -> FileClassification:
    if b"\x00" in sample:
        return FileClassification.BINARY
    return FileClassification.TEXT


def classify(path: str) -> FileClassification:
    target = open_target(path)
    if target is None:
        return FileClassification.UNKNOWN
    with target.file:
        return classify_sample(read_sample(target))
