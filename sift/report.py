"""
SecretSift reporter: the shared stdout sink.
"""
import os
import sys
import threading

from sift.matcher import MatchResult

_ESCAPES = {
    "\t": "\\t",
    "\r": "\\r",
    "\n": "\\n",
    "\0": "\\0",
    '"': '\\"',
    "\\": "\\\\",
}


def display_path(path: str) -> str:
    # os.walk hands back undecodable name bytes as surrogate escapes
    return os.fsencode(path).decode("utf-8", "replace")


def quote_text(text: str) -> str:
    """Double-quoted literal; control and unprintable characters as \\u{hex}."""
    out = []
    for ch in text:
        if ch in _ESCAPES:
            out.append(_ESCAPES[ch])
        elif ch.isprintable() or ch == " ":
            out.append(ch)
        else:
            out.append(f"\\u{{{ord(ch):x}}}")
    return '"' + "".join(out) + '"'


def format_match(result: MatchResult) -> str:
    """
    Render one match as its three output lines:

        <path>:<pattern-index>:[<start>, <end>] - <pattern>
        <quoted matched text>
        <blank>
    """
    return (
        f"{display_path(result.path)}:{result.pattern_index}:"
        f"[{result.start}, {result.end}] - {result.pattern}\n"
        f"{quote_text(result.text)}\n"
        "\n"
    )


class Reporter:
    """Writes match records to a stream, one whole record per locked write."""

    def __init__(self, stream=None):
        self._stream = stream
        self._lock = threading.Lock()

    @property
    def stream(self):
        # Resolved lazily so pytest's capsys replacement of sys.stdout is seen
        return self._stream if self._stream is not None else sys.stdout

    def emit(self, result: MatchResult) -> None:
        record = format_match(result)
        with self._lock:
            out = self.stream
            try:
                out.write(record)
            except UnicodeEncodeError:
                encoding = getattr(out, "encoding", None) or "ascii"
                out.write(record.encode(encoding, "backslashreplace").decode(encoding))
            out.flush()
