"""
SecretSift match engine.

Every rule is probed independently against a line with re.search, so each
rule reports at most its leftmost match per line. Spans are UTF-8 byte
offsets into the line, and the reported text is capped at MAX_REPORT_BYTES.
"""
from typing import NamedTuple, Optional

from sift.patterns import PatternLibrary, PatternRule

MAX_REPORT_BYTES = 150


class MatchResult(NamedTuple):
    path: str
    line_no: int
    pattern_index: int
    pattern: str
    start: int  # byte offset, inclusive
    end: int    # byte offset, exclusive
    text: str


def truncate_utf8(text: str, limit: int = MAX_REPORT_BYTES) -> str:
    """First `limit` UTF-8 bytes of text; a character split by the cut is dropped."""
    raw = text.encode("utf-8")
    if len(raw) <= limit:
        return text
    return raw[:limit].decode("utf-8", errors="ignore")


def probe(rule: PatternRule, line: str, path: str = "", line_no: int = 0) -> Optional[MatchResult]:
    m = rule.regex.search(line)
    if m is None:
        return None
    matched = m.group(0)
    start = len(line[:m.start()].encode("utf-8"))
    end = start + len(matched.encode("utf-8"))
    return MatchResult(
        path=path,
        line_no=line_no,
        pattern_index=rule.index,
        pattern=rule.source,
        start=start,
        end=end,
        text=truncate_utf8(matched),
    )


def match_line(line: str, library: PatternLibrary, path: str = "", line_no: int = 0) -> list:
    """Probe every rule in library order. Returns a list of MatchResult."""
    results = []
    for rule in library:
        result = probe(rule, line, path, line_no)
        if result is not None:
            results.append(result)
    return results
