"""
SecretSift scanner engine.

Pipeline per entry: classify -> (skip | reopen -> lines -> probe every rule
-> report). Work fans out at three levels (entries, lines of a file, rules on
a line), each level on its own thread pool so that a task waiting on its
children never occupies a thread those children need.
"""
import contextlib
import logging
import os
from concurrent.futures import FIRST_COMPLETED, Executor, ThreadPoolExecutor, wait
from typing import Callable, Iterable, Iterator, Optional

from sift.classify import FileClassification, classify, open_target
from sift.lines import LineRecord, iter_records
from sift.matcher import probe
from sift.patterns import PatternLibrary, default_library
from sift.report import Reporter

_log = logging.getLogger("secretsift.engine")

DEFAULT_WORKERS = 8


# ─── Parallel map ─────────────────────────────────────────────────────────────

def fan_out(
    executor: Optional[Executor],
    fn: Callable,
    items: Iterable,
    window: int = 64,
) -> None:
    """
    Call fn(item) for every item and return once all calls have finished.

    With an executor, items are pulled lazily and at most `window` calls are
    in flight at once; without one, items run inline on the calling thread.
    An exception raised by fn is re-raised here.
    """
    if executor is None:
        for item in items:
            fn(item)
        return

    pending = set()
    for item in items:
        pending.add(executor.submit(fn, item))
        if len(pending) >= window:
            done, pending = wait(pending, return_when=FIRST_COMPLETED)
            for fut in done:
                fut.result()

    done, _ = wait(pending)
    for fut in done:
        fut.result()


# ─── Walk ─────────────────────────────────────────────────────────────────────

def _walk_error(err: OSError) -> None:
    _log.debug("Skipping unreadable entry %s: %s", err.filename, err)


def walk_entries(root: str) -> Iterator[str]:
    """Yield every directory and file path under root (root included)."""
    for dirpath, _dirnames, filenames in os.walk(root, onerror=_walk_error):
        yield dirpath
        for fname in filenames:
            yield os.path.join(dirpath, fname)


# ─── Scan ─────────────────────────────────────────────────────────────────────

def scan(
    root: str = ".",
    library: Optional[PatternLibrary] = None,
    reporter: Optional[Reporter] = None,
    workers: int = DEFAULT_WORKERS,
    pattern_workers: int = 0,
) -> None:
    """
    Scan every text file under root and emit each match to reporter as it is
    found. Output order across files, lines and rules is not defined.

    workers          threads in each of the entry and line pools
    pattern_workers  threads in the per-line rule pool; 0 probes rules inline
    """
    library = library if library is not None else default_library()
    reporter = reporter if reporter is not None else Reporter()
    workers = max(1, workers)

    with contextlib.ExitStack() as stack:
        # Exit order is file, line, rule pool: each pool outlives its submitters
        pattern_pool = (
            stack.enter_context(ThreadPoolExecutor(max_workers=pattern_workers, thread_name_prefix="sift-rule"))
            if pattern_workers > 0 else None
        )
        line_pool = stack.enter_context(ThreadPoolExecutor(max_workers=workers, thread_name_prefix="sift-line"))
        file_pool = stack.enter_context(ThreadPoolExecutor(max_workers=workers, thread_name_prefix="sift-file"))
        _run(root, library, reporter, file_pool, line_pool, pattern_pool, workers)


def _run(root, library, reporter, file_pool, line_pool, pattern_pool, workers) -> None:
    # ── Per-line: every rule ──────────────────────────────────────────────────
    def _probe_line(record: LineRecord) -> None:
        def _probe_rule(rule) -> None:
            result = probe(rule, record.text, record.path, record.line_no)
            if result is not None:
                reporter.emit(result)

        fan_out(pattern_pool, _probe_rule, library.rules, window=max(len(library), 1))

    # ── Per-entry: gate, then every line ──────────────────────────────────────
    def _scan_entry(path: str) -> None:
        if classify(path) is not FileClassification.TEXT:
            return
        target = open_target(path)
        if target is None:
            return
        with target.file:
            fan_out(line_pool, _probe_line, iter_records(path, target.file),
                    window=max(workers * 32, 512))

    fan_out(file_pool, _scan_entry, walk_entries(root), window=max(workers * 8, 64))
