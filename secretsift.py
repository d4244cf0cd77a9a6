#!/usr/bin/env python3
"""
SecretSift: offline credential leak scanner.
Scans the current directory tree and prints every pattern hit to stdout.

Usage:
    python secretsift.py

Tuning (environment):
    SECRETSIFT_WORKERS          threads per file/line pool (default 8, 1-16)
    SECRETSIFT_PATTERN_WORKERS  threads probing rules per line (default 0 = inline)
    SECRETSIFT_LOG_LEVEL        stderr diagnostics level (default WARNING)
"""

import logging
import os

__version__ = "1.0.0"

_log = logging.getLogger("secretsift")

SCAN_ROOT = "."


# ─── Settings ─────────────────────────────────────────────────────────────────

def _env_int(environ, name: str, default: int, lo: int, hi: int) -> int:
    raw = environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return max(lo, min(hi, value))


def load_settings(environ=None) -> dict:
    """Read tuning knobs from the environment. Bad values fall back to defaults."""
    environ = os.environ if environ is None else environ
    level = environ.get("SECRETSIFT_LOG_LEVEL", "WARNING").strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        level = "WARNING"
    return {
        "workers":         _env_int(environ, "SECRETSIFT_WORKERS", 8, 1, 16),
        "pattern_workers": _env_int(environ, "SECRETSIFT_PATTERN_WORKERS", 0, 0, 16),
        "log_level":       level,
    }


# ─── Entry point ──────────────────────────────────────────────────────────────

def main() -> int:
    settings = load_settings()
    logging.basicConfig(
        level=settings["log_level"],
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    from sift.engine import scan
    _log.debug(
        "Scanning %s (workers=%d, pattern_workers=%d)",
        os.path.abspath(SCAN_ROOT), settings["workers"], settings["pattern_workers"],
    )
    scan(SCAN_ROOT, workers=settings["workers"], pattern_workers=settings["pattern_workers"])
    return 0


if __name__ == "__main__":
    main()
