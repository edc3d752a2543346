from __future__ import annotations

import itertools
import json
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from threading import Lock


ENABLE_ENV = "WELFAREDESK_API_DEBUG"
LOG_PATH_ENV = "WELFAREDESK_API_DEBUG_LOG"
STDERR_PREFIX = "[api-debug] "

_SECRET_KEYS = frozenset({"authorization", "password", "token", "access_token", "otp", "secret"})
_MASK = "<redacted>"
_ON_VALUES = frozenset({"1", "true", "yes", "on", "y"})

_sequence = itertools.count(1)
_sequence_lock = Lock()


def api_debug_enabled() -> bool:
    return os.environ.get(ENABLE_ENV, "").strip().casefold() in _ON_VALUES


def redact_value(value: object) -> object:
    """Copy ``value`` with credential-looking keys masked at any depth."""
    if isinstance(value, dict):
        return {
            str(key): _MASK if str(key or "").strip().casefold() in _SECRET_KEYS else redact_value(item)
            for key, item in value.items()
        }
    if isinstance(value, set):
        value = sorted(value, key=str)
    if isinstance(value, (list, tuple)):
        return [redact_value(item) for item in value]
    return value


def api_debug(event: str, **payload: object) -> None:
    """Trace one API event as a JSON line when ``WELFAREDESK_API_DEBUG`` is on.

    The line is appended to ``WELFAREDESK_API_DEBUG_LOG`` if that names a
    writable file, otherwise written to stderr behind ``[api-debug]``.
    """
    if not api_debug_enabled():
        return
    with _sequence_lock:
        seq = next(_sequence)
    line = json.dumps(
        {
            "seq": seq,
            "ts": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
            "event": str(event or "").strip() or "unknown",
            "data": redact_value(payload),
        },
        ensure_ascii=True,
        default=str,
    )
    if not _append_to_log_file(line):
        _write_stderr(line)


def _append_to_log_file(line: str) -> bool:
    raw_path = os.environ.get(LOG_PATH_ENV, "").strip()
    if not raw_path:
        return False
    path = Path(raw_path).expanduser()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as handle:
            print(line, file=handle)
    except OSError:
        return False
    return True


def _write_stderr(line: str) -> None:
    stream = sys.stderr
    if stream is None:
        return
    try:
        print(f"{STDERR_PREFIX}{line}", file=stream, flush=True)
    except (OSError, ValueError):
        return
