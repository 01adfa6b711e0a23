"""Trace logging for streamgrid components.

Writes timestamped lines to a trace file so stream lifecycle, holdback and
resize decisions can be inspected while a terminal UI owns stdout.

The trace path comes from STREAMGRID_TRACE_LOG. An empty value disables
tracing; when unset, a file in the system temp directory is used.

Usage:
    from streamgrid.trace import trace

    trace("STREAM_CORE", "push: +3 lines")
    trace("CONFIG", "could not read render.json", include_traceback=True)
"""

import os
import tempfile
import traceback
from datetime import datetime
from pathlib import Path
from typing import Optional


TRACE_ENV_VAR = "STREAMGRID_TRACE_LOG"
DEFAULT_TRACE_FILENAME = "streamgrid_trace.log"


def resolve_trace_path(env_var: str = TRACE_ENV_VAR) -> Optional[str]:
    """Trace file path from ``env_var``; None when tracing is disabled."""
    value = os.environ.get(env_var)
    if value == "":
        return None
    return value or os.path.join(tempfile.gettempdir(), DEFAULT_TRACE_FILENAME)


def _active_traceback() -> Optional[str]:
    """The traceback of the exception being handled, if any."""
    tb = traceback.format_exc()
    if not tb or tb.strip() == "NoneType: None":
        return None
    return tb


def trace_write(
    component: str,
    msg: str,
    trace_path: Optional[str],
    *,
    include_traceback: bool = False,
) -> None:
    """Append ``[time] [component] msg`` to ``trace_path``.

    With ``include_traceback``, the exception currently being handled is
    appended below the message. Write failures are ignored so tracing
    cannot break rendering.
    """
    if not trace_path:
        return
    ts = datetime.now().strftime("%H:%M:%S.%f")[:-3]
    entry = f"[{ts}] [{component}] {msg}\n"
    tb = _active_traceback() if include_traceback else None
    if tb:
        entry += f"[{ts}] [{component}] Traceback:\n{tb}\n"
    try:
        path = Path(trace_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a") as f:
            f.write(entry)
    except OSError:
        pass  # Tracing must never break the renderer


def trace(component: str, msg: str, *, include_traceback: bool = False) -> None:
    """Write a trace message to the streamgrid trace log."""
    trace_write(component, msg, resolve_trace_path(), include_traceback=include_traceback)
