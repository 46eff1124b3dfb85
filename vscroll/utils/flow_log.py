"""Timestamped, optionally throttled flow logging for windowing diagnostics."""

import time

from vscroll.utils.settings import settings

_flow_log_last: dict[str, float] = {}


def log_flow(component: str, message: str, *, level: str = "DEBUG",
             throttle_key: str | None = None, every_s: float | None = None):
    # Set `minimal_trace_logs` to False in settings to see DEBUG flow logs.
    try:
        minimal_trace = bool(settings.value("minimal_trace_logs", True, type=bool))
    except Exception:
        minimal_trace = True
    if minimal_trace and level == "DEBUG":
        return

    now = time.time()
    if throttle_key and every_s is not None:
        last = _flow_log_last.get(throttle_key, 0.0)
        if (now - last) < every_s:
            return
        _flow_log_last[throttle_key] = now
    ts = time.strftime("%H:%M:%S", time.localtime(now)) + f".{int((now % 1) * 1000):03d}"
    print(f"[{ts}][TRACE][{component}][{level}] {message}")


def reset_throttle():
    _flow_log_last.clear()
