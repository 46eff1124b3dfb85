from vscroll.utils.flow_log import log_flow


class StartupStabilizer:
    """Tracks the startup loop that repeats passes until the window settles.

    While stabilizing, item sizes may still come from placeholder widgets, so
    ``start``/``end``/``change`` emission is suppressed and every pass asks for
    another one. The first unchanged pass settles the loop.
    """

    def __init__(self, max_passes: int = 50):
        self.max_passes = max(2, int(max_passes))
        self._stabilizing = True
        self._passes = 0

    @property
    def stabilizing(self) -> bool:
        return self._stabilizing

    @property
    def passes(self) -> int:
        return self._passes

    def reset(self, reason: str = ""):
        if not self._stabilizing:
            log_flow("STARTUP", f"Re-entering stabilization ({reason or 'reset'})")
        self._stabilizing = True
        self._passes = 0

    def record_pass(self) -> bool:
        """Count a stabilizing pass; returns True if the watchdog forced Steady."""
        if not self._stabilizing:
            return False
        self._passes += 1
        if self._passes > self.max_passes:
            log_flow(
                "STARTUP",
                f"Watchdog triggered: window still changing after {self._passes} passes. Forcing steady state.",
                level="WARN",
            )
            self._stabilizing = False
            return True
        return False

    def settle(self):
        log_flow("STARTUP", f"Window settled after {self._passes} passes")
        self._stabilizing = False
