from PySide6.QtCore import QTimer


class FrameScheduler:
    """Coalesces recomputation requests into one pending frame callback."""

    def __init__(self, callback, *, interval_ms: int = 16):
        self._callback = callback
        self._interval_ms = max(0, int(interval_ms))
        self._pending = False
        self._token = 0
        self._disposed = False

    @property
    def pending(self) -> bool:
        return self._pending

    @property
    def disposed(self) -> bool:
        return self._disposed

    def request(self) -> bool:
        """Schedule the callback for the next frame unless one is already pending."""
        if self._disposed or self._pending:
            return False
        self._pending = True
        token = self._token
        QTimer.singleShot(self._interval_ms, lambda: self._fire(token))
        return True

    def _fire(self, token: int):
        # Stale tokens belong to a cancelled request.
        if self._disposed or token != self._token:
            return
        self._pending = False
        self._callback()

    def cancel(self):
        self._token += 1
        self._pending = False

    def dispose(self):
        self.cancel()
        self._disposed = True
