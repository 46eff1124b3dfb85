from vscroll.widgets.window_context import WindowState

WINDOW_EVENTS = ("update", "start", "end", "change")


class WindowNotifier:
    """Per-event listener channels for published windows.

    ``update`` receives the sliced items; ``start``, ``end`` and ``change``
    receive ``{"start": int, "end": int}``.
    """

    def __init__(self, state: WindowState | None = None):
        self.state = state if state is not None else WindowState()
        self._listeners = {event: [] for event in WINDOW_EVENTS}
        self.viewport_items = []

    def connect(self, event: str, callback):
        if event not in self._listeners:
            raise ValueError(f"Unknown window event: {event!r}")
        self._listeners[event].append(callback)

    def disconnect(self, event: str, callback):
        listeners = self._listeners.get(event, [])
        if callback in listeners:
            listeners.remove(callback)

    def clear(self):
        for listeners in self._listeners.values():
            listeners.clear()

    def _emit(self, event: str, payload):
        for callback in list(self._listeners[event]):
            callback(payload)

    def reset_bounds(self):
        self.state.previous_start = None
        self.state.previous_end = None

    def has_changed(self, start: int, end: int) -> bool:
        return start != self.state.previous_start or end != self.state.previous_end

    def publish(self, start: int, end: int, items, *, suppress: bool) -> bool:
        """Emit the window if it differs from the previous one.

        With ``suppress`` only ``update`` is emitted. Returns whether the
        window changed.
        """
        state = self.state
        if not self.has_changed(start, end):
            return False

        self.viewport_items = list(items[start:end]) if items is not None else []
        self._emit("update", self.viewport_items)

        bounds = {"start": start, "end": end}
        if start != state.previous_start and not suppress:
            self._emit("start", dict(bounds))
        if end != state.previous_end and not suppress:
            self._emit("end", dict(bounds))

        state.previous_start = start
        state.previous_end = end

        if not suppress:
            self._emit("change", dict(bounds))
        return True
