"""Scroll origins for the virtual scroll engine.

Every variant exposes the same capability set, so the engine never inspects
which kind of origin it is bound to:

- ``SelfScrollSource``: the view's own scrollbar and viewport.
- ``ElementScrollSource``: an external scroll area that contains the view.
- ``ViewportScrollSource``: the page-level scroll area of the top-level
  window; its visible size is the window size.
"""

from PySide6.QtCore import QEvent, QObject, QPoint
from shiboken6 import isValid as _shiboken_is_valid

from vscroll.utils.flow_log import log_flow


def is_alive(obj) -> bool:
    """False once the C++ side of a Qt wrapper has been deleted."""
    return obj is not None and _shiboken_is_valid(obj)


class _ResizeWatcher(QObject):
    """Event filter forwarding resize events of one widget to callbacks."""

    def __init__(self, target):
        super().__init__()
        self._target = target
        self._callbacks = []
        self._installed = False

    def add(self, callback):
        if callback in self._callbacks:
            return
        self._callbacks.append(callback)
        if not self._installed and self._target is not None:
            self._target.installEventFilter(self)
            self._installed = True

    def remove(self, callback):
        if callback in self._callbacks:
            self._callbacks.remove(callback)
        if not self._callbacks and self._installed:
            if is_alive(self._target):
                self._target.removeEventFilter(self)
            self._installed = False

    def forget(self):
        """Drop all callbacks without touching a target that may be deleted."""
        self._callbacks.clear()
        self._installed = False

    def eventFilter(self, watched, event):
        if event.type() == QEvent.Type.Resize:
            for callback in list(self._callbacks):
                callback()
        return False


class ScrollSource:
    kind = "self"

    def __init__(self, area):
        self._area = area
        self._alive = True
        self._scroll_callbacks = []
        self._lost_callbacks = []
        self._watching_lifetime = False
        self._resize_watcher = _ResizeWatcher(self._resize_target())

    @property
    def area(self):
        return self._area

    @property
    def alive(self) -> bool:
        return self._alive and is_alive(self._area)

    def _resize_target(self):
        return self._area.viewport()

    def current_offset(self) -> int:
        if not self.alive:
            return 0
        return max(0, int(self._area.verticalScrollBar().value()))

    def set_offset(self, value):
        if self.alive:
            self._area.verticalScrollBar().setValue(int(round(value)))

    def client_size(self) -> tuple[int, int]:
        if not self.alive:
            return 0, 0
        viewport = self._area.viewport()
        return viewport.width(), viewport.height()

    def content_offset(self, widget) -> int:
        return 0

    def on_scroll(self, callback):
        if callback in self._scroll_callbacks or not self.alive:
            return
        self._area.verticalScrollBar().valueChanged.connect(callback)
        self._scroll_callbacks.append(callback)

    def off_scroll(self, callback):
        if callback not in self._scroll_callbacks:
            return
        self._scroll_callbacks.remove(callback)
        if self.alive:
            self._area.verticalScrollBar().valueChanged.disconnect(callback)

    def on_resize(self, callback):
        if self.alive:
            self._resize_watcher.add(callback)

    def off_resize(self, callback):
        if self.alive:
            self._resize_watcher.remove(callback)

    def on_lost(self, callback):
        """Call ``callback(source)`` once when the area's C++ object is destroyed."""
        if callback in self._lost_callbacks or not self.alive:
            return
        self._lost_callbacks.append(callback)
        destroyed = getattr(self._area, "destroyed", None)
        if destroyed is not None and not self._watching_lifetime:
            destroyed.connect(self._area_destroyed)
            self._watching_lifetime = True

    def off_lost(self, callback):
        if callback in self._lost_callbacks:
            self._lost_callbacks.remove(callback)
        if not self._lost_callbacks and self._watching_lifetime and self.alive:
            self._area.destroyed.disconnect(self._area_destroyed)
            self._watching_lifetime = False

    def _area_destroyed(self, *_args):
        # Qt already dropped every connection to the dead area.
        self._alive = False
        self._watching_lifetime = False
        self._scroll_callbacks.clear()
        self._resize_watcher.forget()
        callbacks, self._lost_callbacks = self._lost_callbacks, []
        for callback in callbacks:
            callback(self)

    def bind(self, callback):
        self.on_scroll(callback)
        self.on_resize(callback)

    def unbind(self, callback):
        self.off_scroll(callback)
        self.off_resize(callback)

    def is_same(self, other) -> bool:
        return (
            isinstance(other, ScrollSource)
            and other.kind == self.kind
            and other.area is self._area
        )


class SelfScrollSource(ScrollSource):
    kind = "self"


class ElementScrollSource(ScrollSource):
    kind = "element"

    def content_offset(self, widget) -> int:
        if not self.alive:
            return 0
        content = self._area.widget() if hasattr(self._area, "widget") else None
        if content is None or widget is None or not content.isAncestorOf(widget):
            return 0
        return widget.mapTo(content, QPoint(0, 0)).y()


class ViewportScrollSource(ElementScrollSource):
    kind = "viewport"

    def _resize_target(self):
        return self._area.window()

    def client_size(self) -> tuple[int, int]:
        if not self.alive:
            return 0, 0
        window = self._area.window()
        return window.width(), window.height()


def is_scroll_area(target) -> bool:
    return all(hasattr(target, name) for name in ("verticalScrollBar", "viewport"))


def is_outermost_scroll_area(target) -> bool:
    """True when no ancestor widget of ``target`` is itself a scroll area."""
    parent_of = getattr(target, "parentWidget", None)
    parent = parent_of() if parent_of is not None else None
    while parent is not None:
        if is_scroll_area(parent):
            return False
        parent = parent.parentWidget()
    return True


def resolve_scroll_source(view, target, *, page: bool = False) -> ScrollSource:
    """Resolve a scroll container option to a bound-ready source.

    ``None`` means the view scrolls itself. Targets that are not scroll areas
    fall back to the view as well.
    """
    if isinstance(target, ScrollSource):
        return target
    if target is None or target is view:
        return SelfScrollSource(view)
    if not is_scroll_area(target):
        log_flow("SCROLL", f"Unsupported scroll container {type(target).__name__}; using self",
                 level="WARN")
        return SelfScrollSource(view)
    if page:
        if is_outermost_scroll_area(target):
            return ViewportScrollSource(target)
        log_flow("SCROLL", "Page scrolling needs the outermost scroll area; using element",
                 level="WARN")
    return ElementScrollSource(target)
