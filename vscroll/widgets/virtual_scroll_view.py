import math

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import QFrame, QScrollArea, QWidget

from vscroll.widgets.render_surface import RenderSurface
from vscroll.widgets.virtual_scroll_engine import VirtualScrollEngine


class _VirtualCanvas(QWidget):
    """Scroll content sized to the full virtual extent; hosts the surface."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.surface = None

    def resizeEvent(self, event):
        super().resizeEvent(event)
        if self.surface is not None and self.surface.width() != self.width():
            self.surface.resize(self.width(), self.surface.height())
            self.surface.relayout()


class VirtualScrollView(QScrollArea):
    """Scroll area that only mounts widgets for the visible window of items.

    Signals mirror the engine's window events: ``viewport_items_changed`` is
    ``update``, ``start_changed``/``end_changed`` are ``start``/``end`` and
    ``window_changed`` is ``change``.
    """

    viewport_items_changed = Signal(list)
    start_changed = Signal(dict)
    end_changed = Signal(dict)
    window_changed = Signal(dict)

    def __init__(self, parent=None, *, item_factory=None, spacing: int = 0):
        super().__init__(parent)
        self.setWidgetResizable(True)
        self.setFrameShape(QFrame.Shape.NoFrame)
        self.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        self.setVerticalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAsNeeded)

        self._canvas = _VirtualCanvas()
        self.surface = RenderSurface(self._canvas, item_factory=item_factory, spacing=spacing)
        self._canvas.surface = self.surface
        self.setWidget(self._canvas)
        self._external_scroll = False
        self._update_signal = None

        self.engine = VirtualScrollEngine(self, self.surface)
        self.engine.notifier.connect("update", self._on_update)
        self.engine.notifier.connect("start", self.start_changed.emit)
        self.engine.notifier.connect("end", self.end_changed.emit)
        self.engine.notifier.connect("change", self.window_changed.emit)

    # --- Options ---

    def items(self):
        return self.engine.items

    def viewport_items(self) -> list:
        return self.engine.viewport_items

    def set_items(self, items):
        self.engine.set_items(items)

    def set_item_factory(self, item_factory):
        self.surface.set_item_factory(item_factory)
        self.engine.notifier.reset_bounds()
        self.engine.refresh()

    def set_item_size(self, width=None, height=None):
        self.engine.set_item_size(width, height)

    def set_buffer_amount(self, amount: int):
        self.engine.set_buffer_amount(amount)

    def set_scrollbar_allowance(self, width=0, height=0):
        self.engine.set_scrollbar_allowance(width, height)

    def set_scroll_container(self, target, *, page: bool = False):
        return self.engine.bind_scroll_source(target, page=page)

    def set_update_signal(self, signal):
        """Connect an external ``Signal(bool)``; False suspends updates, True resumes."""
        if self._update_signal is not None:
            self._update_signal.disconnect(self.engine.set_updates_active)
        self._update_signal = signal
        if signal is not None:
            signal.connect(self.engine.set_updates_active)

    def set_updates_active(self, active: bool):
        self.engine.set_updates_active(active)

    def scroll_into(self, item) -> bool:
        return self.engine.scroll_into(item)

    def refresh(self):
        self.engine.refresh()

    def dispose(self):
        if self._update_signal is not None:
            self._update_signal.disconnect(self.engine.set_updates_active)
            self._update_signal = None
        self.engine.dispose()

    # --- Engine host callbacks ---

    def _on_update(self, items):
        self.surface.render(items)
        self.viewport_items_changed.emit(items)

    def apply_window_geometry(self, leading_padding: float, total_extent: float):
        extent = int(math.ceil(total_extent)) if math.isfinite(total_extent) else 0
        padding = int(round(leading_padding)) if math.isfinite(leading_padding) else 0
        self._canvas.setMinimumHeight(extent)
        if self._external_scroll:
            self.setMinimumHeight(extent)
        self.surface.move(0, max(0, padding))

    def set_updates_attached(self, attached: bool):
        self.setUpdatesEnabled(bool(attached))

    def on_scroll_source_changed(self, kind: str):
        self._external_scroll = kind != "self"
        if self._external_scroll:
            self.setVerticalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        else:
            self.setVerticalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAsNeeded)
            self.setMinimumHeight(0)

    # --- Qt events ---

    def resizeEvent(self, event):
        super().resizeEvent(event)
        engine = getattr(self, "engine", None)
        if engine is not None:
            engine.refresh()

    def closeEvent(self, event):
        self.dispose()
        super().closeEvent(event)
