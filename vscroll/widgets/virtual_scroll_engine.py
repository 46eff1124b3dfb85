from vscroll.utils.flow_log import log_flow
from vscroll.utils.settings import (get_buffer_amount, get_frame_interval_ms,
                                    get_max_stabilizing_passes, get_scrollbar_allowance)
from vscroll.widgets.dimension_probe import DimensionProbe
from vscroll.widgets.frame_scheduler import FrameScheduler
from vscroll.widgets.scroll_navigator import ScrollNavigator
from vscroll.widgets.scroll_source import is_alive, resolve_scroll_source
from vscroll.widgets.startup_stabilizer import StartupStabilizer
from vscroll.widgets.window_calculator import calculate_window
from vscroll.widgets.window_context import ViewportDimensions, WindowState
from vscroll.widgets.window_notifier import WindowNotifier


class VirtualScrollEngine:
    """Owns windowing state for one virtual scroll view.

    ``host`` is the widget being virtualized. It must provide
    ``apply_window_geometry(leading_padding, total_extent)`` and
    ``set_updates_attached(attached)``, and may provide
    ``on_scroll_source_changed(kind)``. ``surface`` is the rendering surface
    the probe measures (``item_geometries()``, optionally
    ``container_geometries()`` and ``container_offset()``).
    """

    def __init__(self, host, surface, *, scheduler_factory=None):
        self._host = host
        self._surface = surface
        self._items = []
        self.item_width = None
        self.item_height = None
        self.buffer_amount = get_buffer_amount()
        self.scrollbar_width, self.scrollbar_height = get_scrollbar_allowance()

        self.state = WindowState()
        self.notifier = WindowNotifier(self.state)
        self.stabilizer = StartupStabilizer(max_passes=get_max_stabilizing_passes())
        self._probe = DimensionProbe(surface)
        self._navigator = ScrollNavigator(self)

        if scheduler_factory is None:
            interval_ms = get_frame_interval_ms()
            scheduler_factory = lambda callback: FrameScheduler(callback, interval_ms=interval_ms)  # noqa: E731
        self._scheduler = scheduler_factory(self.run_pass)

        self._suspended = False
        self._disposed = False
        self._scroll_source = None
        destroyed = getattr(host, "destroyed", None)
        if destroyed is not None:
            destroyed.connect(self._host_destroyed)
        self.bind_scroll_source(None)

    # --- Configuration ---

    @property
    def items(self):
        return self._items

    @property
    def scroll_source(self):
        return self._scroll_source

    @property
    def suspended(self) -> bool:
        return self._suspended

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def viewport_items(self) -> list:
        return self.notifier.viewport_items

    def _config_changed(self):
        self.notifier.reset_bounds()
        self.refresh()

    def set_items(self, items):
        previous = self._items
        self._items = items if items is not None else []
        if previous is None or len(previous) == 0:
            self.stabilizer.reset("collection reset")
        self._config_changed()

    def set_item_size(self, width=None, height=None):
        self.item_width = width
        self.item_height = height
        self._config_changed()

    def set_buffer_amount(self, amount: int):
        self.buffer_amount = max(0, int(amount or 0))
        self._config_changed()

    def set_scrollbar_allowance(self, width=0, height=0):
        self.scrollbar_width = width or 0
        self.scrollbar_height = height or 0
        self._config_changed()

    def bind_scroll_source(self, target, *, page: bool = False):
        """Swap the active scroll origin; ``None`` binds the host's own scrollbar."""
        source = resolve_scroll_source(self._host, target, page=page)
        if self._scroll_source is not None and self._scroll_source.is_same(source):
            return self._scroll_source
        self._release_scroll_source()
        self._scroll_source = source
        if not self._disposed:
            source.bind(self.refresh)
            source.on_lost(self._scroll_source_lost)
        log_flow("SCROLL", f"Bound scroll source kind={source.kind}")
        if hasattr(self._host, "on_scroll_source_changed"):
            self._host.on_scroll_source_changed(source.kind)
        self.refresh()
        return source

    def _release_scroll_source(self):
        source = self._scroll_source
        if source is None:
            return
        source.off_lost(self._scroll_source_lost)
        source.unbind(self.refresh)

    def _scroll_source_lost(self, source):
        if source is not self._scroll_source:
            return
        self._scroll_source = None
        if self._disposed:
            return
        if source.area is self._host or not is_alive(self._host):
            self._host_destroyed()
            return
        log_flow("SCROLL", f"Scroll container destroyed (kind={source.kind}); using self",
                 level="WARN")
        self.bind_scroll_source(None)

    def _host_destroyed(self, *_args):
        if self._disposed:
            return
        # The host's scrollbar and viewport died with it.
        if self._scroll_source is not None and self._scroll_source.area is self._host:
            self._scroll_source = None
        log_flow("SCROLL", "Host destroyed; disposing engine", level="WARN")
        self.dispose()

    # --- Scheduling ---

    def refresh(self, *_args):
        """Request a recomputation pass on the next frame."""
        if self._disposed or self._suspended:
            return False
        return self._scheduler.request()

    def set_updates_active(self, active: bool):
        if self._disposed:
            return
        if active:
            self._suspended = False
            self._host.set_updates_attached(True)
            self.stabilizer.reset("updates resumed")
            self.refresh()
        else:
            self._suspended = True
            self._host.set_updates_attached(False)

    def dispose(self):
        if self._disposed:
            return
        self._disposed = True
        self._release_scroll_source()
        self._scheduler.dispose()
        self.notifier.clear()

    # --- Measurement ---

    def offset_correction(self) -> float:
        offset = 0
        if hasattr(self._surface, "container_offset"):
            offset += self._surface.container_offset()
        offset += self._scroll_source.content_offset(self._host)
        return offset

    def measure(self) -> ViewportDimensions:
        client_width, client_height = self._scroll_source.client_size()
        return self._probe.measure(
            client_width=client_width,
            client_height=client_height,
            scrollbar_width=self.scrollbar_width,
            scrollbar_height=self.scrollbar_height,
            item_width=self.item_width,
            item_height=self.item_height,
            scroll_offset=self._scroll_source.current_offset(),
            item_count=len(self._items),
            previous_extent=self.state.total_extent,
        )

    def run_pass(self):
        """Recompute the window and publish it."""
        if self._disposed or self._suspended:
            return
        items = self._items
        dimensions = self.measure()
        result = calculate_window(
            scroll_offset=self._scroll_source.current_offset(),
            offset_correction=self.offset_correction(),
            dimensions=dimensions,
            item_count=len(items),
            buffer_amount=self.buffer_amount,
        )

        state = self.state
        state.start = result.start
        state.end = result.end
        state.leading_padding = result.leading_padding
        state.total_extent = result.total_extent
        self._host.apply_window_geometry(result.leading_padding, result.total_extent)

        stabilizing = self.stabilizer.stabilizing
        changed = self.notifier.publish(result.start, result.end, items, suppress=stabilizing)
        if changed:
            log_flow(
                "WINDOW",
                f"Window [{result.start}, {result.end}) of {len(items)} "
                f"per_row={dimensions.items_per_row} per_col={dimensions.items_per_column} "
                f"stabilizing={stabilizing}",
                throttle_key="window_publish",
                every_s=0.25,
            )
            if stabilizing:
                self.stabilizer.record_pass()
                self.refresh()
        elif stabilizing:
            # One more pass flushes sizes that only became accurate after
            # the last render.
            self.stabilizer.settle()
            self.refresh()

    # --- Navigation ---

    def scroll_into(self, item) -> bool:
        return self._navigator.scroll_into(item)
