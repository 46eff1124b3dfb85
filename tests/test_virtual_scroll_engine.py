import pytest
from PySide6.QtCore import QPoint

from vscroll.utils import settings as settings_module
from vscroll.utils.settings import DEFAULT_SETTINGS
from vscroll.widgets.virtual_scroll_engine import VirtualScrollEngine


@pytest.fixture(autouse=True)
def default_settings(monkeypatch):
    monkeypatch.setattr(
        settings_module.settings,
        "value",
        lambda key, default=None, **kwargs: DEFAULT_SETTINGS.get(key, default),
    )


class FakeSignal:
    def __init__(self):
        self.callbacks = []

    def connect(self, callback):
        self.callbacks.append(callback)

    def disconnect(self, callback):
        self.callbacks.remove(callback)

    def emit(self, *args):
        for callback in list(self.callbacks):
            callback(*args)


class FakeScrollBar:
    def __init__(self, value=0):
        self._value = value
        self.valueChanged = FakeSignal()

    def value(self):
        return self._value

    def setValue(self, value):
        self._value = value


class FakeViewport:
    def __init__(self, width=300, height=200):
        self._width = width
        self._height = height
        self.filters = []

    def width(self):
        return self._width

    def height(self):
        return self._height

    def installEventFilter(self, watcher):
        self.filters.append(watcher)

    def removeEventFilter(self, watcher):
        self.filters.remove(watcher)


class FakeRect:
    def __init__(self, x, y, width, height):
        self._x, self._y, self._width, self._height = x, y, width, height

    def y(self):
        return self._y

    def width(self):
        return self._width

    def height(self):
        return self._height


class FakeSurface:
    """Lays mounted items out in a fixed-column grid, like a wrapped flow."""

    def __init__(self, columns=1, item_width=100, item_height=50):
        self.columns = columns
        self.item_width = item_width
        self.item_height = item_height
        self._geometries = []
        self.render_calls = 0

    def render(self, items):
        self.render_calls += 1
        height = self.item_height() if callable(self.item_height) else self.item_height
        self._geometries = [
            FakeRect((i % self.columns) * self.item_width, (i // self.columns) * height,
                     self.item_width, height)
            for i in range(len(items))
        ]

    def item_geometries(self):
        return list(self._geometries)

    def container_offset(self):
        return 0


class FakeHost:
    def __init__(self, width=300, height=200, offset_y=0):
        self._scrollbar = FakeScrollBar()
        self._viewport = FakeViewport(width, height)
        self._offset_y = offset_y
        self.geometry_calls = []
        self.attached_calls = []
        self.source_kinds = []

    def verticalScrollBar(self):
        return self._scrollbar

    def viewport(self):
        return self._viewport

    def mapTo(self, parent, point):
        return QPoint(point.x(), point.y() + self._offset_y)

    def apply_window_geometry(self, leading_padding, total_extent):
        self.geometry_calls.append((leading_padding, total_extent))

    def set_updates_attached(self, attached):
        self.attached_calls.append(attached)

    def on_scroll_source_changed(self, kind):
        self.source_kinds.append(kind)


class FakeContent:
    def __init__(self, *descendants):
        self._descendants = descendants

    def isAncestorOf(self, widget):
        return widget in self._descendants


class FakeScrollArea:
    def __init__(self, content=None, value=0, width=300, height=200):
        self._scrollbar = FakeScrollBar(value)
        self._viewport = FakeViewport(width, height)
        self._content = content
        self.destroyed = FakeSignal()
        self.deleted = False

    def delete(self):
        self.deleted = True
        self.destroyed.emit(self)

    def _check(self):
        if self.deleted:
            raise RuntimeError("Internal C++ object (FakeScrollArea) already deleted.")

    def verticalScrollBar(self):
        self._check()
        return self._scrollbar

    def viewport(self):
        self._check()
        return self._viewport

    def widget(self):
        return self._content


class ManualScheduler:
    def __init__(self, callback):
        self.callback = callback
        self.pending = False
        self.disposed = False

    def request(self):
        if self.disposed or self.pending:
            return False
        self.pending = True
        return True

    def flush(self):
        if not self.pending:
            return False
        self.pending = False
        self.callback()
        return True

    def cancel(self):
        self.pending = False

    def dispose(self):
        self.cancel()
        self.disposed = True


def run_frames(engine, limit=100):
    frames = 0
    while engine._scheduler.flush():
        frames += 1
        assert frames < limit, "window never settled"
    return frames


def make_engine(*, items=None, columns=1, buffer=0, host=None, surface=None):
    host = host or FakeHost()
    surface = surface or FakeSurface(columns=columns)
    engine = VirtualScrollEngine(host, surface, scheduler_factory=ManualScheduler)
    events = []
    engine.notifier.connect("update", surface.render)
    for event in ("update", "start", "end", "change"):
        engine.notifier.connect(event, lambda payload, event=event: events.append((event, payload)))
    if buffer:
        engine.set_buffer_amount(buffer)
    engine.set_items(list(range(100)) if items is None else items)
    return engine, host, surface, events


def names(events):
    return [event for event, _ in events]


def test_startup_converges_without_range_events():
    engine, host, _, events = make_engine()

    frames = run_frames(engine)

    assert frames == 4
    assert engine.stabilizer.stabilizing is False
    assert (engine.state.start, engine.state.end) == (0, 5)
    assert names(events) == ["update", "update"]
    assert engine.viewport_items == [0, 1, 2, 3, 4]
    assert host.geometry_calls[-1] == (0, 5000)


def test_scroll_emits_update_then_edges_then_change():
    engine, host, _, events = make_engine()
    run_frames(engine)
    events.clear()

    host.verticalScrollBar().setValue(500)
    engine.refresh(500)
    run_frames(engine)

    assert events == [
        ("update", [10, 11, 12, 13, 14]),
        ("start", {"start": 10, "end": 15}),
        ("end", {"start": 10, "end": 15}),
        ("change", {"start": 10, "end": 15}),
    ]


def test_repeated_passes_are_idempotent():
    engine, _, _, events = make_engine()
    run_frames(engine)
    events.clear()

    for _ in range(3):
        engine.refresh()
        run_frames(engine)

    assert events == []


def test_buffered_window_and_padding():
    engine, host, _, _ = make_engine(buffer=2)
    run_frames(engine)

    host.verticalScrollBar().setValue(500)
    engine.refresh()
    run_frames(engine)

    assert (engine.state.start, engine.state.end) == (8, 17)
    assert engine.state.leading_padding == 400
    assert host.geometry_calls[-1] == (400, 5000)


def test_grid_startup_settles_on_probed_columns():
    engine, host, _, events = make_engine(items=list(range(99)), columns=3)
    run_frames(engine)

    assert (engine.state.start, engine.state.end) == (0, 15)
    assert "change" not in names(events)

    events.clear()
    host.verticalScrollBar().setValue(825)
    engine.refresh()
    run_frames(engine)

    assert (engine.state.start, engine.state.end) == (48, 66)
    assert names(events) == ["update", "start", "end", "change"]


def test_empty_collection_never_reports_edges():
    engine, _, _, events = make_engine(items=[])
    run_frames(engine)
    engine.refresh()
    run_frames(engine)

    assert (engine.state.start, engine.state.end) == (0, 0)
    assert events == [("update", [])]


def test_filling_empty_collection_restabilizes():
    engine, _, _, events = make_engine(items=[])
    run_frames(engine)
    events.clear()

    engine.set_items(list(range(100)))
    assert engine.stabilizer.stabilizing is True
    run_frames(engine)

    assert engine.stabilizer.stabilizing is False
    assert set(names(events)) == {"update"}
    assert (engine.state.start, engine.state.end) == (0, 5)


def test_replacing_non_empty_collection_stays_steady():
    engine, _, _, events = make_engine()
    run_frames(engine)
    events.clear()

    engine.set_items(list("abcdefghij"))
    assert engine.stabilizer.stabilizing is False
    run_frames(engine)

    assert events[0] == ("update", ["a", "b", "c", "d", "e"])
    assert names(events) == ["update", "start", "end", "change"]


def test_suspended_updates_skip_passes_until_resumed():
    engine, host, _, events = make_engine()
    run_frames(engine)
    events.clear()

    engine.set_updates_active(False)
    host.verticalScrollBar().setValue(500)
    assert engine.refresh() is False
    assert run_frames(engine) == 0
    assert host.attached_calls == [False]

    engine.set_updates_active(True)
    assert engine.stabilizer.stabilizing is True
    run_frames(engine)

    assert host.attached_calls == [False, True]
    assert (engine.state.start, engine.state.end) == (10, 15)
    assert set(names(events)) == {"update"}


def test_scroll_into_brings_item_into_window():
    items = [object() for _ in range(100)]
    engine, host, _, _ = make_engine(items=items, buffer=2)
    run_frames(engine)

    assert engine.scroll_into(items[40]) is True
    assert host.verticalScrollBar().value() == 1900
    run_frames(engine)

    assert engine.state.contains(40)


def test_scroll_into_absent_item_is_noop():
    engine, host, _, _ = make_engine()
    run_frames(engine)

    assert engine.scroll_into(object()) is False
    assert host.verticalScrollBar().value() == 0
    assert engine._scheduler.pending is False


def test_scroll_into_uses_identity():
    items = [[1], [1], [1]]
    engine, _, _, _ = make_engine(items=items)
    run_frames(engine)

    assert engine.scroll_into([1]) is False


def test_external_source_swaps_listeners_and_corrects_offset():
    host = FakeHost(offset_y=300)
    engine, _, _, _ = make_engine(host=host)
    run_frames(engine)
    area = FakeScrollArea(content=FakeContent(host), value=800)

    engine.bind_scroll_source(area)

    assert host.verticalScrollBar().valueChanged.callbacks == []
    assert host.viewport().filters == []
    assert len(area.verticalScrollBar().valueChanged.callbacks) == 1
    assert host.source_kinds == ["self", "element"]
    assert engine.offset_correction() == 300

    run_frames(engine)
    assert (engine.state.start, engine.state.end) == (10, 15)

    engine.bind_scroll_source(area)
    assert host.source_kinds == ["self", "element"]


def test_invalid_source_falls_back_to_self():
    engine, host, _, _ = make_engine()
    engine.bind_scroll_source(FakeScrollArea())

    engine.bind_scroll_source("not a widget")

    assert engine.scroll_source.kind == "self"
    assert len(host.verticalScrollBar().valueChanged.callbacks) == 1


def test_dispose_unbinds_and_silences_engine():
    engine, host, _, events = make_engine()
    run_frames(engine)
    events.clear()

    engine.dispose()
    host.verticalScrollBar().setValue(500)

    assert engine.refresh() is False
    assert host.verticalScrollBar().valueChanged.callbacks == []
    assert host.viewport().filters == []
    engine.run_pass()
    assert events == []


def test_watchdog_ends_oscillating_startup():
    heights = iter([50, 100] * 100)
    surface = FakeSurface(item_height=lambda: next(heights))
    engine, _, _, events = make_engine(surface=surface)
    engine.stabilizer.max_passes = 5

    run_frames(engine)

    assert engine.stabilizer.stabilizing is False
    assert "change" in names(events)


def test_destroyed_external_source_falls_back_to_self():
    host = FakeHost(offset_y=300)
    engine, _, _, _ = make_engine(host=host)
    run_frames(engine)
    area = FakeScrollArea(content=FakeContent(host), value=800)
    engine.bind_scroll_source(area)
    run_frames(engine)
    assert (engine.state.start, engine.state.end) == (10, 15)

    area.delete()

    assert engine.scroll_source.kind == "self"
    assert host.source_kinds == ["self", "element", "self"]
    assert len(host.verticalScrollBar().valueChanged.callbacks) == 1
    run_frames(engine)
    assert (engine.state.start, engine.state.end) == (0, 5)

    engine.bind_scroll_source(None)
    engine.dispose()
    assert host.verticalScrollBar().valueChanged.callbacks == []
    assert host.viewport().filters == []


def test_swap_and_dispose_after_pending_pass_on_deleted_source():
    engine, host, _, _ = make_engine()
    run_frames(engine)
    area = FakeScrollArea(value=800)
    engine.bind_scroll_source(area)
    assert engine._scheduler.pending is True

    area.delete()
    run_frames(engine)
    engine.bind_scroll_source(None)
    engine.dispose()

    assert engine.disposed is True
    assert host.verticalScrollBar().valueChanged.callbacks == []


def test_replaced_source_stops_watching_old_area_lifetime():
    engine, _, _, _ = make_engine()
    area = FakeScrollArea()
    engine.bind_scroll_source(area)
    assert len(area.destroyed.callbacks) == 1

    engine.bind_scroll_source(None)
    assert area.destroyed.callbacks == []

    area.delete()
    assert engine.scroll_source.kind == "self"


def test_destroyed_host_disposes_engine():
    host = FakeHost()
    host.destroyed = FakeSignal()
    engine, _, _, events = make_engine(host=host)
    run_frames(engine)
    area = FakeScrollArea()
    engine.bind_scroll_source(area)

    host.destroyed.emit(host)

    assert engine.disposed is True
    assert engine.refresh() is False
    assert area.destroyed.callbacks == []
    assert area.verticalScrollBar().valueChanged.callbacks == []
    assert engine.scroll_into(0) is False
