import math

from vscroll.utils.flow_log import log_flow


def index_of(items, item) -> int:
    """Position of ``item`` in ``items`` by identity, or -1."""
    for index, candidate in enumerate(items or ()):
        if candidate is item:
            return index
    return -1


def target_offset(*, index: int, items_per_row: int, item_height: float,
                  buffer_amount: int, offset_correction: float = 0) -> float:
    """Scroll offset that puts the row holding ``index`` at the top of the window."""
    return (
        math.floor(index / items_per_row) * item_height
        - item_height * min(index, buffer_amount)
        + offset_correction
    )


class ScrollNavigator:
    """Programmatic scroll-to-item for VirtualScrollEngine."""

    def __init__(self, engine):
        self._engine = engine

    def scroll_into(self, item) -> bool:
        engine = self._engine
        if engine.disposed:
            return False
        items = engine.items
        index = index_of(items, item)
        if index < 0 or index >= len(items):
            return False

        dimensions = engine.measure()
        if not (math.isfinite(dimensions.item_height) and math.isfinite(dimensions.items_per_row)):
            return False
        offset = target_offset(
            index=index,
            items_per_row=dimensions.items_per_row,
            item_height=dimensions.item_height,
            buffer_amount=engine.buffer_amount,
            offset_correction=engine.offset_correction(),
        )
        log_flow("NAV", f"Scroll into index={index} offset={offset:.0f}")
        engine.scroll_source.set_offset(max(0.0, offset))
        engine.refresh()
        return True
