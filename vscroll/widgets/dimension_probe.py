from vscroll.widgets.window_calculator import divide, floor
from vscroll.widgets.window_context import ViewportDimensions


def count_items_per_row(geometries) -> int:
    """Count leading children that share the first child's top offset."""
    top = None
    count = 0
    for rect in geometries:
        if top is not None and rect.y() != top:
            break
        top = rect.y()
        count += 1
    return count


class DimensionProbe:
    """Measures viewport and item footprint from the rendering surface."""

    def __init__(self, surface):
        self._surface = surface

    def _first_child_size(self, view_width, view_height):
        geometries = None
        if hasattr(self._surface, "container_geometries"):
            geometries = self._surface.container_geometries()
        if geometries is None:
            geometries = self._surface.item_geometries()
        for rect in geometries:
            return rect.width(), rect.height()
        # Nothing mounted yet; a viewport-sized item avoids dividing by zero
        # and is corrected on the next pass.
        return view_width, view_height

    def measure(
        self,
        *,
        client_width: float,
        client_height: float,
        scrollbar_width: float = 0,
        scrollbar_height: float = 0,
        item_width: float | None = None,
        item_height: float | None = None,
        scroll_offset: float = 0,
        item_count: int = 0,
        previous_extent: float | None = None,
    ) -> ViewportDimensions:
        view_width = client_width - scrollbar_width
        view_height = client_height - scrollbar_height

        measured_width = measured_height = None
        if item_width is None or item_height is None:
            measured_width, measured_height = self._first_child_size(view_width, view_height)
        child_width = item_width or measured_width
        child_height = item_height or measured_height

        items_per_row = max(1, count_items_per_row(self._surface.item_geometries()))
        items_per_row_calculated = max(1, floor(divide(view_width, child_width)))
        items_per_column = max(1, floor(divide(view_height, child_height)))

        # A single visible row can under-report the grid width because only a
        # partial row is mounted near the end of the collection.
        scroll_top = max(0, scroll_offset)
        if previous_extent is not None and items_per_column == 1:
            projected = floor(divide(scroll_top, previous_extent) * item_count)
            if projected + items_per_row_calculated >= item_count:
                items_per_row = items_per_row_calculated

        return ViewportDimensions(
            item_count=item_count,
            view_width=view_width,
            view_height=view_height,
            item_width=child_width,
            item_height=child_height,
            items_per_row=items_per_row,
            items_per_column=items_per_column,
            items_per_row_calculated=items_per_row_calculated,
        )
