"""Pure index-range math for the virtual scroll window.

All arithmetic follows IEEE float semantics (``x / 0`` is infinite, ``0 / 0``
is NaN) instead of raising, so degenerate layouts flow through to a single
finiteness check and come out as the empty window.
"""

import math

from vscroll.widgets.window_context import ViewportDimensions, WindowResult

SENTINEL = -1


def divide(numerator, denominator) -> float:
    if denominator == 0:
        if numerator == 0 or math.isnan(numerator):
            return math.nan
        return math.copysign(math.inf, numerator)
    return numerator / denominator


def floor(value):
    return math.floor(value) if math.isfinite(value) else value


def is_finite(*values) -> bool:
    return all(math.isfinite(value) for value in values)


def calculate_window(
    *,
    scroll_offset: float,
    offset_correction: float,
    dimensions: ViewportDimensions,
    item_count: int,
    buffer_amount: int,
) -> WindowResult:
    """Map a scroll offset onto the ``[start, end)`` item range to render.

    ``end`` includes one extra row of lookahead below the visible rows, and
    ``start`` is capped so a full screen of rows stays rendered at the bottom
    of the collection. ``leading_padding`` is the offset of the rendered block
    from the top of the virtual content once the buffer pulls ``start``
    earlier.
    """
    per_row = dimensions.items_per_row
    per_column = dimensions.items_per_column
    item_height = dimensions.item_height
    buffer_amount = max(0, int(buffer_amount))

    total_extent = divide(item_height * item_count, per_row)
    if scroll_offset > total_extent:
        scroll_offset = total_extent + offset_correction
    scroll = max(0.0, scroll_offset - offset_correction)
    row_index = divide(divide(scroll, total_extent) * item_count, per_row)

    start = end = SENTINEL
    leading_padding = 0.0
    if is_finite(row_index, per_row, per_column, item_height) and per_row >= 1:
        per_row = int(per_row)
        per_column = int(per_column)
        end = min(item_count, math.ceil(row_index) * per_row + per_row * (per_column + 1))

        max_start_end = end
        remainder = end % per_row
        if remainder:
            max_start_end = end + per_row - remainder
        max_start = max(0, max_start_end - per_column * per_row - per_row)
        start = min(max_start, math.floor(row_index) * per_row)

        leading_padding = (item_height * math.ceil(start / per_row)
                           - item_height * min(start, buffer_amount))

    if end == SENTINEL:
        # Nothing computable: publish the empty window.
        return WindowResult(
            start=0,
            end=0,
            leading_padding=0.0,
            total_extent=total_extent if math.isfinite(total_extent) else 0.0,
        )

    start = max(0, start - buffer_amount)
    end = min(item_count, end + buffer_amount)
    return WindowResult(
        start=start,
        end=end,
        leading_padding=leading_padding,
        total_extent=total_extent,
    )
