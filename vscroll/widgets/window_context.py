from dataclasses import dataclass


@dataclass(frozen=True)
class ViewportDimensions:
    """Measurements taken at the start of a single recomputation pass."""

    item_count: int
    view_width: float
    view_height: float
    item_width: float
    item_height: float
    items_per_row: float = 1
    items_per_column: float = 1
    items_per_row_calculated: float = 1


@dataclass(frozen=True)
class WindowResult:
    start: int
    end: int
    leading_padding: float = 0.0
    total_extent: float = 0.0


@dataclass
class WindowState:
    """Last published window, owned by the engine and mutated only inside a pass."""

    start: int = 0
    end: int = 0
    previous_start: int | None = None
    previous_end: int | None = None
    leading_padding: float = 0.0
    total_extent: float | None = None

    def contains(self, index: int) -> bool:
        return self.start <= index < self.end
