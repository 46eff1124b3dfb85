"""Viewport windowing engine and its collaborators.

Only the Qt-Core-level pieces are re-exported here; the widget classes live in
``virtual_scroll_view``, ``render_surface`` and ``demo_window``.
"""

from .window_context import ViewportDimensions, WindowResult, WindowState
from .window_calculator import calculate_window
from .dimension_probe import DimensionProbe, count_items_per_row
from .scroll_source import (ElementScrollSource, ScrollSource, SelfScrollSource,
                            ViewportScrollSource, resolve_scroll_source)
from .frame_scheduler import FrameScheduler
from .startup_stabilizer import StartupStabilizer
from .window_notifier import WINDOW_EVENTS, WindowNotifier
from .scroll_navigator import ScrollNavigator, target_offset
from .virtual_scroll_engine import VirtualScrollEngine

__all__ = [
    'ViewportDimensions',
    'WindowResult',
    'WindowState',
    'calculate_window',
    'DimensionProbe',
    'count_items_per_row',
    'ScrollSource',
    'SelfScrollSource',
    'ElementScrollSource',
    'ViewportScrollSource',
    'resolve_scroll_source',
    'FrameScheduler',
    'StartupStabilizer',
    'WINDOW_EVENTS',
    'WindowNotifier',
    'ScrollNavigator',
    'target_offset',
    'VirtualScrollEngine',
]
