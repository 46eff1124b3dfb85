from PySide6.QtCore import QSettings, Signal

# Defaults for settings that are accessed from multiple places.
DEFAULT_SETTINGS = {
    'virtual_scroll_buffer_amount': 0,  # Extra items rendered before start and after end
    'virtual_scroll_scrollbar_width': 0,  # Subtracted from the measured viewport width
    'virtual_scroll_scrollbar_height': 0,  # Subtracted from the measured viewport height
    'virtual_scroll_frame_interval_ms': 16,  # One paint frame at 60 Hz
    'virtual_scroll_max_stabilizing_passes': 50,  # Watchdog for the startup loop
    'minimal_trace_logs': True,  # Only WARN/INFO flow logs when enabled
    'demo_item_count': 100000,
    'demo_item_width': 120,
    'demo_item_height': 48,
}


class Settings(QSettings):
    # Signal that shows that the setting with the given string was changes
    change = Signal(str, object, name='settingsChanged')

    def __init__(self):
        super().__init__('vscroll', 'vscroll')

    def setValue(self, key, value):
        super().setValue(key, value)
        self.change.emit(key, value)

# Common shared instance to ensure the Signal is also shared
settings = Settings()


def _int_setting(key: str, minimum: int, maximum: int) -> int:
    default = DEFAULT_SETTINGS[key]
    try:
        value = int(settings.value(key, default, type=int))
    except Exception:
        value = default
    return max(minimum, min(value, maximum))


def get_buffer_amount() -> int:
    return _int_setting('virtual_scroll_buffer_amount', 0, 10000)


def get_scrollbar_allowance() -> tuple[int, int]:
    return (_int_setting('virtual_scroll_scrollbar_width', 0, 1000),
            _int_setting('virtual_scroll_scrollbar_height', 0, 1000))


def get_frame_interval_ms() -> int:
    return _int_setting('virtual_scroll_frame_interval_ms', 0, 1000)


def get_max_stabilizing_passes() -> int:
    return _int_setting('virtual_scroll_max_stabilizing_passes', 2, 10000)
