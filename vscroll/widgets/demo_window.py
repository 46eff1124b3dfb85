from dataclasses import dataclass

from PySide6.QtCore import Qt, Signal, Slot
from PySide6.QtWidgets import (QCheckBox, QComboBox, QFrame, QHBoxLayout, QLabel,
                               QMainWindow, QPushButton, QScrollArea, QSpinBox,
                               QVBoxLayout, QWidget)

from vscroll.utils.settings import DEFAULT_SETTINGS, settings
from vscroll.widgets.virtual_scroll_view import VirtualScrollView


@dataclass(eq=False)
class DemoItem:
    index: int

    @property
    def label(self) -> str:
        return f'Item {self.index:,}'


class DemoWindow(QMainWindow):
    """Main window showing a virtual scroll view over a large generated list."""

    updates_toggled = Signal(bool)

    def __init__(self, item_count: int | None = None):
        super().__init__()
        self.setWindowTitle('vscroll demo')
        if item_count is None:
            item_count = settings.value('demo_item_count', DEFAULT_SETTINGS['demo_item_count'], type=int)
        self.item_width = settings.value('demo_item_width', DEFAULT_SETTINGS['demo_item_width'], type=int)
        self.item_height = settings.value('demo_item_height', DEFAULT_SETTINGS['demo_item_height'], type=int)
        self.items = [DemoItem(index) for index in range(max(0, int(item_count)))]

        self.view = VirtualScrollView(item_factory=self._create_item_widget, spacing=0)
        self.view.set_update_signal(self.updates_toggled)
        self.view.window_changed.connect(self._on_window_changed)

        # Page mode scrolls this outer area instead of the view itself.
        self.page_area = QScrollArea()
        self.page_area.setWidgetResizable(True)
        self.page_area.setFrameShape(QFrame.Shape.NoFrame)
        page = QWidget()
        page_layout = QVBoxLayout(page)
        page_layout.setContentsMargins(0, 0, 0, 0)
        page_layout.addWidget(self.view)
        self.page_area.setWidget(page)

        self.scroll_to_spin_box = QSpinBox()
        self.scroll_to_spin_box.setRange(0, max(0, len(self.items) - 1))
        scroll_to_button = QPushButton('Scroll to')
        scroll_to_button.clicked.connect(self.scroll_to_selected)

        self.buffer_spin_box = QSpinBox()
        self.buffer_spin_box.setRange(0, 500)
        self.buffer_spin_box.setPrefix('Buffer: ')
        self.buffer_spin_box.setValue(self.view.engine.buffer_amount)
        self.buffer_spin_box.valueChanged.connect(self.view.set_buffer_amount)

        self.live_updates_check_box = QCheckBox('Live updates')
        self.live_updates_check_box.setChecked(True)
        self.live_updates_check_box.toggled.connect(self.updates_toggled.emit)

        self.scroll_mode_combo_box = QComboBox()
        self.scroll_mode_combo_box.addItems(['Scroll self', 'Scroll page'])
        self.scroll_mode_combo_box.currentIndexChanged.connect(self._on_scroll_mode_changed)

        controls = QHBoxLayout()
        controls.addWidget(self.scroll_to_spin_box)
        controls.addWidget(scroll_to_button)
        controls.addWidget(self.buffer_spin_box)
        controls.addWidget(self.live_updates_check_box)
        controls.addWidget(self.scroll_mode_combo_box)
        controls.addStretch()

        central = QWidget()
        layout = QVBoxLayout(central)
        layout.addLayout(controls)
        layout.addWidget(self.page_area)
        self.setCentralWidget(central)

        self.range_label = QLabel()
        self.statusBar().addPermanentWidget(self.range_label)
        self.resize(900, 640)

        self.view.set_items(self.items)

    def _create_item_widget(self, item: DemoItem) -> QWidget:
        label = QLabel(item.label)
        label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        label.setFrameShape(QFrame.Shape.StyledPanel)
        label.setFixedSize(self.item_width, self.item_height)
        return label

    @Slot()
    def scroll_to_selected(self):
        index = self.scroll_to_spin_box.value()
        if 0 <= index < len(self.items):
            self.view.scroll_into(self.items[index])

    @Slot(int)
    def _on_scroll_mode_changed(self, mode_index: int):
        if mode_index == 1:
            self.view.set_scroll_container(self.page_area, page=True)
        else:
            self.view.set_scroll_container(None)

    @Slot(dict)
    def _on_window_changed(self, window: dict):
        self.range_label.setText(
            f"Rendering {window['start']:,}-{window['end']:,} of {len(self.items):,}")

    def closeEvent(self, event):
        self.view.dispose()
        super().closeEvent(event)
