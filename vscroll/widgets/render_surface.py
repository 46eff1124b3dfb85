from PySide6.QtWidgets import QLabel, QWidget

from vscroll.widgets.flow_layout import FlowLayout


def default_item_widget(item) -> QWidget:
    label = QLabel(str(item))
    label.setStyleSheet('padding: 4px;')
    return label


class RenderSurface(QWidget):
    """Mounts one widget per item of the current window.

    Widgets are produced by ``item_factory(item)`` and arranged by a
    ``FlowLayout``, so a surface wider than one item renders a grid.
    """

    def __init__(self, parent=None, *, item_factory=None, spacing: int = 0):
        super().__init__(parent)
        self._item_factory = item_factory or default_item_widget
        self._layout = FlowLayout(self, margin=0, h_spacing=spacing, v_spacing=spacing)
        self._container = None
        self._mounted = []

    def set_item_factory(self, item_factory):
        self._item_factory = item_factory or default_item_widget

    def set_container(self, widget: QWidget | None):
        """Designate an inner widget whose children define the item size."""
        self._container = widget

    def mounted_widgets(self) -> list[QWidget]:
        return list(self._mounted)

    def render(self, items):
        self._layout.clear()
        self._mounted = []
        for item in items:
            widget = self._item_factory(item)
            self._layout.addWidget(widget)
            self._mounted.append(widget)
        self.relayout()

    def relayout(self):
        width = max(1, self.width())
        height = self._layout.heightForWidth(width) if self._mounted else 0
        self.resize(width, max(0, height))
        self._layout.setGeometry(self.rect())
        for widget in self._mounted:
            widget.show()

    def item_geometries(self):
        return [widget.geometry() for widget in self._mounted]

    def container_geometries(self):
        if self._container is None:
            return None
        return [child.geometry() for child in self._container.findChildren(QWidget)
                if child.parentWidget() is self._container]

    def container_offset(self) -> int:
        if self._container is None:
            return 0
        return self._container.y()
