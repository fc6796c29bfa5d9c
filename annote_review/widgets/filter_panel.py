# annote_review/widgets/filter_panel.py
from __future__ import annotations

from typing import Dict, Optional

from PyQt5.QtCore import Qt, pyqtSignal
from PyQt5.QtGui import QBrush, QColor
from PyQt5.QtWidgets import (
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QVBoxLayout,
    QWidget,
)

from ..colors import string_to_rgba
from ..filters import FilterState


class FilterPanel(QGroupBox):
    """
    Two checklists: Classifiers and Models. Names are colored by their own string color.

    Emits:
      - classifier_toggled(str, bool)
      - model_toggled(str, bool)
    The panel does not mutate FilterState itself; the owner applies the toggle.
    """
    classifier_toggled = pyqtSignal(str, bool)
    model_toggled = pyqtSignal(str, bool)

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__("Filters", parent)
        self._block = False
        self._build_ui()

    # ---------------- UI ----------------

    def _build_ui(self):
        layout = QHBoxLayout()
        layout.setContentsMargins(6, 6, 6, 6)
        layout.setSpacing(8)
        self.setLayout(layout)

        col_c = QVBoxLayout()
        col_c.addWidget(QLabel("Classifiers"))
        self.list_classifiers = QListWidget()
        self.list_classifiers.itemChanged.connect(lambda it: self._on_item_changed(it, self.classifier_toggled))
        col_c.addWidget(self.list_classifiers, stretch=1)
        layout.addLayout(col_c, stretch=1)

        col_m = QVBoxLayout()
        self.models_label = QLabel("Models")
        col_m.addWidget(self.models_label)
        self.list_models = QListWidget()
        self.list_models.itemChanged.connect(lambda it: self._on_item_changed(it, self.model_toggled))
        col_m.addWidget(self.list_models, stretch=1)
        layout.addLayout(col_m, stretch=1)

    # ---------------- Public API ----------------

    def set_state(self, state: Optional[FilterState]) -> None:
        self._fill(self.list_classifiers, state.classifier_enabled if state else {})
        models = state.model_enabled if state else {}
        self._fill(self.list_models, models)
        self.list_models.setVisible(bool(models))
        self.models_label.setVisible(bool(models))

    # ---------------- Internals ----------------

    def _fill(self, widget: QListWidget, flags: Dict[str, bool]) -> None:
        self._block = True
        try:
            widget.clear()
            for name, enabled in flags.items():
                c = string_to_rgba(name)
                it = QListWidgetItem(name)
                it.setFlags(Qt.ItemIsEnabled | Qt.ItemIsUserCheckable)
                it.setCheckState(Qt.Checked if enabled else Qt.Unchecked)
                it.setForeground(QBrush(QColor(c.r, c.g, c.b)))
                it.setData(Qt.UserRole, name)
                widget.addItem(it)
        finally:
            self._block = False

    def _on_item_changed(self, item: QListWidgetItem, signal) -> None:
        if self._block:
            return
        signal.emit(str(item.data(Qt.UserRole)), item.checkState() == Qt.Checked)
