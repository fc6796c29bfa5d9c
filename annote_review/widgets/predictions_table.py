# annote_review/widgets/predictions_table.py
from __future__ import annotations

from typing import List, Optional

from PyQt5.QtCore import Qt, pyqtSignal
from PyQt5.QtGui import QBrush, QColor
from PyQt5.QtWidgets import (
    QAbstractItemView,
    QPushButton,
    QTableWidget,
    QTableWidgetItem,
    QWidget,
)

from ..listing import TABLE_COLUMNS, ListingRow, first_playing_row

MODEL_COL = 2
SEEK_COL = 5


class PredictionsTable(QTableWidget):
    """
    Read-only listing of the active annotations.

    - Rows follow the current filters, in time order
    - Rows in the current second get a grey background; the first one is scrolled into view
    - Model column is hidden when no annotation carries a model
    - Each row has a Seek button

    Signals:
      - seek_requested(float seconds)
    """
    seek_requested = pyqtSignal(float)

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__(0, len(TABLE_COLUMNS), parent)

        self.setHorizontalHeaderLabels(TABLE_COLUMNS)
        self.horizontalHeader().setStretchLastSection(True)
        self.horizontalHeader().setDefaultSectionSize(120)
        self.verticalHeader().setVisible(False)

        self.setSelectionBehavior(QAbstractItemView.SelectRows)
        self.setSelectionMode(QAbstractItemView.SingleSelection)
        self.setEditTriggers(QAbstractItemView.NoEditTriggers)

        self._rows: List[ListingRow] = []
        self._playing_key: Optional[tuple] = None

    # ---------------- Public API ----------------

    def set_show_model_column(self, show: bool) -> None:
        self.setColumnHidden(MODEL_COL, not show)

    def set_rows(self, rows: List[ListingRow]) -> None:
        self._rows = list(rows or [])
        self.refresh()

    def update_playing(self, rows: List[ListingRow]) -> None:
        """Cheap refresh when only the current second moved."""
        if len(rows) != len(self._rows):
            self.set_rows(rows)
            return
        key = tuple(i for i, r in enumerate(rows) if r.is_playing)
        if key != self._playing_key:
            self._rows = list(rows)
            self._paint_playing()
            self._scroll_to_playing()

    # ---------------- Rendering ----------------

    def refresh(self) -> None:
        self.setUpdatesEnabled(False)
        try:
            self.setRowCount(0)
            self.setRowCount(len(self._rows))
            for row, r in enumerate(self._rows):
                fg = QBrush(QColor(r.color.r, r.color.g, r.color.b))
                values = [r.time_code, r.classifier, r.model, r.confidence, r.media_kind]
                for col, val in enumerate(values):
                    item = QTableWidgetItem(val)
                    item.setToolTip(val)
                    item.setFlags(item.flags() & ~Qt.ItemIsEditable)
                    item.setForeground(fg)
                    self.setItem(row, col, item)

                btn = QPushButton("Seek")
                btn.setCursor(Qt.PointingHandCursor)
                btn.clicked.connect(lambda _checked=False, t=r.annotation.time_seconds: self.seek_requested.emit(t))
                self.setCellWidget(row, SEEK_COL, btn)
        finally:
            self.setUpdatesEnabled(True)
        self._paint_playing()
        self._scroll_to_playing()

    def _paint_playing(self) -> None:
        grey = QBrush(QColor("lightgrey"))
        clear = QBrush()
        for row, r in enumerate(self._rows):
            for col in range(SEEK_COL):
                item = self.item(row, col)
                if item is not None:
                    item.setBackground(grey if r.is_playing else clear)
        self._playing_key = tuple(i for i, r in enumerate(self._rows) if r.is_playing)

    def _scroll_to_playing(self) -> None:
        row = first_playing_row(self._rows)
        if row is None:
            return
        item = self.item(row, 0)
        if item is not None:
            self.scrollToItem(item, QAbstractItemView.PositionAtTop)
