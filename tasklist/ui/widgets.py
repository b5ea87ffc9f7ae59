from __future__ import annotations

from PySide6.QtCore import QSize, Qt
from PySide6.QtWidgets import (
    QAbstractItemView,
    QCheckBox,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QSizePolicy,
    QVBoxLayout,
    QWidget,
)

from tasklist.domain.entities import AnnotatedTask
from tasklist.domain.enums import PriorityLevel, StatusFilter

PRIORITY_OPTIONS = [
    ("Lowest", PriorityLevel.LOWEST.value),
    ("Low", PriorityLevel.LOW.value),
    ("Medium", PriorityLevel.MEDIUM.value),
    ("High", PriorityLevel.HIGH.value),
    ("Critical", PriorityLevel.CRITICAL.value),
]

PRIORITY_COLORS = {
    1: "#7CC4A1",
    2: "#9CC47C",
    3: "#E0B25B",
    4: "#E57B63",
    5: "#E24A4A",
}

STATUS_FILTER_OPTIONS = [
    ("All", StatusFilter.ALL),
    ("Incomplete", StatusFilter.INCOMPLETE),
    ("Completed", StatusFilter.COMPLETED),
]

PRIORITY_FILTER_OPTIONS = [("All priorities", None), *PRIORITY_OPTIONS]


def priority_label(priority: int) -> str:
    return next((label for label, value in PRIORITY_OPTIONS if value == priority), "Unknown")


class TaskItemWidget(QWidget):
    def __init__(self, item: AnnotatedTask, on_toggle):
        super().__init__()
        self.task = item.task
        self._on_toggle = on_toggle
        task = item.task

        self.setObjectName("TaskCard")
        self.setAttribute(Qt.WA_StyledBackground, True)
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Fixed)
        self.setMinimumHeight(64)
        self.setProperty("completed", task.completed)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(12, 8, 12, 8)
        layout.setSpacing(4)

        self.done_check = QCheckBox()
        self.done_check.setChecked(task.completed)
        self.done_check.setToolTip("Mark as done" if not task.completed else "Mark as not done")
        self.done_check.toggled.connect(self._handle_toggle)

        title = QLabel(task.title)
        title.setProperty("class", "task-title")
        title.setWordWrap(True)
        title.setMinimumWidth(0)
        title.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Preferred)
        if task.completed:
            font = title.font()
            font.setStrikeOut(True)
            title.setFont(font)

        meta_parts = [f"Deadline: {task.deadline.strftime('%d.%m.%Y')}"]
        if item.overdue:
            meta_parts.append("Overdue")
        elif item.due_today:
            meta_parts.append("Due today")
        if task.completed:
            meta_parts.append("Done")

        meta = QLabel(" | ".join(meta_parts))
        meta.setProperty("class", "task-meta")
        meta.setWordWrap(True)
        meta.setMinimumWidth(0)
        meta.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Preferred)
        if item.overdue:
            meta.setStyleSheet("color: #E24A4A;")
        elif item.due_today:
            meta.setStyleSheet("color: #E0B25B;")

        priority = QLabel(priority_label(task.priority))
        priority.setProperty("class", "task-priority")
        priority.setStyleSheet(
            f"background-color: {PRIORITY_COLORS.get(task.priority, '#9CA3AF')};"
        )
        priority.setSizePolicy(QSizePolicy.Fixed, QSizePolicy.Fixed)

        header = QHBoxLayout()
        header.setSpacing(8)
        header.addWidget(self.done_check, 0, Qt.AlignTop)
        header.addWidget(title, 1)
        header.addWidget(priority, 0, Qt.AlignTop)

        layout.addLayout(header)
        layout.addWidget(meta)

    def _handle_toggle(self, checked: bool) -> None:
        self._on_toggle(self.task.id, checked)

    def set_selected(self, selected: bool) -> None:
        self.setProperty("selected", selected)
        self.style().unpolish(self)
        self.style().polish(self)


class TaskListWidget(QListWidget):
    def __init__(self, parent=None):
        super().__init__(parent)
        self._h_margin = 12
        self._v_margin = 8
        self.setSelectionMode(QAbstractItemView.SingleSelection)
        self.setEditTriggers(QAbstractItemView.NoEditTriggers)
        self.setHorizontalScrollBarPolicy(Qt.ScrollBarAlwaysOff)
        self._update_viewport_margins()

    def resizeEvent(self, event) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        self.sync_item_sizes()

    def _update_viewport_margins(self) -> None:
        scrollbar_width = self.verticalScrollBar().width() or self.verticalScrollBar().sizeHint().width()
        right_margin = self._h_margin + (scrollbar_width if self.verticalScrollBar().isVisible() else 0)
        self.setViewportMargins(self._h_margin, self._v_margin, right_margin, self._v_margin)

    def sync_item_sizes(self) -> None:
        self._update_viewport_margins()
        viewport_width = self.viewport().width()
        for index in range(self.count()):
            item = self.item(index)
            widget = self.itemWidget(item)
            if widget:
                widget.setMinimumWidth(viewport_width)
                widget.setMaximumWidth(viewport_width)
                widget.adjustSize()
                hint = widget.sizeHint()
                item.setSizeHint(QSize(viewport_width, hint.height()))
                widget.resize(viewport_width, hint.height())
