from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path

from PySide6.QtCore import QDate, Qt, QTimer
from PySide6.QtGui import QKeySequence, QShortcut
from PySide6.QtWidgets import (
    QComboBox,
    QDateEdit,
    QFileDialog,
    QFrame,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidgetItem,
    QMessageBox,
    QPushButton,
    QSplitter,
    QTextEdit,
    QVBoxLayout,
    QWidget,
)

from tasklist.domain.entities import TaskEntity
from tasklist.domain.enums import DEFAULT_PRIORITY
from tasklist.domain.errors import NotFoundError, PersistenceError, ValidationError
from tasklist.domain.filters import FilterState
from tasklist.infra.export import export_csv, import_csv
from tasklist.services.task_store import TaskStore

from .widgets import (
    PRIORITY_FILTER_OPTIONS,
    PRIORITY_OPTIONS,
    STATUS_FILTER_OPTIONS,
    TaskItemWidget,
    TaskListWidget,
)

logger = logging.getLogger(__name__)

STATUS_MESSAGE_MS = 3000


class MainWindow(QWidget):
    def __init__(self, store: TaskStore):
        super().__init__()
        self.setWindowTitle("Task List")
        self.resize(1100, 700)

        self.store = store
        self.filters = FilterState()
        self.current_task_id: int | None = None

        main_layout = QHBoxLayout(self)
        main_layout.setContentsMargins(12, 12, 12, 12)

        splitter = QSplitter(Qt.Horizontal)
        main_layout.addWidget(splitter)

        self.center = self._build_center()
        self.detail = self._build_detail_panel()

        splitter.addWidget(self.center)
        splitter.addWidget(self.detail)
        splitter.setStretchFactor(0, 2)
        splitter.setStretchFactor(1, 1)
        splitter.setSizes([680, 420])

        self._status_timer = QTimer(self)
        self._status_timer.setSingleShot(True)
        self._status_timer.timeout.connect(lambda: self.status_label.setText(""))

        self.refresh_tasks()
        self.new_task()
        self._show_reminders()

        QShortcut(QKeySequence("Ctrl+N"), self, self.new_task)
        QShortcut(QKeySequence("Ctrl+S"), self, self.save_task)

    def _build_center(self) -> QWidget:
        frame = QFrame()
        frame.setObjectName("CenterPanel")
        layout = QVBoxLayout(frame)
        layout.setContentsMargins(12, 12, 12, 12)
        layout.setSpacing(12)

        header = QHBoxLayout()
        header_title = QLabel("My tasks")
        header_title.setProperty("class", "panel-title")
        self.stats_label = QLabel("")
        self.stats_label.setProperty("class", "stats-badge")
        header.addWidget(header_title)
        header.addStretch()
        header.addWidget(self.stats_label)

        action_bar = QFrame()
        action_bar.setObjectName("ActionBar")
        action_layout = QHBoxLayout(action_bar)
        action_layout.setContentsMargins(12, 10, 12, 10)
        action_layout.setSpacing(8)

        self.status_filter_combo = QComboBox()
        for label, value in STATUS_FILTER_OPTIONS:
            self.status_filter_combo.addItem(label, value)
        self.status_filter_combo.currentIndexChanged.connect(self.on_filter_change)

        self.priority_filter_combo = QComboBox()
        for label, value in PRIORITY_FILTER_OPTIONS:
            self.priority_filter_combo.addItem(label, value)
        self.priority_filter_combo.currentIndexChanged.connect(self.on_filter_change)

        add_button = QPushButton("New task")
        add_button.clicked.connect(self.new_task)

        export_csv_button = QPushButton("Export CSV")
        export_csv_button.setProperty("variant", "ghost")
        export_csv_button.clicked.connect(self.export_csv)

        import_csv_button = QPushButton("Import CSV")
        import_csv_button.setProperty("variant", "ghost")
        import_csv_button.clicked.connect(self.import_csv)

        action_layout.addWidget(self.status_filter_combo)
        action_layout.addWidget(self.priority_filter_combo)
        action_layout.addStretch()
        action_layout.addWidget(add_button)
        action_layout.addWidget(export_csv_button)
        action_layout.addWidget(import_csv_button)

        self.task_list = TaskListWidget()
        self.task_list.setObjectName("TaskList")
        self.task_list.setSpacing(10)
        self.task_list.currentItemChanged.connect(self.on_task_selected)

        self.empty_label = QLabel("No tasks match the current filters.")
        self.empty_label.setAlignment(Qt.AlignCenter)
        self.empty_label.setVisible(False)

        layout.addLayout(header)
        layout.addWidget(action_bar)
        layout.addWidget(self.task_list)
        layout.addWidget(self.empty_label)

        return frame

    def _build_detail_panel(self) -> QWidget:
        frame = QFrame()
        frame.setObjectName("DetailPanel")
        layout = QVBoxLayout(frame)
        layout.setContentsMargins(12, 12, 12, 12)
        layout.setSpacing(8)

        self.form_title = QLabel("New task")
        self.form_title.setProperty("class", "panel-title")

        self.title_input = QLineEdit()
        self.title_input.setPlaceholderText("Title")

        self.description_input = QTextEdit()
        self.description_input.setObjectName("DescriptionInput")
        self.description_input.setPlaceholderText("Description")
        self.description_input.setMinimumHeight(120)

        deadline_label = QLabel("Deadline")
        deadline_label.setProperty("class", "section-title")
        self.deadline_input = QDateEdit()
        self.deadline_input.setCalendarPopup(True)
        self.deadline_input.setDisplayFormat("dd.MM.yyyy")
        self.deadline_input.setDate(QDate.currentDate())

        priority_label = QLabel("Priority")
        priority_label.setProperty("class", "section-title")
        self.priority_combo = QComboBox()
        for label, value in PRIORITY_OPTIONS:
            self.priority_combo.addItem(label, value)

        buttons = QHBoxLayout()
        self.save_button = QPushButton("Add task")
        self.save_button.clicked.connect(self.save_task)

        self.done_button = QPushButton("Mark as done")
        self.done_button.setProperty("variant", "secondary")
        self.done_button.clicked.connect(self.toggle_completed)

        self.delete_button = QPushButton("Delete")
        self.delete_button.setProperty("variant", "danger")
        self.delete_button.clicked.connect(self.delete_task)

        self.cancel_button = QPushButton("Cancel edit")
        self.cancel_button.setProperty("variant", "ghost")
        self.cancel_button.clicked.connect(self.new_task)

        buttons.addWidget(self.save_button)
        buttons.addWidget(self.done_button)
        buttons.addWidget(self.delete_button)
        buttons.addWidget(self.cancel_button)

        self.status_label = QLabel("")
        self.status_label.setProperty("class", "stats")
        self.status_label.setWordWrap(True)

        layout.addWidget(self.form_title)
        layout.addWidget(self.title_input)
        layout.addWidget(self.description_input)
        layout.addWidget(deadline_label)
        layout.addWidget(self.deadline_input)
        layout.addWidget(priority_label)
        layout.addWidget(self.priority_combo)
        layout.addLayout(buttons)
        layout.addWidget(self.status_label)
        layout.addStretch()

        return frame

    def refresh_tasks(self) -> None:
        view = self.store.compute_view(self.filters)

        self.task_list.blockSignals(True)
        self.task_list.clear()
        for annotated in view.tasks:
            item = QListWidgetItem()
            item.setData(Qt.UserRole, annotated.task.id)
            widget = TaskItemWidget(annotated, self.on_task_toggled)
            self.task_list.addItem(item)
            self.task_list.setItemWidget(item, widget)
            item.setSizeHint(widget.sizeHint())
            if annotated.task.id == self.current_task_id:
                self.task_list.setCurrentItem(item)
                widget.set_selected(True)
        self.task_list.blockSignals(False)

        self.empty_label.setVisible(view.visible_count == 0)
        self.stats_label.setText(
            f"Shown: {view.visible_count} • Total: {view.total_count} • "
            f"Done: {view.completed_count}"
        )
        self.task_list.sync_item_sizes()

    def on_filter_change(self) -> None:
        self.filters = replace(
            self.filters,
            status=self.status_filter_combo.currentData(),
            priority=self.priority_filter_combo.currentData(),
        )
        self.refresh_tasks()

    def on_task_selected(
        self,
        current: QListWidgetItem,
        previous: QListWidgetItem | None = None,
    ) -> None:
        if previous:
            self._set_task_item_selected(previous, False)
        if not current:
            return
        self._set_task_item_selected(current, True)
        task = self._get_task_from_list(current.data(Qt.UserRole))
        if task:
            self.current_task_id = task.id
            self.populate_form(task)

    def on_task_toggled(self, task_id: int, completed: bool) -> None:
        try:
            self.store.set_completed(task_id, completed)
        except NotFoundError:
            self._abandon_edit(task_id)
            return
        except PersistenceError as exc:
            self._show_persistence_error(exc)
        else:
            self._show_status("Task completed." if completed else "Task reopened.")
        QTimer.singleShot(0, self._refresh_after_toggle)

    def _refresh_after_toggle(self) -> None:
        self.refresh_tasks()
        if self.current_task_id is not None:
            self._sync_done_button(self._current_task())

    def _set_task_item_selected(self, item: QListWidgetItem, selected: bool) -> None:
        widget = self.task_list.itemWidget(item)
        if isinstance(widget, TaskItemWidget):
            widget.set_selected(selected)

    def _get_task_from_list(self, task_id: int) -> TaskEntity | None:
        for index in range(self.task_list.count()):
            item = self.task_list.item(index)
            if item.data(Qt.UserRole) == task_id:
                widget = self.task_list.itemWidget(item)
                if isinstance(widget, TaskItemWidget):
                    return widget.task
        return None

    def _current_task(self) -> TaskEntity | None:
        if self.current_task_id is None:
            return None
        try:
            return self.store.get_task(self.current_task_id)
        except NotFoundError:
            return None

    def populate_form(self, task: TaskEntity) -> None:
        self.form_title.setText(f"Edit task #{task.id}")
        self.save_button.setText("Save changes")
        self.title_input.setText(task.title)
        self.description_input.setPlainText(task.description)
        self.deadline_input.setDate(QDate(task.deadline.year, task.deadline.month, task.deadline.day))
        priority_index = self.priority_combo.findData(task.priority)
        if priority_index >= 0:
            self.priority_combo.setCurrentIndex(priority_index)
        self.delete_button.setEnabled(True)
        self.cancel_button.setEnabled(True)
        self._sync_done_button(task)

    def clear_form(self) -> None:
        self.form_title.setText("New task")
        self.save_button.setText("Add task")
        self.title_input.clear()
        self.description_input.clear()
        self.deadline_input.setDate(QDate.currentDate())
        self.priority_combo.setCurrentIndex(self.priority_combo.findData(int(DEFAULT_PRIORITY)))
        self.delete_button.setEnabled(False)
        self.cancel_button.setEnabled(False)
        self._sync_done_button(None)

    def _sync_done_button(self, task: TaskEntity | None) -> None:
        if task is None:
            self.done_button.setEnabled(False)
            self.done_button.setText("Mark as done")
            self.done_button.setProperty("variant", "secondary")
        elif task.completed:
            self.done_button.setEnabled(True)
            self.done_button.setText("Reopen")
            self.done_button.setProperty("variant", "warning")
        else:
            self.done_button.setEnabled(True)
            self.done_button.setText("Mark as done")
            self.done_button.setProperty("variant", "secondary")

        self.done_button.style().unpolish(self.done_button)
        self.done_button.style().polish(self.done_button)

    def new_task(self) -> None:
        self.current_task_id = None
        self.task_list.clearSelection()
        self.task_list.setCurrentItem(None)
        self.clear_form()
        self.title_input.setFocus()

    def save_task(self) -> None:
        title = self.title_input.text()
        description = self.description_input.toPlainText()
        deadline = self.deadline_input.date().toPython()
        priority = self.priority_combo.currentData()

        try:
            if self.current_task_id is None:
                task = self.store.create(title, description, deadline, priority)
                self._show_status("Task added.")
            else:
                task = self.store.update(self.current_task_id, title, description, deadline, priority)
                self._show_status("Changes saved.")
        except ValidationError as exc:
            QMessageBox.warning(self, "Check the form", exc.message)
            return
        except NotFoundError as exc:
            self._abandon_edit(exc.task_id)
            return
        except PersistenceError as exc:
            self._show_persistence_error(exc)
            return

        self.current_task_id = task.id
        self.refresh_tasks()
        self.populate_form(task)

    def toggle_completed(self) -> None:
        if self.current_task_id is None:
            return
        try:
            task = self.store.toggle_completed(self.current_task_id)
        except NotFoundError as exc:
            self._abandon_edit(exc.task_id)
            return
        except PersistenceError as exc:
            self._show_persistence_error(exc)
            return
        self._show_status("Task completed." if task.completed else "Task reopened.")
        self.refresh_tasks()
        self._sync_done_button(task)

    def delete_task(self) -> None:
        if self.current_task_id is None:
            return
        confirm = QMessageBox.question(
            self,
            "Confirm",
            "Delete this task permanently?",
        )
        if confirm != QMessageBox.Yes:
            return
        try:
            self.store.delete(self.current_task_id)
        except NotFoundError as exc:
            self._abandon_edit(exc.task_id)
            return
        except PersistenceError as exc:
            self._show_persistence_error(exc)
            return
        self._show_status("Task deleted.")
        self.new_task()
        self.refresh_tasks()

    def export_csv(self) -> None:
        path, _ = QFileDialog.getSaveFileName(
            self,
            "Export CSV",
            str(Path.home() / "tasks.csv"),
            "CSV Files (*.csv)",
        )
        if not path:
            return
        try:
            written = export_csv(self.store.tasks, path)
        except OSError as exc:
            QMessageBox.critical(self, "Export failed", str(exc))
            return
        QMessageBox.information(self, "Done", f"Exported tasks: {written}.")

    def import_csv(self) -> None:
        path, _ = QFileDialog.getOpenFileName(
            self,
            "Import CSV",
            str(Path.home()),
            "CSV Files (*.csv)",
        )
        if not path:
            return
        try:
            result = import_csv(self.store, path)
        except (OSError, UnicodeDecodeError) as exc:
            QMessageBox.critical(self, "Import failed", str(exc))
            return
        except PersistenceError as exc:
            self._show_persistence_error(exc)
            self.refresh_tasks()
            return
        self.refresh_tasks()
        QMessageBox.information(
            self,
            "Done",
            f"Imported tasks: {result.created}. Skipped rows: {result.skipped}.",
        )

    def _abandon_edit(self, task_id: int) -> None:
        logger.warning("Task id=%s disappeared, abandoning edit", task_id)
        self._show_status("That task no longer exists.")
        self.new_task()
        self.refresh_tasks()

    def _show_persistence_error(self, exc: PersistenceError) -> None:
        logger.error("Persistence failure: %s", exc)
        QMessageBox.critical(self, "Storage error", f"Changes could not be saved.\n{exc}")

    def _show_status(self, message: str) -> None:
        self.status_label.setText(message)
        self._status_timer.start(STATUS_MESSAGE_MS)

    def _show_reminders(self) -> None:
        reminders = self.store.list_reminders()
        if not reminders:
            return
        lines = []
        for item in reminders[:5]:
            due_label = "overdue" if item.overdue else "due today"
            lines.append(f"- {item.task.title} ({item.task.deadline.strftime('%d.%m.%Y')}, {due_label})")
        message = "Tasks that need attention:\n" + "\n".join(lines)
        QMessageBox.information(self, "Reminders", message)
