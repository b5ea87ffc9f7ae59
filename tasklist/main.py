from __future__ import annotations

import logging
import sys

from PySide6.QtGui import QColor, QFont, QPalette
from PySide6.QtWidgets import QApplication, QMessageBox, QStyleFactory
from sqlalchemy.exc import SQLAlchemyError

from tasklist.domain.errors import PersistenceError
from tasklist.infra.db import init_db
from tasklist.infra.logging import setup_logging
from tasklist.infra.repository import TaskRepository
from tasklist.infra.storage import SqlKeyValueStore
from tasklist.services.task_store import TaskStore
from tasklist.ui.main_window import MainWindow

logger = logging.getLogger(__name__)


def _apply_dark_palette(app: QApplication) -> None:
    palette = QPalette()
    palette.setColor(QPalette.Window, QColor("#0F172A"))
    palette.setColor(QPalette.WindowText, QColor("#E6EDF3"))
    palette.setColor(QPalette.Base, QColor("#111827"))
    palette.setColor(QPalette.AlternateBase, QColor("#1B2230"))
    palette.setColor(QPalette.Text, QColor("#E6EDF3"))
    palette.setColor(QPalette.Button, QColor("#202A3B"))
    palette.setColor(QPalette.ButtonText, QColor("#E6EDF3"))
    palette.setColor(QPalette.ToolTipBase, QColor("#1B2230"))
    palette.setColor(QPalette.ToolTipText, QColor("#E6EDF3"))
    palette.setColor(QPalette.Highlight, QColor("#2563EB"))
    palette.setColor(QPalette.HighlightedText, QColor("#FFFFFF"))
    app.setPalette(palette)


def build_store() -> TaskStore:
    return TaskStore(TaskRepository(SqlKeyValueStore()))


def main() -> None:
    log_file = setup_logging()
    logger.info("Logging to %s", log_file)
    app = QApplication(sys.argv)
    try:
        init_db()
        store = build_store()
    except (SQLAlchemyError, PersistenceError, OSError) as exc:
        logger.exception("Storage is unavailable")
        QMessageBox.critical(None, "Storage error", str(exc))
        return

    app.setStyle(QStyleFactory.create("Fusion"))
    _apply_dark_palette(app)
    app.setFont(QFont("Segoe UI", 10))

    window = MainWindow(store)
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
