# -*- coding: utf-8 -*-
"""shopdesk entrypoint.

Intentionally minimal:
- runtime dependency check
- bootstrap (logging, crash handlers, settings)
- QApplication creation
- show main window
"""
import sys

try:
    from PyQt5.QtWidgets import QMessageBox
except ImportError:  # pragma: no cover - reported by ensure_runtime_deps
    QMessageBox = None


def _report_missing(message: str) -> None:
    if QMessageBox is None:
        print(message, file=sys.stderr)
        return
    from PyQt5.QtWidgets import QApplication

    app = QApplication.instance() or QApplication([])
    QMessageBox.critical(None, "shopdesk - Missing dependencies", message)
    del app


def main() -> None:
    from app.deps import ensure_runtime_deps

    try:
        ensure_runtime_deps()
    except RuntimeError as exc:
        _report_missing(str(exc))
        sys.exit(1)

    from PyQt5.QtWidgets import QApplication, QMessageBox as Box

    from app.bootstrap import bootstrap
    from app.controller import create_main_window
    from infra.settings import repair_user_space

    settings = bootstrap()
    app = QApplication(sys.argv)
    app.setApplicationName("shopdesk")

    if "--repair" in set(sys.argv[1:]):
        repair_user_space()
        Box.information(None, "shopdesk - Repair", "Local settings were reset to defaults.")
        return

    window = create_main_window(settings)
    window.show()
    sys.exit(app.exec_())


if __name__ == "__main__":
    main()
