# -*- coding: utf-8 -*-
"""Application UI controller.

Centralizes creation of the main window, the screens and menu actions.
This keeps main.py as a thin entrypoint and reduces coupling to UI composition.

NOTE: This module intentionally contains PyQt5 imports and screen wiring.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from PyQt5.QtWidgets import (
    QAction,
    QHBoxLayout,
    QInputDialog,
    QLabel,
    QMainWindow,
    QStackedWidget,
    QWidget,
)

from app import config
from app.session import SessionContext
from infra.settings import load_settings, update_settings
from screens.categories.category_browser_screen import CategoryBrowserScreen
from screens.product_editor.product_editor_screen import ProductEditorScreen
from services.category_browser import CategoryBrowser
from services.product_editor import ProductEditorSession
from services.resource_client import RestResourceClient
from services.tasks.qt_runner import QtTaskRunner
from shopdesk.version import __version__ as APP_VERSION
from ui.common.error_handler import run_guarded
from ui.common.notifications import QtNotifier
from ui.common.state import restore_geometry, save_geometry
from ui.widgets.sidebar import Sidebar

log = logging.getLogger(__name__)

PAGE_CATEGORIES = 0
PAGE_PRODUCT = 1


class MainWindow(QMainWindow):
    def __init__(self, settings: Optional[Dict[str, Any]] = None):
        super().__init__()
        self._base_title = f"shopdesk {APP_VERSION}"
        self.setWindowTitle(self._base_title)
        self.resize(1200, 800)

        self.settings = settings if settings is not None else load_settings()
        self.context = SessionContext(
            api_token=self.settings.get("api_token"),
            shop_id=self.settings.get("shop_id"),
            shop_slug=self.settings.get("shop_slug"),
        )
        self.client = RestResourceClient(
            self.settings.get("api_base_url") or config.API_BASE_URL,
            self.context,
            timeout=config.REQUEST_TIMEOUT_S,
            variants_page_size=config.VARIANTS_PAGE_SIZE,
        )
        self.runner = QtTaskRunner(self)
        self.notifier = QtNotifier(self, status_bar=self.statusBar)

        self.editor: Optional[ProductEditorScreen] = None
        self._pending_page: Optional[int] = None
        self._close_pending = False

        self.pages = QStackedWidget(self)
        self.categories = CategoryBrowserScreen(self._make_browser, parent=self.pages)
        self._editor_placeholder = QLabel("Open a product from File > Open product...", self.pages)
        self.pages.addWidget(self.categories)
        self.pages.addWidget(self._editor_placeholder)

        self.sidebar = Sidebar([(PAGE_CATEGORIES, "Categories"), (PAGE_PRODUCT, "Product editor")])
        self.sidebar.navigate_requested.connect(self._on_sidebar_navigate)

        central = QWidget()
        lay = QHBoxLayout(central)
        lay.setContentsMargins(0, 0, 0, 0)
        lay.setSpacing(0)
        lay.addWidget(self.sidebar)
        lay.addWidget(self.pages, 1)
        self.setCentralWidget(central)

        self._create_menus()
        self.sidebar.set_active(PAGE_CATEGORIES)
        restore_geometry(self)

    # ------------------------------------------------------------------
    # factories
    # ------------------------------------------------------------------
    def _make_browser(self, **kwargs: Any) -> CategoryBrowser:
        return CategoryBrowser(
            self.client,
            context=self.context,
            runner=self.runner,
            notifier=self.notifier,
            page_size=int(self.settings.get("page_size") or config.DEFAULT_PAGE_SIZE),
            **kwargs,
        )

    def _make_session(self, record_id: str, **kwargs: Any) -> ProductEditorSession:
        return ProductEditorSession(
            self.client,
            record_id,
            runner=self.runner,
            notifier=self.notifier,
            **kwargs,
        )

    # ------------------------------------------------------------------
    # menus
    # ------------------------------------------------------------------
    def _create_menus(self) -> None:
        file_menu = self.menuBar().addMenu("&File")

        open_action = QAction("Open product...", self)
        open_action.setShortcut("Ctrl+O")
        open_action.triggered.connect(lambda: run_guarded(self.open_product_from_menu, parent=self))
        file_menu.addAction(open_action)

        reload_action = QAction("Reload product", self)
        reload_action.setShortcut("F5")
        reload_action.triggered.connect(self._reload_product)
        file_menu.addAction(reload_action)

        file_menu.addSeparator()
        quit_action = QAction("Quit", self)
        quit_action.setShortcut("Ctrl+Q")
        quit_action.triggered.connect(self.close)
        file_menu.addAction(quit_action)

    def open_product_from_menu(self) -> None:
        default = str(self.settings.get("last_product_id") or "")
        record_id, ok = QInputDialog.getText(self, "Open product", "Product id:", text=default)
        if ok and record_id.strip():
            self.open_product(record_id.strip())

    def _reload_product(self) -> None:
        if self.editor is not None:
            self.editor.session.reload()

    # ------------------------------------------------------------------
    # pages
    # ------------------------------------------------------------------
    def open_product(self, record_id: str) -> None:
        if self.editor is not None and not self.editor.can_deactivate(self):
            log.info("opening %s postponed: unsaved changes in the open product", record_id)
            return
        self._dispose_editor()
        editor = ProductEditorScreen(self._make_session, record_id, on_back=self._editor_back, parent=self.pages)
        editor.title_changed.connect(self._on_editor_title)
        editor.close_requested.connect(self._on_editor_left)
        self.editor = editor
        self.pages.insertWidget(PAGE_PRODUCT, editor)
        self._show_page(PAGE_PRODUCT)
        self.settings = update_settings(last_product_id=record_id)

    def _dispose_editor(self) -> None:
        if self.editor is None:
            return
        self.editor.dispose()
        self.pages.removeWidget(self.editor)
        self.editor.deleteLater()
        self.editor = None
        self.sidebar.set_marked(PAGE_PRODUCT, False)
        self.setWindowTitle(self._base_title)

    def _show_page(self, index: int) -> None:
        self.pages.setCurrentIndex(index)
        self.sidebar.set_active(index)
        widget = self.pages.currentWidget()
        activated = getattr(widget, "on_view_activated", None)
        if callable(activated):
            activated("navigation")

    def _on_sidebar_navigate(self, index: int) -> None:
        if index == self.pages.currentIndex():
            return
        if self.pages.currentWidget() is self.editor and self.editor is not None:
            if not self.editor.can_deactivate(self):
                # The guard dialog decides; _on_editor_left finishes the move.
                self._pending_page = index
                self._close_pending = False
                self.sidebar.set_active(self.pages.currentIndex())
                return
        self._show_page(index)

    def _editor_back(self) -> None:
        self._dispose_editor()
        self._show_page(PAGE_CATEGORIES)

    def _on_editor_left(self) -> None:
        if self._close_pending:
            self._close_pending = False
            self.close()
            return
        page = self._pending_page if self._pending_page is not None else PAGE_CATEGORIES
        self._pending_page = None
        self._show_page(page)

    def _on_editor_title(self, title: str) -> None:
        self.setWindowTitle(f"{self._base_title} - {title}")
        self.sidebar.set_marked(PAGE_PRODUCT, title.endswith("*"))

    def closeEvent(self, event):
        if self.editor is not None and not self.editor.can_close(self):
            self._close_pending = True
            self._pending_page = None
            event.ignore()
            return
        save_geometry(self)
        self._dispose_editor()
        event.accept()


def create_main_window(settings: Optional[Dict[str, Any]] = None) -> MainWindow:
    """Factory used by main.py."""
    return MainWindow(settings)
