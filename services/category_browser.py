# -*- coding: utf-8 -*-
"""Category browser controller (no PyQt imports).

Loads one level of the category tree at a time through the resource client,
keeps the breadcrumb/pagination state in a ``TreeNavigator`` and the open
dialog in a ``ModalState``. Edits and deletions go through that dialog state
and refresh the current level once the server accepts them.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Mapping, Optional

from app.modal_state import ConfirmDelete, EditForm, ModalState, ViewDetails
from app.session import SessionContext
from domain.category_form import category_update, form_values
from domain.category_tree import TreeNavigator
from services.errors import ValidationError, describe
from services.notifications import Notifier, destructive, success
from services.resource_client import Page, ResourceClient
from services.tasks.runner_core import ImmediateRunner

log = logging.getLogger(__name__)


class CategoryBrowser:
    def __init__(
        self,
        client: ResourceClient,
        *,
        context: Optional[SessionContext] = None,
        runner: Any = None,
        notifier: Optional[Notifier] = None,
        resource: str = "categories",
        page_size: int = 10,
        sort_by: str = "name",
        sort_dir: str = "asc",
        on_changed: Optional[Callable[[], None]] = None,
    ) -> None:
        self.client = client
        self.context = context or SessionContext()
        self.runner = runner or ImmediateRunner()
        self.notifier = notifier
        self.resource = resource
        self.sort_by = sort_by
        self.sort_dir = sort_dir
        self.navigator = TreeNavigator(page_size=page_size)
        self.modal = ModalState()
        self.loading = False
        self.error: Optional[str] = None
        self.form_errors: Dict[str, str] = {}
        self.draft: Dict[str, Any] = {}
        self.updating = False
        self._on_changed = on_changed
        self._token = 0

    # --------- loading ---------
    def refresh(self) -> None:
        self._token += 1
        token = self._token
        nav = self.navigator
        self.loading = True
        self.error = None
        parent_id = nav.current_parent_id
        page, size = nav.page, nav.page_size
        if parent_id is None:
            fn = lambda: self.client.list_page(self.resource, page, size, self.sort_by, self.sort_dir)
        else:
            fn = lambda: self.client.list_children(self.resource, parent_id)
        self._changed()
        self.runner.submit(
            fn,
            lambda result: self._on_loaded(token, result),
            lambda exc: self._on_failed(token, exc),
            label=f"list {self.resource}",
        )

    def _on_loaded(self, token: int, result: Any) -> None:
        if token != self._token:
            return
        self.loading = False
        if isinstance(result, Page):
            self.navigator.set_items(result.content, result.total_pages)
        else:
            self.navigator.set_items(list(result or []))
        self._changed()

    def _on_failed(self, token: int, exc: BaseException) -> None:
        if token != self._token:
            return
        self.loading = False
        self.error = describe(exc)
        log.warning("loading %s failed: %s", self.resource, exc)
        what = "subcategories" if not self.navigator.at_root else self.resource
        self._notify(destructive("Error", f"Failed to load {what}. {self.error}"))
        self._changed()

    # --------- navigation ---------
    def enter(self, node: Mapping[str, Any]) -> None:
        self.navigator.enter(node)
        self.refresh()

    def jump_to(self, index: int) -> None:
        self.navigator.jump_to(index)
        self.refresh()

    def go_to_page(self, page: int) -> bool:
        if not self.navigator.go_to_page(page):
            return False
        self._after_page_change()
        return True

    def next_page(self) -> bool:
        return self.go_to_page(self.navigator.page + 1)

    def prev_page(self) -> bool:
        return self.go_to_page(self.navigator.page - 1)

    def _after_page_change(self) -> None:
        # Root pages come from the server; child levels are paged locally.
        if self.navigator.at_root:
            self.refresh()
        else:
            self._changed()

    def set_search(self, text: str) -> None:
        self.navigator.set_search(text)
        self._changed()

    # --------- dialogs ---------
    def view(self, record: Mapping[str, Any]) -> None:
        self.modal.open(ViewDetails(dict(record)))
        self._changed()

    def edit(self, record: Mapping[str, Any]) -> None:
        self.form_errors = {}
        self.draft = {}
        self.modal.open(EditForm(dict(record)))
        self._changed()

    def edit_values(self) -> Dict[str, Any]:
        """Values to show in the edit form: the record, then any unsent draft."""
        active = self.modal.active
        if not isinstance(active, EditForm):
            return {}
        values = form_values(active.record)
        values.update(self.draft)
        return values

    def ask_delete(self, record: Mapping[str, Any]) -> None:
        self.modal.open(ConfirmDelete(dict(record)))
        self._changed()

    def close_modal(self) -> None:
        self.form_errors = {}
        self.draft = {}
        self.modal.close()
        self._changed()

    def confirm_delete(self) -> None:
        active = self.modal.active
        if not isinstance(active, ConfirmDelete):
            raise RuntimeError("No deletion is waiting for confirmation")
        record: Dict[str, Any] = dict(active.record)
        self.context.require_shop()
        self.modal.close()
        self.runner.submit(
            lambda: self.client.delete(self.resource, record.get("id")),
            lambda _r: self._on_deleted(record),
            lambda exc: self._on_delete_failed(record, exc),
            label=f"delete {self.resource}",
        )

    def _on_deleted(self, record: Mapping[str, Any]) -> None:
        self._notify(success("Category deleted", f"{record.get('name') or record.get('id')} has been deleted."))
        self.refresh()

    def _on_delete_failed(self, record: Mapping[str, Any], exc: BaseException) -> None:
        log.warning("deleting %s %s failed: %s", self.resource, record.get("id"), exc)
        self._notify(destructive("Error", f"Failed to delete category. {describe(exc)}"))
        self._changed()

    def submit_edit(self, values: Mapping[str, Any]) -> bool:
        """Send the edit form. False when the form has errors or an update is running."""
        active = self.modal.active
        if not isinstance(active, EditForm):
            raise RuntimeError("No category is being edited")
        if self.updating:
            return False
        record: Dict[str, Any] = dict(active.record)
        payload, errors = category_update(record, values)
        self.draft = dict(values)
        self.form_errors = errors
        if errors:
            self._changed()
            return False
        self.context.require_shop()
        self.updating = True
        self._changed()
        self.runner.submit(
            lambda: self.client.update(self.resource, record.get("id"), payload),
            lambda _r: self._on_updated(record),
            lambda exc: self._on_update_failed(record, exc),
            label=f"update {self.resource}",
        )
        return True

    def _on_updated(self, record: Mapping[str, Any]) -> None:
        self.updating = False
        self.form_errors = {}
        self.draft = {}
        active = self.modal.active
        if isinstance(active, EditForm) and active.record.get("id") == record.get("id"):
            self.modal.close()
        self._notify(success("Category updated", "The category was updated successfully."))
        self.refresh()

    def _on_update_failed(self, record: Mapping[str, Any], exc: BaseException) -> None:
        self.updating = False
        if isinstance(exc, ValidationError):
            self.form_errors = dict(exc.field_errors)
        log.warning("updating %s %s failed: %s", self.resource, record.get("id"), exc)
        self._notify(destructive("Error", f"Failed to update category. {describe(exc)}"))
        self._changed()

    # --------- plumbing ---------
    def _changed(self) -> None:
        if self._on_changed is not None:
            self._on_changed()

    def _notify(self, notification) -> None:
        if self.notifier is not None:
            self.notifier.notify(notification)
