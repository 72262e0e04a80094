# -*- coding: utf-8 -*-
"""Which modal dialog is open, as one value.

Exactly one of ``NoModal``, ``ConfirmDelete``, ``ViewDetails``, ``EditForm``
is active at a time, so two dialogs can never be open together.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union


@dataclass(frozen=True)
class NoModal:
    @property
    def record(self) -> Optional[Dict[str, Any]]:
        return None


@dataclass(frozen=True)
class ConfirmDelete:
    record: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ViewDetails:
    record: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class EditForm:
    record: Dict[str, Any] = field(default_factory=dict)


ActiveModal = Union[NoModal, ConfirmDelete, ViewDetails, EditForm]

NO_MODAL = NoModal()


class ModalState:
    """Holder for the active modal; opening one replaces the previous."""

    def __init__(self) -> None:
        self.active: ActiveModal = NO_MODAL

    @property
    def is_open(self) -> bool:
        return not isinstance(self.active, NoModal)

    def open(self, modal: ActiveModal) -> ActiveModal:
        self.active = modal
        return modal

    def close(self) -> None:
        self.active = NO_MODAL

    def selected(self) -> Optional[Dict[str, Any]]:
        return self.active.record
