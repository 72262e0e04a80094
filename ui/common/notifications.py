# -*- coding: utf-8 -*-
"""Qt notifier: toasts for the desktop.

success/default notifications go to the status bar; destructive ones open
a warning box, so failures are never missed.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from PyQt5.QtWidgets import QStatusBar, QWidget

from core.types import Notification, NotificationVariant
from ui.common import dialogs

log = logging.getLogger(__name__)

STATUS_TIMEOUT_MS = 5000


class QtNotifier:
    def __init__(
        self,
        parent: Optional[QWidget] = None,
        status_bar: Optional[Callable[[], Optional[QStatusBar]]] = None,
    ) -> None:
        self._parent = parent
        self._status_bar = status_bar

    def notify(self, notification: Notification) -> None:
        text = notification.title
        if notification.description:
            text = f"{notification.title}: {notification.description}"
        if notification.variant == NotificationVariant.DESTRUCTIVE:
            log.warning("%s", text)
            dialogs.warn(self._parent, notification.title, notification.description or notification.title)
            return
        log.info("%s", text)
        bar = self._status_bar() if self._status_bar is not None else None
        if bar is not None:
            bar.showMessage(text, STATUS_TIMEOUT_MS)
