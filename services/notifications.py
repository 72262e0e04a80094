# -*- coding: utf-8 -*-
"""Notification surface (fire-and-forget toasts), UI-agnostic part.

Controllers only see the ``Notifier`` protocol. The Qt implementation lives
in ui/common/notifications.py.
"""
from __future__ import annotations

import logging
from typing import List, Protocol

from core.types import Notification, NotificationVariant

log = logging.getLogger(__name__)


class Notifier(Protocol):
    def notify(self, notification: Notification) -> None: ...


def success(title: str, description: str = "") -> Notification:
    return Notification(title=title, description=description, variant=NotificationVariant.SUCCESS)


def destructive(title: str, description: str = "") -> Notification:
    return Notification(title=title, description=description, variant=NotificationVariant.DESTRUCTIVE)


def info(title: str, description: str = "") -> Notification:
    return Notification(title=title, description=description, variant=NotificationVariant.DEFAULT)


class LoggingNotifier:
    """Headless notifier: every notification becomes a log record."""

    def notify(self, notification: Notification) -> None:
        level = logging.WARNING if notification.variant == NotificationVariant.DESTRUCTIVE else logging.INFO
        log.log(level, "%s: %s", notification.title, notification.description)


class RecordingNotifier(LoggingNotifier):
    """Keeps every notification (useful for status panels and tests)."""

    def __init__(self) -> None:
        self.sent: List[Notification] = []

    def notify(self, notification: Notification) -> None:
        super().notify(notification)
        self.sent.append(notification)

    @property
    def last(self) -> Notification:
        return self.sent[-1]

    def titles(self) -> List[str]:
        return [n.title for n in self.sent]
