# -*- coding: utf-8 -*-
"""services/errors.py

Error taxonomy shared by the resource client, the save controller and the UI
(no PyQt dependency).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional


class Level(str, Enum):
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"


@dataclass(frozen=True)
class Issue:
    level: Level
    code: str
    message: str
    field: Optional[str] = None
    hint: Optional[str] = None


class ApiError(Exception):
    """Base class for every failure reported by the resource client."""

    title = "Request failed"

    def __init__(self, message: str, *, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = str(message)
        self.status = status


class ValidationError(ApiError):
    """The server rejected one or more fields (4xx). Never retried automatically."""

    title = "Validation failed"

    def __init__(self, message: str, *, status: Optional[int] = 400, field_errors: Optional[Mapping[str, str]] = None) -> None:
        super().__init__(message, status=status)
        self.field_errors: Dict[str, str] = dict(field_errors or {})

    def issues(self) -> List[Issue]:
        return [Issue(Level.ERROR, "validation", msg, field=name) for name, msg in self.field_errors.items()]


class TransientError(ApiError):
    """Network failure, timeout or 5xx. The user retries by saving again."""

    title = "Connection problem"


class ConflictError(ApiError):
    """The record changed on the server since it was loaded."""

    title = "Record changed on the server"


class NotFoundError(ApiError):
    """The record no longer exists; the editor cannot continue."""

    title = "Record not found"


@dataclass(frozen=True)
class UploadFailure:
    local_key: str
    local_path: str
    message: str


class UploadPartialFailure(ApiError):
    """Some files of a batch were uploaded and some were not."""

    title = "Some uploads failed"

    def __init__(self, failures: List[UploadFailure], uploaded: Optional[Mapping[str, Any]] = None) -> None:
        names = ", ".join(f.local_path for f in failures)
        super().__init__(f"{len(failures)} file(s) could not be uploaded: {names}")
        self.failures = list(failures)
        self.uploaded: Dict[str, Any] = dict(uploaded or {})


def describe(exc: BaseException) -> str:
    """Human-readable one-liner for notifications."""
    if isinstance(exc, ValidationError) and exc.field_errors:
        parts = [f"{issue.field}: {issue.message}" for issue in exc.issues()]
        return "; ".join(parts)
    if isinstance(exc, ConflictError):
        return f"{exc.message} Reload the record to continue; unsaved edits will be lost."
    if isinstance(exc, ApiError):
        return exc.message
    return str(exc) or exc.__class__.__name__
