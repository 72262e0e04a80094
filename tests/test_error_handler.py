# -*- coding: utf-8 -*-
"""Dialog text for failures caught in UI callbacks."""

from __future__ import annotations

import pytest

pytest.importorskip("PyQt5.QtWidgets")

from services.errors import ConflictError, ValidationError  # noqa: E402
from ui.common.error_handler import error_summary  # noqa: E402


def test_api_errors_use_their_own_title() -> None:
    title, text = error_summary(ValidationError("Invalid", field_errors={"name": "already exists"}))
    assert (title, text) == ("Validation failed", "name: already exists")

    title, _text = error_summary(ConflictError("Changed"), "Categories")
    assert title == "Categories"


def test_bugs_point_to_the_log() -> None:
    title, text = error_summary(KeyError("id"))
    assert title == "Unexpected error"
    assert text.startswith("KeyError: 'id'")
    assert text.endswith("Details were written to the log.")
