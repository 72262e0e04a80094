# -*- coding: utf-8 -*-
"""Architecture guards (static, no QApplication).

- core/ and domain/ are pure: no app, services, ui, screens or PyQt5 imports
- services/ never imports ui or screens; PyQt5 only in the Qt task runner
- app/ only touches PyQt5 in the main window controller
- every QWidget screen under screens/ inherits ScreenBase
"""

from __future__ import annotations

import ast
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]

FORBIDDEN = {
    "core": {"app", "domain", "services", "ui", "screens", "PyQt5"},
    "domain": {"app", "services", "ui", "screens", "PyQt5"},
    "services": {"ui", "screens", "PyQt5"},
    "app": {"screens", "PyQt5"},
}

# Files allowed to cross one of the rules above.
QT_BOUNDARY = {
    Path("services/tasks/qt_runner.py"),
    Path("app/controller.py"),
}


def _py_files(layer: str):
    return sorted(p for p in (ROOT / layer).rglob("*.py") if "__pycache__" not in p.parts)


def _imported_roots(path: Path):
    tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                yield alias.name.split(".")[0]
        elif isinstance(node, ast.ImportFrom) and node.module and not node.level:
            yield node.module.split(".")[0]


def test_layer_boundaries() -> None:
    violations = []
    for layer, forbidden in FORBIDDEN.items():
        for path in _py_files(layer):
            rel = path.relative_to(ROOT)
            if rel in QT_BOUNDARY:
                continue
            for name in _imported_roots(path):
                if name in forbidden:
                    violations.append(f"{rel}: imports {name}")

    assert not violations, "Layer violations:\n" + "\n".join(violations)


def _base_names(node: ast.ClassDef):
    for base in node.bases:
        if isinstance(base, ast.Name):
            yield base.id
        elif isinstance(base, ast.Attribute):
            yield base.attr


def test_screens_inherit_screenbase() -> None:
    offenders = []
    for path in _py_files("screens"):
        tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
        for node in ast.walk(tree):
            if isinstance(node, ast.ClassDef) and node.name.endswith("Screen"):
                bases = list(_base_names(node))
                if "ScreenBase" not in bases and "QDialog" not in bases:
                    offenders.append(f"{path.relative_to(ROOT)}::{node.name}({', '.join(bases)})")

    assert not offenders, "These Screen classes should inherit ScreenBase:\n" + "\n".join(offenders)
