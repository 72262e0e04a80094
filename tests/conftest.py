# -*- coding: utf-8 -*-

"""Pytest configuration.

This project is a simple app folder layout (not installed as a package).
For local testing we add the repository root to sys.path so that imports like
`from core...` work reliably.

Shared fixtures: an in-memory resource client seeded with one product and a
small category tree, and a per-test user data directory.
"""

from __future__ import annotations

import copy
import itertools
import os
import sys


ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

import pytest  # noqa: E402

from services.errors import NotFoundError, UploadFailure, UploadPartialFailure  # noqa: E402
from services.resource_client import Page  # noqa: E402


PRODUCT = {
    "id": "p1",
    "productName": "Desk Lamp",
    "shortDescription": "",
    "description": "Adjustable LED desk lamp",
    "sku": "LAMP-1",
    "slug": "desk-lamp",
    "categoryId": 3,
    "active": True,
    "price": 10,
    "compareAtPrice": None,
    "costPrice": 4.5,
    "images": [
        {"id": 11, "url": "https://cdn.test/a.jpg", "isPrimary": True},
        {"id": 12, "url": "https://cdn.test/b.jpg", "isPrimary": False},
    ],
    "videos": [],
    "variants": [
        {"id": 101, "variantSku": "LAMP-1-RED", "price": 10, "isActive": True, "attributes": {"color": "red"}, "images": []},
        {"id": 102, "variantSku": "LAMP-1-BLUE", "price": 11.5, "isActive": True, "attributes": {"color": "blue"}, "images": []},
    ],
    "warehouseStocks": {"w1": {"quantity": 5, "lowStockThreshold": 2, "batches": []}},
    "metaTitle": "Desk Lamp",
}

ROOT_CATEGORIES = [{"id": i, "name": f"Category {i}", "description": ""} for i in range(1, 24)]

CHILD_CATEGORIES = {
    1: [{"id": 100 + i, "name": f"Lamps {i}", "description": "lighting" if i % 2 else ""} for i in range(12)],
    100: [{"id": 500, "name": "Reading lamps", "description": ""}],
}


class FakeClient:
    """In-memory ``ResourceClient``.

    ``patch`` echoes the diff (plus any canned ``responses[path]``) back as
    the server answer. Errors queued in ``errors`` are raised by the next
    ``patch``/``fetch``/``update``/``delete`` call, in order.
    """

    def __init__(self) -> None:
        self.records = {"p1": copy.deepcopy(PRODUCT)}
        self.categories = [dict(c) for c in ROOT_CATEGORIES]
        self.children = copy.deepcopy(CHILD_CATEGORIES)
        self.responses = {}
        self.errors = []
        self.failing_paths = set()
        self.fetches = []
        self.patches = []
        self.uploads = []
        self.listed = []
        self.deleted = []
        self.updated = []
        self._ids = itertools.count(1000)

    def fail_next(self, exc: BaseException) -> None:
        self.errors.append(exc)

    def _maybe_fail(self) -> None:
        if self.errors:
            raise self.errors.pop(0)

    def fetch(self, record_id):
        self.fetches.append(record_id)
        self._maybe_fail()
        if record_id not in self.records:
            raise NotFoundError(f"Product {record_id} not found", status=404)
        return copy.deepcopy(self.records[record_id])

    def patch(self, record_id, path, diff):
        self.patches.append((record_id, path, copy.deepcopy(dict(diff))))
        self._maybe_fail()
        response = copy.deepcopy(dict(diff))
        response.update(self.responses.get(path, {}))
        return response

    def upload_files(self, record_id, path, files):
        self.uploads.append((record_id, path, list(files)))
        uploaded, failures = {}, []
        for local_key, local_path in files:
            if local_path in self.failing_paths:
                failures.append(UploadFailure(local_key, local_path, "File is too large"))
                continue
            media_id = next(self._ids)
            uploaded[local_key] = {"id": media_id, "url": f"https://cdn.test/{media_id}.jpg", "isPrimary": False}
        if failures:
            raise UploadPartialFailure(failures, uploaded)
        return uploaded

    def list_page(self, resource, page, size, sort_by="name", sort_dir="asc", **params):
        self.listed.append((resource, None, page))
        self._maybe_fail()
        start = page * size
        return Page.from_json(
            {
                "content": self.categories[start:start + size],
                "number": page,
                "size": size,
                "totalElements": len(self.categories),
            },
            page=page,
            size=size,
        )

    def list_children(self, resource, parent_id):
        self.listed.append((resource, parent_id, None))
        self._maybe_fail()
        return copy.deepcopy(self.children.get(parent_id, []))

    def update(self, resource, record_id, data):
        self.updated.append((resource, record_id, dict(data)))
        self._maybe_fail()
        for category in self.categories:
            if category["id"] == record_id:
                category.update(data)
                return dict(category)
        return dict(data, id=record_id)

    def delete(self, resource, record_id):
        self.deleted.append((resource, record_id))
        self._maybe_fail()
        self.categories = [c for c in self.categories if c["id"] != record_id]


@pytest.fixture
def client() -> FakeClient:
    return FakeClient()


@pytest.fixture
def product() -> dict:
    return copy.deepcopy(PRODUCT)


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    """Per-user data directory isolated under tmp_path."""
    monkeypatch.setenv("SHOPDESK_DATA_DIR", str(tmp_path / "userdata"))
    return tmp_path / "userdata"
