# -*- coding: utf-8 -*-
"""Resource client: paginated CRUD calls to the marketplace REST backend.

``ResourceClient`` is the protocol the controllers depend on.
``RestResourceClient`` implements it with a ``requests.Session`` and maps
every HTTP/network failure onto the taxonomy in services.errors.

This module has **no PyQt imports**; calls block and are meant to run on a
worker (see services/tasks).
"""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple

import requests

from app.session import SessionContext
from core.keys import ProductKeys as K
from core.sections import Section
from core.types import SaveKey
from services.errors import (
    ApiError,
    ConflictError,
    NotFoundError,
    TransientError,
    UploadFailure,
    UploadPartialFailure,
    ValidationError,
)

log = logging.getLogger(__name__)

# (local_key, local_path)
UploadSpec = Tuple[str, str]


@dataclass
class Page:
    content: List[Dict[str, Any]] = field(default_factory=list)
    page: int = 0
    size: int = 10
    total_elements: int = 0
    total_pages: int = 0

    @classmethod
    def from_json(cls, data: Any, *, page: int = 0, size: int = 10) -> "Page":
        if isinstance(data, list):
            total = len(data)
            return cls(list(data), page, size, total, int(math.ceil(total / size)) if size else 0)
        data = data or {}
        content = list(data.get("content") or [])
        total = int(data.get("totalElements", len(content)) or 0)
        total_pages = data.get("totalPages")
        if total_pages is None:
            total_pages = int(math.ceil(total / size)) if size else 0
        return cls(
            content=content,
            page=int(data.get("number", data.get("page", page)) or 0),
            size=int(data.get("size", size) or size),
            total_elements=total,
            total_pages=int(total_pages),
        )


class ResourceClient(Protocol):
    def fetch(self, record_id: str) -> Dict[str, Any]: ...

    def patch(self, record_id: str, path: str, diff: Mapping[str, Any]) -> Dict[str, Any]: ...

    def upload_files(self, record_id: str, path: str, files: Sequence[UploadSpec]) -> Dict[str, Dict[str, Any]]: ...

    def list_page(self, resource: str, page: int, size: int, sort_by: str = "name", sort_dir: str = "asc", **params: Any) -> Page: ...

    def list_children(self, resource: str, parent_id: Any) -> List[Dict[str, Any]]: ...

    def update(self, resource: str, record_id: Any, data: Mapping[str, Any]) -> Dict[str, Any]: ...

    def delete(self, resource: str, record_id: Any) -> None: ...


# ---------------------------------------------------------------------------
# endpoint routing
# ---------------------------------------------------------------------------

_PATCH_PATHS = {
    Section.BASIC: "basic-info",
    Section.PRICING: "pricing",
    Section.MEDIA: "media",
    Section.INVENTORY: "inventory",
    Section.DETAILS: "details",
}

_UPLOAD_PATHS = {
    K.IMAGES: "media/images",
    K.VIDEOS: "media/videos",
}


def patch_path(key: SaveKey) -> str:
    if key.section == Section.VARIANTS:
        if key.item_id is None:
            raise ValueError("variant saves need an item id")
        return f"variants/{key.item_id}"
    return _PATCH_PATHS[key.section]


def upload_path(key: SaveKey, media_field: str = K.IMAGES) -> str:
    if key.section == Section.VARIANTS:
        return f"variants/{key.item_id}/images"
    return _UPLOAD_PATHS[media_field]


# ---------------------------------------------------------------------------
# error mapping
# ---------------------------------------------------------------------------

def _body(response: requests.Response) -> Dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _field_errors(body: Mapping[str, Any]) -> Dict[str, str]:
    errors = body.get("errors") or body.get("fieldErrors") or {}
    if isinstance(errors, Mapping):
        return {str(k): str(v) for k, v in errors.items()}
    out: Dict[str, str] = {}
    if isinstance(errors, list):
        for item in errors:
            if isinstance(item, Mapping) and item.get("field"):
                out[str(item["field"])] = str(item.get("message") or item.get("defaultMessage") or "invalid")
    return out


def error_for_response(response: requests.Response) -> ApiError:
    status = int(response.status_code)
    body = _body(response)
    message = str(body.get("message") or body.get("error") or response.reason or f"HTTP {status}")
    if status in (400, 422):
        return ValidationError(message, status=status, field_errors=_field_errors(body))
    if status == 404:
        return NotFoundError(message, status=status)
    if status in (409, 412):
        return ConflictError(message, status=status)
    if status >= 500 or status in (408, 429):
        return TransientError(message, status=status)
    return ApiError(message, status=status)


class RestResourceClient:
    """requests-based implementation of ``ResourceClient`` for products."""

    PARTIAL_UPDATE_METHOD = "PUT"

    def __init__(
        self,
        base_url: str,
        session_context: Optional[SessionContext] = None,
        *,
        timeout: float = 30.0,
        http: Optional[requests.Session] = None,
        variants_page_size: int = 100,
    ) -> None:
        self.base_url = str(base_url).rstrip("/")
        self.context = session_context or SessionContext()
        self.timeout = float(timeout)
        self.http = http or requests.Session()
        self.variants_page_size = int(variants_page_size)

    def set_context(self, context: SessionContext) -> None:
        self.context = context

    # --------- plumbing ---------
    def _url(self, path: str) -> str:
        return f"{self.base_url}/{str(path).lstrip('/')}"

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = self._url(path)
        headers = dict(kwargs.pop("headers", None) or {})
        headers.update(self.context.auth_headers())
        try:
            response = self.http.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
        except requests.exceptions.Timeout as e:
            log.warning("API timeout: %s %s", method, url)
            raise TransientError(f"The server did not answer in time ({e})") from e
        except requests.exceptions.RequestException as e:
            log.warning("API request failed: %s %s - %s", method, url, e)
            raise TransientError(f"Network error: {e}") from e

        if not response.ok:
            err = error_for_response(response)
            log.warning("API %s %s -> %s %s", method, url, response.status_code, err.message)
            raise err
        log.debug("API %s %s -> %s", method, url, response.status_code)
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            return {}

    # --------- products ---------
    def fetch(self, record_id: str) -> Dict[str, Any]:
        base = f"products/{record_id}"
        record: Dict[str, Any] = {K.ID: str(record_id)}
        record.update(self._request("GET", f"{base}/basic-info") or {})
        record.update(self._request("GET", f"{base}/pricing") or {})
        record[K.IMAGES] = list(self._request("GET", f"{base}/media/images") or [])
        record[K.VIDEOS] = list(self._request("GET", f"{base}/media/videos") or [])
        variants = self._request(
            "GET",
            f"{base}/variants",
            params={"page": 0, "size": self.variants_page_size, "sortBy": "id", "sortDir": "asc"},
        )
        record[K.VARIANTS] = Page.from_json(variants, size=self.variants_page_size).content
        stock = self._request("GET", f"{base}/inventory") or {}
        record[K.WAREHOUSE_STOCKS] = stock.get(K.WAREHOUSE_STOCKS, stock) if isinstance(stock, dict) else {}
        record.update(self._request("GET", f"{base}/details") or {})
        record[K.ID] = str(record_id)
        return record

    def patch(self, record_id: str, path: str, diff: Mapping[str, Any]) -> Dict[str, Any]:
        payload = dict(diff)
        payload.update(self.context.scope_params())
        result = self._request(self.PARTIAL_UPDATE_METHOD, f"products/{record_id}/{path}", json=payload)
        return result if isinstance(result, dict) else {}

    def upload_files(self, record_id: str, path: str, files: Sequence[UploadSpec]) -> Dict[str, Dict[str, Any]]:
        """Upload each file separately so per-item failures can be reported."""
        uploaded: Dict[str, Dict[str, Any]] = {}
        failures: List[UploadFailure] = []
        for local_key, local_path in files:
            try:
                with open(local_path, "rb") as fh:
                    result = self._request(
                        "POST",
                        f"products/{record_id}/{path}",
                        files=[("files", (os.path.basename(local_path), fh))],
                    )
            except (ApiError, OSError) as e:
                log.warning("upload failed for %s: %s", local_path, e)
                failures.append(UploadFailure(local_key, local_path, str(e)))
                continue
            item = result[0] if isinstance(result, list) and result else result
            uploaded[local_key] = dict(item or {})
        if failures:
            raise UploadPartialFailure(failures, uploaded)
        return uploaded

    # --------- generic resources (categories, brands, ...) ---------
    def list_page(self, resource: str, page: int, size: int, sort_by: str = "name", sort_dir: str = "asc", **params: Any) -> Page:
        query = {"page": int(page), "size": int(size), "sortBy": sort_by, "sortDir": sort_dir}
        query.update(self.context.scope_params())
        query.update({k: v for k, v in params.items() if v is not None})
        return Page.from_json(self._request("GET", resource, params=query), page=page, size=size)

    def list_children(self, resource: str, parent_id: Any) -> List[Dict[str, Any]]:
        data = self._request("GET", f"{resource}/sub-categories/{parent_id}")
        if isinstance(data, dict):
            return list(data.get("content") or [])
        return list(data or [])

    def update(self, resource: str, record_id: Any, data: Mapping[str, Any]) -> Dict[str, Any]:
        payload = dict(data)
        payload.update(self.context.scope_params())
        result = self._request("PUT", f"{resource}/{record_id}", json=payload)
        return result if isinstance(result, dict) else {}

    def delete(self, resource: str, record_id: Any) -> None:
        self._request("DELETE", f"{resource}/{record_id}")
