# -*- coding: utf-8 -*-
"""Session context: the single source of truth for who/where we are.

Holds the API token and the active shop. Controllers receive it explicitly;
nothing else caches a shop id (no module globals, no storage fallbacks).
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class SessionContext:
    api_token: Optional[str] = None
    shop_id: Optional[str] = None
    shop_slug: Optional[str] = None

    def auth_headers(self) -> Dict[str, str]:
        if not self.api_token:
            return {}
        return {"Authorization": f"Bearer {self.api_token}"}

    def scope_params(self) -> Dict[str, Any]:
        """Query/body parameters that scope a request to the active shop."""
        if self.shop_id:
            return {"shopId": self.shop_id}
        return {}

    def require_shop(self) -> str:
        """Return the shop id for writes that need one; a shop slug without an id is an error."""
        if self.shop_slug and not self.shop_id:
            raise ValueError(f"Shop {self.shop_slug!r} is selected but its id is unknown; reload the shop.")
        return str(self.shop_id or "")
