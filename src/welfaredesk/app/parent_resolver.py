from __future__ import annotations

import logging

from welfaredesk.app.admin_models import HierarchyNode, normalize_node_type, parent_node_type
from welfaredesk.app.api_client import AdminApi


class ParentResolver:
    """Looks up the valid parents for a location type, one level up the hierarchy."""

    def __init__(self, api: AdminApi, *, logger: logging.Logger | None = None) -> None:
        self._api = api
        self._logger = logger or logging.getLogger("welfaredesk.parents")

    def resolve_parents(self, child_type: str) -> list[HierarchyNode]:
        normalized = normalize_node_type(child_type)
        if not normalized:
            raise ValueError(f"Unknown location type: {child_type!r}")
        parent_type = parent_node_type(normalized)
        if not parent_type:
            return []
        try:
            candidates = self._api.list_by_type(parent_type, active=True)
        except Exception as exc:
            self._logger.warning("Failed to load %s candidates for %s: %s", parent_type, normalized, exc)
            return []
        return sorted(
            (node for node in candidates if node.node_id and node.is_active),
            key=lambda node: node.name.casefold(),
        )
