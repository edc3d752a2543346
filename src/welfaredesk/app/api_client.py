from __future__ import annotations

import json
from collections.abc import Mapping
from time import perf_counter
from typing import Any, Protocol
from urllib.error import HTTPError, URLError
from urllib.parse import quote, urlencode
from urllib.request import Request, urlopen

from welfaredesk.app.admin_models import (
    BeneficiaryRecord,
    HierarchyNode,
    ProjectRecord,
    SchemeRecord,
    StageRecord,
    StagesConfiguration,
    StatusUpdateRecord,
    TransactionRecord,
    UserRecord,
    normalize_node_type,
    sort_status_updates,
)
from welfaredesk.app.api_debug import api_debug
from welfaredesk.app.errors import ApiRequestError
from welfaredesk.app.settings_store import ApiSettings


_USER_AGENT = "welfaredesk-admin"


class AdminApi(Protocol):
    def list_by_type(self, node_type: str, *, active: bool = True) -> list[HierarchyNode]:
        raise NotImplementedError

    def get_location(self, node_id: str) -> HierarchyNode:
        raise NotImplementedError

    def create_location(self, node: HierarchyNode) -> HierarchyNode:
        raise NotImplementedError

    def update_location(self, node_id: str, node: HierarchyNode) -> HierarchyNode:
        raise NotImplementedError

    def delete_location(self, node_id: str) -> None:
        raise NotImplementedError

    def list_projects(self) -> list[ProjectRecord]:
        raise NotImplementedError

    def get_stage_configuration(self, project_id: str) -> StagesConfiguration | None:
        raise NotImplementedError

    def set_stage_configuration(self, project_id: str, configuration: StagesConfiguration) -> None:
        raise NotImplementedError

    def list_status_updates(self, project_id: str) -> list[StatusUpdateRecord]:
        raise NotImplementedError

    def add_status_update(self, project_id: str, update: StatusUpdateRecord) -> list[StatusUpdateRecord]:
        raise NotImplementedError

    def update_status_update(
        self,
        project_id: str,
        update_id: str,
        update: StatusUpdateRecord,
    ) -> list[StatusUpdateRecord]:
        raise NotImplementedError

    def delete_status_update(self, project_id: str, update_id: str) -> None:
        raise NotImplementedError

    def get_scheme(self, scheme_id: str) -> SchemeRecord:
        raise NotImplementedError

    def set_scheme_stages(self, scheme_id: str, stages: list[StageRecord]) -> None:
        raise NotImplementedError

    def list_beneficiaries(self) -> list[BeneficiaryRecord]:
        raise NotImplementedError

    def delete_beneficiary(self, beneficiary_id: str) -> None:
        raise NotImplementedError

    def list_users(self) -> list[UserRecord]:
        raise NotImplementedError

    def delete_user(self, user_id: str) -> None:
        raise NotImplementedError

    def list_transactions(self, *, limit: int = 50) -> list[TransactionRecord]:
        raise NotImplementedError


class WelfareApiClient:
    """JSON/HTTP client for the welfare ERP backend.

    Every response is expected in the ``{success, message, data}`` envelope.
    Transport failures, non-2xx statuses and ``success: false`` bodies all
    surface as :class:`ApiRequestError` carrying the server's message.
    """

    def __init__(self, settings: ApiSettings | None = None) -> None:
        self._settings = settings or ApiSettings()

    @property
    def settings(self) -> ApiSettings:
        return self._settings

    def list_by_type(self, node_type: str, *, active: bool = True) -> list[HierarchyNode]:
        normalized = normalize_node_type(node_type)
        if not normalized:
            raise ValueError(f"Unknown location type: {node_type!r}")
        data = self._request_json(
            method="GET",
            path=f"/locations/by-type/{quote(normalized, safe='')}",
            query={"active": "true" if active else "false"},
        )
        return [HierarchyNode.from_mapping(row) for row in _list_field(data, "locations")]

    def get_location(self, node_id: str) -> HierarchyNode:
        data = self._request_json(method="GET", path=f"/locations/{_segment(node_id)}")
        return HierarchyNode.from_mapping(_mapping_field(data, "location"))

    def create_location(self, node: HierarchyNode) -> HierarchyNode:
        data = self._request_json(method="POST", path="/locations", payload=node.to_mapping())
        return HierarchyNode.from_mapping(_mapping_field(data, "location"))

    def update_location(self, node_id: str, node: HierarchyNode) -> HierarchyNode:
        data = self._request_json(
            method="PUT",
            path=f"/locations/{_segment(node_id)}",
            payload=node.to_mapping(),
        )
        return HierarchyNode.from_mapping(_mapping_field(data, "location"))

    def delete_location(self, node_id: str) -> None:
        self._request_json(method="DELETE", path=f"/locations/{_segment(node_id)}")

    def list_projects(self) -> list[ProjectRecord]:
        data = self._request_json(method="GET", path="/projects", query={"limit": "100"})
        return [ProjectRecord.from_mapping(row) for row in _list_field(data, "projects")]

    def get_stage_configuration(self, project_id: str) -> StagesConfiguration | None:
        data = self._request_json(
            method="GET",
            path=f"/projects/{_segment(project_id)}/status-configuration",
        )
        raw = _mapping_field(data, "statusConfiguration")
        if not raw:
            return None
        return StagesConfiguration.from_mapping(raw)

    def set_stage_configuration(self, project_id: str, configuration: StagesConfiguration) -> None:
        self._request_json(
            method="PUT",
            path=f"/projects/{_segment(project_id)}/status-configuration",
            payload=configuration.to_mapping(),
        )

    def list_status_updates(self, project_id: str) -> list[StatusUpdateRecord]:
        data = self._request_json(method="GET", path=f"/projects/{_segment(project_id)}")
        return ProjectRecord.from_mapping(_mapping_field(data, "project")).status_updates

    def add_status_update(self, project_id: str, update: StatusUpdateRecord) -> list[StatusUpdateRecord]:
        data = self._request_json(
            method="POST",
            path=f"/projects/{_segment(project_id)}/status-update",
            payload=update.to_mapping(),
        )
        return _status_updates_from(data)

    def update_status_update(
        self,
        project_id: str,
        update_id: str,
        update: StatusUpdateRecord,
    ) -> list[StatusUpdateRecord]:
        data = self._request_json(
            method="PUT",
            path=f"/projects/{_segment(project_id)}/status-update/{_segment(update_id)}",
            payload=update.to_mapping(),
        )
        return _status_updates_from(data)

    def delete_status_update(self, project_id: str, update_id: str) -> None:
        self._request_json(
            method="DELETE",
            path=f"/projects/{_segment(project_id)}/status-update/{_segment(update_id)}",
        )

    def get_scheme(self, scheme_id: str) -> SchemeRecord:
        data = self._request_json(method="GET", path=f"/schemes/{_segment(scheme_id)}")
        return SchemeRecord.from_mapping(_mapping_field(data, "scheme"))

    def set_scheme_stages(self, scheme_id: str, stages: list[StageRecord]) -> None:
        self._request_json(
            method="PUT",
            path=f"/schemes/{_segment(scheme_id)}",
            payload={"statusStages": [stage.to_mapping(include_duration=False) for stage in stages]},
        )

    def list_beneficiaries(self) -> list[BeneficiaryRecord]:
        data = self._request_json(method="GET", path="/beneficiaries", query={"limit": "100"})
        return [BeneficiaryRecord.from_mapping(row) for row in _list_field(data, "beneficiaries")]

    def delete_beneficiary(self, beneficiary_id: str) -> None:
        self._request_json(method="DELETE", path=f"/beneficiaries/{_segment(beneficiary_id)}")

    def list_users(self) -> list[UserRecord]:
        data = self._request_json(method="GET", path="/users", query={"limit": "100"})
        return [UserRecord.from_mapping(row) for row in _list_field(data, "users")]

    def delete_user(self, user_id: str) -> None:
        self._request_json(method="DELETE", path=f"/users/{_segment(user_id)}")

    def list_transactions(self, *, limit: int = 50) -> list[TransactionRecord]:
        data = self._request_json(
            method="GET",
            path="/budget/transactions",
            query={"limit": str(max(1, int(limit)))},
        )
        rows = [TransactionRecord.from_mapping(row) for row in _list_field(data, "transactions")]
        return sorted(rows, key=lambda row: row.sort_key, reverse=True)

    def _request_json(
        self,
        *,
        method: str,
        path: str,
        query: Mapping[str, str] | None = None,
        payload: Any | None = None,
    ) -> Any:
        settings = self._settings
        base = settings.base_url.rstrip("/")
        query_text = f"?{urlencode(dict(query))}" if query else ""
        request_url = f"{base}{path}{query_text}"
        request_data: bytes | None = None
        if payload is not None:
            request_data = json.dumps(payload, ensure_ascii=False).encode("utf-8")
        api_debug(
            "api.request",
            method=method.upper(),
            path=path,
            query_present=bool(query_text),
            payload_bytes=len(request_data) if request_data is not None else 0,
        )
        headers = {
            "Accept": "application/json",
            "User-Agent": _USER_AGENT,
        }
        if settings.token:
            headers["Authorization"] = f"Bearer {settings.token}"
        if payload is not None:
            headers["Content-Type"] = "application/json"

        request = Request(request_url, data=request_data, headers=headers, method=method.upper())
        started_at = perf_counter()
        try:
            with urlopen(request, timeout=settings.timeout_seconds) as response:
                status_code = int(response.getcode() or 0)
                body = response.read()
        except HTTPError as exc:
            raw_body = b""
            try:
                raw_body = exc.read()
            except OSError:
                raw_body = b""
            message = _server_message(raw_body) or f"HTTP error! status: {exc.code}"
            api_debug(
                "api.request.error",
                method=method.upper(),
                path=path,
                code=int(exc.code),
                reason=str(exc.reason),
            )
            raise ApiRequestError(message, status_code=int(exc.code), path=path) from exc
        except URLError as exc:
            api_debug(
                "api.request.error",
                method=method.upper(),
                path=path,
                error=str(exc.reason),
            )
            raise ApiRequestError(f"Could not reach the server: {exc.reason}", path=path) from exc
        except OSError as exc:
            api_debug("api.request.error", method=method.upper(), path=path, error=str(exc))
            raise ApiRequestError(f"Could not reach the server: {exc}", path=path) from exc

        api_debug(
            "api.response",
            method=method.upper(),
            path=path,
            status=status_code,
            body_bytes=len(body),
            duration_ms=round((perf_counter() - started_at) * 1000.0, 2),
        )
        if not body:
            return {}
        try:
            envelope = json.loads(body.decode("utf-8"))
        except ValueError as exc:
            api_debug(
                "api.response.parse_error",
                method=method.upper(),
                path=path,
                body_bytes=len(body),
                error=str(exc),
            )
            raise ApiRequestError(
                f"Server returned a non-JSON payload for {path} ({len(body)} bytes).",
                status_code=status_code,
                path=path,
            ) from exc

        if not isinstance(envelope, dict):
            return envelope
        if envelope.get("success") is False:
            raise ApiRequestError(
                str(envelope.get("message") or ""),
                status_code=status_code,
                path=path,
            )
        return envelope.get("data", {})


def _segment(value: str) -> str:
    text = str(value or "").strip()
    if not text:
        raise ValueError("A record id is required.")
    return quote(text, safe="")


def _server_message(raw_body: bytes) -> str:
    if not raw_body:
        return ""
    try:
        parsed = json.loads(raw_body.decode("utf-8", errors="replace"))
    except ValueError:
        return ""
    if isinstance(parsed, dict):
        return str(parsed.get("message") or parsed.get("error") or "").strip()
    return ""


def _mapping_field(data: Any, key: str) -> dict[str, Any]:
    if isinstance(data, Mapping):
        value = data.get(key)
        if isinstance(value, Mapping):
            return dict(value)
    return {}


def _list_field(data: Any, key: str) -> list[Mapping[str, Any]]:
    if isinstance(data, Mapping):
        value = data.get(key)
    elif isinstance(data, list):
        value = data
    else:
        value = None
    if not isinstance(value, list):
        return []
    return [row for row in value if isinstance(row, Mapping)]


def _status_updates_from(data: Any) -> list[StatusUpdateRecord]:
    project = _mapping_field(data, "project")
    rows = project.get("statusUpdates")
    if not isinstance(rows, list):
        return []
    return sort_status_updates(
        [StatusUpdateRecord.from_mapping(row) for row in rows if isinstance(row, Mapping)]
    )
