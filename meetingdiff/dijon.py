from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

import httpx

from .dates import api_date

LOGGER = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://dijon-api.bmlt.dev"


class DijonClient:
    """Thin wrapper over the Dijon snapshot API. Every call raises on a non-2xx status."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        token: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._http = httpx.Client(base_url=base_url, timeout=timeout, transport=transport, trust_env=False)
        self.token = token

    @property
    def token(self) -> Optional[str]:
        return self._token

    @token.setter
    def token(self, token: Optional[str]) -> None:
        self._token = token or None
        if self._token:
            self._http.headers["Authorization"] = f"Bearer {self._token}"
        else:
            self._http.headers.pop("Authorization", None)

    @property
    def is_logged_in(self) -> bool:
        return self._token is not None

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "DijonClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        response = self._http.request(method, path, **kwargs)
        LOGGER.debug("%s %s -> %s", method, path, response.status_code)
        response.raise_for_status()
        if not response.content:
            return None
        return response.json()

    def create_token(self, username: str, password: str) -> str:
        data = self._request(
            "POST",
            "/token",
            data={"grant_type": "password", "username": username, "password": password},
        )
        self.token = data["access_token"]
        return self.token

    def list_root_servers(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/rootservers")

    def list_snapshots(self, root_server_id: int) -> List[Dict[str, Any]]:
        return self._request("GET", f"/rootservers/{root_server_id}/snapshots")

    def list_service_bodies(self, root_server_id: int, snapshot_date: date) -> List[Dict[str, Any]]:
        return self._request("GET", f"/rootservers/{root_server_id}/snapshots/{api_date(snapshot_date)}/servicebodies")

    def list_snapshot_meetings(
        self,
        root_server_id: int,
        snapshot_date: date,
        service_body_bmlt_ids: Optional[Iterable[int]] = None,
    ) -> List[Dict[str, Any]]:
        params = {}
        if service_body_bmlt_ids:
            params["service_body_bmlt_ids"] = list(service_body_bmlt_ids)
        return self._request(
            "GET",
            f"/rootservers/{root_server_id}/snapshots/{api_date(snapshot_date)}/meetings",
            params=params,
        )

    def list_meeting_changes(
        self,
        root_server_id: int,
        start_date: date,
        end_date: date,
        service_body_bmlt_ids: Optional[Iterable[int]] = None,
        exclude_world_id_updates: bool = False,
    ) -> Any:
        params: Dict[str, Any] = {
            "start_date": api_date(start_date),
            "end_date": api_date(end_date),
            "exclude_world_id_updates": "true" if exclude_world_id_updates else "false",
        }
        if service_body_bmlt_ids:
            params["service_body_bmlt_ids"] = list(service_body_bmlt_ids)
        return self._request("GET", f"/rootservers/{root_server_id}/meetings/changes", params=params)

    def batch_update_meeting_naws_codes(self, root_server_id: int, updates: Iterable[Dict[str, Any]]) -> Any:
        return self._request("PATCH", f"/rootservers/{root_server_id}/meetings/nawscodes", json=list(updates))
