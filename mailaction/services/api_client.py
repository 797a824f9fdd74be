import logging
from typing import Any, Dict, Iterator, List, Optional

import requests

from mailaction.app.config import Config
from mailaction.services.errors import BackendError

logger = logging.getLogger(__name__)


class ApiClient:
    """Thin client for the messaging backend REST API.

    Every call returns the decoded JSON body or raises ``BackendError``.
    """

    def __init__(
        self,
        base_url: str = Config.API_URL,
        access_token: Optional[str] = Config.API_TOKEN,
        timeout: float = Config.API_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.access_token = access_token
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        headers = {}
        if self.access_token:
            headers["X-Access-Token"] = self.access_token

        try:
            resp = self.session.request(
                method,
                f"{self.base_url}{path}",
                params=params,
                json=json,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning("backend %s %s failed: %s", method, path, e)
            raise BackendError(detail=str(e), code="BackendUnavailable", status_code=502)

        try:
            data = resp.json()
        except ValueError:
            data = None

        if not isinstance(data, dict):
            raise BackendError(
                detail=f"Invalid response from backend (HTTP {resp.status_code})",
                code="InvalidResponse",
                status_code=resp.status_code,
            )
        if data.get("error"):
            raise BackendError(
                detail=data["error"],
                code=data.get("code"),
                status_code=resp.status_code,
            )
        if not 200 <= resp.status_code < 300:
            raise BackendError(
                detail=f"Backend request failed (HTTP {resp.status_code})",
                status_code=resp.status_code,
            )
        return data

    def update_messages(
        self, user_id: str, mailbox_id: str, message: str, patch: Dict[str, Any]
    ) -> Dict[str, Any]:
        # the backend takes the comma joined selector as is
        body = {"message": message}
        body.update(patch)
        return self._request(
            "PUT", f"/users/{user_id}/mailboxes/{mailbox_id}/messages", json=body
        )

    def delete_message(
        self, user_id: str, mailbox_id: str, message_id: int
    ) -> Dict[str, Any]:
        return self._request(
            "DELETE", f"/users/{user_id}/mailboxes/{mailbox_id}/messages/{message_id}"
        )

    def list_messages(
        self, user_id: str, mailbox_id: str, params: Dict[str, Any]
    ) -> Dict[str, Any]:
        return self._request(
            "GET", f"/users/{user_id}/mailboxes/{mailbox_id}/messages", params=params
        )

    def list_mailboxes(
        self, user_id: str, special_use: bool = False
    ) -> List[Dict[str, Any]]:
        params = {"specialUse": "true"} if special_use else None
        data = self._request("GET", f"/users/{user_id}/mailboxes", params=params)
        return data.get("results", [])


def get_api_client() -> Iterator[ApiClient]:
    client = ApiClient()
    try:
        yield client
    finally:
        client.session.close()
