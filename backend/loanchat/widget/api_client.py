"""HTTP client the chat widget uses to reach the chat endpoint."""

from typing import Any, Dict, List, Optional

import requests

from loanchat.config import Config


class ChatClientError(Exception):
    """The chat endpoint could not be reached or answered with an error."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ChatApiClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[int] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = (base_url or Config.widget.api_base_url).rstrip("/")
        self.timeout = timeout or Config.widget.timeout
        self.session = session or requests.Session()

    def fetch_history(
        self,
        product_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        params = {}
        if product_id:
            params["productId"] = product_id
        if user_id:
            params["userId"] = user_id
        return self._request("GET", "/api/chat", params=params)

    def submit_turn(
        self,
        message: str,
        product_id: Optional[str] = None,
        user_id: Optional[str] = None,
        message_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        body = {"message": message}
        if message_id:
            body["id"] = message_id
        if product_id:
            body["productId"] = product_id
        if user_id:
            body["userId"] = user_id
        return self._request("POST", "/api/chat", json=body)

    def list_products(self, **filters) -> List[Dict[str, Any]]:
        params = {k: v for k, v in filters.items() if v not in (None, "")}
        return self._request("GET", "/api/products", params=params)["data"]

    def _request(self, method: str, path: str, **kwargs):
        try:
            resp = self.session.request(
                method,
                f"{self.base_url}{path}",
                timeout=self.timeout,
                **kwargs,
            )
        except requests.RequestException as e:
            raise ChatClientError(f"Request to {path} failed: {e}") from e

        if not resp.ok:
            try:
                payload = resp.json()
            except ValueError:
                payload = None
            error = payload.get("error") if isinstance(payload, dict) else None
            raise ChatClientError(
                error or f"{method} {path} returned {resp.status_code}",
                status_code=resp.status_code,
            )
        return resp.json()
