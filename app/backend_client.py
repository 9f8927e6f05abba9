"""HTTP client used by the Streamlit app to talk to the property API."""

from __future__ import annotations

import os
from typing import Any, Dict, List, Optional

import requests

DEFAULT_TIMEOUT = 10


class ApiError(Exception):
    """A failed API call; ``message`` is safe to show next to the form."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class BackendClient:
    def __init__(self, base_url: Optional[str] = None, session: Optional[Any] = None) -> None:
        self.base_url = (base_url or os.getenv("API_BASE_URL", "http://localhost:4000")).rstrip("/")
        # anything with requests.Session's get/post/patch/delete works here
        self.session = session or requests.Session()

    def is_available(self) -> bool:
        try:
            resp = self.session.get(f"{self.base_url}/api/health", timeout=2)
            return resp.status_code == 200
        except requests.RequestException:
            return False

    # ------------------------------------------------------------------
    # Properties
    def list_properties(self) -> List[Dict]:
        return self._request("GET", "/api/properties", fallback="Unable to load properties") or []

    def get_property(self, property_id: str) -> Dict:
        return self._request("GET", f"/api/properties/{property_id}", fallback="Unable to load property")

    def create_property(self, payload: Dict) -> Dict:
        return self._request("POST", "/api/properties", payload, fallback="Unable to create property")

    def delete_property(self, property_id: str) -> None:
        self._request("DELETE", f"/api/properties/{property_id}", fallback="Unable to delete property")

    # ------------------------------------------------------------------
    # Phases and units
    def create_phase(self, property_id: str, name: str) -> Dict:
        data = self._request(
            "POST", f"/api/properties/{property_id}/phases", {"name": name}, fallback="Unable to add phase"
        )
        return data["phase"]

    def add_unit(self, property_id: str, payload: Dict) -> Dict:
        return self._request("POST", f"/api/properties/{property_id}/units", payload, fallback="Unable to add unit")

    def get_unit(self, property_id: str, unit_id: str) -> Dict:
        return self._request("GET", f"/api/properties/{property_id}/units/{unit_id}", fallback="Unable to load unit")

    def update_unit(self, property_id: str, unit_id: str, payload: Dict) -> Dict:
        return self._request(
            "PATCH", f"/api/properties/{property_id}/units/{unit_id}", payload, fallback="Unable to update unit"
        )

    def delete_unit(self, property_id: str, unit_id: str) -> Dict:
        return self._request(
            "DELETE", f"/api/properties/{property_id}/units/{unit_id}", fallback="Unable to delete unit"
        )

    # ------------------------------------------------------------------
    # Milestones
    def add_milestone(self, property_id: str, unit_id: str, payload: Dict) -> Dict:
        return self._request(
            "POST",
            f"/api/properties/{property_id}/units/{unit_id}/milestones",
            payload,
            fallback="Unable to add milestone",
        )

    def update_milestone(self, property_id: str, unit_id: str, payload: Dict) -> Dict:
        return self._request(
            "PATCH",
            f"/api/properties/{property_id}/units/{unit_id}/milestones",
            payload,
            fallback="Unable to update milestone",
        )

    # ------------------------------------------------------------------
    def _request(self, method: str, path: str, payload: Optional[Dict] = None, fallback: str = "Request failed") -> Any:
        kwargs: Dict[str, Any] = {"timeout": DEFAULT_TIMEOUT}
        if payload is not None:
            kwargs["json"] = payload
        try:
            resp = self.session.request(method, f"{self.base_url}{path}", **kwargs)
        except requests.RequestException as exc:
            raise ApiError(f"{fallback}: {exc}") from exc
        if resp.status_code == 204:
            return None
        body = self._json(resp)
        if resp.status_code >= 400:
            raise ApiError(body.get("error") or fallback, resp.status_code)
        return body.get("data")

    @staticmethod
    def _json(resp) -> Dict:
        try:
            body = resp.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}
