from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

import requests

from ..excel.rate_guide_parser import validate_payload
from ..models.config_models import ApiConfig
from ..models.parsed_row import ParsedRow
from ..models.rate_guide import RateGuide, RateGuidePayload

"""REST client for the rate guide resource.

The backend owns persistence; this client only moves payloads:

    GET    /rate-guides                -> list of entries
    POST   /rate-guides                -> create one entry
    PATCH  /rate-guides/{id}           -> partial update
    DELETE /rate-guides/{id}
    POST   /rate-guides/bulk-replace   -> {"entries": [...]} replaces everything, {"inserted": n}

Bulk replace is all-or-nothing on the server side; the client refuses to send
rows that failed validation so a partly broken file never wipes the table.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "ApiError",
    "RateGuideClient",
]


class ApiError(Exception):
    """Non-2xx response or transport failure."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message if status is None else f"HTTP {status}: {message}")
        self.status = status


def _error_message(resp: requests.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text.strip() or resp.reason or "request failed"
    if isinstance(body, dict):
        msg = body.get("message") or body.get("error")
        if isinstance(msg, list):
            return "; ".join(str(m) for m in msg)
        if msg:
            return str(msg)
    return str(body)


class RateGuideClient:
    """Thin wrapper over a requests.Session bound to the API base URL."""

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.setdefault("Accept", "application/json")
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

    @classmethod
    def from_config(cls, cfg: ApiConfig) -> RateGuideClient:
        if not cfg.base_url:
            raise ApiError("API base URL is not configured (set ERP_API_BASE_URL or api.base_url)")
        return cls(cfg.base_url, token=cfg.token, timeout=cfg.timeout_seconds)

    def _request(self, method: str, path: str, json: Any = None) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        logger.debug(f"{method} {url}")
        try:
            resp = self.session.request(method, url, json=json, timeout=self.timeout)
        except requests.RequestException as e:
            raise ApiError(f"{method} {url} failed: {e}") from e
        if not resp.ok:
            raise ApiError(_error_message(resp), status=resp.status_code)
        if resp.status_code == 204 or not resp.content:
            return None
        return resp.json()

    def list_rate_guides(self) -> list[RateGuide]:
        data = self._request("GET", "rate-guides")
        return [RateGuide.from_api(item) for item in data or []]

    def create_rate_guide(self, payload: RateGuidePayload) -> RateGuide:
        errors = validate_payload(payload)
        if errors:
            raise ValueError("; ".join(errors))
        return RateGuide.from_api(self._request("POST", "rate-guides", json=payload.to_api()))

    def update_rate_guide(self, guide_id: str, changes: dict[str, Any]) -> RateGuide:
        """Partial update; ``changes`` uses wire (camelCase) keys."""
        return RateGuide.from_api(self._request("PATCH", f"rate-guides/{guide_id}", json=changes))

    def delete_rate_guide(self, guide_id: str) -> None:
        self._request("DELETE", f"rate-guides/{guide_id}")

    def bulk_replace(self, rows: Iterable[ParsedRow]) -> int:
        """Replace every server-side entry with rows. Returns the inserted count.

        Raises:
            ValueError: any row carries validation errors, or there are no rows
            ApiError: the backend rejected the request
        """
        rows = list(rows)
        if not rows:
            raise ValueError("no rows to import")
        bad = [r.row_number for r in rows if not r.is_valid]
        if bad:
            raise ValueError(f"rows with validation errors: {bad}")
        body = {"entries": [r.data.to_api() for r in rows]}
        result = self._request("POST", "rate-guides/bulk-replace", json=body)
        inserted = int((result or {}).get("inserted", len(rows)))
        logger.info(f"bulk replace: inserted={inserted}")
        return inserted
