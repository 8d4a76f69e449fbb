"""Low-level HTTP client for the SentinelOne management API.

Handles authentication headers, the common response envelope and failure
classification. No business logic lives here.
"""
from __future__ import annotations
import logging
from typing import Any, Dict, Optional

import requests

from .exceptions import APIReportedError, ResponseDecodeError, ServerFaultError, TransportError
from .models import APIErrorDetail, APIResponse, Pagination

API_BASE_PATH = "/web/api/v2.1"
REQUEST_TIMEOUT = 30

logger = logging.getLogger(__name__)


class SentinelOneClient:
    """HTTP client for the SentinelOne API with envelope decoding.

    Features:
    - ApiToken authentication on every call
    - Server fault / API error classification
    - Each failure logged once with method and URL

    The client keeps no session state between calls and is safe for
    sequential reuse.

    Usage:
        client = SentinelOneClient("https://tenant.sentinelone.net", "api-key")
        resp = client.get("/accounts", params={"name": "Acme", "limit": "1"})
        accounts = resp.data
    """

    def __init__(self, tenant_url: str, api_key: str, timeout: float = REQUEST_TIMEOUT):
        """Initialize SentinelOne client.

        Args:
            tenant_url: Base URL of the SentinelOne tenant
            api_key: API token used for authentication
            timeout: Per-request timeout in seconds
        """
        self.tenant_url = tenant_url.rstrip("/")
        self.timeout = timeout
        self._api_key = api_key

    def url_for(self, path: str) -> str:
        return f"{self.tenant_url}{API_BASE_PATH}{path}"

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"ApiToken {self._api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def execute(
        self,
        method: str,
        path: str,
        body: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> APIResponse:
        """Execute an API call and decode the response envelope.

        Args:
            method: HTTP method (GET, POST, PUT, ...)
            path: Endpoint path below the API base (e.g., "/accounts")
            body: JSON request body
            params: Query parameters

        Returns:
            Decoded envelope; ``data`` is left for the caller to decode

        Raises:
            TransportError: Request could not be issued
            ServerFaultError: Status code >= 405
            ResponseDecodeError: Body is not a JSON envelope
            APIReportedError: Envelope contains one or more errors
        """
        method = method.upper()
        url = self.url_for(path)
        logger.debug(f"method={method} url={url} executing request")

        try:
            resp = requests.request(
                method,
                url,
                json=body,
                params=params,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            error = TransportError(method, url, "failed to execute request", str(exc))
            logger.error(f"method={method} url={url} {error}")
            raise error from exc

        self._check_status(method, url, resp)
        envelope = self._decode_envelope(method, url, resp)

        if envelope.errors:
            for api_error in envelope.errors:
                if api_error.detail:
                    logger.error(
                        f"method={method} url={url} error_code={api_error.code} "
                        f"{api_error.title}: {api_error.detail}"
                    )
                else:
                    logger.error(f"method={method} url={url} error_code={api_error.code} {api_error.title}")
            raise APIReportedError(method, url, len(envelope.errors))

        return envelope

    def get(self, path: str, params: Optional[Dict[str, str]] = None) -> APIResponse:
        """Execute GET request."""
        return self.execute("GET", path, params=params)

    def post(self, path: str, json: Optional[Dict[str, Any]] = None) -> APIResponse:
        """Execute POST request."""
        return self.execute("POST", path, body=json)

    def put(self, path: str, json: Optional[Dict[str, Any]] = None) -> APIResponse:
        """Execute PUT request."""
        return self.execute("PUT", path, body=json)

    def _check_status(self, method: str, url: str, resp: requests.Response) -> None:
        """Classify fatal HTTP status codes.

        Statuses below 405 fall through so the envelope errors can be logged.
        """
        status = resp.status_code
        if status >= 500:
            error = ServerFaultError(method, url, status, f"request returned server error code {status}")
        elif status >= 405:
            error = ServerFaultError(method, url, status, "method is not allowed for endpoint")
        else:
            return
        logger.error(f"method={method} url={url} status_code={status} {error}")
        raise error

    def _decode_envelope(self, method: str, url: str, resp: requests.Response) -> APIResponse:
        try:
            payload = resp.json()
        except ValueError as exc:
            error = ResponseDecodeError(f"failed to unmarshal response from request: {exc}", method, url)
            logger.error(f"method={method} url={url} {error}")
            raise error from exc

        if not isinstance(payload, dict):
            error = ResponseDecodeError(
                "failed to unmarshal response from request: expected a JSON object", method, url
            )
            logger.error(f"method={method} url={url} {error}")
            raise error

        try:
            errors = [
                APIErrorDetail(
                    code=int(item.get("code") or 0),
                    title=item.get("title") or "",
                    detail=item.get("detail") or "",
                )
                for item in payload.get("errors") or []
            ]
            raw_page = payload.get("pagination") or {}
            pagination = Pagination(
                next_cursor=raw_page.get("nextCursor"),
                total_items=int(raw_page.get("totalItems") or 0),
            )
        except (AttributeError, TypeError, ValueError) as exc:
            error = ResponseDecodeError(f"failed to unmarshal response from request: {exc}", method, url)
            logger.error(f"method={method} url={url} {error}")
            raise error from exc

        return APIResponse(errors=errors, pagination=pagination, data=payload.get("data"))
