"""Pytest shared fixtures: stubbed SentinelOne API and sample objects."""
import json
import pathlib
import sys
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest
import requests

from s1provision.core.sentinelone import API_BASE_PATH, SentinelOneClient

TENANT_URL = "https://tenant.example.net"
API_KEY = "test-api-key"


# ─────────────────────────────────────────────────────────────────────────────
# Stub HTTP layer
# ─────────────────────────────────────────────────────────────────────────────
class StubResponse:
    def __init__(self, payload: Any = None, status_code: int = 200, raw: Optional[str] = None):
        self._payload = payload
        self.status_code = status_code
        self.text = raw if raw is not None else json.dumps(payload)

    def json(self):
        return json.loads(self.text)


def envelope(data: Any = None, errors: Optional[list] = None, pagination: Optional[dict] = None) -> dict:
    """Build a SentinelOne response envelope."""
    body: Dict[str, Any] = {"data": data}
    if errors is not None:
        body["errors"] = errors
    if pagination is not None:
        body["pagination"] = pagination
    return body


@dataclass
class RecordedCall:
    method: str
    path: str
    json: Any = None
    params: Optional[dict] = None
    headers: Dict[str, str] = field(default_factory=dict)
    timeout: Any = None


class FakeSentinelOne:
    """Replacement for ``requests.request`` that serves canned responses per route.

    Routes are keyed by (METHOD, path below the API base). A route holds either
    a list of responses (consumed in order, the last one repeats) or a callable
    receiving the RecordedCall.
    """

    def __init__(self):
        self.calls: List[RecordedCall] = []
        self.routes: Dict[Tuple[str, str], Any] = {}

    def add(self, method: str, path: str, payload: Any = None, status_code: int = 200, raw: Optional[str] = None):
        self.routes.setdefault((method.upper(), path), []).append(StubResponse(payload, status_code, raw))
        return self

    def handle(self, method: str, path: str, fn: Callable[[RecordedCall], StubResponse]):
        self.routes[(method.upper(), path)] = fn
        return self

    def calls_to(self, method: str, path: str) -> List[RecordedCall]:
        return [c for c in self.calls if c.method == method.upper() and c.path == path]

    def __call__(self, method, url, json=None, params=None, headers=None, timeout=None, **kwargs):
        prefix = f"{TENANT_URL}{API_BASE_PATH}"
        assert url.startswith(prefix), f"Unexpected URL: {url}"
        call = RecordedCall(method.upper(), url[len(prefix):], json, params, dict(headers or {}), timeout)
        self.calls.append(call)
        route = self.routes.get((call.method, call.path))
        if route is None:
            raise AssertionError(f"Unexpected {call.method} {call.path}")
        if callable(route):
            return route(call)
        return route.pop(0) if len(route) > 1 else route[0]


# ─────────────────────────────────────────────────────────────────────────────
# Network Guard Rails
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture(autouse=True)
def _block_network(monkeypatch, request):
    """Prevent unit tests from hitting a live tenant."""
    if request.node.get_closest_marker("integration"):
        return

    def _refuse(method, url, *args, **kwargs):
        raise RuntimeError(f"Unexpected HTTP {method} in unit test: {url}")

    monkeypatch.setattr(requests, "request", _refuse)


@pytest.fixture()
def fake_api(monkeypatch):
    fake = FakeSentinelOne()
    monkeypatch.setattr(requests, "request", fake)
    return fake


@pytest.fixture()
def client():
    return SentinelOneClient(TENANT_URL, API_KEY)


# ─────────────────────────────────────────────────────────────────────────────
# Sample wire objects
# ─────────────────────────────────────────────────────────────────────────────
def account_obj(account_id="acc-1", name="Acme", state="active", expiration="2030-01-01T00:00:00Z", **extra):
    obj = {
        "id": account_id,
        "name": name,
        "accountType": "Paid",
        "billingMode": "subscription",
        "expiration": expiration,
        "externalId": "ext-1",
        "state": state,
    }
    obj.update(extra)
    return obj


def user_obj(user_id="user-1", email="alice@example.com", scope_roles=None):
    return {
        "id": user_id,
        "email": email,
        "emailVerified": True,
        "twoFaStatus": "configured",
        "scope": "account",
        "scopeRoles": scope_roles or [],
    }


def role_obj(role_id="role-admin", name="Admin", scope_id="acc-1"):
    return {
        "id": role_id,
        "name": name,
        "accountName": "Acme",
        "predefinedRole": True,
        "scope": "account",
        "scopeId": scope_id,
        "usersInRoles": 2,
    }
