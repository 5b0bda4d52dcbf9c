"""
Integration tests for router completeness.

Verifies every public endpoint is routed (never a routing 404) and that
each requires authentication except /health.
"""

import pytest

pytestmark = pytest.mark.integration


# (method, path, allowed statuses)
# 404 is allowed only where it means "resource not found"
KEY_ENDPOINTS = [
    ("GET", "/health", [200]),
    ("GET", "/stats", [200, 404]),
    ("POST", "/stats/initialize", [200]),
    ("GET", "/badges", [200]),
    ("GET", "/plans/active", [200, 404]),
    ("POST", "/plans/generate", [422]),
    ("POST", "/sessions", [422]),
    ("POST", "/sessions/test-id/pause", [404]),
    ("POST", "/sessions/test-id/resume", [404]),
    ("POST", "/sessions/test-id/finish", [422]),
    ("GET", "/progress/weeks", [200]),
]

PROTECTED_ENDPOINTS = [(m, p) for m, p, _ in KEY_ENDPOINTS if p != "/health"]


@pytest.mark.parametrize("method,path,allowed", KEY_ENDPOINTS)
def test_endpoint_is_routed(client, method, path, allowed):
    response = client.request(method, path, json={} if method == "POST" else None)
    assert response.status_code in allowed, (
        f"{method} {path} returned {response.status_code}: {response.text}"
    )


@pytest.mark.parametrize("method,path", PROTECTED_ENDPOINTS)
def test_endpoint_requires_auth(client, app, method, path):
    from api.deps import get_current_user

    app.dependency_overrides.pop(get_current_user, None)
    response = client.request(method, path, json={} if method == "POST" else None)

    assert response.status_code == 401


def test_openapi_lists_all_routes(app):
    paths = set(app.openapi()["paths"])
    expected = {p for _, p, _ in KEY_ENDPOINTS if "test-id" not in p}
    assert expected <= paths
    assert "/sessions/{session_id}/finish" in paths
