"""
Tests for page routes, static assets, health probes and route classification.
"""
import pytest
from fastapi.testclient import TestClient

from svgshare.core.routing import RouteClass, classify_route


class TestPages:
    @pytest.mark.parametrize("path", ["/", "/dashboard", "/admin", "/s/some-share-id"])
    def test_pages_served_without_session(self, client: TestClient, path):
        response = client.get(path)
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")

    @pytest.mark.parametrize("path", [
        "/js/api.js",
        "/js/dashboard.js",
        "/js/components/svg-viewer.js",
        "/css/style.css",
    ])
    def test_static_assets(self, client: TestClient, path):
        assert client.get(path).status_code == 200

    def test_unknown_asset(self, client: TestClient):
        assert client.get("/js/missing.js").status_code == 404


class TestHealth:
    def test_live(self, client: TestClient):
        assert client.get("/api/health/live").json() == {"alive": True}

    def test_ready(self, client: TestClient):
        assert client.get("/api/health/ready").json() == {"ready": True}

    def test_health(self, client: TestClient):
        data = client.get("/api/health").json()
        assert data["status"] == "healthy"
        assert data["checks"]["storage"]["backend"] == "local"


class TestRouteClassification:
    @pytest.mark.parametrize("path,expected", [
        ("/", RouteClass.ASSET),
        ("/dashboard", RouteClass.ASSET),
        ("/s/abc", RouteClass.ASSET),
        ("/js/api.js", RouteClass.ASSET),
        ("/auth/login", RouteClass.AUTH),
        ("/auth/me", RouteClass.AUTH),
        ("/api/s/abc", RouteClass.PUBLIC_SHARE),
        ("/raw/abc", RouteClass.PUBLIC_SHARE),
        ("/api/files", RouteClass.PROTECTED_API),
        ("/api/admin/users", RouteClass.PROTECTED_API),
    ])
    def test_classify(self, path, expected):
        assert classify_route(path) == expected
