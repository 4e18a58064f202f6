"""
Tests for the HTTP service.
"""

import httpx
import pytest
from fastapi.testclient import TestClient

from pricepatrol_parser import main
from pricepatrol_parser.adapters.page_fetcher import PageFetcher


@pytest.fixture
def client() -> TestClient:
    return TestClient(main.app)


class TestHealthAndCapabilities:
    """Informational endpoints."""

    def test_health(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "version": main.processor.get_version()}

    def test_capabilities(self, client):
        response = client.get("/api/capabilities")

        assert response.status_code == 200
        assert response.json()["jsonLd"] is True
        assert response.json()["customDataLayers"] is True


class TestValidate:
    """Payload validation endpoint."""

    def test_valid_payload(self, client, mock_structured_data):
        response = client.post("/api/validate", json=mock_structured_data)

        assert response.json() == {"valid": True}

    def test_invalid_payload(self, client):
        response = client.post("/api/validate", json={"jsonLd": "x", "metaTags": {}, "dataLayers": {}})

        assert response.json() == {"valid": False}


class TestResolve:
    """Recipe resolution endpoint."""

    def test_resolve_recipe(self, client, mock_structured_data):
        body = {
            "payload": mock_structured_data,
            "selectors": {
                "price": {"jsonLd": "0.offers.price", "transformations": [{"type": "parseNumber"}]},
                "currency": {"metaTags": "og:price:currency"},
                "nonexistent": {"jsonLd": "0.missing"},
            },
        }

        response = client.post("/api/resolve", json=body)
        data = response.json()

        assert response.status_code == 200
        assert data["fields"]["price"] == {
            "value": 1399.0,
            "source": "jsonLd",
            "path": "0.offers.price",
            "confidence": 0.9,
        }
        assert data["fields"]["currency"]["value"] == "NZD"
        assert data["missing"] == ["nonexistent"]
        assert data["trace_id"]

    def test_invalid_payload_rejected(self, client):
        body = {"payload": {"jsonLd": "not an array"}, "selectors": {"sku": {"jsonLd": "0.sku"}}}

        response = client.post("/api/resolve", json=body)

        assert response.status_code == 422

    def test_invalid_selector_rejected(self, client, mock_structured_data):
        body = {"payload": mock_structured_data, "selectors": {"sku": {"jsonLd": "0.sku", "regex": "("}}}

        response = client.post("/api/resolve", json=body)

        assert response.status_code == 422


class TestExtract:
    """Extraction endpoints."""

    def test_extract_from_html(self, client, product_html):
        body = {
            "html": product_html,
            "url": "https://shop.example/p/tcl",
            "selectors": {"title": "h1.product-title"},
        }

        response = client.post("/api/extract", json=body)
        data = response.json()

        assert response.status_code == 200
        assert data["has_structured_data"] is True
        assert data["custom_data"] == {"title": "TCL 65"}
        assert data["submission"]["source"] == "API"
        assert data["submission"]["url"] == "https://shop.example/p/tcl"
        assert data["submission"]["data"]["jsonLd"][0]["name"] == "TCL 65"
        assert data["submission"]["data"]["metaTags"]["og:title"] == "TCL 65 Inch TV"

    def test_extract_from_url(self, client, product_html, monkeypatch):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, text=product_html))
        monkeypatch.setattr(main, "page_fetcher", PageFetcher(transport=transport))

        response = client.post("/api/extract-url", json={"url": "https://shop.example/p/tcl"})
        data = response.json()

        assert response.status_code == 200
        assert data["submission"]["source"] == "SCRAPER"
        assert data["submission"]["data"]["dataLayers"]["dataLayer"][0]["event"] == "productView"

    def test_extract_from_url_fetch_failure(self, client, monkeypatch):
        transport = httpx.MockTransport(lambda request: httpx.Response(500, text="error"))
        monkeypatch.setattr(main, "page_fetcher", PageFetcher(transport=transport))

        response = client.post("/api/extract-url", json={"url": "https://shop.example/p/tcl"})

        assert response.status_code == 502
