"""
Tests for the page fetcher, with the network stubbed by httpx.MockTransport.
"""

import httpx
import pytest

from pricepatrol_parser.config import config
from pricepatrol_parser.adapters.page_fetcher import PageFetcher


def make_transport(html: str, status_code: int = 200, seen: list = None) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(status_code, text=html)

    return httpx.MockTransport(handler)


class TestPageFetcher:
    """Fetching pages for extraction."""

    @pytest.mark.asyncio
    async def test_fetch_html_sends_browser_headers(self, product_html):
        seen = []
        fetcher = PageFetcher(transport=make_transport(product_html, seen=seen))

        response = await fetcher.fetch_html("https://shop.example/p/tcl")

        assert response.status_code == 200
        assert seen[0].headers["User-Agent"] == config.USER_AGENT

    @pytest.mark.asyncio
    async def test_fetch_extractor(self, product_html):
        fetcher = PageFetcher(transport=make_transport(product_html))

        extractor = await fetcher.fetch_extractor("https://shop.example/p/tcl")
        payload = extractor.extract_all()

        assert payload.url == "https://shop.example/p/tcl"
        assert payload.json_ld[0]["name"] == "TCL 65"
        # registers recovered from the inline script
        assert payload.data_layers["dataLayer"][0]["product"]["sku"] == "N242346"

    @pytest.mark.asyncio
    async def test_http_error_is_raised(self):
        fetcher = PageFetcher(transport=make_transport("gone", status_code=404))

        with pytest.raises(httpx.HTTPStatusError):
            await fetcher.fetch_html("https://shop.example/missing")
