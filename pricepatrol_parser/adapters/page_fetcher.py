"""
Page Fetcher Adapter for the Price Patrol structured data parser.
Downloads a product page so it can be run through the page extractor.
"""
from typing import Optional

import httpx

from pricepatrol_parser.config import config
from pricepatrol_parser.adapters.page_extractor import PageDataExtractor
from pricepatrol_parser.utils.logger import LayerLogger


class PageFetcher:
    """
    Fetches pages over HTTP.

    Static HTML only: registers that a page builds at runtime are recovered
    from inline script assignments where possible.
    """

    def __init__(
        self,
        timeout: int = config.REQUEST_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout
        self.transport = transport
        self.logger = LayerLogger("page_fetcher")

    async def fetch_html(self, url: str) -> httpx.Response:
        """
        Fetch a page.

        Raises:
            httpx.HTTPError: on transport failure or a non-2xx status
        """
        self.logger.log_action("fetch_html", "started", url=url)

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                transport=self.transport,
            ) as client:
                response = await client.get(url, headers=self._get_headers())
                response.raise_for_status()

            self.logger.log_action(
                "fetch_html",
                "completed",
                url=url,
                status_code=response.status_code,
                content_length=len(response.text)
            )
            return response

        except httpx.HTTPError as e:
            self.logger.log_error(
                f"Failed to fetch URL: {str(e)}",
                error_type="http_error",
                url=url
            )
            raise

    async def fetch_extractor(self, url: str) -> PageDataExtractor:
        """Fetch a page and wrap it in an extractor keyed to its final URL."""
        response = await self.fetch_html(url)
        return PageDataExtractor(response.text, url=str(response.url))

    def _get_headers(self) -> dict:
        """Get request headers mimicking a browser."""
        return {
            "User-Agent": config.USER_AGENT,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.5",
        }
