import copy

import pytest

from pricepatrol_parser.layers.resolver import StructuredDataProcessor


MOCK_STRUCTURED_DATA = {
    "version": "1.0.0",
    "jsonLd": [
        {
            "@type": "Product",
            "name": "TCL 65 Inch P7K QLED 4K Google TV",
            "sku": "N242346",
            "brand": {"@type": "Brand", "name": "TCL"},
            "offers": {
                "@type": "Offer",
                "price": "1399.00",
                "priceCurrency": "NZD",
                "availability": "https://schema.org/InStock",
            },
        }
    ],
    "metaTags": {
        "og:title": "TCL 65 Inch P7K QLED 4K Google TV - Noel Leeming",
        "og:price:amount": "1399.00",
        "og:price:currency": "NZD",
        "product:price:amount": "1399.00",
    },
    "dataLayers": {
        "dataLayer": [
            {
                "event": "productView",
                "product": {
                    "name": "TCL 65 Inch TV",
                    "sku": "N242346",
                    "price": 1399.00,
                    "currency": "NZD",
                    "brand": "TCL",
                },
            }
        ]
    },
    "url": "https://www.noelleeming.co.nz/p/tcl-65-inch-tv/N242346.html",
    "pageTitle": "TCL 65 Inch P7K QLED 4K Google TV - Noel Leeming",
    "timestamp": "2025-01-23T10:30:00Z",
    "extractorVersion": "1.0.0",
}


PRODUCT_HTML = """<!DOCTYPE html>
<html>
<head>
<title>
  TCL 65 Inch TV - Noel Leeming
</title>
<meta charset="utf-8">
<meta property="og:title" content="TCL 65 Inch TV">
<meta name="description" content="A television">
<meta property="og:price:amount" content="1399.00">
<script type="application/ld+json">{"@type": "Product", "name": "TCL 65", "offers": {"price": "1399.00"}}</script>
<script type="application/ld+json">{ not json </script>
<script>window.dataLayer = [{"event": "productView", "product": {"sku": "N242346", "price": 1399.0}}];</script>
</head>
<body>
<div itemscope itemtype="https://schema.org/Product">
  <span itemprop="name">  TCL Television  </span>
  <span itemprop="sku" content="N242346"></span>
  <img itemprop="image" src="/tv.jpg">
  <a itemprop="url" href="/p/tcl">link</a>
  <time itemprop="releaseDate" datetime="2024-03-01">March</time>
  <div itemprop="offers" itemscope itemtype="https://schema.org/Offer">
    <span itemprop="price">1399.00</span>
    <span itemprop="priceCurrency">NZD</span>
  </div>
</div>
<h1 class="product-title"> TCL 65 </h1>
</body>
</html>
"""


@pytest.fixture
def mock_structured_data() -> dict:
    """Payload in wire form, shaped like a real product page."""
    return copy.deepcopy(MOCK_STRUCTURED_DATA)


@pytest.fixture
def processor() -> StructuredDataProcessor:
    return StructuredDataProcessor()


@pytest.fixture
def product_html() -> str:
    """Product page carrying every kind of structured data."""
    return PRODUCT_HTML
