"""Adapters package initialization."""
from pricepatrol_parser.adapters.page_extractor import (
    PageDataExtractor,
    ExtractionContextError,
    DATA_LAYER_NAMES,
)
from pricepatrol_parser.adapters.page_fetcher import PageFetcher

__all__ = ["PageDataExtractor", "ExtractionContextError", "DATA_LAYER_NAMES", "PageFetcher"]
