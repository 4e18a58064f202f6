"""Layers package initialization."""
from pricepatrol_parser.layers.path_evaluator import evaluate_path
from pricepatrol_parser.layers.transformations import apply_transformations
from pricepatrol_parser.layers.resolver import (
    StructuredDataProcessor,
    SourceRule,
    SOURCE_PRIORITY,
    STRUCTURED_DATA_VERSION,
    NOT_FOUND_SENTINEL,
)

__all__ = [
    "evaluate_path",
    "apply_transformations",
    "StructuredDataProcessor",
    "SourceRule",
    "SOURCE_PRIORITY",
    "STRUCTURED_DATA_VERSION",
    "NOT_FOUND_SENTINEL",
]
