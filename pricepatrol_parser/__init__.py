"""
pricepatrol-parser

Structured data parsing for the Price Patrol ecosystem: pulls JSON-LD, meta
tags, data layers and microdata out of product pages and resolves named
fields from them with declarative selectors.
"""

__version__ = "1.0.0"

from pricepatrol_parser.models.payload import (  # noqa: E402
    DataSource,
    ExtractorCapabilities,
    StructuredDataPayload,
    StructuredDataSubmission,
    SubmissionSource,
)
from pricepatrol_parser.models.selector import (  # noqa: E402
    ExtractedField,
    FieldSelector,
    FieldTransformation,
    TransformationType,
)
from pricepatrol_parser.layers.path_evaluator import evaluate_path  # noqa: E402
from pricepatrol_parser.layers.resolver import (  # noqa: E402
    StructuredDataProcessor,
    STRUCTURED_DATA_VERSION,
)
from pricepatrol_parser.adapters.page_extractor import (  # noqa: E402
    PageDataExtractor,
    ExtractionContextError,
)

__all__ = [
    "__version__",
    "DataSource",
    "ExtractorCapabilities",
    "StructuredDataPayload",
    "StructuredDataSubmission",
    "SubmissionSource",
    "ExtractedField",
    "FieldSelector",
    "FieldTransformation",
    "TransformationType",
    "evaluate_path",
    "StructuredDataProcessor",
    "STRUCTURED_DATA_VERSION",
    "PageDataExtractor",
    "ExtractionContextError",
]
