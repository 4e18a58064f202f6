"""
Selector Resolver for the Price Patrol structured data parser.
Resolves recipe fields out of a structured data payload.
"""
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from pydantic import ValidationError

from pricepatrol_parser import __version__
from pricepatrol_parser.models.payload import DataSource, StructuredDataPayload
from pricepatrol_parser.models.selector import ExtractedField, FieldSelector
from pricepatrol_parser.layers.path_evaluator import evaluate_path
from pricepatrol_parser.layers.transformations import apply_selector_regex, apply_transformations
from pricepatrol_parser.utils.logger import LayerLogger

STRUCTURED_DATA_VERSION = __version__

# Emitted by some upstream producers in place of a missing value
NOT_FOUND_SENTINEL = "Not found"


@dataclass(frozen=True)
class SourceRule:
    """A data source and the confidence given to values read from it."""
    source: DataSource
    confidence: float


# Highest priority first
SOURCE_PRIORITY: Tuple[SourceRule, ...] = (
    SourceRule(DataSource.JSON_LD, 0.9),
    SourceRule(DataSource.META_TAGS, 0.8),
    SourceRule(DataSource.DATA_LAYERS, 0.7),
    SourceRule(DataSource.MICRODATA, 0.6),
    SourceRule(DataSource.CUSTOM_DATA_LAYERS, 0.5),
)

PayloadLike = Union[StructuredDataPayload, Mapping[str, Any]]
SelectorLike = Union[FieldSelector, Mapping[str, Any]]

_REQUIRED_STRING_FIELDS = ("url", "pageTitle", "timestamp", "extractorVersion")


class StructuredDataProcessor:
    """
    Resolves fields from structured data with per-field selectors.

    Sources are tried in SOURCE_PRIORITY order and the first one whose path
    yields a value wins. The processor holds no state besides its version
    string, so one instance can serve any number of concurrent callers.
    """

    def __init__(self, version: str = STRUCTURED_DATA_VERSION):
        self._version = version
        self.logger = LayerLogger("selector_resolver")

    def resolve_field(
        self,
        payload: PayloadLike,
        selector: SelectorLike,
    ) -> Optional[ExtractedField]:
        """
        Resolve a single selector against a payload.

        Args:
            payload: StructuredDataPayload, or a mapping using the camelCase
                source names
            selector: FieldSelector, or a mapping that validates as one

        Returns:
            ExtractedField from the highest priority source that matched,
            or None when no configured source has the field.
        """
        if not isinstance(selector, FieldSelector):
            selector = FieldSelector.model_validate(selector)

        previous: Optional[DataSource] = None
        for rule in SOURCE_PRIORITY:
            path = selector.path_for(rule.source)
            data = _source_data(payload, rule.source)
            if not path or not data:
                continue

            raw = evaluate_path(data, path)
            if raw is None or raw == NOT_FOUND_SENTINEL:
                previous = rule.source
                continue

            if previous is not None:
                self.logger.log_fallback(
                    from_source=previous.value,
                    to_source=rule.source.value,
                    reason="path_missed",
                )

            value = apply_transformations(raw, selector.transformations)
            value = apply_selector_regex(value, selector.regex)

            self.logger.log_resolution(rule.source.value, path, rule.confidence)
            return ExtractedField(
                value=value,
                source=rule.source,
                path=path,
                confidence=rule.confidence,
            )

        self.logger.log_resolution(None, None, None)
        return None

    def resolve_recipe(
        self,
        payload: PayloadLike,
        selectors: Mapping[str, SelectorLike],
    ) -> Dict[str, ExtractedField]:
        """
        Resolve every selector of a recipe.

        Fields that could not be resolved are left out of the result, so
        check for key presence rather than truthiness.
        """
        result: Dict[str, ExtractedField] = {}
        missing = []

        for field_name, selector in selectors.items():
            try:
                extracted = self.resolve_field(payload, selector)
            except ValidationError as e:
                self.logger.log_error(
                    f"Invalid selector for field '{field_name}': {e.error_count()} error(s)",
                    error_type="invalid_selector",
                    field=field_name,
                )
                missing.append(field_name)
                continue

            if extracted is None:
                missing.append(field_name)
            else:
                result[field_name] = extracted

        self.logger.log_action(
            "resolve_recipe",
            "completed",
            fields_resolved=list(result.keys()),
            fields_missing=missing,
        )
        return result

    @staticmethod
    def is_valid_payload(candidate: Any) -> bool:
        """Structural check that a candidate looks like a payload."""
        if isinstance(candidate, StructuredDataPayload):
            return True
        if not isinstance(candidate, Mapping):
            return False

        return (
            isinstance(candidate.get("jsonLd"), (list, tuple))
            and isinstance(candidate.get("metaTags"), Mapping)
            and isinstance(candidate.get("dataLayers"), Mapping)
            and all(isinstance(candidate.get(key), str) for key in _REQUIRED_STRING_FIELDS)
        )

    def get_version(self) -> str:
        """Version string this processor was created with."""
        return self._version


def _source_data(payload: PayloadLike, source: DataSource) -> Any:
    if isinstance(payload, StructuredDataPayload):
        return payload.get_source(source)
    if isinstance(payload, Mapping):
        return payload.get(source.value)
    return None
