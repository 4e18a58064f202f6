"""
Selector models for the Price Patrol structured data parser.
Recipes are a mapping of field name -> FieldSelector; resolving a selector
yields an ExtractedField.
"""
from typing import List, Optional, Union
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from pricepatrol_parser.models.payload import DataSource
from pricepatrol_parser.utils.patterns import compile_pattern


class TransformationType(str, Enum):
    """Kinds of value transformation a selector can apply."""
    REGEX = "regex"
    REPLACE = "replace"
    TRIM = "trim"
    LOWERCASE = "lowercase"
    UPPERCASE = "uppercase"
    PARSE_NUMBER = "parseNumber"
    PARSE_BOOLEAN = "parseBoolean"


class FieldTransformation(BaseModel):
    """One step of a selector's transformation pipeline."""
    type: TransformationType
    pattern: Optional[str] = None
    replacement: Optional[str] = None
    flags: Optional[str] = None

    @model_validator(mode="after")
    def _validate_pattern(self) -> "FieldTransformation":
        if self.pattern is not None:
            compile_pattern(self.pattern, self.flags)
        return self


class FieldSelector(BaseModel):
    """
    Declarative rule for one field: at most one path per data source, an
    optional standalone regex and an ordered list of transformations.

    A selector with no paths configured never matches.
    """
    model_config = ConfigDict(populate_by_name=True)

    json_ld: Optional[str] = Field(default=None, alias="jsonLd")
    meta_tags: Optional[str] = Field(default=None, alias="metaTags")
    data_layers: Optional[str] = Field(default=None, alias="dataLayers")
    microdata: Optional[str] = None
    custom_data_layers: Optional[str] = Field(default=None, alias="customDataLayers")
    regex: Optional[str] = None
    transformations: List[FieldTransformation] = Field(default_factory=list)

    @field_validator("regex")
    @classmethod
    def _validate_regex(cls, value: Optional[str]) -> Optional[str]:
        if value is not None:
            compile_pattern(value)
        return value

    def path_for(self, source: DataSource) -> Optional[str]:
        """Path configured for a source, if any."""
        return {
            DataSource.JSON_LD: self.json_ld,
            DataSource.META_TAGS: self.meta_tags,
            DataSource.DATA_LAYERS: self.data_layers,
            DataSource.MICRODATA: self.microdata,
            DataSource.CUSTOM_DATA_LAYERS: self.custom_data_layers,
        }[source]


class ExtractedField(BaseModel):
    """A resolved field value and where it came from."""
    model_config = ConfigDict(frozen=True)

    value: Union[str, bool, float, None]
    source: DataSource
    path: str
    confidence: float = Field(ge=0.0, le=1.0)
