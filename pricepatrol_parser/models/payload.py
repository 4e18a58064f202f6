"""
Payload models for the Price Patrol structured data parser.
A payload is everything the page extractor pulled out of one page; the
selector resolver reads fields out of it.
"""
from typing import Any, Dict, List, Optional
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field


class DataSource(str, Enum):
    """Named structured data source within a payload."""
    JSON_LD = "jsonLd"
    META_TAGS = "metaTags"
    DATA_LAYERS = "dataLayers"
    MICRODATA = "microdata"
    CUSTOM_DATA_LAYERS = "customDataLayers"


class SubmissionSource(str, Enum):
    """Where a structured data submission was produced."""
    BROWSER_EXTENSION = "BROWSER_EXTENSION"
    API = "API"
    SCRAPER = "SCRAPER"


class ExtractorCapabilities(BaseModel):
    """Which extraction categories an extractor supports."""
    model_config = ConfigDict(populate_by_name=True)

    json_ld: bool = Field(default=False, alias="jsonLd")
    meta_tags: bool = Field(default=False, alias="metaTags")
    data_layers: bool = Field(default=False, alias="dataLayers")
    microdata: bool = False
    custom_data_layers: bool = Field(default=False, alias="customDataLayers")


class StructuredDataPayload(BaseModel):
    """
    Structured data extracted from a single page.

    Each source is independently shaped and may be empty:
    - json_ld: parsed JSON-LD blocks, in document order
    - meta_tags: flat meta key -> content (keys such as "og:title")
    - data_layers: recognised page registers -> their value
    - microdata: one flattened object per itemscope
    - custom_data_layers: caller-defined registers, lowest priority

    url, page_title, timestamp and extractor_version are passthrough page
    metadata; the resolver never reads them.
    """
    model_config = ConfigDict(populate_by_name=True)

    version: Optional[str] = None
    json_ld: List[Any] = Field(default_factory=list, alias="jsonLd")
    meta_tags: Dict[str, str] = Field(default_factory=dict, alias="metaTags")
    data_layers: Dict[str, Any] = Field(default_factory=dict, alias="dataLayers")
    microdata: Optional[List[Any]] = None
    custom_data_layers: Optional[Dict[str, Any]] = Field(default=None, alias="customDataLayers")
    url: str = ""
    page_title: str = Field(default="", alias="pageTitle")
    timestamp: str = ""
    extractor_version: str = Field(default="", alias="extractorVersion")

    def get_source(self, source: DataSource) -> Any:
        """Return the data held for a source (may be None or empty)."""
        return getattr(self, _SOURCE_ATTRIBUTES[source])

    def to_wire(self) -> Dict[str, Any]:
        """Dump using the camelCase wire names, dropping unset optionals."""
        return self.model_dump(by_alias=True, exclude_none=True)


_SOURCE_ATTRIBUTES = {
    DataSource.JSON_LD: "json_ld",
    DataSource.META_TAGS: "meta_tags",
    DataSource.DATA_LAYERS: "data_layers",
    DataSource.MICRODATA: "microdata",
    DataSource.CUSTOM_DATA_LAYERS: "custom_data_layers",
}


class StructuredDataSubmission(BaseModel):
    """A payload wrapped with the details of who extracted it."""
    model_config = ConfigDict(populate_by_name=True)

    extractor_version: str = Field(alias="extractorVersion")
    url: str
    timestamp: str
    source: SubmissionSource
    capabilities: ExtractorCapabilities
    data: StructuredDataPayload
