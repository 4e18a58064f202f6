"""
Page Extractor Adapter for the Price Patrol structured data parser.
Pulls JSON-LD, meta tags, data layers and microdata out of a page and
packages them as a StructuredDataPayload.

The page document and its global registers are handed in explicitly; the
extractor never goes looking for them.
"""
import json
import re
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from bs4 import BeautifulSoup, Tag
from soupsieve import SelectorSyntaxError

from pricepatrol_parser.config import config
from pricepatrol_parser.models.payload import ExtractorCapabilities, StructuredDataPayload
from pricepatrol_parser.utils.logger import LayerLogger

# Conventional analytics registers looked up on the page globals
DATA_LAYER_NAMES = ("dataLayer", "digitalData", "utag_data")

INVALID_JSON_MARKER = "Invalid JSON"

_REGISTER_ASSIGNMENT = re.compile(
    r"(?<![\w$.])(?:window\.)?(%s)\s*=(?!=)\s*" % "|".join(DATA_LAYER_NAMES)
)

Document = Union[str, bytes, BeautifulSoup]


class ExtractionContextError(TypeError):
    """Raised when the extractor is not given a usable page context."""


def parse_document(document: Document) -> BeautifulSoup:
    """Turn HTML text into a soup; soups pass straight through."""
    if isinstance(document, BeautifulSoup):
        return document
    if isinstance(document, (str, bytes)):
        return BeautifulSoup(document, "lxml")
    raise ExtractionContextError(
        f"A page document is required (HTML text or BeautifulSoup), got {type(document).__name__}"
    )


def extract_json_ld_data(soup: BeautifulSoup) -> List[Any]:
    """
    Parse every JSON-LD script block in document order.

    A block that is not valid JSON is kept as a placeholder
    {"error": "Invalid JSON", "content": <raw text>} so one broken block
    does not hide the others.
    """
    blocks = []
    for script in soup.find_all("script", type="application/ld+json"):
        content = script.get_text()
        try:
            blocks.append(json.loads(content))
        except json.JSONDecodeError:
            blocks.append({"error": INVALID_JSON_MARKER, "content": content})
    return blocks


def extract_meta_tags(soup: BeautifulSoup) -> Dict[str, str]:
    """Map meta tag property (or name) to its content."""
    meta_tags: Dict[str, str] = {}
    for tag in soup.find_all("meta"):
        key = tag.get("property") or tag.get("name")
        if key:
            meta_tags[key] = tag.get("content") or ""
    return meta_tags


def extract_data_layers(registers: Mapping[str, Any]) -> Dict[str, Any]:
    """Copy the recognised analytics registers that are set."""
    return extract_named_registers(registers, DATA_LAYER_NAMES)


def extract_named_registers(registers: Mapping[str, Any], names: Iterable[str]) -> Dict[str, Any]:
    """Copy the named registers whose value is set (not null, false, 0 or "")."""
    found = {}
    for name in names:
        value = registers.get(name)
        if value not in (None, False, 0, ""):
            found[name] = value
    return found


def extract_script_registers(soup: BeautifulSoup) -> Dict[str, Any]:
    """
    Recover data layer registers assigned in inline scripts.

    Handles literal assignments such as
        window.dataLayer = [{"event": "productView", ...}];
        var utag_data = {"product_id": ["N242346"]};
    Assignments whose right-hand side is not a JSON literal are ignored.
    Later assignments win.
    """
    registers: Dict[str, Any] = {}
    decoder = json.JSONDecoder()

    for script in soup.find_all("script"):
        if script.get("type") not in (None, "", "text/javascript", "application/javascript"):
            continue
        text = script.get_text()
        if not text:
            continue

        for match in _REGISTER_ASSIGNMENT.finditer(text):
            try:
                value, _ = decoder.raw_decode(text, match.end())
            except json.JSONDecodeError:
                continue
            registers[match.group(1)] = value

    return registers


def extract_microdata(soup: BeautifulSoup) -> List[Dict[str, str]]:
    """
    Flatten each itemscope into a dict of its own itemprops.

    Properties inside a nested itemscope belong to that scope only. The
    itemtype, when present, is stored under "@type".
    """
    items = []
    for element in soup.find_all(attrs={"itemscope": True}):
        item: Dict[str, str] = {}

        item_type = element.get("itemtype")
        if item_type:
            item["@type"] = item_type

        for prop in element.find_all(attrs={"itemprop": True}):
            if not _belongs_to_scope(prop, element):
                continue
            name = prop.get("itemprop")
            value = _microdata_value(prop)
            if name and value:
                item[name] = value

        items.append(item)
    return items


def _belongs_to_scope(prop: Tag, scope: Tag) -> bool:
    parent = prop.parent
    while parent is not None and parent is not scope:
        if parent.has_attr("itemscope"):
            return False
        parent = parent.parent
    return True


def _microdata_value(prop: Tag) -> Optional[str]:
    if prop.has_attr("content") or prop.name == "meta":
        return prop.get("content")
    if prop.name == "time":
        return prop.get("datetime") or prop.get_text().strip() or None
    if prop.name == "img":
        return prop.get("src")
    if prop.name == "a":
        return prop.get("href")
    return prop.get_text().strip() or None


class PageDataExtractor:
    """
    Extracts structured data from one page.

    Args:
        document: HTML text/bytes or an already parsed BeautifulSoup
        registers: Page global registers (e.g. {"dataLayer": [...]}).
            When omitted, registers assigned in inline scripts are used.
        url: Page URL; falls back to registers["location"]["href"]
        custom_layer_names: Extra register names to expose as
            customDataLayers
        extractor_version: Version stamped on produced payloads
    """

    def __init__(
        self,
        document: Document,
        registers: Optional[Mapping[str, Any]] = None,
        url: Optional[str] = None,
        custom_layer_names: Iterable[str] = (),
        extractor_version: str = config.EXTRACTOR_VERSION,
    ):
        if registers is not None and not isinstance(registers, Mapping):
            raise ExtractionContextError(
                f"Page registers must be a mapping, got {type(registers).__name__}"
            )

        self.logger = LayerLogger("page_extractor")
        self.soup = parse_document(document)
        self.url = url
        self.custom_layer_names = tuple(custom_layer_names)
        self.extractor_version = extractor_version

        if registers is None:
            self.logger.log_decision(
                decision="use_inline_script_registers",
                reason="no page registers supplied",
                url=url,
            )
            registers = extract_script_registers(self.soup)
        self.registers: Mapping[str, Any] = registers

    def extract_all(self) -> StructuredDataPayload:
        """Extract every structured data category from the page."""
        url = self._page_url()
        self.logger.log_action("extract_all", "started", url=url)

        json_ld = extract_json_ld_data(self.soup)
        meta_tags = extract_meta_tags(self.soup)
        data_layers = extract_data_layers(self.registers)
        microdata = extract_microdata(self.soup)
        custom_data_layers = (
            extract_named_registers(self.registers, self.custom_layer_names)
            if self.custom_layer_names
            else None
        )

        invalid_blocks = sum(
            1 for block in json_ld
            if isinstance(block, dict) and block.get("error") == INVALID_JSON_MARKER
        )
        if invalid_blocks:
            self.logger.log_error(
                f"{invalid_blocks} JSON-LD block(s) could not be parsed",
                error_type="invalid_json_ld",
                url=url,
            )

        self.logger.log_action(
            "extract_all",
            "completed",
            url=url,
            json_ld_blocks=len(json_ld),
            meta_tags=len(meta_tags),
            data_layers=list(data_layers.keys()),
            microdata_items=len(microdata),
        )

        return StructuredDataPayload(
            json_ld=json_ld,
            meta_tags=meta_tags,
            data_layers=data_layers,
            microdata=microdata,
            custom_data_layers=custom_data_layers,
            url=url,
            page_title=self._page_title(),
            timestamp=datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            extractor_version=self.extractor_version,
        )

    @staticmethod
    def get_capabilities() -> ExtractorCapabilities:
        """Extraction categories supported by this extractor."""
        return ExtractorCapabilities(
            json_ld=True,
            meta_tags=True,
            data_layers=True,
            microdata=True,
            custom_data_layers=True,
        )

    def extract_custom_data(self, selectors: Mapping[str, str]) -> Dict[str, Optional[str]]:
        """
        Extract text for ad-hoc CSS selectors.

        Fields whose selector matches nothing are left out. A selector with
        invalid or unsupported syntax is skipped without affecting the rest.
        """
        result: Dict[str, Optional[str]] = {}

        for key, selector in selectors.items():
            try:
                element = self.soup.select_one(selector)
            except (SelectorSyntaxError, NotImplementedError) as e:
                self.logger.log_error(
                    f"Skipping invalid selector: {e}",
                    error_type="invalid_selector",
                    field=key,
                    selector=selector,
                )
                continue

            if element is not None:
                result[key] = element.get_text().strip() or None

        return result

    def has_structured_data(self) -> bool:
        """Whether the page carries any structured data at all."""
        try:
            has_json_ld = self.soup.select_one('script[type="application/ld+json"]') is not None
            has_meta = self.soup.select_one("meta[property], meta[name]") is not None
            has_microdata = self.soup.select_one("[itemscope]") is not None

            data_layer = self.registers.get("dataLayer")
            has_data_layer = isinstance(data_layer, list) and len(data_layer) > 0

            return has_json_ld or has_meta or has_microdata or has_data_layer
        except Exception as e:
            self.logger.log_error(str(e), error_type="structured_data_check")
            return False

    def _page_url(self) -> str:
        if self.url:
            return self.url
        location = self.registers.get("location")
        if isinstance(location, Mapping) and isinstance(location.get("href"), str):
            return location["href"]
        return ""

    def _page_title(self) -> str:
        if self.soup.title is None:
            return ""
        return " ".join(self.soup.title.get_text().split())
