"""
Value transformation pipeline applied to resolved selector values.

Each transformation kind maps to one handler in TRANSFORMERS. Handlers only
act on string values; anything else passes through unchanged, so a
parseNumber early in the pipeline turns later string steps into no-ops.
"""
import re
from typing import Any, Callable, Dict, Iterable, Optional

from pricepatrol_parser.models.selector import FieldTransformation, TransformationType
from pricepatrol_parser.utils.patterns import (
    compile_pattern,
    expand_template,
    find_matches,
    preferred_group,
)

TRUTHY_VALUES = frozenset({"true", "yes", "1", "on", "enabled"})

_NON_NUMERIC = re.compile(r"[^0-9.\-]")
_LEADING_FLOAT = re.compile(r"-?(?:[0-9]+\.?[0-9]*|\.[0-9]+)")


def _regex(value: str, transform: FieldTransformation) -> Any:
    if not transform.pattern:
        return value
    pattern = compile_pattern(transform.pattern, transform.flags)
    matches = find_matches(pattern, value)
    if not matches:
        return value
    if pattern.is_global:
        # A global match yields whole matches only; the second one is preferred
        whole = [match.group(0) for match in matches]
        return whole[1] if len(whole) > 1 and whole[1] else whole[0]
    return preferred_group(matches[0])


def _replace(value: str, transform: FieldTransformation) -> Any:
    if not transform.pattern or not transform.replacement:
        return value
    matches = find_matches(compile_pattern(transform.pattern, transform.flags), value)
    if not matches:
        return value

    parts = []
    last_end = 0
    for match in matches:
        parts.append(value[last_end:match.start()])
        parts.append(expand_template(match, transform.replacement))
        last_end = match.end()
    parts.append(value[last_end:])
    return "".join(parts)


def _trim(value: str, transform: FieldTransformation) -> Any:
    return value.strip()


def _lowercase(value: str, transform: FieldTransformation) -> Any:
    return value.lower()


def _uppercase(value: str, transform: FieldTransformation) -> Any:
    return value.upper()


def _parse_number(value: str, transform: FieldTransformation) -> Any:
    return parse_number(value)


def _parse_boolean(value: str, transform: FieldTransformation) -> Any:
    return value.lower() in TRUTHY_VALUES


TRANSFORMERS: Dict[TransformationType, Callable[[str, FieldTransformation], Any]] = {
    TransformationType.REGEX: _regex,
    TransformationType.REPLACE: _replace,
    TransformationType.TRIM: _trim,
    TransformationType.LOWERCASE: _lowercase,
    TransformationType.UPPERCASE: _uppercase,
    TransformationType.PARSE_NUMBER: _parse_number,
    TransformationType.PARSE_BOOLEAN: _parse_boolean,
}


def parse_number(value: str) -> Any:
    """
    Strip everything but digits, dots and minus signs, then parse the
    leading float ("NZ$1,399.00" -> 1399.0). Unparseable input is returned
    unchanged.
    """
    match = _LEADING_FLOAT.match(_NON_NUMERIC.sub("", value))
    if not match:
        return value
    return float(match.group(0))


def apply_transformations(
    value: Any,
    transformations: Optional[Iterable[FieldTransformation]] = None
) -> Any:
    """Apply transformations in order, each consuming the previous output."""
    result = value
    for transform in transformations or ():
        if isinstance(result, str):
            result = TRANSFORMERS[transform.type](result, transform)
    return result


def apply_selector_regex(value: Any, pattern: Optional[str]) -> Any:
    """Apply a selector's standalone regex to a string value."""
    if not pattern or not isinstance(value, str):
        return value
    match = compile_pattern(pattern).regex.search(value)
    return preferred_group(match) if match else value
