"""
Regular expression helpers shared by selector validation and the
transformation pipeline.

Recipes are authored against page-script regular expressions, so flags come
in as a letter string ("gi", "m", ...) and replacement templates use the
``$1`` / ``$&`` syntax. These helpers translate both to the ``re`` module.
"""
import re
from functools import lru_cache
from re import Match, Pattern
from typing import List, NamedTuple, Optional

_FLAG_MAP = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "u": 0,  # str patterns are always unicode-aware
    "d": 0,  # match indices; no effect on matched text
}

GLOBAL_FLAG = "g"
STICKY_FLAG = "y"

_TEMPLATE_TOKEN = re.compile(r"\$(\$|&|`|'|[0-9]{1,2})")


class CompiledPattern(NamedTuple):
    """A compiled pattern plus the flags ``re`` has no equivalent for."""
    regex: Pattern
    is_global: bool
    is_sticky: bool


@lru_cache(maxsize=256)
def compile_pattern(pattern: str, flags: Optional[str] = None) -> CompiledPattern:
    """
    Compile a pattern with a flag letter string.

    Raises:
        ValueError: unknown flag letter or invalid pattern
    """
    re_flags = 0
    is_global = False
    is_sticky = False
    for letter in flags or "":
        if letter == GLOBAL_FLAG:
            is_global = True
        elif letter == STICKY_FLAG:
            is_sticky = True
        elif letter in _FLAG_MAP:
            re_flags |= _FLAG_MAP[letter]
        else:
            raise ValueError(f"Invalid regular expression flag: {letter!r}")

    try:
        return CompiledPattern(re.compile(pattern, re_flags), is_global, is_sticky)
    except re.error as e:
        raise ValueError(f"Invalid regular expression {pattern!r}: {e}") from e


def find_matches(pattern: CompiledPattern, value: str) -> List[Match]:
    """
    Matches of a compiled pattern in value.

    Only the first match is returned unless the pattern is global. A sticky
    pattern must match at the start of the string, and each further global
    match must start where the previous one ended.
    """
    if not pattern.is_sticky:
        if pattern.is_global:
            return list(pattern.regex.finditer(value))
        match = pattern.regex.search(value)
        return [match] if match else []

    matches = []
    position = 0
    while position <= len(value):
        match = pattern.regex.match(value, position)
        if match is None:
            break
        matches.append(match)
        if not pattern.is_global:
            break
        # Empty matches step forward one character
        position = match.end() if match.end() > position else position + 1
    return matches


def preferred_group(match: Match) -> str:
    """Capture group 1 when it exists and is non-empty, else the full match."""
    if match.re.groups >= 1 and match.group(1):
        return match.group(1)
    return match.group(0)


def expand_template(match: Match, template: str) -> str:
    """Expand a ``$``-style replacement template for one match."""

    def _token(token: Match) -> str:
        ref = token.group(1)
        if ref == "$":
            return "$"
        if ref == "&":
            return match.group(0)
        if ref == "`":
            return match.string[:match.start()]
        if ref == "'":
            return match.string[match.end():]

        # Two-digit references fall back to one digit plus a literal
        if int(ref) > match.re.groups and len(ref) == 2:
            if 0 < int(ref[0]) <= match.re.groups:
                return (match.group(int(ref[0])) or "") + ref[1]
            return token.group(0)
        if 0 < int(ref) <= match.re.groups:
            return match.group(int(ref)) or ""
        return token.group(0)

    return _TEMPLATE_TOKEN.sub(_token, template)
