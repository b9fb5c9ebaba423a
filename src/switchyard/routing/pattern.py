"""Delimited regular expression targets.

A pattern target wraps a regex in a delimiter character, optionally
followed by flags::

    ~/cats/([0-9]+)~
    #^/cats/(?<id>[0-9]+)$#i

``(?<name>...)`` groups are accepted and rewritten as Python's
``(?P<name>...)``. Matching is always anchored at both ends.
"""

import re

from switchyard.errors import InvalidRouteTarget

DELIMITERS = "~#!%@;,|`+"

_FLAGS: dict[str, re.RegexFlag] = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "x": re.VERBOSE,
    "u": re.UNICODE,
}

_NAMED_GROUP_RE = re.compile(r"\(\?<(?=[A-Za-z_])")


def split_pattern(target: str) -> tuple[str, str] | None:
    """Split a delimited target into ``(source, flags)``.

    Returns None when *target* is not a delimited pattern.
    """
    if len(target) < 2 or target[0] not in DELIMITERS:
        return None
    delimiter = target[0]
    end = target.rfind(delimiter)
    if end == 0:
        return None
    flags = target[end + 1 :]
    if any(flag not in _FLAGS for flag in flags):
        return None
    return target[1:end], flags


def is_pattern(target: str) -> bool:
    return split_pattern(target) is not None


def compile_pattern(target: str) -> re.Pattern[str]:
    """Compile a delimited target for use with ``fullmatch``.

    Raises ``InvalidRouteTarget`` if the target is not delimited or the
    body is not a valid regular expression.
    """
    parts = split_pattern(target)
    if parts is None:
        msg = f"{target!r} is not a delimited pattern (expected e.g. ~^/path/$~)."
        raise InvalidRouteTarget(msg)

    source, flag_letters = parts
    flags = 0
    for letter in flag_letters:
        flags |= _FLAGS[letter]

    source = _NAMED_GROUP_RE.sub("(?P<", source)
    try:
        return re.compile(source, flags)
    except re.error as exc:
        msg = f"Invalid pattern target {target!r}: {exc}"
        raise InvalidRouteTarget(msg) from exc


def pattern_variables(match: re.Match[str]) -> dict[str, str]:
    """Path variables from a pattern match.

    Named groups are keyed by name; unnamed groups by their 1-based index.
    Groups that did not participate are left out.
    """
    named_indexes = set(match.re.groupindex.values())
    variables: dict[str, str] = {}
    for index in range(1, (match.re.groups or 0) + 1):
        if index in named_indexes:
            continue
        value = match.group(index)
        if value is not None:
            variables[str(index)] = value
    for name, value in match.groupdict().items():
        if value is not None:
            variables[name] = value
    return variables
