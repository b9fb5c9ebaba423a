"""URI template compilation.

Turns a template such as ``/cats/{id}/toys/{toy}.json`` into an anchored
regular expression with one named group per variable::

    compile_template("/cats/{id}")               # id matches RE_SLUG
    compile_template("/cats/{id}", RE_NUM)       # every variable matches RE_NUM
    compile_template("/cats/{id}", {"id": RE_NUM})
"""

import re
from collections.abc import Mapping

from switchyard.errors import InvalidRouteTarget

# URL friendly characters: letters, digits, hyphen and underscore
RE_SLUG = r"[0-9a-zA-Z\-_]+"
RE_NUM = r"[0-9]+"
RE_ALPHA = r"[a-zA-Z]+"
RE_ALPHANUM = r"[0-9a-zA-Z]+"

# A single variable expression, e.g. {id}
TEMPLATE_EXPRESSION_RE = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)\}")


def is_template(target: str) -> bool:
    """True if *target* contains at least one ``{name}`` expression."""
    return TEMPLATE_EXPRESSION_RE.search(target) is not None


def template_variables(template: str) -> list[str]:
    """Variable names in the order they appear in *template*."""
    return TEMPLATE_EXPRESSION_RE.findall(template)


def build_template_pattern(
    template: str,
    default_pattern: str = RE_SLUG,
    variable_patterns: Mapping[str, str] | None = None,
) -> str:
    """Build the regex source for *template*.

    Each ``/``-separated segment is either a literal (escaped) or holds
    exactly one variable expression, optionally surrounded by literal text.

    Raises ``InvalidRouteTarget`` when a segment holds more than one
    expression or a variable name repeats.
    """
    patterns = variable_patterns or {}
    default_pattern = default_pattern or RE_SLUG
    seen: set[str] = set()
    parts: list[str] = []

    for segment in template.split("/"):
        expressions = list(TEMPLATE_EXPRESSION_RE.finditer(segment))
        if not expressions:
            parts.append(re.escape(segment))
            continue
        if len(expressions) > 1:
            msg = f"Invalid URI template {template!r}: segment {segment!r} has more than one variable."
            raise InvalidRouteTarget(msg)

        expression = expressions[0]
        name = expression.group(1)
        if name in seen:
            msg = f"Invalid URI template {template!r}: variable {name!r} appears twice."
            raise InvalidRouteTarget(msg)
        seen.add(name)

        before = segment[: expression.start()]
        after = segment[expression.end() :]
        pattern = patterns.get(name, default_pattern)
        parts.append(f"{re.escape(before)}(?P<{name}>{pattern}){re.escape(after)}")

    return "/".join(parts)


def compile_template(
    template: str,
    extra: str | Mapping[str, str] | None = None,
    *,
    default_pattern: str = RE_SLUG,
) -> re.Pattern[str]:
    """Compile *template* into a pattern for use with ``fullmatch``.

    *extra* is the registration argument: a string replaces the default
    pattern for every variable, a mapping supplies per-variable patterns.
    """
    variable_patterns: Mapping[str, str] | None = None
    if isinstance(extra, str):
        default_pattern = extra
    elif isinstance(extra, Mapping):
        variable_patterns = extra
    elif extra is not None:
        msg = f"Template options for {template!r} must be a pattern string or a mapping, got {type(extra).__name__}."
        raise InvalidRouteTarget(msg)

    source = build_template_pattern(template, default_pattern, variable_patterns)
    try:
        return re.compile(source)
    except re.error as exc:
        msg = f"Invalid URI template {template!r}: {exc}"
        raise InvalidRouteTarget(msg) from exc
