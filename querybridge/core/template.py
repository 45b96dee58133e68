"""Placeholder extraction and rendering for ``{{name}}`` query templates."""

import re
from enum import Enum
from typing import TYPE_CHECKING, Any, Final

if TYPE_CHECKING:
    from collections.abc import Mapping

__all__ = (
    "PLACEHOLDER_PATTERN",
    "ParameterStyle",
    "extract_parameter_names",
    "prepare_template",
    "render_template",
)

PLACEHOLDER_PATTERN: Final = re.compile(r"\{\{\s*([^{}]*?)\s*\}\}")


class ParameterStyle(str, Enum):
    """Positional placeholder styles understood by DB-API drivers."""

    QMARK = "qmark"
    NUMERIC = "numeric"
    POSITIONAL_COLON = "positional_colon"
    POSITIONAL_PYFORMAT = "pyformat_positional"

    def __str__(self) -> str:
        return self.value

    def placeholder(self, position: int) -> str:
        """Render the marker for a 1-based bind position."""
        if self is ParameterStyle.NUMERIC:
            return f"${position}"
        if self is ParameterStyle.POSITIONAL_COLON:
            return f":{position}"
        if self is ParameterStyle.POSITIONAL_PYFORMAT:
            return "%s"
        return "?"

    @classmethod
    def from_paramstyle(cls, paramstyle: str) -> "ParameterStyle":
        """Map a DB-API module ``paramstyle`` string onto a positional style.

        Raises:
            ValueError: If the driver only supports named parameters.
        """
        mapping = {
            "qmark": cls.QMARK,
            "numeric": cls.POSITIONAL_COLON,
            "format": cls.POSITIONAL_PYFORMAT,
            "pyformat": cls.POSITIONAL_PYFORMAT,
            "dollar": cls.NUMERIC,
        }
        try:
            return mapping[paramstyle]
        except KeyError:
            msg = f"Unsupported DB-API paramstyle: {paramstyle!r}"
            raise ValueError(msg) from None


def extract_parameter_names(template: str) -> "list[str]":
    """Return placeholder names in the order they occur.

    Repeated placeholders are returned once per occurrence.

    >>> extract_parameter_names("SELECT {{a}}, {{ b }}, {{a}}")
    ['a', 'b', 'a']
    """
    return [match.group(1) for match in PLACEHOLDER_PATTERN.finditer(template)]


def prepare_template(template: str, style: ParameterStyle = ParameterStyle.QMARK) -> str:
    """Replace every placeholder with the positional marker of ``style``.

    For :attr:`ParameterStyle.POSITIONAL_PYFORMAT` the literal ``%`` signs
    around the placeholders are doubled, since those drivers interpolate the
    whole statement with ``sql % parameters``. A template without
    placeholders is executed without parameters and is left untouched.

    >>> prepare_template("SELECT * FROM t WHERE a LIKE 'x%' AND b = {{b}}", ParameterStyle.POSITIONAL_PYFORMAT)
    "SELECT * FROM t WHERE a LIKE 'x%%' AND b = %s"
    """
    escape_percent = style is ParameterStyle.POSITIONAL_PYFORMAT and PLACEHOLDER_PATTERN.search(template) is not None
    parts: list[str] = []
    position = 0
    last_end = 0
    for match in PLACEHOLDER_PATTERN.finditer(template):
        parts.append(_literal(template[last_end : match.start()], escape_percent))
        position += 1
        parts.append(style.placeholder(position))
        last_end = match.end()
    parts.append(_literal(template[last_end:], escape_percent))
    return "".join(parts)


def _literal(text: str, escape_percent: bool) -> str:
    return text.replace("%", "%%") if escape_percent else text


def render_template(template: str, parameters: "Mapping[str, Any]") -> str:
    """Substitute placeholder values directly into the query text.

    Values are inserted with ``str()`` and no quoting or escaping. Callers
    choosing this mode accept that parameter values become SQL text; use it
    only for trusted values or constructs a driver cannot bind (identifiers,
    ``IN`` lists, ``ORDER BY`` clauses).
    """

    def _replace(match: "re.Match[str]") -> str:
        value = parameters.get(match.group(1))
        return "" if value is None else str(value)

    return PLACEHOLDER_PATTERN.sub(_replace, template)
