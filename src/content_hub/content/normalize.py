"""Metadata normalization table.

Raw front matter is an untyped mapping. Each document kind declares a
table of :class:`FieldRule` entries (canonical name, metadata aliases,
coercion rule, fallback). :func:`normalize_metadata` applies the table and
returns only canonical keys; unrecognized keys are dropped.

Coercion never raises. A value that cannot be coerced resolves to the
rule's fallback.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
import logging
import math
from typing import Any


logger = logging.getLogger(__name__)


class Coercion(str, Enum):
    """Coercion rules understood by the normalizer."""

    STRING = "string"
    STRING_LIST = "string_list"
    BOOL = "bool"
    NUMBER = "number"
    DATE = "date"
    OPAQUE = "opaque"


@dataclass(frozen=True)
class FieldRule:
    """One row of a normalization table."""

    name: str
    aliases: tuple[str, ...]
    coercion: Coercion
    fallback: Any = None


def _scalar_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def coerce_string(value: Any) -> str | None:
    """Strings and scalars become stripped text; empty or structured values are absent."""
    if value is None or isinstance(value, (Mapping, list, tuple, set)):
        return None
    text = _scalar_text(value).strip()
    return text or None


def coerce_string_list(value: Any) -> tuple[str, ...] | None:
    """Coerce a list-ish value into a tuple of non-empty strings.

    - a single string is split on commas (``"a, b"`` -> ``("a", "b")``)
    - a mapping nested inside a list becomes ``"k: v, k2: v2"``
    - other scalars inside a list are string-ified
    """
    if value is None:
        return None
    if isinstance(value, str):
        parts = tuple(part.strip() for part in value.split(","))
        return tuple(part for part in parts if part) or None
    if not isinstance(value, (list, tuple)):
        return None

    items: list[str] = []
    for element in value:
        if element is None:
            continue
        if isinstance(element, Mapping):
            text = ", ".join(f"{key}: {_scalar_text(val)}" for key, val in element.items())
        elif isinstance(element, (list, tuple)):
            text = ", ".join(_scalar_text(val) for val in element if val is not None)
        else:
            text = _scalar_text(element)
        text = text.strip()
        if text:
            items.append(text)
    return tuple(items)


def coerce_bool(value: Any) -> bool | None:
    """Booleans pass through; ``"true"``/``"false"`` strings are recognized."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
    return None


def coerce_number(value: Any) -> float | None:
    """Finite numbers or numeric strings; everything else (NaN, inf, bool) is absent."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return number


def coerce_date(value: Any) -> str | None:
    """Dates (YAML parses bare dates) become ISO strings; strings are stripped."""
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return coerce_string(value)


def coerce_opaque(value: Any) -> Any:
    """Structured values pass through unparsed; scalars are dropped."""
    if isinstance(value, (Mapping, list, tuple)):
        return value
    return None


_COERCERS = {
    Coercion.STRING: coerce_string,
    Coercion.STRING_LIST: coerce_string_list,
    Coercion.BOOL: coerce_bool,
    Coercion.NUMBER: coerce_number,
    Coercion.DATE: coerce_date,
    Coercion.OPAQUE: coerce_opaque,
}


COMMON_RULES: tuple[FieldRule, ...] = (
    FieldRule("title", ("title",), Coercion.STRING),
    FieldRule("summary", ("summary", "description", "tagline"), Coercion.STRING, ""),
    FieldRule("subtitle", ("subtitle", "section"), Coercion.STRING),
    FieldRule("tags", ("tags", "keywords"), Coercion.STRING_LIST, ()),
    FieldRule("created", ("date", "created", "publishedAt"), Coercion.DATE),
    FieldRule("updated", ("updated", "updatedAt", "lastmod"), Coercion.DATE),
    FieldRule("draft", ("draft",), Coercion.BOOL, False),
    FieldRule("hero", ("hero", "heroImage", "image"), Coercion.STRING),
    FieldRule("slug", ("slug",), Coercion.STRING),
)

COUNTRY_RULES: tuple[FieldRule, ...] = (
    *COMMON_RULES,
    FieldRule("country_name", ("countryName", "country_name", "country"), Coercion.STRING),
)

PROGRAM_RULES: tuple[FieldRule, ...] = (
    *COMMON_RULES,
    FieldRule("country_name", ("countryName", "country_name"), Coercion.STRING),
    FieldRule("min_investment", ("minInvestment", "min_investment"), Coercion.NUMBER),
    FieldRule("timeline_months", ("timelineMonths", "timeline_months"), Coercion.NUMBER),
    FieldRule("holding_period_months", ("holdingPeriodMonths", "holding_period_months"), Coercion.NUMBER),
    FieldRule("currency", ("currency",), Coercion.STRING),
    FieldRule("benefits", ("benefits",), Coercion.STRING_LIST, ()),
    FieldRule("requirements", ("requirements",), Coercion.STRING_LIST, ()),
    FieldRule("process_steps", ("processSteps", "process_steps"), Coercion.OPAQUE),
    FieldRule("faq", ("faq",), Coercion.OPAQUE),
    FieldRule("prices", ("prices",), Coercion.OPAQUE),
    FieldRule("quick_facts", ("quickFacts", "quick_facts"), Coercion.OPAQUE),
    FieldRule("government_fees", ("governmentFees", "government_fees"), Coercion.OPAQUE),
)

HUB_RULES: tuple[FieldRule, ...] = (
    *COMMON_RULES,
    FieldRule("author", ("author",), Coercion.STRING),
    FieldRule("verticals", ("verticals", "vertical"), Coercion.STRING_LIST, ()),
    FieldRule("countries", ("countries", "country"), Coercion.STRING_LIST, ()),
    FieldRule("programs", ("programs", "program"), Coercion.STRING_LIST, ()),
)


def normalize_metadata(raw: Mapping[str, Any], rules: Sequence[FieldRule]) -> dict[str, Any]:
    """Apply a normalization table to raw front matter.

    For each rule the first alias whose value coerces successfully wins;
    when none does, the rule's fallback is used.

    Args:
        raw: Parsed front matter mapping
        rules: Normalization table for the document kind

    Returns:
        Dict keyed by canonical field names only
    """
    normalized: dict[str, Any] = {}
    for rule in rules:
        coerce = _COERCERS[rule.coercion]
        value = None
        for alias in rule.aliases:
            if alias not in raw:
                continue
            value = coerce(raw[alias])
            if value is not None:
                break
            logger.debug("Dropped metadata field %s=%r (not coercible to %s)", alias, raw[alias], rule.coercion.value)
        normalized[rule.name] = rule.fallback if value is None else value
    return normalized
