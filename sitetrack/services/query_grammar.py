import math
import re
from datetime import datetime, timezone

from sitetrack.core.query_config import QueryPolicy
from sitetrack.schemas.query import FieldPredicate

_KEY_RE = re.compile(r"^(.+)\[(.+)\]$")
_DATE_PREFIX_RE = re.compile(r"^\d{4}-\d{2}-\d{2}")
_REGEX_SPECIAL_RE = re.compile(r"[.*+?^${}()|\[\]\\]")

LIST_OPERATORS = {"in", "nin"}
TEXT_OPERATORS = {"contains", "startsWith", "endsWith"}


def parse_key(key: str) -> tuple[str, str]:
    """Split ``field[op]`` into its parts; a bare key means equality."""
    match = _KEY_RE.match(key)
    if match:
        return match.group(1), match.group(2)
    return key, "eq"


def _parse_number(text: str):
    stripped = text.strip()
    # python accepts digit separators, query strings should not
    if not stripped or "_" in stripped:
        return None
    try:
        return int(stripped)
    except ValueError:
        pass
    try:
        number = float(stripped)
    except ValueError:
        return None
    if math.isnan(number):
        return None
    # float() also reads "inf" and "infinity"; only "Infinity" is a number in a query string
    word = stripped.lstrip("+-")
    if math.isinf(number) and word.isalpha() and word != "Infinity":
        return None
    return number


def _parse_date(text: str):
    if not _DATE_PREFIX_RE.match(text):
        return None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def coerce_value(text: str):
    """Coerce a query-string operand: bool, then number, then ISO date, else the text."""
    if text == "true":
        return True
    if text == "false":
        return False
    number = _parse_number(text)
    if number is not None:
        return number
    parsed = _parse_date(text)
    if parsed is not None:
        return parsed
    return text


def escape_regex(text: str) -> str:
    return _REGEX_SPECIAL_RE.sub(lambda m: "\\" + m.group(0), text)


def text_pattern(op: str, text: str) -> re.Pattern:
    escaped = escape_regex(text)
    if op == "startsWith":
        escaped = f"^{escaped}"
    elif op == "endsWith":
        escaped = f"{escaped}\\Z"
    return re.compile(escaped, re.IGNORECASE)


def split_list(text: str) -> list[str]:
    return [item.strip() for item in text.split(",")]


def rejection_reason(field: str, op: str, policy: QueryPolicy) -> str | None:
    if not policy.allows_field(field):
        return "field not allowed"
    if not policy.allows_operator(op):
        return "operator not allowed"
    return None


def parse_predicate(key: str, raw: str, policy: QueryPolicy) -> FieldPredicate | None:
    field, op = parse_key(key)
    if rejection_reason(field, op, policy) is not None:
        return None
    if op in LIST_OPERATORS:
        items = split_list(raw)
        return FieldPredicate(field=field, op=op, value=[coerce_value(item) for item in items], raw=items)
    if op in TEXT_OPERATORS:
        return FieldPredicate(field=field, op=op, value=text_pattern(op, raw), raw=raw)
    return FieldPredicate(field=field, op=op, value=coerce_value(raw), raw=raw)
