"""Translation of list-endpoint query strings into a store-neutral query.

Query strings arrive as flat pairs such as ``averageCost[gte]=1000`` or
``sort=-createdAt,name``. They are parsed into a nested mapping, split into
reserved control parameters (``select``, ``sort``, ``page``, ``limit``) and
filter parameters, and turned into a :class:`ListQuery`. Everything here is
pure: executing the query and counting the matching set belongs to
:mod:`devcamper.services.advanced_results`.
"""
from __future__ import annotations

import re
from typing import Any, Iterable, Mapping

from devcamper.schemas.query import FilterClause, ListQuery, SortClause

RESERVED_PARAMS = ("select", "sort", "page", "limit")
OPERATORS = frozenset({"gt", "gte", "lt", "lte", "in"})
ID_FIELD = "id"
DEFAULT_PAGE = 1
DEFAULT_LIMIT = 25
MAX_LIMIT = 1000
MAX_PAGE = 1_000_000
DEFAULT_SORT_FIELD = "createdAt"

_KEY_RE = re.compile(r"^([^\[\]]+)((?:\[[^\[\]]*\])*)$")
_SEGMENT_RE = re.compile(r"\[([^\[\]]*)\]")
_LEADING_INT_RE = re.compile(r"^\s*\+?(\d+)")


def _key_path(raw_key: str) -> list[str]:
    match = _KEY_RE.match(raw_key)
    if not match:
        return [raw_key]
    return [match.group(1)] + _SEGMENT_RE.findall(match.group(2))


def parse_query_params(items: Iterable[tuple[str, Any]]) -> dict[str, Any]:
    """Build a nested mapping from bracketed query-string pairs.

    ``a[b]=1`` becomes ``{"a": {"b": "1"}}`` and ``a[]=1&a[]=2`` becomes
    ``{"a": ["1", "2"]}``. A repeated plain key keeps its last value, and any
    key segment starting with ``$`` is dropped so callers can never inject raw
    store operators.
    """
    parsed: dict[str, Any] = {}
    for raw_key, value in items:
        path = _key_path(str(raw_key).strip())
        append = len(path) > 1 and path[-1] == ""
        if append:
            path = path[:-1]
        if any(not part or part.startswith("$") for part in path):
            continue
        node = parsed
        for part in path[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        leaf = path[-1]
        if append:
            current = node.get(leaf)
            node[leaf] = (current if isinstance(current, list) else []) + [value]
        else:
            node[leaf] = value
    return parsed


def _last_scalar(value: Any) -> Any:
    if isinstance(value, list):
        return value[-1] if value else None
    if isinstance(value, Mapping):
        return None
    return value


def _operand(op: str, value: Any) -> Any:
    if op == "in":
        if isinstance(value, list):
            return value
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return [value]
    if isinstance(value, list):
        return value[-1] if value else None
    return value


def build_filters(params: Mapping[str, Any]) -> list[FilterClause]:
    """Turn the non-reserved parameters into filter clauses.

    Operator keywords are only recognized in key position; a literal value
    that happens to read ``gt`` or ``in`` stays a literal.
    """
    clauses: list[FilterClause] = []
    for field, value in params.items():
        if field in RESERVED_PARAMS:
            continue
        if not isinstance(value, Mapping):
            clauses.append(FilterClause(field=field, op="eq", value=value))
            continue
        literal: dict[str, Any] = {}
        for key, operand in value.items():
            if key in OPERATORS:
                clauses.append(FilterClause(field=field, op=key, value=_operand(key, operand)))
            else:
                literal[key] = operand
        if literal:
            clauses.append(FilterClause(field=field, op="eq", value=literal))
    return clauses


def parse_select(raw: Any) -> tuple[str, ...] | None:
    text = _last_scalar(raw)
    if text is None or not str(text).strip():
        return None
    fields = [ID_FIELD]
    for token in str(text).split(","):
        token = token.strip()
        if token and token not in fields:
            fields.append(token)
    return tuple(fields)


def parse_sort(raw: Any) -> list[SortClause]:
    text = _last_scalar(raw)
    clauses: list[SortClause] = []
    for token in str(text or "").split(","):
        token = token.strip()
        if token.startswith("-"):
            field, direction = token[1:].strip(), "desc"
        else:
            field, direction = token, "asc"
        if field:
            clauses.append(SortClause(field=field, dir=direction))
    return clauses or [SortClause(field=DEFAULT_SORT_FIELD, dir="desc")]


def parse_positive_int(raw: Any, default: int, maximum: int | None = None) -> int:
    """Strictly positive integer from ``raw``; ``default`` when absent or invalid.

    Values above ``maximum`` are clamped so the resulting offset always fits
    the store's integer type.
    """
    value = _last_scalar(raw)
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        number = value
    else:
        match = _LEADING_INT_RE.match(str(value))
        if not match:
            return default
        digits = match.group(1).lstrip("0") or "0"
        if maximum is not None and len(digits) > len(str(maximum)):
            return maximum
        number = int(digits)
    if number <= 0:
        return default
    if maximum is not None and number > maximum:
        return maximum
    return number


def translate_params(params: Mapping[str, Any]) -> ListQuery:
    return ListQuery(
        filters=build_filters(params),
        select=parse_select(params.get("select")),
        sort=parse_sort(params.get("sort")),
        page=parse_positive_int(params.get("page"), DEFAULT_PAGE, MAX_PAGE),
        limit=parse_positive_int(params.get("limit"), DEFAULT_LIMIT, MAX_LIMIT),
    )


def translate(items: Iterable[tuple[str, Any]]) -> ListQuery:
    return translate_params(parse_query_params(items))
