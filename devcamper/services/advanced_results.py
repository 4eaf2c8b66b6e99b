import json
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Callable, Mapping

from sqlalchemy import JSON, String, and_, asc, cast, desc, false, or_
from sqlalchemy.orm import Query, Session, selectinload

from devcamper.core.errors import ValidationFailed
from devcamper.schemas.query import FilterClause, ListQuery

SCALAR_TYPES = (str, int, float, bool)


@dataclass(frozen=True)
class Resource:
    """How a model is exposed to list endpoints.

    ``fields`` maps public (camelCase or dotted) names to model attribute
    names. ``populate`` names relationships loaded alongside each row so the
    serializer can embed them.
    """

    model: type
    fields: Mapping[str, str]
    serialize: Callable[[Any], dict]
    populate: tuple[str, ...] = field(default_factory=tuple)

    def column(self, public_name: str):
        attr = self.fields.get(public_name)
        if attr is None:
            return None
        return getattr(self.model, attr, None)


def _bad_filter_value(field_name: str, kind: str) -> ValidationFailed:
    return ValidationFailed(f'Invalid filter value for field "{field_name}" ({kind})')


def _coerce_bool_filter_value(field_name: str, value):
    if isinstance(value, bool):
        return value
    text = str(value or "").strip().lower()
    if text in {"1", "true", "yes", "y"}:
        return True
    if text in {"0", "false", "no", "n"}:
        return False
    raise _bad_filter_value(field_name, "boolean")


def _coerce_number_filter_value(field_name: str, value, python_type):
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise _bad_filter_value(field_name, "number")
    if isinstance(value, (int, float)):
        return python_type(value)
    text = value.strip()
    if not text:
        raise _bad_filter_value(field_name, "number")
    try:
        if python_type is int:
            return int(text)
        return float(text)
    except ValueError:
        raise _bad_filter_value(field_name, "number")


def _coerce_datetime_filter_value(field_name: str, value):
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value or "").strip()
        if not text:
            raise _bad_filter_value(field_name, "datetime")
        try:
            if "T" not in text and " " not in text and len(text) == 10:
                parsed = datetime.combine(date.fromisoformat(text), datetime.min.time())
            else:
                parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            raise _bad_filter_value(field_name, "datetime")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _column_python_type(column):
    try:
        return column.property.columns[0].type.python_type
    except Exception:
        return None


def _is_list_column(column) -> bool:
    try:
        return isinstance(column.property.columns[0].type, JSON)
    except Exception:
        return False


def coerce_filter_value(field_name: str, column, value):
    python_type = _column_python_type(column)
    if python_type is uuid.UUID:
        if isinstance(value, uuid.UUID):
            return value
        try:
            return uuid.UUID(str(value or "").strip())
        except ValueError:
            raise _bad_filter_value(field_name, "id")
    if python_type is bool:
        return _coerce_bool_filter_value(field_name, value)
    if python_type in {int, float}:
        return _coerce_number_filter_value(field_name, value, python_type)
    if python_type is datetime:
        return _coerce_datetime_filter_value(field_name, value)
    return str(value)


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _list_contains(column, value):
    # JSON arrays serialize each string element as a quoted token
    needle = _escape_like(json.dumps(str(value)))
    return cast(column, String).like(f"%{needle}%", escape="\\")


def _list_filter_expression(clause: FilterClause, column):
    if clause.op == "eq":
        if isinstance(clause.value, list):
            return and_(*[_list_contains(column, v) for v in clause.value]) if clause.value else false()
        if isinstance(clause.value, Mapping):
            return false()
        return _list_contains(column, clause.value)
    if clause.op == "in":
        values = [v for v in clause.value if isinstance(v, SCALAR_TYPES)]
        return or_(*[_list_contains(column, v) for v in values]) if values else false()
    return false()


def filter_expression(resource: Resource, clause: FilterClause):
    column = resource.column(clause.field)
    if column is None:
        # unknown fields never match, like a document store missing the key
        return false()
    if _is_list_column(column):
        return _list_filter_expression(clause, column)
    if clause.op == "in":
        values = [coerce_filter_value(clause.field, column, v) for v in clause.value if isinstance(v, SCALAR_TYPES)]
        return column.in_(values) if values else false()
    if not isinstance(clause.value, SCALAR_TYPES):
        # embedded objects and arrays never equal a scalar column
        return false()
    value = coerce_filter_value(clause.field, column, clause.value)
    if clause.op == "eq":
        return column == value
    if clause.op == "gt":
        return column > value
    if clause.op == "gte":
        return column >= value
    if clause.op == "lt":
        return column < value
    if clause.op == "lte":
        return column <= value
    return false()


def apply_filters(q: Query, resource: Resource, lq: ListQuery) -> Query:
    for clause in lq.filters:
        q = q.filter(filter_expression(resource, clause))
    return q


def apply_sort(q: Query, resource: Resource, lq: ListQuery) -> Query:
    for s in lq.sort:
        col = resource.column(s.field)
        if col is None:
            continue
        q = q.order_by(asc(col) if s.dir == "asc" else desc(col))
    return q.order_by(asc(resource.model.id))


def select_fields(item: dict, selection: tuple[str, ...] | None) -> dict:
    """Trim a serialized record to the selected fields.

    Dotted names (``location.city``) keep the embedded object trimmed to the
    named sub-keys; selecting the bare name keeps the whole object.
    """
    if selection is None:
        return item
    nested: dict[str, list[str]] = {}
    for token in selection:
        head, _, rest = token.partition(".")
        if head in item:
            nested.setdefault(head, []).append(rest)
    picked = {}
    for key, value in item.items():
        paths = nested.get(key)
        if paths is None:
            continue
        if "" in paths or not isinstance(value, dict):
            picked[key] = value
        else:
            picked[key] = select_fields(value, tuple(paths))
    return picked


def advanced_results(db: Session, resource: Resource, lq: ListQuery, base: Query | None = None) -> dict:
    """Run a translated list query and build the list envelope."""
    q = base if base is not None else db.query(resource.model)
    q = apply_filters(q, resource, lq)
    total = q.order_by(None).count()

    q = apply_sort(q, resource, lq)
    for rel in resource.populate:
        q = q.options(selectinload(getattr(resource.model, rel)))
    rows = q.offset(lq.skip).limit(lq.limit).all()

    data = [select_fields(resource.serialize(row), lq.select) for row in rows]
    return {
        "success": True,
        "count": len(data),
        "pagination": lq.paginate(total).model_dump(by_alias=True, exclude_none=True),
        "data": data,
    }
