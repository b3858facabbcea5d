"""Storage adapters consumed by the query builder.

A collection exposes ``find(predicates)`` and ``count_documents(predicates)``.
``find`` returns a generative cursor with ``sort``, ``skip``, ``limit`` and
``select``; nothing touches storage until ``all()`` is called.

Operands whose type cannot apply to a field match nothing for positive
operators and everything for ``ne``/``nin``, the way a document store compares
across types. No adapter raises for such operands.
"""

from __future__ import annotations

import operator
import uuid
from dataclasses import dataclass, replace
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Iterable, Sequence

from pydantic.alias_generators import to_camel, to_snake
from sqlalchemy import and_, asc, desc, false, inspect as sa_inspect, or_, true
from sqlalchemy.orm import Query, Session

from sitetrack.schemas.query import FieldPredicate, SortClause
from sitetrack.services.query_grammar import TEXT_OPERATORS

_MISMATCH = object()

_COMPARATORS = {
    "gt": operator.gt,
    "gte": operator.ge,
    "lt": operator.lt,
    "lte": operator.le,
}


@dataclass(frozen=True)
class Cursor:
    collection: Any
    predicates: tuple[FieldPredicate, ...]
    order: tuple[SortClause, ...] = ()
    projection: tuple[str, ...] | None = None
    offset: int = 0
    row_limit: int | None = None

    def sort(self, clauses: Iterable[SortClause]) -> "Cursor":
        return replace(self, order=tuple(clauses))

    def select(self, fields: Iterable[str]) -> "Cursor":
        return replace(self, projection=tuple(fields))

    def skip(self, n: int) -> "Cursor":
        return replace(self, offset=max(int(n), 0))

    def limit(self, n: int) -> "Cursor":
        return replace(self, row_limit=int(n))

    def all(self) -> list[dict[str, Any]]:
        return self.collection.execute(self)


def _project(record: dict[str, Any], projection: Sequence[str] | None) -> dict[str, Any]:
    if not projection:
        return record
    out = {"id": record.get("id")} if "id" in record else {}
    for name in projection:
        if name in record:
            out[name] = record[name]
    return out


# --- SQLAlchemy -------------------------------------------------------------


def _column_python_type(column):
    try:
        return column.property.columns[0].type.python_type
    except Exception:
        return None


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _adapt_operand(python_type, value, raw):
    if python_type is str:
        return raw if isinstance(raw, str) else _MISMATCH
    if python_type is uuid.UUID:
        try:
            return uuid.UUID(str(raw).strip())
        except ValueError:
            return _MISMATCH
    if python_type is bool:
        return value if isinstance(value, bool) else _MISMATCH
    if python_type in {int, float, Decimal}:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return _MISMATCH
        return value
    if python_type is datetime:
        return value if isinstance(value, datetime) else _MISMATCH
    if python_type is date:
        return value.date() if isinstance(value, datetime) else _MISMATCH
    return value


def row_to_record(row) -> dict[str, Any]:
    mapper = sa_inspect(type(row))
    return {to_camel(column.key): getattr(row, column.key) for column in mapper.columns}


def _negative(op: str) -> bool:
    return op in {"ne", "nin"}


class SqlAlchemyCollection:
    def __init__(self, db: Session, model, base_filters: Sequence[Any] = ()):
        self.db = db
        self.model = model
        self.base_filters = tuple(base_filters)
        self._columns = {column.key: column for column in sa_inspect(model).columns}

    def _attribute(self, field: str):
        key = to_snake(field)
        if key not in self._columns:
            return None
        return getattr(self.model, key)

    def _criterion(self, predicate: FieldPredicate):
        col = self._attribute(predicate.field)
        if col is None:
            return true() if _negative(predicate.op) else false()
        python_type = _column_python_type(col)
        op = predicate.op

        if op in TEXT_OPERATORS:
            if python_type is not str:
                return false()
            text = _escape_like(str(predicate.raw))
            if op == "contains":
                pattern = f"%{text}%"
            elif op == "startsWith":
                pattern = f"{text}%"
            else:
                pattern = f"%{text}"
            return col.ilike(pattern, escape="\\")

        if op in {"in", "nin"}:
            items = [
                _adapt_operand(python_type, value, raw)
                for value, raw in zip(predicate.value, predicate.raw)
            ]
            items = [item for item in items if item is not _MISMATCH]
            if op == "in":
                return col.in_(items) if items else false()
            if not items:
                return true()
            return or_(col.not_in(items), col.is_(None))

        operand = _adapt_operand(python_type, predicate.value, predicate.raw)
        if operand is _MISMATCH:
            return true() if op == "ne" else false()
        if op == "eq":
            return col == operand
        if op == "ne":
            return or_(col != operand, col.is_(None))
        return _COMPARATORS[op](col, operand)

    def _query(self, predicates: Sequence[FieldPredicate]) -> Query:
        q = self.db.query(self.model)
        criteria = list(self.base_filters) + [self._criterion(p) for p in predicates]
        if criteria:
            q = q.filter(and_(*criteria))
        return q

    def find(self, predicates: Sequence[FieldPredicate]) -> Cursor:
        return Cursor(collection=self, predicates=tuple(predicates))

    def count_documents(self, predicates: Sequence[FieldPredicate]) -> int:
        return self._query(predicates).count()

    def execute(self, cursor: Cursor) -> list[dict[str, Any]]:
        q = self._query(cursor.predicates)
        for clause in cursor.order:
            col = self._attribute(clause.field)
            if col is None:
                continue
            q = q.order_by(desc(col) if clause.dir == "desc" else asc(col))
        if cursor.offset:
            q = q.offset(cursor.offset)
        if cursor.row_limit is not None:
            q = q.limit(cursor.row_limit)
        return [_project(row_to_record(row), cursor.projection) for row in q.all()]


# --- in-memory documents ----------------------------------------------------

_KIND_RANK = {"null": 0, "number": 1, "string": 2, "bool": 3, "date": 4, "other": 5}


def _normalize(value):
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime.combine(value, datetime.min.time(), tzinfo=timezone.utc)
    if isinstance(value, Decimal):
        return float(value)
    return value


def _kind(value) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, (int, float, Decimal)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (datetime, date)):
        return "date"
    return "other"


def _equal(current, value) -> bool:
    if _kind(current) != _kind(value):
        return False
    return _normalize(current) == _normalize(value)


def _compare(op: str, current, value) -> bool:
    kind = _kind(current)
    if kind in {"null", "other"} or kind != _kind(value):
        return False
    return _COMPARATORS[op](_normalize(current), _normalize(value))


def _sort_key(value):
    kind = _kind(value)
    if kind == "null":
        return (0, 0)
    if kind == "other":
        return (_KIND_RANK[kind], str(value))
    return (_KIND_RANK[kind], _normalize(value))


def matches(record: dict[str, Any], predicate: FieldPredicate) -> bool:
    current = record.get(predicate.field)
    op = predicate.op
    if op in TEXT_OPERATORS:
        return isinstance(current, str) and predicate.value.search(current) is not None
    if op == "eq":
        return _equal(current, predicate.value)
    if op == "ne":
        return not _equal(current, predicate.value)
    if op == "in":
        return any(_equal(current, item) for item in predicate.value)
    if op == "nin":
        return not any(_equal(current, item) for item in predicate.value)
    return _compare(op, current, predicate.value)


class DocumentCollection:
    """Evaluates predicates over a list of plain dicts, e.g. embedded sub-documents."""

    def __init__(self, records: Iterable[dict[str, Any]]):
        self.records = list(records)

    def _filtered(self, predicates: Sequence[FieldPredicate]) -> list[dict[str, Any]]:
        return [r for r in self.records if all(matches(r, p) for p in predicates)]

    def find(self, predicates: Sequence[FieldPredicate]) -> Cursor:
        return Cursor(collection=self, predicates=tuple(predicates))

    def count_documents(self, predicates: Sequence[FieldPredicate]) -> int:
        return len(self._filtered(predicates))

    def execute(self, cursor: Cursor) -> list[dict[str, Any]]:
        rows = self._filtered(cursor.predicates)
        # stable sorts applied from the least significant key
        for clause in reversed(cursor.order):
            rows.sort(key=lambda r, f=clause.field: _sort_key(r.get(f)), reverse=clause.dir == "desc")
        end = None if cursor.row_limit is None else cursor.offset + cursor.row_limit
        return [_project(dict(r), cursor.projection) for r in rows[cursor.offset:end]]
