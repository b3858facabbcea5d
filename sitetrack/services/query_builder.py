"""Builds paginated, whitelisted reads from raw query-string parameters.

Usage from a list endpoint::

    qb = QueryBuilder(collection, raw_query, policy).filter().sort().limit_fields().paginate()
    rows = qb.build().all()
    meta = qb.get_pagination_meta(qb.count_documents())

Forbidden fields, forbidden operators and malformed values never raise here.
They are dropped or kept as plain strings. Storage errors raised by the
collection propagate to the caller.
"""

import logging
import math
import re

from sitetrack.core.query_config import QueryPolicy
from sitetrack.schemas.query import (
    FieldPredicate,
    PaginationMeta,
    QuerySpec,
    RawQuery,
    RejectedKey,
    SortClause,
)
from sitetrack.services.query_grammar import parse_key, parse_predicate, rejection_reason

RESERVED_KEYS = ("page", "limit", "sort", "select", "fields")

# OFFSET is bound as a signed 64-bit integer by every supported driver
MAX_SKIP = 2**63 - 1
_INT_PREFIX_RE = re.compile(r"^\s*([+-]?\d+)")
_LOG = logging.getLogger("sitetrack.query")


def _values(raw) -> list[str]:
    if isinstance(raw, (list, tuple)):
        return [str(v) for v in raw]
    return [str(raw)]


def _last(raw) -> str:
    values = _values(raw)
    return values[-1] if values else ""


def _parse_int(raw) -> int | None:
    # leading-integer parse: "2abc" -> 2, "abc" -> None
    if raw is None:
        return None
    match = _INT_PREFIX_RE.match(_last(raw))
    if not match:
        return None
    return int(match.group(1))


class QueryBuilder:
    def __init__(self, collection, query: RawQuery, policy: QueryPolicy):
        self.collection = collection
        self.query = dict(query or {})
        self.policy = policy
        self._spec = QuerySpec(limit=policy.default_page_size)
        self.rejected: list[RejectedKey] = []

    @property
    def spec(self) -> QuerySpec:
        return self._spec

    def _reject(self, key: str, reason: str) -> None:
        self.rejected.append(RejectedKey(key=key, reason=reason))
        _LOG.info("query_key_dropped entity=%s key=%s reason=%s", self.policy.entity, key, reason)

    def filter(self) -> "QueryBuilder":
        added: list[FieldPredicate] = []
        for key, raw in self.query.items():
            if key in RESERVED_KEYS:
                continue
            for value in _values(raw):
                predicate = parse_predicate(key, value, self.policy)
                if predicate is None:
                    field, op = parse_key(key)
                    self._reject(key, rejection_reason(field, op, self.policy) or "invalid")
                    continue
                added.append(predicate)
        self._spec = self._spec.model_copy(update={"predicates": self._spec.predicates + tuple(added)})
        return self

    def sort(self) -> "QueryBuilder":
        sort_param = _last(self.query["sort"]).strip() if "sort" in self.query else ""
        if not sort_param:
            self._spec = self._spec.model_copy(update={"sort": tuple(self.policy.default_sort)})
            return self

        # a repeated field keeps its first position and takes the last direction
        directions: dict[str, str] = {}
        for token in sort_param.split(","):
            name, _, direction = token.partition(":")
            name = name.strip()
            if not self.policy.allows_field(name):
                self._reject(f"sort={token.strip()}", "field not allowed")
                continue
            directions[name] = "desc" if direction.strip().lower() == "desc" else "asc"
        clauses = tuple(SortClause(field=name, dir=direction) for name, direction in directions.items())
        self._spec = self._spec.model_copy(update={"sort": clauses})
        return self

    def limit_fields(self) -> "QueryBuilder":
        select_param = ""
        for key in ("select", "fields"):
            if key in self.query and _last(self.query[key]).strip():
                select_param = _last(self.query[key])
                break
        if not select_param:
            return self

        fields: list[str] = []
        for name in (f.strip() for f in select_param.split(",")):
            if not name or name in fields:
                continue
            if not self.policy.allows_field(name):
                self._reject(f"select={name}", "field not allowed")
                continue
            fields.append(name)
        # an empty projection means "everything", never "nothing"
        self._spec = self._spec.model_copy(update={"fields": tuple(fields) or None})
        return self

    def paginate(self) -> "QueryBuilder":
        page = _parse_int(self.query.get("page")) or 1
        limit = _parse_int(self.query.get("limit")) or self.policy.default_page_size
        if limit < 1:
            limit = self.policy.default_page_size
        limit = min(limit, self.policy.max_page_size)
        page = min(max(1, page), MAX_SKIP // limit + 1)
        self._spec = self._spec.model_copy(update={"page": page, "limit": limit, "skip": (page - 1) * limit})
        return self

    def build(self):
        """Return an unexecuted cursor; call ``.all()`` on it to run the read."""
        spec = self._spec
        cursor = self.collection.find(spec.predicates)
        if spec.sort:
            cursor = cursor.sort(spec.sort)
        if spec.fields:
            cursor = cursor.select(spec.fields)
        return cursor.skip(spec.skip).limit(spec.limit)

    def count_documents(self) -> int:
        return self.collection.count_documents(self._spec.predicates)

    def get_query(self) -> tuple[FieldPredicate, ...]:
        return self._spec.predicates

    def get_pagination_meta(self, total: int) -> PaginationMeta:
        page, limit = self._spec.page, self._spec.limit
        total_pages = math.ceil(total / limit)
        return PaginationMeta(
            page=page,
            limit=limit,
            total=total,
            total_pages=total_pages,
            has_next_page=page < total_pages,
            has_prev_page=page > 1,
        )
