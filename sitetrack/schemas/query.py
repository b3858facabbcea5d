from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Any, Literal, Optional, Tuple

Op = Literal["eq", "ne", "gt", "gte", "lt", "lte", "contains", "startsWith", "endsWith", "in", "nin"]
Dir = Literal["asc", "desc"]

RawQuery = dict[str, str | list[str]]


class FieldPredicate(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    field: str
    op: Op
    # bool | int | float | datetime | str | re.Pattern | list of the scalar kinds
    value: Any
    # operand text as received, before coercion
    raw: str | list[str]


class SortClause(BaseModel):
    model_config = ConfigDict(frozen=True)

    field: str
    dir: Dir = "asc"


class RejectedKey(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    reason: str


class QuerySpec(BaseModel):
    """Accumulated state of one QueryBuilder.

    ``fields`` is ``None`` when every field should be returned.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    predicates: Tuple[FieldPredicate, ...] = ()
    sort: Tuple[SortClause, ...] = ()
    fields: Optional[Tuple[str, ...]] = None
    page: int = 1
    limit: int = 50
    skip: int = 0


class PaginationMeta(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    page: int
    limit: int
    total: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool
