"""Per-entity whitelist of queryable fields, operators, sort and page sizes.

List endpoints only filter, sort and project on what is declared here. The
table is validated when this module is imported, so a broken entry stops the
process from starting.
"""

from typing import Tuple

from pydantic import BaseModel, ConfigDict, model_validator

from sitetrack.schemas.query import SortClause

ALL_OPERATORS: Tuple[str, ...] = (
    "eq", "ne", "gt", "gte", "lt", "lte", "contains", "startsWith", "endsWith", "in", "nin",
)
COMPARISON_OPERATORS: Tuple[str, ...] = ("eq", "ne", "gt", "gte", "lt", "lte", "in", "nin")


class QueryPolicy(BaseModel):
    model_config = ConfigDict(frozen=True)

    entity: str
    allowed_fields: frozenset[str]
    allowed_operators: frozenset[str] = frozenset(ALL_OPERATORS)
    default_sort: Tuple[SortClause, ...] = (SortClause(field="createdAt", dir="desc"),)
    default_page_size: int = 50
    max_page_size: int = 100

    @model_validator(mode="after")
    def _check_invariants(self):
        if self.default_page_size < 1:
            raise ValueError(f"{self.entity}: default_page_size must be >= 1")
        if self.default_page_size > self.max_page_size:
            raise ValueError(f"{self.entity}: default_page_size exceeds max_page_size")
        unknown_ops = self.allowed_operators - set(ALL_OPERATORS)
        if unknown_ops:
            raise ValueError(f"{self.entity}: unknown operators {sorted(unknown_ops)}")
        for clause in self.default_sort:
            if clause.field not in self.allowed_fields:
                raise ValueError(f'{self.entity}: default sort field "{clause.field}" is not an allowed field')
        return self

    def allows_field(self, name: str) -> bool:
        return name in self.allowed_fields

    def allows_operator(self, op: str) -> bool:
        return op in self.allowed_operators


def _policy(entity: str, fields: list[str], **kwargs) -> QueryPolicy:
    return QueryPolicy(entity=entity, allowed_fields=frozenset(fields), **kwargs)


QUERY_POLICIES: dict[str, QueryPolicy] = {
    p.entity: p
    for p in (
        _policy(
            "materials",
            [
                "projectId", "name", "category", "quantity", "unit", "unitCost",
                "supplier", "ecoFriendly", "reorderLevel", "createdAt", "updatedAt",
            ],
        ),
        _policy(
            "tasks",
            [
                "projectId", "title", "description", "status", "priority", "deadline",
                "assignedTo", "assignedBy", "completedAt", "createdAt", "updatedAt",
            ],
        ),
        _policy(
            "projects",
            [
                "name", "description", "location", "startDate", "expectedEndDate", "actualEndDate",
                "status", "progressPercentage", "sustainabilityScore", "teamSize", "projectType",
                "owner", "createdBy", "createdAt", "updatedAt",
            ],
        ),
        _policy(
            "documents",
            [
                "projectId", "filename", "originalName", "fileType", "fileSize", "category",
                "description", "tags", "uploadedBy", "isProcessed", "processingStatus",
                "createdAt", "updatedAt",
            ],
        ),
        _policy(
            "budgets",
            ["projectId", "totalBudget", "contingencyPercentage", "currency", "createdAt", "updatedAt"],
            allowed_operators=frozenset(COMPARISON_OPERATORS),
        ),
        # expenses are nested inside a budget document
        _policy(
            "expenses",
            [
                "category", "amount", "description", "date", "invoiceNumber", "vendor",
                "paymentStatus", "paymentDate", "addedBy",
            ],
            default_sort=(SortClause(field="date", dir="desc"),),
            max_page_size=200,
        ),
    )
}


def get_query_policy(entity: str) -> QueryPolicy:
    try:
        return QUERY_POLICIES[entity]
    except KeyError:
        raise KeyError(f'No query policy configured for "{entity}"') from None
