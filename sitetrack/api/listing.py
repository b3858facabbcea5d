from __future__ import annotations

import logging
import uuid
from typing import Any, Callable

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sitetrack.api.query_params import ParsedQuery
from sitetrack.core.config import settings
from sitetrack.core.responses import paginated_response
from sitetrack.services.query_builder import QueryBuilder

_LOG = logging.getLogger("sitetrack.api")


def list_with_query(
    collection,
    parsed: ParsedQuery,
    *,
    message: str,
    transform: Callable[[dict[str, Any]], dict[str, Any]] | None = None,
) -> dict[str, Any]:
    qb = QueryBuilder(collection, parsed.raw, parsed.policy).filter().sort().limit_fields().paginate()

    parsed.rejected.extend(qb.rejected)
    rejected = parsed.rejected
    if rejected and settings.QUERY_REJECT_INVALID_FILTERS:
        raise HTTPException(
            status_code=400,
            detail={
                "message": "Query contains fields or operators that are not allowed",
                "rejected": [item.model_dump() for item in rejected],
            },
        )

    try:
        rows = qb.build().all()
        total = qb.count_documents()
    except SQLAlchemyError:
        _LOG.exception("list_query_failed entity=%s", parsed.policy.entity)
        raise

    if transform is not None:
        rows = [transform(row) for row in rows]
    return paginated_response(rows, qb.get_pagination_meta(total), message)


def load_row_or_404(db: Session, model, row_id: str, label: str):
    try:
        key = uuid.UUID(str(row_id))
    except ValueError:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    row = db.get(model, key)
    if row is None:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    return row
