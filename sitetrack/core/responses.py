from datetime import datetime, timezone
from typing import Any

from sitetrack.schemas.query import PaginationMeta


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def success_response(data: Any, message: str = "Success") -> dict[str, Any]:
    return {"status": "success", "message": message, "data": data, "timestamp": _timestamp()}


def paginated_response(data: list, pagination: PaginationMeta, message: str = "Success") -> dict[str, Any]:
    return {
        "status": "success",
        "message": message,
        "data": data,
        "pagination": pagination.model_dump(by_alias=True),
        "timestamp": _timestamp(),
    }
