from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from sitetrack.api.listing import list_with_query, load_row_or_404
from sitetrack.api.query_params import ParsedQuery, query_parser
from sitetrack.core.responses import success_response
from sitetrack.db.collections import SqlAlchemyCollection, row_to_record
from sitetrack.db.session import get_db
from sitetrack.models.task import Task

router = APIRouter()


def _with_overdue_flag(record: dict) -> dict:
    if "status" not in record or "deadline" not in record:
        return record
    deadline = record["deadline"]
    if deadline is not None and deadline.tzinfo is None:
        deadline = deadline.replace(tzinfo=timezone.utc)
    record["isOverdue"] = (
        record["status"] != "completed" and deadline is not None and datetime.now(timezone.utc) > deadline
    )
    return record


@router.get("")
def list_tasks(parsed: ParsedQuery = Depends(query_parser("tasks")), db: Session = Depends(get_db)):
    return list_with_query(
        SqlAlchemyCollection(db, Task), parsed, message="Tasks retrieved successfully", transform=_with_overdue_flag
    )


@router.get("/{task_id}")
def get_task(task_id: str, db: Session = Depends(get_db)):
    row = load_row_or_404(db, Task, task_id, "Task")
    return success_response(_with_overdue_flag(row_to_record(row)), "Task retrieved successfully")
