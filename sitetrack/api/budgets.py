from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from sitetrack.api.listing import list_with_query, load_row_or_404
from sitetrack.api.query_params import ParsedQuery, query_parser
from sitetrack.core.responses import success_response
from sitetrack.db.collections import DocumentCollection, SqlAlchemyCollection, row_to_record
from sitetrack.db.session import get_db
from sitetrack.models.budget import Budget
from sitetrack.schemas.budget import ExpenseItem

router = APIRouter()


@router.get("")
def list_budgets(parsed: ParsedQuery = Depends(query_parser("budgets")), db: Session = Depends(get_db)):
    return list_with_query(SqlAlchemyCollection(db, Budget), parsed, message="Budgets retrieved successfully")


@router.get("/{budget_id}")
def get_budget(budget_id: str, db: Session = Depends(get_db)):
    row = load_row_or_404(db, Budget, budget_id, "Budget")
    return success_response(row_to_record(row), "Budget retrieved successfully")


@router.get("/{budget_id}/expenses")
def list_expenses(
    budget_id: str,
    parsed: ParsedQuery = Depends(query_parser("expenses")),
    db: Session = Depends(get_db),
):
    budget = load_row_or_404(db, Budget, budget_id, "Budget")
    records = [ExpenseItem.model_validate(item).as_record() for item in budget.expenses or []]
    return list_with_query(DocumentCollection(records), parsed, message="Expenses retrieved successfully")
