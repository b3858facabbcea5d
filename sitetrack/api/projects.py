from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from sitetrack.api.listing import list_with_query, load_row_or_404
from sitetrack.api.query_params import ParsedQuery, query_parser
from sitetrack.core.responses import success_response
from sitetrack.db.collections import SqlAlchemyCollection, row_to_record
from sitetrack.db.session import get_db
from sitetrack.models.project import Project

router = APIRouter()


@router.get("")
def list_projects(parsed: ParsedQuery = Depends(query_parser("projects")), db: Session = Depends(get_db)):
    return list_with_query(SqlAlchemyCollection(db, Project), parsed, message="Projects retrieved successfully")


@router.get("/{project_id}")
def get_project(project_id: str, db: Session = Depends(get_db)):
    row = load_row_or_404(db, Project, project_id, "Project")
    return success_response(row_to_record(row), "Project retrieved successfully")
