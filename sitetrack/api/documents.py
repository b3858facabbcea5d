from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from sitetrack.api.listing import list_with_query, load_row_or_404
from sitetrack.api.query_params import ParsedQuery, query_parser
from sitetrack.core.responses import success_response
from sitetrack.db.collections import SqlAlchemyCollection, row_to_record
from sitetrack.db.session import get_db
from sitetrack.models.document import Document

router = APIRouter()

IMAGE_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp"}


def _with_file_flags(record: dict) -> dict:
    if "fileType" in record:
        record["isImage"] = record["fileType"] in IMAGE_TYPES
        record["isPdf"] = record["fileType"] == "application/pdf"
    return record


@router.get("")
def list_documents(parsed: ParsedQuery = Depends(query_parser("documents")), db: Session = Depends(get_db)):
    return list_with_query(
        SqlAlchemyCollection(db, Document), parsed, message="Documents retrieved successfully", transform=_with_file_flags
    )


@router.get("/{document_id}")
def get_document(document_id: str, db: Session = Depends(get_db)):
    row = load_row_or_404(db, Document, document_id, "Document")
    return success_response(_with_file_flags(row_to_record(row)), "Document retrieved successfully")
