from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from sitetrack.api.listing import list_with_query, load_row_or_404
from sitetrack.api.query_params import ParsedQuery, query_parser
from sitetrack.core.responses import success_response
from sitetrack.db.collections import SqlAlchemyCollection, row_to_record
from sitetrack.db.session import get_db
from sitetrack.models.material import Material

router = APIRouter()


def _with_reorder_flag(record: dict) -> dict:
    # only when both operands survived the projection
    if "quantity" in record and "reorderLevel" in record:
        record["needsReorder"] = record["quantity"] <= record["reorderLevel"]
    return record


@router.get("")
def list_materials(parsed: ParsedQuery = Depends(query_parser("materials")), db: Session = Depends(get_db)):
    return list_with_query(
        SqlAlchemyCollection(db, Material),
        parsed,
        message="Materials retrieved successfully",
        transform=_with_reorder_flag,
    )


@router.get("/{material_id}")
def get_material(material_id: str, db: Session = Depends(get_db)):
    row = load_row_or_404(db, Material, material_id, "Material")
    return success_response(_with_reorder_flag(row_to_record(row)), "Material retrieved successfully")
