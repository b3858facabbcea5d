from fastapi import APIRouter
from sitetrack.api import budgets, documents, materials, projects, tasks

router = APIRouter()
router.include_router(projects.router, prefix="/projects", tags=["Projects"])
router.include_router(materials.router, prefix="/materials", tags=["Materials"])
router.include_router(tasks.router, prefix="/tasks", tags=["Tasks"])
router.include_router(documents.router, prefix="/documents", tags=["Documents"])
router.include_router(budgets.router, prefix="/budgets", tags=["Budgets"])
