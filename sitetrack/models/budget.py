import uuid
from decimal import Decimal

from sqlalchemy import Float, JSON, Numeric, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column
from sitetrack.db.session import Base
from sitetrack.models.common import UUIDMixin, TimestampMixin

class Budget(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "budgets"
    project_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False, unique=True, index=True)
    total_budget: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    allocations: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
    contingency_percentage: Mapped[float] = mapped_column(Float, nullable=False, default=10)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    # embedded expense documents, see sitetrack.schemas.budget.ExpenseItem
    expenses: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
