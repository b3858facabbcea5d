import uuid
from decimal import Decimal

from sqlalchemy import Boolean, Float, Numeric, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column
from sitetrack.db.session import Base
from sitetrack.models.common import UUIDMixin, TimestampMixin

class Material(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "materials"
    project_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    category: Mapped[str] = mapped_column(String(30), nullable=False, index=True)
    quantity: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    unit: Mapped[str] = mapped_column(String(20), nullable=False)
    unit_cost: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    supplier: Mapped[str | None] = mapped_column(String(200), nullable=True)
    eco_friendly: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    reorder_level: Mapped[float] = mapped_column(Float, nullable=False, default=0)
