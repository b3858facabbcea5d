import uuid
from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column
from sitetrack.db.session import Base
from sitetrack.models.common import UUIDMixin, TimestampMixin

class Task(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "tasks"
    project_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    # not_started | in_progress | completed
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="not_started", index=True)
    # low | medium | high
    priority: Mapped[str] = mapped_column(String(10), nullable=False, default="medium")
    deadline: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    assigned_to: Mapped[str | None] = mapped_column(String(128), nullable=True, index=True)
    assigned_by: Mapped[str | None] = mapped_column(String(128), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
