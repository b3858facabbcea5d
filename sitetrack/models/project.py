from datetime import datetime

from sqlalchemy import DateTime, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sitetrack.db.session import Base
from sitetrack.models.common import UUIDMixin, TimestampMixin

class Project(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "projects"
    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    location: Mapped[str | None] = mapped_column(String(300), nullable=True)
    start_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    expected_end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    actual_end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # planning | in_progress | on_hold | completed | cancelled
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="planning", index=True)
    progress_percentage: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    sustainability_score: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    team_size: Mapped[int | None] = mapped_column(Integer, nullable=True)
    # residential | commercial | industrial | infrastructure
    project_type: Mapped[str | None] = mapped_column(String(30), nullable=True)
    owner: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    created_by: Mapped[str | None] = mapped_column(String(128), nullable=True)
