from __future__ import annotations
import uuid
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Integer, DateTime, Text, JSON, Uuid, CheckConstraint, func
from sqlalchemy.dialects.postgresql import JSONB
from contestpulse.db import Base

class Contest(Base):
    __tablename__ = "contests"
    id: Mapped[uuid.UUID] = mapped_column(Uuid(), primary_key=True, default=uuid.uuid4)
    name: Mapped[str | None] = mapped_column(String(200))
    description: Mapped[str | None] = mapped_column(Text())
    starts_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    ends_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="draft")  # draft|active|ended|archived
    num_winners: Mapped[int] = mapped_column(Integer, nullable=False, default=5)
    min_views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)  # winner eligibility threshold
    prize_per_winner: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    prize_titles: Mapped[list | None] = mapped_column(JSON().with_variant(JSONB, "postgresql"))  # [{"rank": 1, "title": "..."}]
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint("ends_at > starts_at", name="ck_contest_window_order"),
    )
