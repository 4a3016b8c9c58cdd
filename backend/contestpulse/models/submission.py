from __future__ import annotations
import uuid
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Text, DateTime, ForeignKey, BigInteger, Boolean, Uuid, func
from contestpulse.db import Base


class Submission(Base):
    __tablename__ = "submissions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(), primary_key=True, default=uuid.uuid4)

    contest_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(), ForeignKey("contests.id", ondelete="CASCADE"), index=True, nullable=False
    )

    url: Mapped[str | None] = mapped_column(Text(), nullable=True)
    video_id: Mapped[str | None] = mapped_column(String(64), nullable=True)  # platform id parsed from url

    # Display fields passed through to the leaderboard
    username: Mapped[str | None] = mapped_column(String(120), nullable=True)
    full_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    title: Mapped[str | None] = mapped_column(Text(), nullable=True)
    thumbnail_url: Mapped[str | None] = mapped_column(Text(), nullable=True)

    # Engagement metrics; written only by the metrics sync
    views: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    likes: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    comments: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    shares: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    last_synced_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    submitted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
