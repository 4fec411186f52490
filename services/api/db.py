import os
from datetime import datetime
from pathlib import Path

from sqlalchemy import Boolean, DateTime, String, Text, create_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker


# Default DB path: ./data/submissions.db (create dir if missing)
DATABASE_DIR = Path(__file__).resolve().parent / "data"
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{DATABASE_DIR / 'submissions.db'}")


class Base(DeclarativeBase):
    pass


class _ModeratedMixin:
    """Moderation fields shared by every stored submission."""

    status: Mapped[str] = mapped_column(String(32), nullable=False, index=True)  # "pending" | "urgent-review" | "rejected"
    approved: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    rejected: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    moderation_result: Mapped[str] = mapped_column(Text, nullable=False)
    flag_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    crisis_resources_shown: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    detected_keywords_json: Mapped[str] = mapped_column(Text, nullable=False, default="[]")  # JSON string
    ip_address: Mapped[str] = mapped_column(String(128), nullable=False, default="unknown")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class Whisper(_ModeratedMixin, Base):
    __tablename__ = "whispers"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    text: Mapped[str] = mapped_column(Text, nullable=False)


class Tribute(_ModeratedMixin, Base):
    __tablename__ = "tributes"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str | None] = mapped_column(Text, nullable=True)
    submitted_from: Mapped[str] = mapped_column(String(64), nullable=False, default="memorial-wall")


class RejectedSubmission(_ModeratedMixin, Base):
    """Monitoring log of auto-rejected content. Never served to the site."""

    __tablename__ = "rejected_submissions"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    submission_type: Mapped[str] = mapped_column(String(16), nullable=False)  # "whisper" | "tribute"
    name: Mapped[str | None] = mapped_column(Text, nullable=True)
    email: Mapped[str | None] = mapped_column(Text, nullable=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    rejection_reason: Mapped[str] = mapped_column(Text, nullable=False)


# Engine and session factory
_engine = None
_SessionLocal = None


def get_engine():
    global _engine
    if _engine is None:
        if DATABASE_URL.startswith("sqlite"):
            DATABASE_DIR.mkdir(parents=True, exist_ok=True)
        _engine = create_engine(DATABASE_URL, connect_args={"check_same_thread": False} if "sqlite" in DATABASE_URL else {})
    return _engine


def get_session_factory():
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=get_engine())
    return _SessionLocal


def init_db() -> None:
    """Create all tables. No migrations."""
    engine = get_engine()
    Base.metadata.create_all(bind=engine)
