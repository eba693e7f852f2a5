from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import DateTime, String, Text, create_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker

from .config import get_settings
from .models import ApplicationState


def utcnow() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    pass


class StoredApplication(Base):
    __tablename__ = "application_states"

    name: Mapped[str] = mapped_column(String, primary_key=True)
    state_json: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )


# --- Engine & Session factory ---

settings = get_settings()

engine = create_engine(
    settings.database_url,
    connect_args={"check_same_thread": False} if settings.database_url.startswith("sqlite") else {},
)

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def init_db() -> None:
    """Create tables if they don't exist."""
    Base.metadata.create_all(bind=engine)


def load_state(db: Session, name: str) -> ApplicationState | None:
    """Return the stored state for `name`, or None if nothing was ever deployed."""
    row = db.get(StoredApplication, name)
    if row is None:
        return None
    return ApplicationState.model_validate_json(row.state_json)


def save_state(db: Session, name: str, state: ApplicationState) -> None:
    payload = state.model_dump_json(exclude_none=True)
    row = db.get(StoredApplication, name)
    if row is None:
        db.add(StoredApplication(name=name, state_json=payload))
    else:
        row.state_json = payload
    db.commit()


def clear_state(db: Session, name: str) -> bool:
    """Forget `name`. Returns False if there was nothing stored."""
    row = db.get(StoredApplication, name)
    if row is None:
        return False
    db.delete(row)
    db.commit()
    return True
