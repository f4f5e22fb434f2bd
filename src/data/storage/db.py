from __future__ import annotations

import logging
import uuid
from typing import Generator

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    create_engine,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship, sessionmaker
from sqlalchemy.pool import StaticPool

from core.config import get_settings
from core.types import JSONDict
from core.utils.time import utc_now

logger = logging.getLogger(__name__)

ACTIVE_STATUSES = ("new", "carried_forward", "claimed", "contacted")


def _new_id() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    pass


class Company(Base):
    __tablename__ = "companies"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    domain: Mapped[str | None] = mapped_column(String(255))
    industry: Mapped[str | None] = mapped_column(String(255))
    relationship_warmth: Mapped[str] = mapped_column(
        String(50), nullable=False, default="new_prospect"
    )
    size_range: Mapped[str | None] = mapped_column(String(50))
    created_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), default=utc_now)

    signals = relationship("Signal", back_populates="company")
    contacts = relationship("Contact", back_populates="company")


class Contact(Base):
    __tablename__ = "contacts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    company_id: Mapped[str] = mapped_column(ForeignKey("companies.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    title: Mapped[str | None] = mapped_column(String(255))
    email: Mapped[str | None] = mapped_column(String(255))
    created_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), default=utc_now)

    company = relationship("Company", back_populates="contacts")


class Signal(Base):
    __tablename__ = "signals"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    company_id: Mapped[str | None] = mapped_column(ForeignKey("companies.id"))
    signal_type: Mapped[str] = mapped_column(String(100), nullable=False)
    signal_summary: Mapped[str | None] = mapped_column(Text)
    signal_detail: Mapped[dict] = mapped_column(JSONDict(), default=dict)
    source_url: Mapped[str | None] = mapped_column(Text)
    source_name: Mapped[str | None] = mapped_column(String(255))
    first_detected_at: Mapped[DateTime | None] = mapped_column(DateTime(timezone=True))
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="new")
    claimed_by: Mapped[str | None] = mapped_column(String(255))
    priority_score: Mapped[float] = mapped_column(Float, default=0.0)
    score_breakdown: Mapped[dict] = mapped_column(JSONDict(), default=dict)
    days_in_queue: Mapped[int] = mapped_column(Integer, default=0)
    is_carried_forward: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), default=utc_now)
    updated_at: Mapped[DateTime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    company = relationship("Company", back_populates="signals")


class SignalContact(Base):
    __tablename__ = "signal_contacts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    signal_id: Mapped[str] = mapped_column(
        ForeignKey("signals.id", ondelete="CASCADE"), nullable=False
    )
    contact_id: Mapped[str] = mapped_column(ForeignKey("contacts.id"), nullable=False)
    is_primary: Mapped[bool] = mapped_column(Boolean, default=False)


class CompetitorFirm(Base):
    __tablename__ = "competitor_firms"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), default=utc_now)


def _engine_kwargs(database_url: str) -> dict:
    if database_url.startswith("sqlite") and ":memory:" in database_url:
        return {
            "connect_args": {"check_same_thread": False},
            "poolclass": StaticPool,
        }
    return {"pool_pre_ping": True}


settings = get_settings()
engine = create_engine(settings.database_url, **_engine_kwargs(settings.database_url))
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def get_session() -> Generator:
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def init_db() -> None:
    logger.info("Creating tables on %s", engine.dialect.name)
    Base.metadata.create_all(bind=engine)
