"""Database tables / schema"""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy import JSON, ForeignKey
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class DBEngine(Base):
    __tablename__ = "engines"
    engine_id: Mapped[str] = mapped_column(primary_key=True)
    elo: Mapped[float]
    wins: Mapped[int] = mapped_column(default=0)
    losses: Mapped[int] = mapped_column(default=0)
    draws: Mapped[int] = mapped_column(default=0)
    created_at: Mapped[datetime] = mapped_column(default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(default=utc_now, onupdate=utc_now)


class DBGame(Base):
    __tablename__ = "games"
    id: Mapped[UUID] = mapped_column(primary_key=True)
    initial_fen: Mapped[str]
    final_fen: Mapped[str]
    moves_uci: Mapped[list[str]] = mapped_column(JSON, default=list)
    status: Mapped[str]
    result: Mapped[str]
    winner: Mapped[Optional[str]]
    white_engine: Mapped[Optional[str]] = mapped_column(ForeignKey("engines.engine_id"))
    black_engine: Mapped[Optional[str]] = mapped_column(ForeignKey("engines.engine_id"))
    created_at: Mapped[datetime] = mapped_column(default=utc_now)
