"""
db/models/casino_record.py

One scraped document per game / casino, upserted by name.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, Float, Index, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, JSONDocument, TimestampMixin


class CasinoRecordStatus:
    SUCCESS = "success"
    ERROR = "error"


class CasinoRecord(Base, TimestampMixin):
    __tablename__ = "casino_records"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        comment="Natural identity: game or casino name",
    )
    type: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        default="unknown",
        comment="game show, roulette, casino, ...",
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    stats: Mapped[dict[str, Any]] = mapped_column(
        JSONDocument,
        nullable=False,
        default=dict,
        comment="Section name -> extracted rows",
    )
    features: Mapped[list[str]] = mapped_column(
        JSONDocument,
        nullable=False,
        default=list,
    )
    url: Mapped[str] = mapped_column(String(500), nullable=False)
    score: Mapped[float | None] = mapped_column(Float, nullable=True)
    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=CasinoRecordStatus.SUCCESS,
        comment="success, error",
    )
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    heuristic_fields: Mapped[list[str]] = mapped_column(
        JSONDocument,
        nullable=False,
        default=list,
        comment="Fields derived from the free-text keyword scan",
    )
    scraped_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint("name", name="uq_casino_records_name"),
        Index("ix_casino_records_status", "status"),
    )


Index(
    "ix_casino_records_url_scraped_at",
    CasinoRecord.url,
    CasinoRecord.scraped_at.desc(),
)
