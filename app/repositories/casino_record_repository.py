"""
app/repositories/casino_record_repository.py

Persistence layer for scraped casino records, one row per name.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from db.base import as_utc, utc_now
from db.models.casino_record import CasinoRecord

_UPSERT_FIELDS = (
    "type",
    "description",
    "stats",
    "features",
    "url",
    "score",
    "status",
    "error_message",
    "heuristic_fields",
)


class CasinoRecordRepository:
    """
    Repository for reading and upserting casino records by natural key.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_by_name(self, name: str) -> CasinoRecord | None:
        stmt = select(CasinoRecord).where(CasinoRecord.name == name)
        return self._session.scalars(stmt).first()

    def upsert(
        self,
        *,
        name: str,
        values: dict[str, Any],
        scraped_at: datetime,
    ) -> CasinoRecord:
        """
        Replace every document field of the row named `name`, or insert it.
        An update older than the stored `scraped_at` is ignored.

        Flushes but does not commit; the caller owns the transaction.
        """

        unknown = set(values) - set(_UPSERT_FIELDS)
        if unknown:
            raise ValueError(f"Unknown casino record fields: {sorted(unknown)}")

        record = self.get_by_name(name)
        if record is None:
            now = utc_now()
            record = CasinoRecord(name=name, created_at=now, updated_at=now)
            self._session.add(record)
        elif as_utc(record.scraped_at) > as_utc(scraped_at):
            # Stored scrape is newer; an out-of-order write must not roll it back.
            return record
        else:
            record.updated_at = utc_now()

        for field_name in _UPSERT_FIELDS:
            if field_name in values:
                setattr(record, field_name, values[field_name])
        record.scraped_at = scraped_at

        self._session.flush()
        return record

    def list_recent(self, *, limit: int = 20) -> list[CasinoRecord]:
        stmt = (
            select(CasinoRecord)
            .order_by(CasinoRecord.scraped_at.desc(), CasinoRecord.name.asc())
            .limit(max(1, limit))
        )
        return list(self._session.scalars(stmt).all())

    def count(self) -> int:
        return int(self._session.scalar(select(func.count()).select_from(CasinoRecord)) or 0)
