"""
SQLAlchemy-backed storage implementation for scraped casino records.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.repositories.casino_record_repository import CasinoRecordRepository
from app.scraping.config.models import ScrapeTarget
from app.scraping.errors import PersistenceError
from app.scraping.storage.base import RecordStorage
from app.scraping.types import STATUS_ERROR, ExtractedRecord, PersistedRecord
from db.base import as_utc
from db.models.casino_record import CasinoRecord


class SQLAlchemyRecordStorage(RecordStorage):
    """
    Persist records through the repository, one commit per call.
    """

    def __init__(self, *, session: Session) -> None:
        self._session = session

    def upsert(self, record: ExtractedRecord, scraped_at: datetime) -> PersistedRecord:
        values: dict[str, Any] = {
            "type": record.category,
            "description": record.description,
            "stats": record.stats,
            "features": list(record.features),
            "url": record.source_url,
            "score": record.score,
            "status": record.status,
            "error_message": record.error,
            "heuristic_fields": list(record.heuristic_fields),
        }
        return self._write(name=record.name, values=values, scraped_at=scraped_at)

    def upsert_error(
        self,
        target: ScrapeTarget,
        message: str,
        scraped_at: datetime,
    ) -> PersistedRecord:
        fallback = target.profile.fallback
        values: dict[str, Any] = {
            "type": target.category,
            "description": fallback.default_description or None,
            "stats": {},
            "features": list(fallback.default_features),
            "url": target.url,
            "score": None,
            "status": STATUS_ERROR,
            "error_message": message,
            "heuristic_fields": [],
        }
        return self._write(name=target.name, values=values, scraped_at=scraped_at)

    def _write(
        self,
        *,
        name: str,
        values: dict[str, Any],
        scraped_at: datetime,
    ) -> PersistedRecord:
        repository = CasinoRecordRepository(self._session)
        try:
            row = repository.upsert(name=name, values=values, scraped_at=scraped_at)
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise PersistenceError(f"Failed to upsert record '{name}': {exc}") from exc
        return to_persisted_record(row)


def to_persisted_record(row: CasinoRecord) -> PersistedRecord:
    return PersistedRecord(
        id=row.id,
        name=row.name,
        type=row.type,
        description=row.description,
        stats=dict(row.stats or {}),
        features=list(row.features or []),
        url=row.url,
        score=row.score,
        status=row.status,
        error_message=row.error_message,
        heuristic_fields=list(row.heuristic_fields or []),
        scraped_at=as_utc(row.scraped_at),
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
    )
