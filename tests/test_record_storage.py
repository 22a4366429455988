"""
tests/test_record_storage.py

Upsert-by-name behaviour of SQLAlchemyRecordStorage against in-memory SQLite.

Coverage
--------
- Insert creates exactly one row with created_at == updated_at
- Second upsert with the same name replaces fields and keeps one row
- An older scraped_at never overwrites a newer row
- Synthetic error records for fetch failures
- SQLAlchemy failures are rolled back and surfaced as PersistenceError
- Recent-records read ordering
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from app.repositories.casino_record_repository import CasinoRecordRepository
from app.scraping.errors import PersistenceError
from app.scraping.storage import SQLAlchemyRecordStorage
from app.scraping.types import NO_DATA_FOUND, ExtractedRecord
from db.models.casino_record import CasinoRecord

T1 = datetime(2025, 3, 12, 14, 0, tzinfo=timezone.utc)
T2 = T1 + timedelta(minutes=1)


def _record(name: str = "Crazy Time", *, has_data: bool = True, payout: str = "€10") -> ExtractedRecord:
    rows = [{"finished": "12 Mar 2025 14:05", "payout": payout}] if has_data else []
    return ExtractedRecord(
        name=name,
        category="game show",
        stats={"round_results": rows},
        features=["live", "wheel"],
        source_url="https://casinoscores.com/crazy-time",
        has_data=has_data,
        error=None if has_data else NO_DATA_FOUND,
        description="Wheel game.",
    )


def _naive(value: datetime) -> datetime:
    return value.replace(tzinfo=None)


class TestUpsert:
    def test_insert_creates_row(self, db_session) -> None:
        storage = SQLAlchemyRecordStorage(session=db_session)

        persisted = storage.upsert(_record(), T1)

        assert persisted.name == "Crazy Time"
        assert persisted.status == "success"
        assert persisted.error_message is None
        assert persisted.created_at == persisted.updated_at
        assert CasinoRecordRepository(db_session).count() == 1

    def test_upsert_twice_keeps_one_row_with_latest_values(self, db_session, session_factory) -> None:
        storage = SQLAlchemyRecordStorage(session=db_session)

        first = storage.upsert(_record(payout="€10"), T1)
        second = storage.upsert(_record(payout="€99"), T2)

        assert first.id == second.id
        assert second.created_at == first.created_at
        assert second.created_at.tzinfo is not None
        assert second.scraped_at == T2

        with session_factory() as fresh:
            rows = fresh.scalars(select(CasinoRecord)).all()
            assert len(rows) == 1
            assert _naive(rows[0].scraped_at) == _naive(T2)
            assert rows[0].stats["round_results"][0]["payout"] == "€99"

    def test_older_upsert_does_not_roll_back(self, db_session, session_factory) -> None:
        storage = SQLAlchemyRecordStorage(session=db_session)

        storage.upsert(_record(payout="€99"), T2)
        kept = storage.upsert(_record(payout="€10"), T1)

        assert kept.scraped_at == T2
        assert kept.stats["round_results"][0]["payout"] == "€99"
        with session_factory() as fresh:
            (row,) = fresh.scalars(select(CasinoRecord)).all()
            assert _naive(row.scraped_at) == _naive(T2)
            assert row.stats["round_results"][0]["payout"] == "€99"

    def test_empty_record_persisted_with_error_status(self, db_session) -> None:
        storage = SQLAlchemyRecordStorage(session=db_session)

        persisted = storage.upsert(_record(has_data=False), T1)

        assert persisted.status == "error"
        assert persisted.error_message == NO_DATA_FOUND
        assert persisted.stats == {"round_results": []}

    def test_error_record_replaces_previous_success(self, db_session, crazy_time) -> None:
        storage = SQLAlchemyRecordStorage(session=db_session)
        storage.upsert(_record(), T1)

        persisted = storage.upsert_error(crazy_time, "Navigation timed out", T2)

        assert persisted.status == "error"
        assert persisted.error_message == "Navigation timed out"
        assert persisted.stats == {}
        assert persisted.url == crazy_time.url
        assert persisted.features == ["live", "game show", "wheel", "multipliers"]
        assert CasinoRecordRepository(db_session).count() == 1

    def test_database_error_rolls_back_and_raises(self, db_session, monkeypatch) -> None:
        storage = SQLAlchemyRecordStorage(session=db_session)
        rolled_back: list[bool] = []

        def _boom() -> None:
            raise OperationalError("COMMIT", {}, Exception("disk full"))

        original_rollback = db_session.rollback

        def _rollback() -> None:
            rolled_back.append(True)
            original_rollback()

        monkeypatch.setattr(db_session, "commit", _boom)
        monkeypatch.setattr(db_session, "rollback", _rollback)

        with pytest.raises(PersistenceError, match="Crazy Time"):
            storage.upsert(_record(), T1)
        assert rolled_back == [True]


class TestReadSide:
    def test_list_recent_orders_by_scraped_at_desc(self, db_session) -> None:
        storage = SQLAlchemyRecordStorage(session=db_session)
        storage.upsert(_record("Crazy Time"), T1)
        storage.upsert(_record("Monopoly Live"), T2)

        rows = CasinoRecordRepository(db_session).list_recent(limit=10)

        assert [row.name for row in rows] == ["Monopoly Live", "Crazy Time"]

    def test_list_recent_respects_limit(self, db_session) -> None:
        storage = SQLAlchemyRecordStorage(session=db_session)
        for offset, name in enumerate(["A game", "B game", "C game"]):
            storage.upsert(_record(name), T1 + timedelta(minutes=offset))

        rows = CasinoRecordRepository(db_session).list_recent(limit=2)

        assert [row.name for row in rows] == ["C game", "B game"]

    def test_get_by_name(self, db_session) -> None:
        SQLAlchemyRecordStorage(session=db_session).upsert(_record(), T1)

        repository = CasinoRecordRepository(db_session)

        assert repository.get_by_name("Crazy Time") is not None
        assert repository.get_by_name("Unknown") is None
