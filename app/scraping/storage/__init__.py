"""
Storage layer exports.
"""

from app.scraping.storage.base import RecordStorage
from app.scraping.storage.sqlalchemy_storage import SQLAlchemyRecordStorage, to_persisted_record

__all__ = ["RecordStorage", "SQLAlchemyRecordStorage", "to_persisted_record"]
