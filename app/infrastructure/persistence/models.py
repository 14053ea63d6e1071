"""
SQLAlchemy models for actor state persistence.

Contains:
- ActorRecordModel: one logical record (messages, userContext, summaries)
  of one actor key, stored as a JSON document
"""
from datetime import datetime, timezone
from typing import Any, Dict
import json

from sqlalchemy import String, Text, DateTime, Index
from sqlalchemy.orm import declarative_base, Mapped, mapped_column

# Single Base instance for all models
Base = declarative_base()


class ActorRecordModel(Base):
    """SQLAlchemy model for a single actor record"""
    __tablename__ = "actor_records"

    namespace: Mapped[str] = mapped_column(String(64), primary_key=True, comment="session_log | session_directory")
    key: Mapped[str] = mapped_column(String(255), primary_key=True, comment="Conversation id or directory name")
    record: Mapped[str] = mapped_column(String(64), primary_key=True, comment="messages | userContext | summaries")
    payload: Mapped[str] = mapped_column(Text, nullable=False)  # JSON serialized
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index('idx_actor_records_key', 'namespace', 'key'),
    )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "namespace": self.namespace,
            "key": self.key,
            "record": self.record,
            "payload": json.loads(self.payload),
            "updated_at": self.updated_at,
        }
