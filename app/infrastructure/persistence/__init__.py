"""
Долговременное хранение состояния акторов.
"""

from .database import (
    StateStore,
    SqlAlchemyStateStore,
    init_database,
    init_db,
    close_db,
)
from .models import Base, ActorRecordModel

__all__ = [
    "StateStore",
    "SqlAlchemyStateStore",
    "init_database",
    "init_db",
    "close_db",
    "Base",
    "ActorRecordModel",
]
