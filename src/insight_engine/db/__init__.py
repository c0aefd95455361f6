"""Task store: ORM models, sessions and the task repository."""

from insight_engine.db.models import Base, TaskModel
from insight_engine.db.repository import TaskRepository
from insight_engine.db.session import SessionLocal, get_session_context, init_db

__all__ = [
    "Base",
    "SessionLocal",
    "TaskModel",
    "TaskRepository",
    "get_session_context",
    "init_db",
]
