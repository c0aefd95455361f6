"""Persistence for analysis tasks."""

from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session, sessionmaker

from insight_engine.db.models import TaskModel
from insight_engine.db.session import get_session_context
from insight_engine.domain.enums import TASK_TRANSITIONS, TaskKind, TaskStatus
from insight_engine.domain.models import ResultSet, Task, TaskParameters
from insight_engine.exceptions import InvalidTransition, TaskNotFound
from insight_engine.logging import get_logger

logger = get_logger(__name__)


def _aware(value: datetime | None) -> datetime | None:
    # SQLite drops tzinfo on round trip
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def to_domain(model: TaskModel) -> Task:
    """Convert an ORM row into a domain Task."""
    return Task(
        id=model.id,
        prompt=model.prompt,
        kind=TaskKind(model.task_type),
        user_id=model.user_id,
        status=TaskStatus(model.status),
        parameters=TaskParameters.from_dict(model.parameters),
        result_set=ResultSet.from_dict(model.result_set) if model.result_set else None,
        error_message=model.error_message,
        created_at=_aware(model.created_at),
        started_at=_aware(model.started_at),
        completed_at=_aware(model.completed_at),
    )


class TaskRepository:
    """Task store over SQLAlchemy.

    Every call opens its own short-lived session. Status changes are
    conditional updates on the expected current status, so concurrent
    callers cannot both move a task out of the same state.
    """

    def __init__(self, session_factory: sessionmaker[Session] | None = None) -> None:
        self.session_factory = session_factory

    def add(self, task: Task) -> Task:
        created_at = task.created_at or datetime.now(UTC)
        with get_session_context(self.session_factory) as session:
            session.add(
                TaskModel(
                    id=task.id,
                    user_id=task.user_id,
                    prompt=task.prompt,
                    task_type=task.kind.value,
                    status=task.status.value,
                    parameters=task.parameters.to_dict(),
                    result_set=task.result_set.to_dict() if task.result_set else None,
                    error_message=task.error_message,
                    created_at=created_at,
                    started_at=task.started_at,
                    completed_at=task.completed_at,
                )
            )
        task.created_at = created_at
        return task

    def get(self, task_id: UUID) -> Task:
        with get_session_context(self.session_factory) as session:
            model = session.get(TaskModel, task_id)
            if model is None:
                raise TaskNotFound(f"Task {task_id} not found")
            return to_domain(model)

    def list_tasks(
        self,
        status: TaskStatus | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[Task], int]:
        """List tasks newest first. Returns (page, total matching)."""
        with get_session_context(self.session_factory) as session:
            query = select(TaskModel)
            count_query = select(func.count()).select_from(TaskModel)
            if status is not None:
                query = query.where(TaskModel.status == status.value)
                count_query = count_query.where(TaskModel.status == status.value)

            total = session.execute(count_query).scalar_one()
            rows = session.execute(
                query.order_by(TaskModel.created_at.desc()).limit(limit).offset(offset)
            ).scalars()
            return [to_domain(row) for row in rows], total

    def _transition(
        self,
        task_id: UUID,
        expected: TaskStatus,
        target: TaskStatus,
        **values: object,
    ) -> bool:
        if target not in TASK_TRANSITIONS[expected]:
            raise InvalidTransition(expected, target)
        with get_session_context(self.session_factory) as session:
            result = session.execute(
                update(TaskModel)
                .where(TaskModel.id == task_id, TaskModel.status == expected.value)
                .values(status=target.value, **values)
            )
            changed = result.rowcount == 1
        if changed:
            logger.info(
                "task_status_changed",
                task_id=str(task_id),
                from_status=expected.value,
                to_status=target.value,
            )
        return changed

    def claim(self, task_id: UUID) -> bool:
        """Move pending -> running. False when the task is not pending."""
        return self._transition(
            task_id, TaskStatus.PENDING, TaskStatus.RUNNING, started_at=datetime.now(UTC)
        )

    def complete(self, task_id: UUID, result_set: ResultSet) -> Task:
        """Move running -> completed, storing the result set."""
        if not self._transition(
            task_id,
            TaskStatus.RUNNING,
            TaskStatus.COMPLETED,
            result_set=result_set.to_dict(),
            error_message=None,
            completed_at=datetime.now(UTC),
        ):
            raise InvalidTransition(self.get(task_id).status, TaskStatus.COMPLETED)
        return self.get(task_id)

    def fail(self, task_id: UUID, error_message: str) -> Task:
        """Move running -> failed with the error message."""
        if not self._transition(
            task_id,
            TaskStatus.RUNNING,
            TaskStatus.FAILED,
            error_message=error_message,
            completed_at=datetime.now(UTC),
        ):
            raise InvalidTransition(self.get(task_id).status, TaskStatus.FAILED)
        return self.get(task_id)
