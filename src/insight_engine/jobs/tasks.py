"""Celery task definitions for the analysis pipeline."""

from typing import Any
from uuid import UUID

from insight_engine.logging import get_logger
from insight_engine.services.tasks import TaskService
from insight_engine.utils.async_utils import run_async
from insight_engine.worker import celery_app

logger = get_logger(__name__)


@celery_app.task(bind=True, name="tasks.run_analysis")
def run_analysis_task(self: Any, task_id: str) -> dict[str, Any]:
    """Run one analysis task end to end.

    Failures inside the pipeline are recorded on the task itself, so the
    Celery task is not retried. Re-delivery of the same message is a no-op
    once the task has left ``pending``.

    Args:
        task_id: UUID of the analysis task

    Returns:
        Task snapshot as a dict
    """
    logger.info("run_analysis_started", celery_task_id=self.request.id, task_id=task_id)

    task = run_async(TaskService().run(UUID(task_id)))

    logger.info(
        "run_analysis_finished",
        celery_task_id=self.request.id,
        task_id=task_id,
        status=task.status.value,
    )
    return task.to_dict()
