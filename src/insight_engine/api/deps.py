"""FastAPI dependencies."""

from typing import Annotated

from fastapi import Depends

from insight_engine.services.tasks import TaskService


def get_task_service() -> TaskService:
    """Get the task service instance."""
    return TaskService()


TaskServiceDep = Annotated[TaskService, Depends(get_task_service)]
