"""Analysis task endpoints."""

from datetime import datetime
from typing import Any
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, HTTPException, Query, status
from pydantic import BaseModel, ConfigDict, Field

from insight_engine.api.deps import TaskServiceDep
from insight_engine.config import settings
from insight_engine.domain.enums import ProviderName, TaskKind, TaskStatus, TimeWindow
from insight_engine.domain.models import Task, TaskParameters
from insight_engine.exceptions import NoResults, NotReady, TaskNotFound
from insight_engine.jobs.tasks import run_analysis_task
from insight_engine.logging import get_logger
from insight_engine.services.tasks import TaskService

router = APIRouter(prefix="/tasks", tags=["Tasks"])
logger = get_logger(__name__)


class TaskOptions(BaseModel):
    """Optional overrides for prompt-derived and configured parameters."""

    model_config = ConfigDict(populate_by_name=True)

    query: str | None = Field(None, min_length=1, max_length=500)
    max_results: int | None = Field(None, ge=1, le=50, alias="maxResults")
    time_window: TimeWindow | None = Field(None, alias="timeWindow")
    provider: ProviderName | None = None
    want_storyboard: bool | None = Field(None, alias="wantStoryboard")
    concurrency: int | None = Field(None, ge=1, le=20)
    max_retries: int | None = Field(None, ge=0, le=10, alias="maxRetries")

    def to_parameters(self) -> TaskParameters:
        return TaskParameters(
            query=self.query,
            max_results=self.max_results,
            time_window=self.time_window,
            provider=self.provider,
            want_storyboard=self.want_storyboard,
            concurrency=self.concurrency,
            max_retries=self.max_retries,
        )


class CreateTaskRequest(BaseModel):
    """Request to create an analysis task. Accepts ``taskType`` or ``task_type``."""

    model_config = ConfigDict(populate_by_name=True)

    prompt: str = Field(..., min_length=1, max_length=2000)
    task_type: TaskKind = Field(default=TaskKind.YOUTUBE_SCRAPE, alias="taskType")
    options: TaskOptions = Field(default_factory=TaskOptions)


class TaskOut(BaseModel):
    """Task snapshot."""

    id: UUID
    user_id: int
    prompt: str
    task_type: TaskKind
    status: TaskStatus
    parameters: dict[str, Any]
    error_message: str | None = None
    has_results: bool = False
    created_at: datetime | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @classmethod
    def from_domain(cls, task: Task) -> "TaskOut":
        return cls(
            id=task.id,
            user_id=task.user_id,
            prompt=task.prompt,
            task_type=task.kind,
            status=task.status,
            parameters=task.parameters.to_dict(),
            error_message=task.error_message,
            has_results=task.result_set is not None,
            created_at=task.created_at,
            started_at=task.started_at,
            completed_at=task.completed_at,
        )


class TaskResponse(BaseModel):
    """Single task response."""

    task: TaskOut


class TaskListResponse(BaseModel):
    """Paged task list."""

    tasks: list[TaskOut]
    total: int


class ResultsResponse(BaseModel):
    """Results of a completed task."""

    results: dict[str, Any]


async def _run_inline(service: TaskService, task_id: UUID) -> None:
    await service.run(task_id)


def _get_or_404(service: TaskService, task_id: UUID) -> Task:
    try:
        return service.status(task_id)
    except TaskNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.post(
    "/create",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create task",
    description=(
        "Create an analysis task from a prompt and start running it. "
        "The task type is recorded; every type runs the YouTube search pipeline."
    ),
)
async def create_task(
    request: CreateTaskRequest,
    service: TaskServiceDep,
    background_tasks: BackgroundTasks,
) -> TaskResponse:
    """Create a task and dispatch its run."""
    try:
        task = service.create(
            request.prompt,
            kind=request.task_type,
            parameters=request.options.to_parameters(),
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)
        ) from e

    if settings.task_dispatch_mode == "inline":
        background_tasks.add_task(_run_inline, service, task.id)
    else:
        result = run_analysis_task.delay(str(task.id))
        logger.info("task_dispatched", task_id=str(task.id), celery_task_id=result.id)

    return TaskResponse(task=TaskOut.from_domain(task))


@router.get(
    "",
    response_model=TaskListResponse,
    summary="List tasks",
    description="List tasks newest first, optionally filtered by status.",
)
async def list_tasks(
    service: TaskServiceDep,
    status_filter: TaskStatus | None = Query(None, alias="status"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
) -> TaskListResponse:
    """List tasks."""
    tasks, total = service.list(status=status_filter, limit=limit, offset=offset)
    return TaskListResponse(tasks=[TaskOut.from_domain(t) for t in tasks], total=total)


@router.get(
    "/{task_id}",
    response_model=TaskResponse,
    summary="Task status",
    description="Get the current state of a task.",
)
async def get_task(task_id: UUID, service: TaskServiceDep) -> TaskResponse:
    """Get a task snapshot."""
    return TaskResponse(task=TaskOut.from_domain(_get_or_404(service, task_id)))


@router.get(
    "/{task_id}/results",
    response_model=ResultsResponse,
    summary="Task results",
    description="Get the result set of a completed task. 409 while running, 410 if failed.",
)
async def get_task_results(task_id: UUID, service: TaskServiceDep) -> ResultsResponse:
    """Get task results."""
    try:
        result_set = service.results(task_id)
    except TaskNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except NotReady as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    except NoResults as e:
        raise HTTPException(status_code=status.HTTP_410_GONE, detail=str(e)) from e

    return ResultsResponse(results=result_set.to_dict())
