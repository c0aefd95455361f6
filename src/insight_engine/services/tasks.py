"""Task lifecycle: create, run the scrape-analyze-assemble pipeline, and query."""

from collections.abc import Callable
from dataclasses import dataclass
from uuid import UUID

from insight_engine.adapters.browser.base import BrowserProvider
from insight_engine.adapters.llm.base import LLMProvider
from insight_engine.adapters.llm.factory import get_llm_provider
from insight_engine.config import settings
from insight_engine.db.repository import TaskRepository
from insight_engine.domain.enums import ProviderName, TaskKind, TaskStatus, TimeWindow
from insight_engine.domain.models import ResultSet, Task, TaskParameters
from insight_engine.exceptions import NoResults, NotReady, ProviderError, ScrapeError
from insight_engine.logging import get_logger
from insight_engine.services.analyzer import AnalysisBatcher
from insight_engine.services.prompt_parser import clamp_max_results, parse_prompt
from insight_engine.services.report import assemble_entries
from insight_engine.services.scraper import ScraperEngine

logger = get_logger(__name__)


@dataclass(frozen=True)
class RunPlan:
    """Fully resolved parameters for one run."""

    query: str
    time_window: TimeWindow
    max_results: int
    provider: ProviderName
    want_storyboard: bool
    concurrency: int
    max_retries: int
    fallback_provider: ProviderName | None = None


def resolve_parameters(prompt: str, parameters: TaskParameters) -> RunPlan:
    """Fill unset parameters from the prompt, then from settings."""
    parsed = parse_prompt(prompt)
    provider = parameters.provider or ProviderName(settings.llm_provider.lower())
    fallback = (
        ProviderName(settings.llm_fallback_provider.lower())
        if settings.llm_fallback_provider
        else None
    )
    return RunPlan(
        query=parameters.query or parsed.query,
        time_window=parameters.time_window or parsed.time_window,
        max_results=clamp_max_results(parameters.max_results or parsed.max_results),
        provider=provider,
        fallback_provider=fallback if fallback != provider else None,
        want_storyboard=(
            settings.want_storyboard
            if parameters.want_storyboard is None
            else parameters.want_storyboard
        ),
        concurrency=max(1, parameters.concurrency or settings.analysis_concurrency),
        max_retries=(
            settings.analysis_max_retries
            if parameters.max_retries is None
            else max(0, parameters.max_retries)
        ),
    )


class TaskService:
    """Drives tasks through pending -> running -> completed | failed.

    The browser and LLM providers are injectable so runs can be exercised
    with stubs.
    """

    def __init__(
        self,
        repository: TaskRepository | None = None,
        browser: BrowserProvider | None = None,
        llm_factory: Callable[[ProviderName], LLMProvider] = get_llm_provider,
        scraper_factory: Callable[[BrowserProvider | None], ScraperEngine] = ScraperEngine,
        batcher_factory: Callable[..., AnalysisBatcher] = AnalysisBatcher,
    ) -> None:
        self.repository = repository or TaskRepository()
        self.browser = browser
        self.llm_factory = llm_factory
        self.scraper_factory = scraper_factory
        self.batcher_factory = batcher_factory

    def create(
        self,
        prompt: str,
        kind: TaskKind = TaskKind.YOUTUBE_SCRAPE,
        parameters: TaskParameters | None = None,
        user_id: int = 1,
    ) -> Task:
        """Create and persist a pending task.

        Raises:
            ValueError: empty prompt
        """
        if not prompt or not prompt.strip():
            raise ValueError("Prompt is required")

        task = Task.create(prompt.strip(), TaskKind(kind), parameters, user_id=user_id)
        self.repository.add(task)
        logger.info("task_created", task_id=str(task.id), task_type=task.kind.value)
        return task

    async def run(self, task_id: UUID) -> Task:
        """Run a pending task to completion.

        A task that is no longer pending is left untouched and its current
        snapshot returned, so duplicate triggers are harmless. Item-level
        analysis failures never fail the task.
        """
        if not self.repository.claim(task_id):
            task = self.repository.get(task_id)
            logger.info("task_run_skipped", task_id=str(task_id), status=task.status.value)
            return task

        task = self.repository.get(task_id)
        log = logger.bind(task_id=str(task_id), task_type=task.kind.value)
        log.info("task_run_started")

        try:
            result_set = await self._execute(task)
        except (ScrapeError, ProviderError) as e:
            log.error("task_run_failed", error=str(e), error_type=type(e).__name__)
            return self.repository.fail(task_id, str(e))
        except Exception as e:
            log.exception("task_run_crashed", error=str(e))
            return self.repository.fail(task_id, str(e) or type(e).__name__)

        try:
            task = self.repository.complete(task_id, result_set)
        except Exception as e:
            log.exception("task_store_results_failed", error=str(e))
            return self.repository.fail(
                task_id, f"Failed to store results: {str(e) or type(e).__name__}"
            )

        log.info(
            "task_run_completed",
            items=result_set.metadata.total_items,
            analyzed=result_set.metadata.analyzed_items,
        )
        return task

    async def _execute(self, task: Task) -> ResultSet:
        # Every kind searches YouTube; the kind is only recorded on the task.
        plan = resolve_parameters(task.prompt, task.parameters)
        provider = self.llm_factory(plan.provider)
        fallback = self.llm_factory(plan.fallback_provider) if plan.fallback_provider else None

        items = await self.scraper_factory(self.browser).search(
            plan.query, plan.time_window, plan.max_results
        )
        batcher = self.batcher_factory(provider, fallback=fallback)
        entries = await batcher.analyze(
            items,
            concurrency=plan.concurrency,
            max_retries=plan.max_retries,
            want_storyboard=plan.want_storyboard,
        )
        summary = None
        if settings.analysis_summary_enabled:
            summary = await batcher.summarize(entries, max_retries=plan.max_retries)
        return assemble_entries(items, entries, summary=summary)

    def status(self, task_id: UUID) -> Task:
        """Current snapshot. Raises TaskNotFound."""
        return self.repository.get(task_id)

    def list(
        self,
        status: TaskStatus | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[Task], int]:
        """Newest-first page of tasks and the total count."""
        return self.repository.list_tasks(status=status, limit=limit, offset=offset)

    def results(self, task_id: UUID) -> ResultSet:
        """Result set of a completed task.

        Raises:
            TaskNotFound: unknown id
            NotReady: task is pending or running
            NoResults: task failed
        """
        task = self.repository.get(task_id)
        if task.status == TaskStatus.FAILED:
            raise NoResults(task.error_message)
        if task.status != TaskStatus.COMPLETED or task.result_set is None:
            raise NotReady(task.status)
        return task.result_set
