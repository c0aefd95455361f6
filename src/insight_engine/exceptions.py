"""Error taxonomy for the analysis pipeline."""

from insight_engine.domain.enums import ProviderErrorKind, TaskStatus


class ScrapeError(Exception):
    """Navigation, timeout, or extraction failure during a search. Fatal for a task."""


class ProviderError(Exception):
    """Classified failure from an AI inference provider."""

    def __init__(self, kind: ProviderErrorKind, message: str, provider: str | None = None) -> None:
        self.kind = ProviderErrorKind(kind)
        self.provider = provider
        super().__init__(message)

    @property
    def transient(self) -> bool:
        """Whether retrying the same request may succeed."""
        return self.kind != ProviderErrorKind.AUTH

    def __str__(self) -> str:
        prefix = f"{self.provider} " if self.provider else ""
        return f"{prefix}{self.kind.value}: {self.args[0]}"


class TaskNotFound(Exception):
    """No task exists with the given identifier."""


class InvalidTransition(Exception):
    """A task status change outside pending -> running -> completed|failed."""

    def __init__(self, current: TaskStatus, target: TaskStatus) -> None:
        self.current = current
        self.target = target
        super().__init__(f"Invalid task transition: {current.value} -> {target.value}")


class NotReady(Exception):
    """Results were requested before the task completed. Poll again later."""

    def __init__(self, status: TaskStatus) -> None:
        self.status = status
        super().__init__(f"Task results not ready (status: {status.value})")


class NoResults(Exception):
    """The task failed and will never have results."""

    def __init__(self, error_message: str | None = None) -> None:
        self.error_message = error_message
        super().__init__(f"Task failed without results: {error_message or 'unknown error'}")
