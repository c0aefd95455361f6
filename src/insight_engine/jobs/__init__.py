"""Celery job definitions."""

from insight_engine.jobs.tasks import run_analysis_task

__all__ = ["run_analysis_task"]
