"""Pipeline services: prompt parsing, scraping, analysis, reporting and task orchestration."""

from insight_engine.services.analyzer import AnalysisBatcher
from insight_engine.services.prompt_parser import SearchRequest, parse_prompt
from insight_engine.services.report import assemble, parse_view_count
from insight_engine.services.scraper import ScraperEngine
from insight_engine.services.tasks import TaskService

__all__ = [
    "AnalysisBatcher",
    "ScraperEngine",
    "SearchRequest",
    "TaskService",
    "assemble",
    "parse_prompt",
    "parse_view_count",
]
