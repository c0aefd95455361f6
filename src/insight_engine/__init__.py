"""AI Insight Engine - prompt-driven content discovery and AI analysis."""

__version__ = "0.1.0"
