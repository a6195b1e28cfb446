"""Analysis stages that run after scraping."""

from .synthesizer import NO_NEWS_TEXT, SYNTHESIS_FAILED_TEXT, Synthesizer

__all__ = ["Synthesizer", "NO_NEWS_TEXT", "SYNTHESIS_FAILED_TEXT"]
