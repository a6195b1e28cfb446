"""
Tux Letter - daily digest of Linux kernel and Linux news.

This package scrapes lore.kernel.org and a few Linux news sites, keeps
track of links already sent, asks an LLM for a single digest and emails it.

Main entry point is the CLI via `tux-letter run` command.

Example:
    $ tux-letter run --source lore --source phoronix
"""

__all__ = ["__version__", "AppConfig", "load_config", "run_pipeline", "PreflightError"]
__version__ = "0.1.0"

from .config import AppConfig, load_config
from .runner import PreflightError, run_pipeline
