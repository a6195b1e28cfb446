"""Prompt loading and rendering helpers for the synthesis provider."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from ..config import SummaryConfig
from ..core.types import Item


_PROMPT_DIR = Path(__file__).resolve().parent.parent / "prompts"

KERNEL_HEADER = "=== LINUX KERNEL MESSAGES (lore.kernel.org) ==="
NEWS_HEADER = "=== GENERAL NEWS (Phoronix, Linux.com, It's FOSS) ==="


@lru_cache(maxsize=None)
def _load_template(name: str) -> str:
    path = _PROMPT_DIR / f"{name}.md"
    return path.read_text(encoding="utf-8").strip()


def _render_template(name: str, **values: str) -> str:
    template = _load_template(name)
    return template.format(**values)


def split_items(items: list[Item]) -> tuple[list[Item], list[Item]]:
    """Split a batch into (kernel mailing-list items, general news items)."""
    kernel = [item for item in items if item.type in ("patch", "inbox")]
    news = [item for item in items if item.type == "news"]
    return kernel, news


def format_item(label: str, index: int, item: Item, max_chars: int) -> str:
    return (
        f"{label} {index}:\n"
        f"TYPE: {item.type}\n"
        f"TITLE: {item.title}\n"
        f"AUTHOR: {item.author}\n"
        f"DATE: {item.date}\n"
        f"CONTENT: {item.body[:max_chars]}\n"
        f"LINK: {item.link}\n"
        "---"
    )


def build_news_content(items: list[Item], cfg: SummaryConfig) -> str:
    kernel, news = split_items(items)
    blocks = []
    if kernel:
        blocks.append(KERNEL_HEADER)
        for idx, item in enumerate(kernel, start=1):
            blocks.append(format_item("MESSAGE", idx, item, cfg.body_max_chars))
    if news:
        blocks.append(NEWS_HEADER)
        for idx, item in enumerate(news, start=1):
            blocks.append(format_item("NEWS", idx, item, cfg.body_max_chars))
    return "\n\n".join(blocks)


def build_synthesis_prompt(items: list[Item], cfg: SummaryConfig) -> str:
    return _render_template("synthesis", news_content=build_news_content(items, cfg))


def build_connection_test_prompt() -> str:
    return _load_template("connection_test")
