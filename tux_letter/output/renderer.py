"""
Digest rendering for email delivery.

The HTML body uses a Jinja2 template with autoescaping; the plain-text
body is assembled directly and sent as the alternative part.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..core.types import NotificationPayload


SOURCE_LABELS = {
    "lore": "lore",
    "phoronix": "phoronix",
    "linuxcom": "linux.com",
    "itsfoss": "itsfoss",
}


def _environment() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(Path(__file__).resolve().parent.parent / "templates")),
        autoescape=select_autoescape(["html"]),
    )


def build_subject(payload: NotificationPayload, now: datetime | None = None) -> str:
    now = now or datetime.now()
    return f"Tux Letter • {now.strftime('%Y-%m-%d')} • {payload.total_items} updates"


def _source_rows(payload: NotificationPayload) -> list[dict[str, object]]:
    return [
        {"label": SOURCE_LABELS.get(name, name), "count": count}
        for name, count in payload.source_counts.items()
    ]


def render_email_html(payload: NotificationPayload, now: datetime | None = None) -> str:
    """Render the digest as an HTML email body.

    Args:
        payload: Digest text, references and statistics
        now: Timestamp shown in the header and footer (defaults to now)

    Returns:
        The rendered HTML document
    """
    now = now or datetime.now()
    template = _environment().get_template("email.html")
    return template.render(
        title="Tux Letter",
        date_label=now.strftime("%A, %B %d, %Y"),
        generated_at=now.strftime("%Y-%m-%d %H:%M"),
        text=payload.text,
        references=payload.references,
        sources=_source_rows(payload),
        total_items=payload.total_items,
        bot_verification_count=payload.bot_verification_count,
    )


def render_email_text(payload: NotificationPayload, now: datetime | None = None) -> str:
    now = now or datetime.now()
    lines = [f"Tux Letter - {now.strftime('%A, %B %d, %Y')}", "", payload.text, "", "References:"]
    if payload.references:
        for idx, link in enumerate(payload.references, start=1):
            lines.append(f"{idx}. {link}")
    else:
        lines.append("No references available")
    lines.append("")
    lines.append(f"{payload.bot_verification_count} bot verifications")
    lines.append(f"{payload.total_items} items")
    for row in _source_rows(payload):
        lines.append(f"{row['count']} {row['label']}")
    return "\n".join(lines)
