"""
Output rendering.

This package renders the digest into email bodies.
"""

from .renderer import build_subject, render_email_html, render_email_text

__all__ = ["build_subject", "render_email_html", "render_email_text"]
