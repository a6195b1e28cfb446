"""
SMTP delivery of the digest.

Unlike synthesis, delivery failures propagate: a run that cannot send its
digest has no other visible output.
"""

from __future__ import annotations

from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
import logging
import smtplib
import ssl

from ..config import MailConfig, get_mail_credentials
from ..core.types import NotificationPayload
from ..output.renderer import build_subject, render_email_html, render_email_text
from ..utils.logging import log_event


logger = logging.getLogger(__name__)


class Mailer:
    """Sends digests to the single configured recipient."""

    def __init__(self, cfg: MailConfig, sender: str | None = None, password: str | None = None):
        env_sender, env_password = get_mail_credentials(cfg)
        self.cfg = cfg
        self.sender = sender or env_sender
        self.password = password or env_password
        if not self.password:
            raise ValueError(f"Missing SMTP password; set {cfg.password_env}")

    def _connect(self) -> smtplib.SMTP:
        context = ssl.create_default_context()
        if self.cfg.use_ssl:
            server = smtplib.SMTP_SSL(
                self.cfg.smtp_host,
                self.cfg.smtp_port,
                timeout=self.cfg.timeout_seconds,
                context=context,
            )
        else:
            server = smtplib.SMTP(self.cfg.smtp_host, self.cfg.smtp_port, timeout=self.cfg.timeout_seconds)
        try:
            if not self.cfg.use_ssl:
                server.ehlo()
                server.starttls(context=context)
                server.ehlo()
            server.login(self.sender, self.password)
        except (smtplib.SMTPException, OSError):
            server.close()
            raise
        return server

    def build_message(self, payload: NotificationPayload, now: datetime | None = None) -> MIMEMultipart:
        now = now or datetime.now()
        msg = MIMEMultipart("alternative")
        msg["Subject"] = build_subject(payload, now)
        msg["From"] = formataddr((self.cfg.sender_name, self.sender))
        msg["To"] = self.cfg.recipient
        msg.attach(MIMEText(render_email_text(payload, now), "plain", "utf-8"))
        msg.attach(MIMEText(render_email_html(payload, now), "html", "utf-8"))
        return msg

    def send(self, payload: NotificationPayload) -> None:
        """Render and send the digest; any failure is logged and re-raised."""
        log_event(
            logger,
            "Sending digest email",
            event="mail_start",
            recipient=self.cfg.recipient,
            total_items=payload.total_items,
            references=len(payload.references),
        )
        try:
            msg = self.build_message(payload)
            with self._connect() as server:
                server.sendmail(self.sender, [self.cfg.recipient], msg.as_string())
        except (smtplib.SMTPException, OSError) as exc:
            log_event(
                logger,
                "Sending digest email failed",
                level=logging.ERROR,
                exc_info=True,
                event="mail_failed",
                recipient=self.cfg.recipient,
                error=f"{type(exc).__name__}: {exc}",
            )
            raise
        log_event(
            logger,
            "Digest email sent",
            event="mail_sent",
            recipient=self.cfg.recipient,
            total_items=payload.total_items,
        )

    def test_connection(self) -> bool:
        """Check the SMTP server is reachable and accepts the credentials."""
        log_event(logger, "Testing SMTP connection", event="smtp_connection_test")
        try:
            with self._connect() as server:
                server.noop()
        except (smtplib.SMTPException, OSError) as exc:
            log_event(
                logger,
                "SMTP connection test failed",
                level=logging.ERROR,
                exc_info=True,
                event="smtp_connection_failed",
                host=self.cfg.smtp_host,
                error=f"{type(exc).__name__}: {exc}",
            )
            return False
        log_event(logger, "SMTP connection verified", event="smtp_connection_ok")
        return True
