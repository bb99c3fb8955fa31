# makeafood/services/mailer.py
# Transactional mail over SMTP (reset links, verification, moderation warnings)
# Optional at startup: without SMTP_HOST/MAIL_FROM every send raises MailerNotReady.
# Blocking I/O -> callers run it in the threadpool.

from __future__ import annotations
import html
import logging
import smtplib
from email.message import EmailMessage
from typing import Optional

from makeafood.core.config import Settings
from makeafood.core.errors import EmailError, MailerNotReady

log = logging.getLogger(__name__)

BRAND = "MakeAFood"


class Mailer:
    def __init__(self, host: Optional[str], port: int = 587, user: Optional[str] = None,
                 password: Optional[str] = None, sender: Optional[str] = None):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.sender = sender or user

    @classmethod
    def from_settings(cls, settings: Settings) -> "Mailer":
        return cls(settings.SMTP_HOST, settings.SMTP_PORT, settings.SMTP_USER,
                   settings.SMTP_PASSWORD, settings.MAIL_FROM)

    @property
    def ready(self) -> bool:
        return bool(self.host and self.sender)

    def ensure_ready(self) -> None:
        if not self.ready:
            raise MailerNotReady("SMTP_HOST / MAIL_FROM not set")

    def send(self, to: str, subject: str, body_html: str) -> None:
        self.ensure_ready()

        msg = EmailMessage()
        msg["From"] = f"{BRAND} <{self.sender}>"
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content("This message requires an HTML capable mail client.")
        msg.add_alternative(body_html, subtype="html")

        try:
            if self.port == 465:
                with smtplib.SMTP_SSL(self.host, self.port) as smtp:
                    self._deliver(smtp, msg)
            else:
                with smtplib.SMTP(self.host, self.port) as smtp:
                    smtp.starttls()
                    self._deliver(smtp, msg)
        except (smtplib.SMTPException, OSError) as e:
            log.error("Mail to %s failed: %s", to, e)
            raise EmailError(str(e))
        log.info("Mail sent to %s (%s)", to, subject)

    def _deliver(self, smtp: smtplib.SMTP, msg: EmailMessage) -> None:
        if self.user and self.password:
            smtp.login(self.user, self.password)
        smtp.send_message(msg)


# ------------------------------
# templates
# ------------------------------

def password_reset_html(username: str, link: str) -> str:
    return f"""
<h2>Password Reset</h2>
<p>Hello {html.escape(username)},</p>
<p>We received a request to reset the password for your account.
If you made this request, use the link below to choose a new password:</p>
<p><a href="{html.escape(link, quote=True)}">Reset Password</a></p>
<p><strong>Security note:</strong> this link expires in 30 minutes.
If you didn't request a reset, you can ignore this email.</p>
"""


def verification_html(link: str) -> str:
    return f"""
<h2>Welcome to {BRAND}!</h2>
<p>Click the link below to verify your account:</p>
<p><a href="{html.escape(link, quote=True)}">Verify Email</a></p>
<p>If you did not sign up, ignore this email.</p>
"""


def warning_html(username: str, reason: str) -> str:
    return f"""
<h2>Account warning</h2>
<p>Hello {html.escape(username)},</p>
<p>A moderator flagged activity on your {BRAND} account:</p>
<blockquote>{html.escape(reason)}</blockquote>
<p>Repeated violations may lead to suspension.</p>
"""
