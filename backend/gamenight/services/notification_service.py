"""Outbound mail for invitations and confirmations.

Without SMTP settings the ``LoggingNotifier`` only records what would be
sent, which is what local development and tests use.
"""
import logging
import smtplib
from abc import ABC, abstractmethod
from email.message import EmailMessage
from typing import Iterable, Optional

from gamenight.config import settings

logger = logging.getLogger(__name__)


class NotificationError(Exception):
    """A single message could not be delivered."""


class Notifier(ABC):
    """Builds invitation/confirmation messages and hands them to ``deliver``."""

    @abstractmethod
    def deliver(self, to_email: str, subject: str, body: str) -> None:
        """Send one message. Raises NotificationError when delivery fails."""

    def send_invitation(
        self,
        to_email: str,
        event_title: str,
        organizer_name: str,
        proposed_dates: list[str],
        invite_token: str,
        response_deadline: Optional[str] = None,
    ) -> None:
        """Send one invitation. Raises NotificationError when delivery fails."""
        invite_link = f"{settings.APP_URL}/invite/{invite_token}"
        lines = [
            f"{organizer_name} invites you to: {event_title}",
            "",
            "Proposed dates:",
            *[f"  - {d}" for d in proposed_dates],
            "",
        ]
        if response_deadline:
            lines += [f"Please answer before {response_deadline}.", ""]
        lines.append(f"Vote for dates and games here: {invite_link}")
        self.deliver(to_email, f"{organizer_name} invites you to: {event_title}", "\n".join(lines))

    def send_confirmation(
        self,
        to_emails: Iterable[str],
        event_title: str,
        final_date: str,
        final_time: Optional[str] = None,
        location: Optional[str] = None,
        final_games: Iterable[dict] = (),
    ) -> dict[str, bool]:
        """Send the confirmation to every recipient; one failure never stops the rest."""
        when = f"{final_date} at {final_time}" if final_time else final_date
        lines = [f"{event_title} is confirmed!", "", f"When: {when}"]
        if location:
            lines.append(f"Where: {location}")
        games = list(final_games)
        if games:
            lines += ["", "Games:"]
            lines += [f"  - {g['name']} (brought by {g['responsible']})" for g in games]
        body = "\n".join(lines)

        results = {}
        for email in to_emails:
            try:
                self.deliver(email, f"Game night confirmed: {event_title}", body)
                results[email] = True
            except NotificationError as exc:
                logger.warning("Confirmation for '%s' not delivered to %s: %s", event_title, email, exc)
                results[email] = False
            except Exception:
                logger.exception("Unexpected error sending confirmation for '%s' to %s", event_title, email)
                results[email] = False
        return results


class LoggingNotifier(Notifier):
    def deliver(self, to_email: str, subject: str, body: str) -> None:
        logger.info("Email would be sent to %s: %s", to_email, subject)


class SmtpNotifier(Notifier):
    def __init__(self, host: str, port: int, username: str = "", password: str = "",
                 use_tls: bool = True, from_email: str = ""):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.from_email = from_email

    def deliver(self, to_email: str, subject: str, body: str) -> None:
        msg = EmailMessage()
        msg["From"] = self.from_email
        msg["To"] = to_email
        msg["Subject"] = subject
        msg.set_content(body)
        try:
            with smtplib.SMTP(self.host, self.port, timeout=10) as server:
                if self.use_tls:
                    server.starttls()
                if self.username:
                    server.login(self.username, self.password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            raise NotificationError(str(exc)) from exc
        logger.info("Sent '%s' to %s", subject, to_email)


def get_notifier() -> Notifier:
    """FastAPI dependency: SMTP when configured, logging otherwise."""
    if not settings.SMTP_HOST:
        return LoggingNotifier()
    return SmtpNotifier(
        host=settings.SMTP_HOST,
        port=settings.SMTP_PORT,
        username=settings.SMTP_USERNAME,
        password=settings.SMTP_PASSWORD,
        use_tls=settings.SMTP_USE_TLS,
        from_email=settings.MAIL_FROM,
    )
