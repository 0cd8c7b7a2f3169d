"""Tests for invitation and confirmation mail."""
import smtplib

import pytest

from gamenight.services import notification_service
from gamenight.services.notification_service import (
    LoggingNotifier, NotificationError, Notifier, SmtpNotifier, get_notifier,
)
from tests.conftest import RecordingNotifier


class TestMessages:

    def test_invitation_contents(self):
        notifier = RecordingNotifier()
        notifier.send_invitation(
            to_email="bo@example.com",
            event_title="Friday Games",
            organizer_name="Ana",
            proposed_dates=["Friday, 06 November 2026 at 19:00"],
            invite_token="abc123",
            response_deadline="01 November 2026 12:00 UTC",
        )
        message = notifier.sent[0]
        assert message["subject"] == "Ana invites you to: Friday Games"
        assert "Friday, 06 November 2026 at 19:00" in message["body"]
        assert "/invite/abc123" in message["body"]
        assert "before 01 November 2026 12:00 UTC" in message["body"]

    def test_confirmation_continues_after_failure(self):
        notifier = RecordingNotifier(fail_for=["a@example.com"])
        results = notifier.send_confirmation(
            to_emails=["a@example.com", "b@example.com"],
            event_title="Friday Games",
            final_date="Friday, 06 November 2026",
            final_time="19:00",
            location="Ana's place",
            final_games=[{"name": "Catan", "responsible": "Bo"}],
        )
        assert results == {"a@example.com": False, "b@example.com": True}
        body = notifier.sent[0]["body"]
        assert "When: Friday, 06 November 2026 at 19:00" in body
        assert "Where: Ana's place" in body
        assert "Catan (brought by Bo)" in body

    def test_confirmation_survives_unexpected_error(self):
        notifier = RecordingNotifier(crash_for=["a@example.com"])
        results = notifier.send_confirmation(
            to_emails=["a@example.com", "b@example.com"],
            event_title="Friday Games",
            final_date="Friday, 06 November 2026",
        )
        assert results == {"a@example.com": False, "b@example.com": True}

    def test_notifier_requires_deliver(self):
        class Incomplete(Notifier):
            pass

        with pytest.raises(TypeError):
            Incomplete()

    def test_logging_notifier_never_fails(self):
        LoggingNotifier().send_invitation("x@example.com", "T", "O", [], "tok")


class TestSmtp:

    def test_transport_errors_wrapped(self, monkeypatch):
        def _refuse(*args, **kwargs):
            raise ConnectionRefusedError("no server")

        monkeypatch.setattr(smtplib, "SMTP", _refuse)
        notifier = SmtpNotifier(host="localhost", port=2525, from_email="noreply@example.com")
        with pytest.raises(NotificationError):
            notifier.deliver("x@example.com", "hi", "body")

    def test_get_notifier_defaults_to_logging(self, monkeypatch):
        monkeypatch.setattr(notification_service.settings, "SMTP_HOST", "")
        assert isinstance(get_notifier(), LoggingNotifier)

    def test_get_notifier_uses_smtp_when_configured(self, monkeypatch):
        monkeypatch.setattr(notification_service.settings, "SMTP_HOST", "mail.example.com")
        notifier = get_notifier()
        assert isinstance(notifier, SmtpNotifier)
        assert notifier.host == "mail.example.com"
