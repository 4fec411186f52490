"""
Notifier: urgent alerts and pending-review notifications over SMTP. smtplib is mocked; nothing is sent.
Delivery problems must come back as {"success": False} and never raise.
"""

import smtplib
from unittest.mock import patch

import pytest

from app.logging_structured import get_metrics
from app.moderation import classify
from app.notify import mailer
from app.notify.renderer import render_general_notification_text, render_urgent_alert_html


@pytest.fixture
def smtp_configured(monkeypatch):
    monkeypatch.setattr(mailer, "SMTP_HOST", "smtp.example.test")
    monkeypatch.setattr(mailer, "SMTP_FROM", "alerts@example.test")
    monkeypatch.setattr(mailer, "SMTP_USER", "alerts@example.test")
    monkeypatch.setattr(mailer, "SMTP_PASS", "secret")
    monkeypatch.setattr(mailer, "ADMIN_EMAIL", "admin@example.test")
    monkeypatch.setattr(mailer, "INFO_EMAIL", "info@example.test")


def test_urgent_alert_sends_html_email(smtp_configured):
    verdict = classify("I want to die", "whisper")
    with patch("app.notify.mailer.smtplib.SMTP") as mock_smtp:
        result = mailer.send_urgent_alert({"id": 7, "text": "I want to die"}, verdict, "whisper")

    assert result["success"] is True
    assert result["message_id"]
    mock_smtp.assert_called_once_with("smtp.example.test", 587, timeout=mailer.SMTP_TIMEOUT_SEC)
    server = mock_smtp.return_value.__enter__.return_value
    server.starttls.assert_called_once()
    server.login.assert_called_once_with("alerts@example.test", "secret")
    sent = server.send_message.call_args[0][0]
    assert sent["To"] == "admin@example.test"
    assert sent["Subject"] == "URGENT: Crisis Language Detected in Whisper"
    html = sent.get_body(preferencelist=("html",)).get_content()
    assert "want to die" in html
    assert "Self-harm or suicidal language detected" in html


def test_tribute_alert_subject_and_fields(smtp_configured):
    verdict = classify("Ann I want to end my life", "tribute")
    submission = {"id": 3, "name": "Ann", "message": "I want to end my life", "email": "ann@example.test"}
    with patch("app.notify.mailer.smtplib.SMTP") as mock_smtp:
        result = mailer.send_urgent_alert(submission, verdict, "tribute")

    assert result["success"] is True
    sent = mock_smtp.return_value.__enter__.return_value.send_message.call_args[0][0]
    assert sent["Subject"] == "URGENT: Crisis Language Detected in Memorial Tribute"
    html = sent.get_body(preferencelist=("html",)).get_content()
    assert "ann@example.test" in html
    assert "Tribute Message:" in html


def test_general_notification_goes_to_info_address(smtp_configured):
    with patch("app.notify.mailer.smtplib.SMTP") as mock_smtp:
        result = mailer.send_general_notification({"id": 11, "text": "a quiet evening"}, "whisper")

    assert result["success"] is True
    sent = mock_smtp.return_value.__enter__.return_value.send_message.call_args[0][0]
    assert sent["To"] == "info@example.test"
    assert sent["Subject"] == "New Whisper Pending Review"
    assert "a quiet evening" in sent.get_content()


def test_smtp_failure_is_swallowed(smtp_configured):
    before = get_metrics()["notification_failures_total"]
    verdict = classify("I want to die", "whisper")
    with patch("app.notify.mailer.smtplib.SMTP") as mock_smtp:
        mock_smtp.return_value.__enter__.return_value.send_message.side_effect = smtplib.SMTPException("boom")
        result = mailer.send_urgent_alert({"id": 1, "text": "I want to die"}, verdict, "whisper")

    assert result == {"success": False, "error": "boom"}
    assert get_metrics()["notification_failures_total"] == before + 1


def test_connection_error_is_swallowed(smtp_configured):
    with patch("app.notify.mailer.smtplib.SMTP", side_effect=ConnectionRefusedError("refused")):
        result = mailer.send_general_notification({"id": 1, "text": "hello"}, "whisper")
    assert result["success"] is False
    assert "refused" in result["error"]


def test_missing_configuration_does_not_connect(monkeypatch):
    monkeypatch.setattr(mailer, "SMTP_HOST", "")
    verdict = classify("I want to die", "whisper")
    with patch("app.notify.mailer.smtplib.SMTP") as mock_smtp:
        result = mailer.send_urgent_alert({"id": 1, "text": "I want to die"}, verdict)
    assert result["success"] is False
    assert "not configured" in result["error"]
    mock_smtp.assert_not_called()


def test_missing_recipient_is_reported(smtp_configured, monkeypatch):
    monkeypatch.setattr(mailer, "ADMIN_EMAIL", "")
    verdict = classify("I want to die", "whisper")
    with patch("app.notify.mailer.smtplib.SMTP") as mock_smtp:
        result = mailer.send_urgent_alert({"id": 1, "text": "x"}, verdict)
    assert result["success"] is False
    mock_smtp.assert_not_called()


def test_verify_smtp_config(smtp_configured):
    with patch("app.notify.mailer.smtplib.SMTP") as mock_smtp:
        assert mailer.verify_smtp_config() is True
        mock_smtp.return_value.__enter__.return_value.noop.assert_called_once()
    with patch("app.notify.mailer.smtplib.SMTP", side_effect=OSError("down")):
        assert mailer.verify_smtp_config() is False


def test_alert_html_escapes_submitter_content():
    html = render_urgent_alert_html(
        {"id": 1, "name": "<b>x</b>", "message": "<script>alert(1)</script>"},
        reason="Crisis language detected",
        matches=["<bomb>"],
        submission_type="tribute",
        dashboard_url="https://example.test/admin",
    )
    assert "<script>" not in html
    assert "&lt;script&gt;" in html
    assert "&lt;b&gt;x&lt;/b&gt;" in html
    assert "&lt;bomb&gt;" in html


def test_alert_html_lists_na_without_matches():
    html = render_urgent_alert_html(
        {"text": "hello"}, reason="r", matches=[], submission_type="whisper", dashboard_url="https://x.test"
    )
    assert "N/A" in html
    assert "Whisper Content:" in html
    assert "Name:" not in html


def test_general_notification_text_for_tribute():
    body = render_general_notification_text(
        {"id": 4, "name": "Ann", "message": "We miss you"}, submission_type="tribute", dashboard_url="https://x.test"
    )
    assert body.startswith("A new memorial tribute is pending review.")
    assert "Name: Ann" in body
    assert "We miss you" in body
