"""Unit tests for email rendering and the SMTP mailer"""

import smtplib
from unittest.mock import MagicMock, patch

import pytest

from insight_auth.services.notification_service import NotificationService, SmtpMailer

from mocks.mailer import MockMailer, extract_link


@pytest.mark.unit
@pytest.mark.asyncio
async def test_links_point_at_frontend_pages():
    mailer = MockMailer()
    notifications = NotificationService(mailer, frontend_url="https://app.insight.test/")

    await notifications.send_welcome_email("a@example.com", "abc123", "tok")
    await notifications.send_invite_email("b@example.com", "abc123", "tok", creator="Olive")
    await notifications.send_password_reset_email("c@example.com", "abc123", "tok")

    links = [extract_link(email) for email in mailer.sent_emails]
    assert links == [
        "https://app.insight.test/signup-complete?email=a%40example.com&orgId=abc123&token=tok",
        "https://app.insight.test/accept-invite?email=b%40example.com&orgId=abc123&token=tok",
        "https://app.insight.test/password-reset?email=c%40example.com&orgId=abc123&token=tok",
    ]


@pytest.mark.unit
def test_templates_escape_user_input():
    notifications = NotificationService(MockMailer())

    body = notifications.render("invite", {
        "email": "b@example.com",
        "creator": "<script>alert(1)</script>",
        "role": "standard",
        "link": "http://localhost:3000/accept-invite",
    })

    assert "<script>" not in body
    assert "&lt;script&gt;" in body


@pytest.mark.unit
@pytest.mark.asyncio
async def test_failed_send_is_reported():
    notifications = NotificationService(MockMailer(fail=True))

    assert await notifications.send_welcome_email("a@example.com", "abc123", "tok") is False


@pytest.mark.unit
@pytest.mark.asyncio
async def test_smtp_mailer_without_host_logs_instead_of_sending():
    mailer = SmtpMailer(host="")

    with patch("insight_auth.services.notification_service.smtplib.SMTP") as smtp:
        assert await mailer.send("a@example.com", "Subject", "<p>hi</p>") is True

    smtp.assert_not_called()


@pytest.mark.unit
@pytest.mark.asyncio
async def test_smtp_mailer_sends_with_starttls():
    mailer = SmtpMailer(host="smtp.example.com", port=587, user="u", password="p",
                        from_email="Insight Support <support@insight.com>")
    server = MagicMock()

    with patch("insight_auth.services.notification_service.smtplib.SMTP") as smtp:
        smtp.return_value.__enter__.return_value = server
        assert await mailer.send("a@example.com", "Subject", "<p>hi</p>") is True

    smtp.assert_called_once_with("smtp.example.com", 587)
    server.starttls.assert_called_once()
    server.login.assert_called_once_with("u", "p")
    from_addr, to_addr, _ = server.sendmail.call_args.args
    assert from_addr == "Insight Support <support@insight.com>"
    assert to_addr == "a@example.com"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_smtp_mailer_reports_transport_errors():
    mailer = SmtpMailer(host="smtp.example.com", port=587, user="", password="")

    with patch("insight_auth.services.notification_service.smtplib.SMTP") as smtp:
        smtp.side_effect = smtplib.SMTPConnectError(421, "unavailable")
        assert await mailer.send("a@example.com", "Subject", "<p>hi</p>") is False
