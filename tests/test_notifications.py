import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from app.services.email import send_registration_received_email, send_verification_decision_email
from app.tasks.notifications import enqueue, notify_registration_received, notify_verification_decision


@pytest.mark.asyncio
async def test_registration_received_email():
    """Confirmation mail names the business and goes to the applicant"""
    with patch("app.services.email.send_email_smtp", new_callable=AsyncMock, return_value=True) as send:
        assert await send_registration_received_email("ada@x.com", "Analytical Gems") is True

    email_to, subject, body = send.await_args.args
    assert email_to == "ada@x.com"
    assert "Analytical Gems" in body


@pytest.mark.asyncio
async def test_verification_decision_email_includes_reason():
    with patch("app.services.email.send_email_smtp", new_callable=AsyncMock, return_value=True) as send:
        await send_verification_decision_email("ada@x.com", "Analytical Gems", False, "Certificate is illegible")

    assert "Certificate is illegible" in send.await_args.args[2]


@pytest.mark.asyncio
async def test_send_email_smtp_failure_returns_false():
    from app.services.email import send_email_smtp

    with patch("app.services.email.aiosmtplib.send", new_callable=AsyncMock, side_effect=OSError("refused")):
        assert await send_email_smtp("ada@x.com", "Subject", "<p>Body</p>") is False


def test_notify_registration_received_task():
    with patch("app.tasks.notifications.send_registration_received_email",
               new_callable=AsyncMock, return_value=True) as send:
        assert notify_registration_received("ada@x.com", "Analytical Gems") is True

    send.assert_awaited_once_with("ada@x.com", "Analytical Gems")


def test_notify_verification_decision_task():
    with patch("app.tasks.notifications.send_verification_decision_email",
               new_callable=AsyncMock, return_value=False) as send:
        assert notify_verification_decision("ada@x.com", "Analytical Gems", False, "Expired") is False

    send.assert_awaited_once_with("ada@x.com", "Analytical Gems", False, "Expired")


def test_enqueue_swallows_broker_errors():
    """A broker outage is logged, the request still succeeds"""
    task = MagicMock()
    task.name = "notify"
    task.delay.side_effect = ConnectionError("broker down")

    enqueue(task, "ada@x.com")

    task.delay.assert_called_once_with("ada@x.com")


@pytest.mark.asyncio
async def test_email_escapes_user_input():
    """Business names and reasons are rendered as text, never as markup"""
    with patch("app.services.email.send_email_smtp", new_callable=AsyncMock, return_value=True) as send:
        await send_registration_received_email("ada@x.com", "<script>alert(1)</script> Gems")
        await send_verification_decision_email("ada@x.com", "A & B", False, "<b>forged</b>")

    registration_body = send.await_args_list[0].args[2]
    decision_body = send.await_args_list[1].args[2]
    assert "<script>" not in registration_body
    assert "&lt;script&gt;alert(1)&lt;/script&gt; Gems" in registration_body
    assert "A &amp; B" in decision_body
    assert "&lt;b&gt;forged&lt;/b&gt;" in decision_body
