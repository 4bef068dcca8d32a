"""Unit tests for the SMTP notifier (smtplib mocked)"""

from __future__ import annotations

import smtplib
from datetime import UTC, datetime
from email.utils import parseaddr
from unittest.mock import patch
from zoneinfo import ZoneInfo

import pytest

from newsbrief.briefing.errors import DeliveryFailure
from newsbrief.briefing.notifier import Notifier, html_to_plaintext

HTML = "<h1>오늘의 브리핑</h1><p>Rice prices rose &amp; exports fell.</p>"
SEOUL = ZoneInfo("Asia/Seoul")


@pytest.fixture
def notifier():
    return Notifier(smtp_host="smtp.test", smtp_port=587, from_name="AI News Briefing")


def test_subject_uses_reference_date(notifier):
    subject = notifier.build_subject(datetime(2024, 5, 6, 8, 0, tzinfo=SEOUL))

    assert subject == "[Today's Briefing] 2024-05-06 agri-food news summary"


def test_subject_date_converted_from_utc(notifier):
    # 2024-05-06 20:00 UTC is already 2024-05-07 in Seoul
    subject = notifier.build_subject(datetime(2024, 5, 6, 20, 0, tzinfo=UTC))

    assert "2024-05-07" in subject


def test_message_headers(notifier, complete_config):
    msg = notifier.build_message(complete_config, HTML)

    assert parseaddr(msg["From"]) == ("AI News Briefing", "sender@gmail.com")
    assert msg["To"] == "reader@example.com"
    assert msg["Subject"].startswith("[Today's Briefing]")


def test_html_part_is_verbatim(notifier, complete_config):
    msg = notifier.build_message(complete_config, HTML)

    plain_part, html_part = msg.get_payload()
    assert html_part.get_content_type() == "text/html"
    assert html_part.get_payload(decode=True).decode("utf-8") == HTML
    assert plain_part.get_content_type() == "text/plain"


def test_send_uses_starttls_and_sender_credentials(notifier, complete_config):
    with patch("newsbrief.briefing.notifier.smtplib.SMTP") as mock_smtp:
        server = mock_smtp.return_value.__enter__.return_value

        notifier.send(complete_config, HTML)

    mock_smtp.assert_called_once_with("smtp.test", 587, timeout=notifier.timeout)
    server.starttls.assert_called_once()
    server.login.assert_called_once_with("sender@gmail.com", "abcd efgh ijkl mnop")
    sent = server.send_message.call_args.args[0]
    assert sent["To"] == "reader@example.com"


def test_port_465_uses_implicit_tls(complete_config):
    notifier = Notifier(smtp_host="smtp.test", smtp_port=465)

    with patch("newsbrief.briefing.notifier.smtplib.SMTP_SSL") as mock_ssl, patch(
        "newsbrief.briefing.notifier.smtplib.SMTP"
    ) as mock_smtp:
        notifier.send(complete_config, HTML)

    mock_ssl.assert_called_once()
    mock_smtp.assert_not_called()
    mock_ssl.return_value.__enter__.return_value.send_message.assert_called_once()


def test_auth_rejection_raises_delivery_failure(notifier, complete_config):
    with patch("newsbrief.briefing.notifier.smtplib.SMTP") as mock_smtp:
        server = mock_smtp.return_value.__enter__.return_value
        server.login.side_effect = smtplib.SMTPAuthenticationError(535, b"Bad credentials")

        with pytest.raises(DeliveryFailure) as exc_info:
            notifier.send(complete_config, HTML)

    assert "535" in exc_info.value.message
    assert "abcd efgh" not in exc_info.value.message
    server.send_message.assert_not_called()


def test_connection_error_raises_delivery_failure(notifier, complete_config):
    with patch("newsbrief.briefing.notifier.smtplib.SMTP", side_effect=OSError("refused")):
        with pytest.raises(DeliveryFailure) as exc_info:
            notifier.send(complete_config, HTML)

    assert exc_info.value.stage == "deliver"
    assert isinstance(exc_info.value.__cause__, OSError)


def test_recipient_refused_raises_delivery_failure(notifier, complete_config):
    with patch("newsbrief.briefing.notifier.smtplib.SMTP") as mock_smtp:
        server = mock_smtp.return_value.__enter__.return_value
        server.send_message.side_effect = smtplib.SMTPRecipientsRefused({})

        with pytest.raises(DeliveryFailure):
            notifier.send(complete_config, HTML)


def test_html_to_plaintext():
    text = html_to_plaintext("<h2>Top</h2><ul><li>One</li><li>Two &amp; three</li></ul>")

    assert "<" not in text
    assert "- One" in text
    assert "Two & three" in text
