"""
NewsBrief email delivery

Sends a generated briefing over SMTP using the user's own sender account.
"""

from __future__ import annotations

import re
import smtplib
import ssl
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr, formatdate
from zoneinfo import ZoneInfo

from newsbrief.briefing.errors import DeliveryFailure
from newsbrief.config import (
    BRIEFING_INDUSTRY,
    REFERENCE_TIMEZONE,
    SENDER_DISPLAY_NAME,
    SMTP_HOST,
    SMTP_PORT,
    SMTP_TIMEOUT,
    SUBJECT_TEMPLATE,
)
from newsbrief.observability.logging import get_logger
from newsbrief.observability.telemetry import counter, time_block
from newsbrief.storage.models import BriefingConfig
from newsbrief.utils.redaction import redact

logger = get_logger(__name__)


def html_to_plaintext(html: str) -> str:
    """
    Simple HTML to plaintext conversion for the text/plain alternative part
    """
    text = re.sub(r"<style[^>]*>.*?</style>", "", html, flags=re.DOTALL | re.IGNORECASE)
    text = re.sub(r"<script[^>]*>.*?</script>", "", text, flags=re.DOTALL | re.IGNORECASE)

    text = re.sub(r"<br\s*/?>", "\n", text)
    text = re.sub(r"<hr\s*/?>", "\n---\n", text)
    text = re.sub(r"<h[1-6][^>]*>", "\n\n", text)
    text = re.sub(r"</h[1-6]>", "\n", text)
    text = re.sub(r"<li[^>]*>", "\n- ", text)
    text = re.sub(r"</?(p|div|ul|ol)[^>]*>", "\n", text)

    text = re.sub(r"<[^>]+>", "", text)

    text = text.replace("&nbsp;", " ")
    text = text.replace("&lt;", "<")
    text = text.replace("&gt;", ">")
    text = text.replace("&quot;", '"')
    text = text.replace("&#39;", "'")
    text = text.replace("&amp;", "&")

    text = re.sub(r"\n\s*\n", "\n\n", text)
    return text.strip()


class Notifier:
    """Composes the briefing email and hands it to the mail provider."""

    def __init__(
        self,
        smtp_host: str = SMTP_HOST,
        smtp_port: int = SMTP_PORT,
        from_name: str = SENDER_DISPLAY_NAME,
        timeout: int = SMTP_TIMEOUT,
    ):
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.from_name = from_name
        self.timeout = timeout

    def build_subject(self, now: datetime | None = None) -> str:
        """Subject line dated in the reference timezone, whatever the server clock says."""
        tz = ZoneInfo(REFERENCE_TIMEZONE)
        now = (now or datetime.now(tz)).astimezone(tz)
        return SUBJECT_TEMPLATE.format(date=now.strftime("%Y-%m-%d"), industry=BRIEFING_INDUSTRY)

    def build_message(
        self, config: BriefingConfig, html: str, now: datetime | None = None
    ) -> MIMEMultipart:
        """
        Build the MIME message. The HTML part carries the briefing verbatim.
        """
        msg = MIMEMultipart("alternative")
        msg["Subject"] = self.build_subject(now)
        msg["From"] = formataddr((self.from_name, config.sender_email))
        msg["To"] = config.receiver_email
        msg["Date"] = formatdate(localtime=True)

        # Clients render the last alternative they support, so HTML goes last
        msg.attach(MIMEText(html_to_plaintext(html), "plain", "utf-8"))
        msg.attach(MIMEText(html, "html", "utf-8"))
        return msg

    def send(self, config: BriefingConfig, html: str, now: datetime | None = None) -> None:
        """
        Send a briefing email

        Raises:
            DeliveryFailure: On authentication rejection, SMTP or network errors
        """
        msg = self.build_message(config, html, now)
        password = config.sender_app_password.get_secret_value()
        context = ssl.create_default_context()

        try:
            with time_block("briefing.deliver.latency"):
                if self.smtp_port == 465:
                    with smtplib.SMTP_SSL(
                        self.smtp_host, self.smtp_port, timeout=self.timeout, context=context
                    ) as server:
                        server.login(config.sender_email, password)
                        server.send_message(msg)
                else:
                    with smtplib.SMTP(
                        self.smtp_host, self.smtp_port, timeout=self.timeout
                    ) as server:
                        server.starttls(context=context)
                        server.login(config.sender_email, password)
                        server.send_message(msg)
        except smtplib.SMTPAuthenticationError as e:
            counter("briefing.deliver.auth_errors")
            logger.error("SMTP authentication rejected for sender %s", redact(config.sender_email))
            raise DeliveryFailure(
                f"Email provider rejected the sender credentials ({e.smtp_code})"
            ) from e
        except (smtplib.SMTPException, OSError) as e:
            counter("briefing.deliver.errors")
            logger.error("Failed to send briefing: %s", type(e).__name__)
            raise DeliveryFailure(f"Failed to send briefing email: {type(e).__name__}") from e

        logger.info("Briefing sent to %s", redact(config.receiver_email))
