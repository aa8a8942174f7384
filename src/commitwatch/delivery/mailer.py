"""Email delivery of audit reports over SMTP."""

import smtplib
import ssl
from contextlib import contextmanager
from email.message import EmailMessage
from email.utils import formatdate, make_msgid
from typing import Iterator, Union

import structlog

from commitwatch.errors import DeliveryError
from commitwatch.models import MailerConfig
from commitwatch.reports import Report

logger = structlog.get_logger(__name__)

SMTPClient = Union[smtplib.SMTP, smtplib.SMTP_SSL]

ATTACHMENT_FILENAME = "report.log"


def _tls_context(config: MailerConfig) -> ssl.SSLContext:
    context = ssl.create_default_context()
    if not config.verify_tls:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context


@contextmanager
def open_smtp(config: MailerConfig) -> Iterator[SMTPClient]:
    """Open an authenticated SMTP connection for the duration of the block.

    Raises:
        DeliveryError: If connecting, the TLS handshake or login fails
    """
    context = _tls_context(config)
    try:
        if config.ssl:
            client: SMTPClient = smtplib.SMTP_SSL(
                config.host, config.port, timeout=config.timeout, context=context
            )
        else:
            client = smtplib.SMTP(config.host, config.port, timeout=config.timeout)
    except (smtplib.SMTPException, OSError) as e:
        raise DeliveryError(f"Cannot connect to {config.host}:{config.port}: {e}") from e

    try:
        try:
            if config.starttls and not config.ssl:
                client.starttls(context=context)
            if config.user:
                client.login(config.user, config.password or "")
        except (smtplib.SMTPException, OSError) as e:
            raise DeliveryError(f"SMTP session setup failed on {config.host}: {e}") from e
        yield client
    finally:
        try:
            client.quit()
        except (smtplib.SMTPException, OSError):
            client.close()


class Mailer:
    """Sends the audit report through a caller-managed SMTP connection."""

    def __init__(self, config: MailerConfig, client: SMTPClient) -> None:
        self.config = config
        self.client = client

    def verify(self) -> None:
        """Check that the server answers NOOP.

        Raises:
            DeliveryError: If the server does not reply 250
        """
        try:
            code, reply = self.client.noop()
        except (smtplib.SMTPException, OSError) as e:
            raise DeliveryError(f"SMTP verification failed: {e}") from e
        if code != 250:
            raise DeliveryError(f"SMTP verification failed: {code} {reply!r}")
        logger.info("smtp_verified", host=self.config.host)

    def build_message(self, report: Report) -> EmailMessage:
        """Attach the report when it has content, otherwise send ``message_ok``."""
        message = EmailMessage()
        message["From"] = self.config.sender
        message["To"] = ", ".join(self.config.to)
        message["Subject"] = self.config.subject
        message["Date"] = formatdate(localtime=True)
        message["Message-ID"] = make_msgid()

        if report.has_content:
            message.set_content("Commit audit report attached.")
            message.add_attachment(report.text, subtype="plain", filename=ATTACHMENT_FILENAME)
        else:
            message.set_content(self.config.message_ok)
        return message

    def send_report(self, report: Report) -> str:
        """Send the report email.

        Returns:
            The Message-ID of the sent email

        Raises:
            DeliveryError: If the server rejects the message
        """
        message = self.build_message(report)
        try:
            self.client.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            raise DeliveryError(f"Sending report failed: {e}") from e

        message_id = message["Message-ID"]
        logger.info("report_sent", message_id=message_id, attached=report.has_content)
        return message_id
