import asyncio
import smtplib
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Protocol, Sequence

from app.core.config import Settings
from app.core.errors import NotificationError
from app.core.logger import logger

ICS_FILENAME = "booking.ics"
ICS_CONTENT_TYPE = "text/calendar"


@dataclass(frozen=True)
class Attachment:
    filename: str
    content: str
    content_type: str = "text/plain"

def ics_attachment(ics: str) -> Attachment:
    return Attachment(filename=ICS_FILENAME, content=ics, content_type=ICS_CONTENT_TYPE)


class Mailer(Protocol):
    async def send_email(self, sender: str, recipient: str, subject: str, body: str,
                         attachments: Sequence[Attachment] = ()) -> None:
        ...


def build_message(sender: str, recipient: str, subject: str, body: str,
                  attachments: Sequence[Attachment] = ()) -> MIMEMultipart:
    msg = MIMEMultipart()
    msg['From'] = sender
    msg['To'] = recipient
    msg['Subject'] = subject

    msg.attach(MIMEText(body, 'plain', 'utf-8'))

    for attachment in attachments:
        maintype, _, subtype = attachment.content_type.partition("/")
        if maintype != "text":
            raise ValueError(f"Unsupported attachment type: {attachment.content_type}")
        part = MIMEText(attachment.content, subtype or "plain", "utf-8")
        part.add_header('Content-Disposition', 'attachment', filename=attachment.filename)
        msg.attach(part)

    return msg


class SMTPMailer:
    """
    Sends mail through a single SMTP server.
    Port 465 uses implicit TLS, anything else upgrades with STARTTLS.
    """

    def __init__(self, host: str, port: int, username: str = "", password: str = "", timeout: float = 30):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.timeout = timeout

        if not host or not port or not username or not password:
            logger.warning("⚠️ SMTP settings incomplete (SMTP_HOST/SMTP_PORT/SMTP_USER/SMTP_PASS). Email will fail without them.")

    @classmethod
    def from_settings(cls, settings: Settings) -> "SMTPMailer":
        return cls(settings.SMTP_HOST, settings.SMTP_PORT, settings.SMTP_USER, settings.SMTP_PASS)

    def _send(self, sender: str, recipient: str, msg: MIMEMultipart):
        if self.port == 465:
            server = smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout)
        else:
            server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        try:
            if self.port != 465:
                server.starttls()
            if self.username and self.password:
                server.login(self.username, self.password)
            server.sendmail(sender, [recipient], msg.as_string())
        finally:
            server.quit()

    async def send_email(self, sender: str, recipient: str, subject: str, body: str,
                         attachments: Sequence[Attachment] = ()) -> None:
        if not self.host:
            raise NotificationError("SMTP_HOST is not configured")

        msg = build_message(sender, recipient, subject, body, attachments)
        try:
            await asyncio.to_thread(self._send, sender, recipient, msg)
        # ValueError covers UnicodeEncodeError for non-ASCII addresses on the SMTP commands
        except (smtplib.SMTPException, OSError, ValueError) as e:
            logger.error(f"❌ Email to {recipient} failed: {e}")
            raise NotificationError(str(e)) from e

        logger.info(f"✅ Email sent to {recipient} with subject: '{subject}'")
