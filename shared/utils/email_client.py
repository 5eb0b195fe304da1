import smtplib
import logging
import time
from typing import List, Optional
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from contextlib import contextmanager

logger = logging.getLogger(__name__)


class EmailClient:
    """SMTP client with a bounded number of send attempts."""

    def __init__(
        self,
        smtp_host: str,
        smtp_port: int,
        username: Optional[str],
        password: Optional[str],
        use_ssl: bool = False,
        max_retries: int = 3,
        retry_delay: int = 3
    ):
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.username = username
        self.password = password
        self.use_ssl = use_ssl
        self.max_retries = max_retries
        self.retry_delay = retry_delay

    @contextmanager
    def _connection(self):
        server = None
        try:
            if self.use_ssl:
                server = smtplib.SMTP_SSL(self.smtp_host, self.smtp_port)
            else:
                server = smtplib.SMTP(self.smtp_host, self.smtp_port)
                server.starttls()
            if self.username:
                server.login(self.username, self.password)
            yield server
        finally:
            if server:
                try:
                    server.quit()
                except smtplib.SMTPException as e:
                    logger.warning("Error closing SMTP connection: %s", e)

    def _build_message(
        self,
        sender: str,
        recipients: List[str],
        subject: str,
        text_body: str,
        html_body: Optional[str] = None,
    ) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["From"] = sender
        msg["To"] = ", ".join(recipients)
        msg["Subject"] = subject

        msg.attach(MIMEText(text_body or "", "plain"))
        if html_body:
            msg.attach(MIMEText(html_body, "html"))
        return msg

    def send_email(
        self,
        sender: str,
        recipients: List[str],
        subject: str,
        text_body: str,
        html_body: Optional[str] = None,
    ) -> bool:
        msg = self._build_message(sender, recipients, subject, text_body, html_body)

        for attempt in range(1, self.max_retries + 1):
            try:
                with self._connection() as server:
                    server.sendmail(sender, recipients, msg.as_string())
                logger.info("Email sent to %s", ", ".join(recipients))
                return True
            except smtplib.SMTPAuthenticationError:
                logger.error("SMTP authentication failed, check username/password")
                break
            except (smtplib.SMTPException, OSError) as e:
                logger.error("Email attempt %s failed: %s", attempt, e)
                if attempt < self.max_retries:
                    time.sleep(self.retry_delay)

        logger.error("Failed to send email after all retry attempts")
        return False
