import logging
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Optional, List, Union
from competeedu.settings import settings


class EmailSender:
    def __init__(
        self,
        smtp_host: Optional[str] = None,
        smtp_port: Optional[int] = None,
        smtp_sender: Optional[str] = None
    ):
        self.smtp_host = smtp_host if smtp_host is not None else settings.smtp_host
        self.smtp_port = smtp_port or settings.smtp_port
        self.smtp_sender = smtp_sender or settings.smtp_sender

    @property
    def enabled(self) -> bool:
        return bool(self.smtp_host)

    def _create_message(
        self,
        to_email: Union[str, List[str]],
        subject: str,
        body: str,
        is_html: bool = False
    ) -> MIMEMultipart:
        """
        Build a message with the given parameters

        Args:
            to_email: Recipient email or list of recipients
            subject: Subject line
            body: Message body
            is_html: Whether the body is HTML

        Returns:
            MIMEMultipart: Prepared message
        """
        msg = MIMEMultipart()
        msg['From'] = self.smtp_sender

        if isinstance(to_email, list):
            msg['To'] = ', '.join(to_email)
        else:
            msg['To'] = to_email
        msg['Subject'] = subject

        content_type = 'html' if is_html else 'plain'
        msg.attach(MIMEText(body, content_type))

        return msg

    def send_email(
        self,
        to_email: Union[str, List[str]],
        subject: str,
        body: str,
        is_html: bool = False
    ) -> bool:
        """
        Send an email message

        Returns:
            bool: True on success, False when sending failed or SMTP is not configured
        """
        if not self.enabled:
            logging.info(f"SMTP is not configured, skipping email to {to_email}: {subject}")
            return False

        try:
            msg = self._create_message(to_email, subject, body, is_html)

            with smtplib.SMTP(self.smtp_host, self.smtp_port) as server:
                server.send_message(msg)
            return True

        except (smtplib.SMTPException, OSError) as e:
            logging.error(f"Error sending email to {to_email}: {e}")
            return False


email_sender = EmailSender()
