"""
Contact Form Notifications

Formats a staff notification for an accepted submission and sends it
through the configured mail transport. Failures are returned as a
NotifyResult instead of raised, and nothing is retried.
"""
import logging
from dataclasses import dataclass
from datetime import timezone as dt_timezone
from enum import Enum

from django.core.mail import EmailMultiAlternatives, get_connection
from django.template.loader import render_to_string

logger = logging.getLogger(__name__)

NO_SUBJECT = '(no subject)'
STAFF_NOTIFICATION_TEMPLATE = 'contact/emails/staff_notification.html'


class NotifyError(Enum):
    MISCONFIGURED = 'misconfigured'
    SEND_FAILED = 'send_failed'


@dataclass(frozen=True)
class NotifyResult:
    ok: bool
    error: NotifyError = None

    @classmethod
    def success(cls):
        return cls(ok=True)

    @classmethod
    def failure(cls, error):
        return cls(ok=False, error=error)


@dataclass(frozen=True)
class OutboundEmail:
    subject: str
    text_body: str
    html_body: str
    from_email: str
    to_email: str
    reply_to: str = ''


class DjangoMailTransport:
    """
    Sends OutboundEmail through Django's mail framework.

    The transport credential is passed as the connection password, so the
    configured EMAIL_BACKEND (SMTP in production) authenticates with it.
    """

    def __init__(self, backend=None):
        self.backend = backend

    def send(self, email: OutboundEmail, credential: str):
        connection = get_connection(
            backend=self.backend,
            password=credential,
            fail_silently=False,
        )
        message = EmailMultiAlternatives(
            subject=email.subject,
            body=email.text_body,
            from_email=email.from_email,
            to=[email.to_email],
            reply_to=[email.reply_to] if email.reply_to else None,
            connection=connection,
        )
        message.attach_alternative(email.html_body, "text/html")
        return message.send(fail_silently=False)


def build_subject_line(cleaned):
    subject = cleaned.subject or NO_SUBJECT
    # Header values must stay on one line
    subject = ' '.join(subject.splitlines())
    return f"[ContactForm][{cleaned.site}] {subject}"


def build_text_body(cleaned, client_id, user_agent, timestamp):
    return "\n".join([
        f"Name: {cleaned.name}",
        f"Email: {cleaned.email}",
        f"Subject: {cleaned.subject or NO_SUBJECT}",
        f"Message: {cleaned.message}",
        f"Site: {cleaned.site}",
        f"Timestamp: {timestamp}",
        f"IP: {client_id}",
        f"User-Agent: {user_agent}",
    ])


def build_html_body(cleaned, client_id, user_agent, timestamp):
    return render_to_string(STAFF_NOTIFICATION_TEMPLATE, {
        'name': cleaned.name,
        'email': cleaned.email,
        'subject': cleaned.subject or NO_SUBJECT,
        'message_lines': cleaned.message.replace('\r\n', '\n').split('\n'),
        'site': cleaned.site,
        'timestamp': timestamp,
        'client_id': client_id,
        'user_agent': user_agent,
    }).strip()


def format_timestamp(timestamp):
    """ISO-8601 in UTC."""
    return timestamp.astimezone(dt_timezone.utc).isoformat()


class Notifier:
    """
    Service for notifying staff about contact form submissions.

    Usage:
        notifier = Notifier(config, DjangoMailTransport())
        result = notifier.notify(cleaned, client_id='203.0.113.7',
                                 user_agent='Mozilla/5.0', timestamp=timezone.now())
    """

    def __init__(self, config, transport=None):
        self.config = config
        self.transport = transport or DjangoMailTransport()

    @property
    def is_configured(self) -> bool:
        return self.config.mail_configured

    def build_email(self, cleaned, client_id, user_agent, timestamp) -> OutboundEmail:
        iso_timestamp = format_timestamp(timestamp)
        return OutboundEmail(
            subject=build_subject_line(cleaned),
            text_body=build_text_body(cleaned, client_id, user_agent, iso_timestamp),
            html_body=build_html_body(cleaned, client_id, user_agent, iso_timestamp),
            from_email=self.config.from_email.strip(),
            to_email=self.config.to_email.strip(),
            reply_to=cleaned.email,
        )

    def notify(self, cleaned, client_id, user_agent, timestamp) -> NotifyResult:
        """
        Send the staff notification for a validated submission.

        Args:
            cleaned: Trimmed SubmissionPayload that passed validation
            client_id: Rate limit key of the sender
            user_agent: Sender's User-Agent header
            timestamp: Aware datetime of the submission

        Returns:
            NotifyResult; never raises for transport errors
        """
        if not self.is_configured:
            return NotifyResult.failure(NotifyError.MISCONFIGURED)

        email = self.build_email(cleaned, client_id, user_agent, timestamp)

        try:
            status = self.transport.send(email, self.config.transport_credential)
        except Exception:
            logger.exception(
                f"Email send failed. Site: {cleaned.site}, Ip: {client_id}"
            )
            return NotifyResult.failure(NotifyError.SEND_FAILED)

        logger.info(
            f"Email sent. Status: {status}, Site: {cleaned.site}, Ip: {client_id}, "
            f"Ua: {user_agent}, MessageLength: {len(cleaned.message)}"
        )
        return NotifyResult.success()
