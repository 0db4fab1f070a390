"""
Contact Form Configuration

Resolves the contact form settings once at startup into an immutable object
that is handed to the validator, rate limiter, notifier and handler.
"""
from dataclasses import dataclass, field
from datetime import timedelta

from django.conf import settings

from .permissions import parse_allowed_sites


@dataclass(frozen=True)
class ContactFormConfig:
    """Deployment configuration for the submission pipeline."""

    allowed_sites: frozenset = field(default_factory=frozenset)
    from_email: str = ''
    to_email: str = ''
    transport_credential: str = ''
    rate_limit_max: int = 5
    rate_limit_window: timedelta = timedelta(minutes=10)
    rate_limit_max_clients: int = 10000

    @property
    def mail_configured(self) -> bool:
        """True when sender, recipient and transport credential are all set."""
        return bool(
            self.from_email.strip()
            and self.to_email.strip()
            and self.transport_credential.strip()
        )

    @classmethod
    def from_settings(cls, source=None):
        """
        Build the config from Django settings.

        Args:
            source: Settings-like object (defaults to django.conf.settings)
        """
        if source is None:
            source = settings
        return cls(
            allowed_sites=parse_allowed_sites(getattr(source, 'ALLOWED_SITES', '')),
            from_email=getattr(source, 'CONTACT_EMAIL_FROM', '') or '',
            to_email=getattr(source, 'CONTACT_EMAIL_TO', '') or '',
            transport_credential=getattr(source, 'CONTACT_EMAIL_CREDENTIAL', '') or '',
            rate_limit_max=int(getattr(source, 'CONTACT_FORM_RATE_LIMIT_MAX', 5)),
            rate_limit_window=timedelta(
                minutes=int(getattr(source, 'CONTACT_FORM_RATE_LIMIT_WINDOW_MINUTES', 10))
            ),
            rate_limit_max_clients=int(
                getattr(source, 'CONTACT_FORM_RATE_LIMIT_MAX_CLIENTS', 10000)
            ),
        )
