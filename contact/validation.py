"""
Contact Form Validation

Trims and checks a contact form submission. Every applicable error is
collected rather than stopping at the first one, so the client can show
all problems at once.
"""
import re
from dataclasses import dataclass, fields, replace
from typing import List

# Error codes returned in the "details" list of a validation_error response
NAME_REQUIRED = 'name_required'
EMAIL_REQUIRED = 'email_required'
EMAIL_INVALID = 'email_invalid'
MESSAGE_REQUIRED = 'message_required'
HONEYPOT_TRIGGERED = 'honeypot_triggered'

# (field, max length) in the order their *_too_long codes are reported
FIELD_MAX_LENGTHS = (
    ('name', 100),
    ('email', 254),
    ('subject', 150),
    ('message', 4000),
    ('site', 50),
)

EMAIL_PATTERN = re.compile(r'[^\s@]+@[^\s@]+\.[^\s@]+')


@dataclass(frozen=True)
class SubmissionPayload:
    """A contact form submission as received from the client."""

    name: str = ''
    email: str = ''
    subject: str = ''
    message: str = ''
    site: str = ''
    company: str = ''  # Honeypot, hidden from human users

    @classmethod
    def from_data(cls, data):
        """Build a payload from a mapping, treating missing or null fields as empty."""
        data = data or {}
        return cls(**{
            f.name: '' if data.get(f.name) is None else str(data.get(f.name))
            for f in fields(cls)
        })

    def trimmed(self):
        """Return a copy with surrounding whitespace stripped from every field."""
        return replace(self, **{
            f.name: getattr(self, f.name).strip() for f in fields(self)
        })


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validate_payload. Do not use `cleaned` when `errors` is non-empty."""

    errors: List[str]
    cleaned: SubmissionPayload

    @property
    def is_valid(self) -> bool:
        return not self.errors


def is_valid_email(email: str) -> bool:
    """Loose local@domain.tld check with no whitespace and a single @."""
    return EMAIL_PATTERN.fullmatch(email) is not None


def validate_payload(raw) -> ValidationResult:
    """
    Validate and normalize a submission.

    Args:
        raw: SubmissionPayload or a mapping of form fields

    Returns:
        ValidationResult with error codes in discovery order and the
        trimmed payload
    """
    payload = raw if isinstance(raw, SubmissionPayload) else SubmissionPayload.from_data(raw)
    cleaned = payload.trimmed()
    errors = []

    if not cleaned.name:
        errors.append(NAME_REQUIRED)
    if not cleaned.email:
        errors.append(EMAIL_REQUIRED)
    elif not is_valid_email(cleaned.email):
        errors.append(EMAIL_INVALID)
    if not cleaned.message:
        errors.append(MESSAGE_REQUIRED)

    for field_name, max_length in FIELD_MAX_LENGTHS:
        if len(getattr(cleaned, field_name)) > max_length:
            errors.append(f'{field_name}_too_long')

    if cleaned.company:
        errors.append(HONEYPOT_TRIGGERED)

    return ValidationResult(errors=errors, cleaned=cleaned)
