"""
Contact Form Submission Handler

Runs a submission through validation, the site allowlist, the rate limiter
and the notifier, short-circuiting at the first failure. Every outcome is
mapped to a fixed status code and JSON body here; the view only renders.
"""
import json
import logging
from dataclasses import dataclass, field
from enum import Enum

from django.utils import timezone
from rest_framework import status

from .config import ContactFormConfig
from .notifications import Notifier, NotifyError
from .permissions import is_site_allowed
from .rate_limiting import SlidingWindowRateLimiter, get_client_ip
from .serializers import ContactFormSubmitSerializer
from .validation import validate_payload

logger = logging.getLogger(__name__)

INVALID_JSON = 'invalid_json'


class SubmissionError(Enum):
    """Failure kinds and the status and error code each one is reported with."""

    MALFORMED_INPUT = ('malformed_input', status.HTTP_400_BAD_REQUEST, 'validation_error')
    VALIDATION_FAILURE = ('validation_failure', status.HTTP_400_BAD_REQUEST, 'validation_error')
    SITE_NOT_ALLOWED = ('site_not_allowed', status.HTTP_403_FORBIDDEN, 'forbidden_site')
    RATE_LIMITED = ('rate_limited', status.HTTP_429_TOO_MANY_REQUESTS, 'rate_limited')
    MISCONFIGURED = ('misconfigured', status.HTTP_500_INTERNAL_SERVER_ERROR, 'server_error')
    TRANSPORT_FAILURE = ('transport_failure', status.HTTP_500_INTERNAL_SERVER_ERROR, 'email_send_failed')

    def __init__(self, kind, status_code, code):
        self.kind = kind
        self.status_code = status_code
        self.code = code


@dataclass
class SubmissionResponse:
    status_code: int
    body: dict
    headers: dict = field(default_factory=dict)

    @classmethod
    def ok(cls):
        return cls(status_code=status.HTTP_200_OK, body={'ok': True})

    @classmethod
    def failure(cls, error, details=None, headers=None):
        body = {'ok': False, 'error': error.code}
        if details is not None:
            body['details'] = list(details)
        return cls(status_code=error.status_code, body=body, headers=headers or {})


class MalformedSubmission(Exception):
    """Raised when the request body is not a JSON object of string fields."""


def parse_submission(raw_body):
    """
    Decode a request body into a field mapping.

    An empty body or JSON null is an empty submission.

    Raises:
        MalformedSubmission: If the body is not valid UTF-8 JSON describing
            an object whose fields are strings
    """
    if isinstance(raw_body, bytes):
        try:
            raw_body = raw_body.decode('utf-8')
        except UnicodeDecodeError as exc:
            raise MalformedSubmission(str(exc)) from exc

    if not raw_body or not raw_body.strip():
        return {}

    try:
        data = json.loads(raw_body)
    except ValueError as exc:
        raise MalformedSubmission(str(exc)) from exc

    if data is None:
        return {}

    serializer = ContactFormSubmitSerializer(data=data)
    if not serializer.is_valid():
        raise MalformedSubmission(str(serializer.errors))
    return serializer.validated_data


class SubmissionHandler:
    """
    Request-admission pipeline for contact form submissions.

    Usage:
        handler = build_submission_handler()
        response = handler.handle(request.body, request.headers)
    """

    def __init__(self, config, rate_limiter, notifier, clock=timezone.now):
        self.config = config
        self.rate_limiter = rate_limiter
        self.notifier = notifier
        self.clock = clock

    def handle(self, raw_body, headers) -> SubmissionResponse:
        try:
            data = parse_submission(raw_body)
        except MalformedSubmission:
            return SubmissionResponse.failure(
                SubmissionError.MALFORMED_INPUT, details=[INVALID_JSON]
            )

        result = validate_payload(data)
        if not result.is_valid:
            return SubmissionResponse.failure(
                SubmissionError.VALIDATION_FAILURE, details=result.errors
            )
        cleaned = result.cleaned

        lowered = {key.lower(): value for key, value in headers.items()}
        client_id = get_client_ip(lowered)
        user_agent = lowered.get('user-agent') or 'unknown'

        if not is_site_allowed(cleaned.site, self.config.allowed_sites):
            logger.info(f"Rejected submission for site not in allowlist. Site: {cleaned.site}, Ip: {client_id}")
            return SubmissionResponse.failure(SubmissionError.SITE_NOT_ALLOWED)

        now = self.clock()
        decision = self.rate_limiter.check(client_id, now)
        if not decision.allowed:
            logger.info(f"Rate limited submission. Site: {cleaned.site}, Ip: {client_id}")
            return SubmissionResponse.failure(
                SubmissionError.RATE_LIMITED,
                headers={'Retry-After': str(decision.retry_after)},
            )

        if not self.notifier.is_configured:
            logger.warning(
                f"Missing contact email configuration. Site: {cleaned.site}, Ip: {client_id}"
            )
            return SubmissionResponse.failure(SubmissionError.MISCONFIGURED)

        outcome = self.notifier.notify(cleaned, client_id, user_agent, now)
        if outcome.ok:
            return SubmissionResponse.ok()
        if outcome.error is NotifyError.MISCONFIGURED:
            return SubmissionResponse.failure(SubmissionError.MISCONFIGURED)
        return SubmissionResponse.failure(SubmissionError.TRANSPORT_FAILURE)


def build_submission_handler(config=None, transport=None):
    """Assemble the default pipeline from Django settings."""
    config = config or ContactFormConfig.from_settings()
    return SubmissionHandler(
        config=config,
        rate_limiter=SlidingWindowRateLimiter.from_config(config),
        notifier=Notifier(config, transport),
    )
