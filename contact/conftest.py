"""
Shared pytest fixtures for contact form tests.
"""
import pytest
from django.apps import apps
from rest_framework.test import APIClient

from contact.config import ContactFormConfig
from contact.handlers import build_submission_handler
from contact.permissions import parse_allowed_sites


class RecordingTransport:
    """Mail transport stub that records every send and can be told to fail."""

    def __init__(self, error=None):
        self.sent = []
        self.error = error

    def send(self, email, credential):
        self.sent.append((email, credential))
        if self.error is not None:
            raise self.error
        return 1


@pytest.fixture
def api_client():
    """API client for making requests."""
    return APIClient()


@pytest.fixture
def contact_config():
    return ContactFormConfig(
        allowed_sites=parse_allowed_sites('siteA,siteB'),
        from_email='noreply@example.com',
        to_email='inbox@example.com',
        transport_credential='test-credential',
    )


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def submission_handler(contact_config, transport):
    return build_submission_handler(contact_config, transport)


@pytest.fixture
def installed_handler(monkeypatch, submission_handler):
    """Route API requests through the test pipeline instead of the one built at startup."""
    monkeypatch.setattr(apps.get_app_config('contact'), 'submission_handler', submission_handler)
    return submission_handler


@pytest.fixture
def valid_payload():
    return {
        'name': 'Jane',
        'email': 'jane@example.com',
        'subject': 'Hello',
        'message': 'Test',
        'site': 'siteA',
        'company': '',
    }
