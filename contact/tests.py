"""
End-to-end Tests for the Contact Form API
"""
import pytest
from rest_framework import status

from contact.config import ContactFormConfig
from contact.permissions import parse_allowed_sites

SUBMIT_URL = '/api/submit'

pytestmark = pytest.mark.usefixtures('installed_handler')


def submit(api_client, data, **extra):
    return api_client.post(SUBMIT_URL, data, format='json', **extra)


class TestContactFormSubmission:
    """Test public contact form submission."""

    def test_submit_valid_contact_form(self, api_client, valid_payload, transport):
        """Test successful contact form submission."""
        response = submit(api_client, valid_payload)

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {'ok': True}
        assert response['Content-Type'] == 'application/json'
        assert len(transport.sent) == 1
        email, _ = transport.sent[0]
        assert email.subject == '[ContactForm][siteA] Hello'

    def test_html_accept_header_still_gets_json(self, api_client, valid_payload, transport):
        """Browsers posting a plain form ask for text/html; the reply stays JSON."""
        response = submit(api_client, valid_payload, HTTP_ACCEPT='text/html')

        assert response.status_code == status.HTTP_200_OK
        assert response['Content-Type'] == 'application/json'
        assert response.json() == {'ok': True}
        assert len(transport.sent) == 1

    def test_html_accept_header_on_failure_gets_json(self, api_client, valid_payload):
        valid_payload['site'] = 'siteC'

        response = submit(api_client, valid_payload, HTTP_ACCEPT='text/html,application/xhtml+xml')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json() == {'ok': False, 'error': 'forbidden_site'}

    def test_submit_missing_required_fields(self, api_client, transport):
        """Test submission with missing fields."""
        response = submit(api_client, {'site': 'siteA'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {
            'ok': False,
            'error': 'validation_error',
            'details': ['name_required', 'email_required', 'message_required'],
        }
        assert transport.sent == []

    def test_submit_invalid_email(self, api_client, valid_payload):
        """Test submission with invalid email."""
        valid_payload['email'] = 'invalid-email'

        response = submit(api_client, valid_payload)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()['details'] == ['email_invalid']

    def test_honeypot_spam_detection(self, api_client, valid_payload, transport):
        """Test honeypot field for spam detection."""
        valid_payload['company'] = 'Spam Inc'

        response = submit(api_client, valid_payload)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'honeypot_triggered' in response.json()['details']
        assert transport.sent == []

    def test_empty_subject_uses_placeholder(self, api_client, valid_payload, transport):
        valid_payload['subject'] = ''

        response = submit(api_client, valid_payload)

        assert response.status_code == status.HTTP_200_OK
        email, _ = transport.sent[0]
        assert email.subject == '[ContactForm][siteA] (no subject)'

    def test_missing_fields_are_treated_as_empty(self, api_client, valid_payload):
        del valid_payload['subject']
        del valid_payload['company']

        response = submit(api_client, valid_payload)

        assert response.status_code == status.HTTP_200_OK


class TestMalformedInput:

    def test_invalid_json(self, api_client, transport):
        response = api_client.post(SUBMIT_URL, '{"name": ', content_type='application/json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {
            'ok': False,
            'error': 'validation_error',
            'details': ['invalid_json'],
        }
        assert transport.sent == []

    def test_json_array_is_malformed(self, api_client):
        response = api_client.post(SUBMIT_URL, '[1, 2]', content_type='application/json')

        assert response.json()['details'] == ['invalid_json']

    def test_non_string_field_is_malformed(self, api_client, valid_payload):
        valid_payload['name'] = {'first': 'Jane'}

        response = submit(api_client, valid_payload)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()['details'] == ['invalid_json']

    def test_control_characters_in_strings_are_accepted(self, api_client, valid_payload, transport):
        valid_payload['message'] = 'hello\x00world'

        response = submit(api_client, valid_payload)

        assert response.status_code == status.HTTP_200_OK
        email, _ = transport.sent[0]
        assert 'hello\x00world' in email.text_body

    def test_empty_body_fails_required_checks(self, api_client):
        response = api_client.post(SUBMIT_URL, '', content_type='application/json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()['details'] == [
            'name_required', 'email_required', 'message_required'
        ]


class TestSiteAllowlist:

    def test_site_match_is_case_insensitive(self, api_client, valid_payload):
        valid_payload['site'] = 'SITEA'

        response = submit(api_client, valid_payload)

        assert response.status_code == status.HTTP_200_OK

    @pytest.mark.parametrize('site', ['siteC', '', 'sitea.evil'])
    def test_unlisted_site_is_forbidden(self, api_client, valid_payload, transport, site):
        valid_payload['site'] = site

        response = submit(api_client, valid_payload)

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json() == {'ok': False, 'error': 'forbidden_site'}
        assert transport.sent == []


class TestRateLimiting:
    """Test rate limiting for contact form."""

    def test_rate_limit_per_client(self, api_client, valid_payload):
        """Test IP-based rate limiting."""
        for i in range(5):
            valid_payload['message'] = f'Test message number {i}'
            response = submit(api_client, valid_payload, HTTP_X_FORWARDED_FOR='203.0.113.7')
            assert response.status_code == status.HTTP_200_OK

        # 6th submission should be rate limited
        response = submit(api_client, valid_payload, HTTP_X_FORWARDED_FOR='203.0.113.7')
        assert response.status_code == status.HTTP_429_TOO_MANY_REQUESTS
        assert response.json() == {'ok': False, 'error': 'rate_limited'}
        assert int(response['Retry-After']) > 0

        # Another client is unaffected
        response = submit(api_client, valid_payload, HTTP_X_FORWARDED_FOR='198.51.100.4')
        assert response.status_code == status.HTTP_200_OK

    def test_forwarded_for_chain_uses_first_hop(self, api_client, valid_payload, installed_handler):
        submit(api_client, valid_payload, HTTP_X_FORWARDED_FOR='203.0.113.7, 10.0.0.1')

        assert installed_handler.rate_limiter.check('203.0.113.7').allowed
        assert installed_handler.rate_limiter.tracked_clients == 1

    def test_invalid_submissions_do_not_consume_quota(self, api_client, valid_payload):
        for _ in range(10):
            submit(api_client, {'site': 'siteA'}, HTTP_X_CLIENT_IP='203.0.113.7')

        response = submit(api_client, valid_payload, HTTP_X_CLIENT_IP='203.0.113.7')

        assert response.status_code == status.HTTP_200_OK


class TestMissingMailConfiguration:

    @pytest.fixture
    def contact_config(self):
        return ContactFormConfig(allowed_sites=parse_allowed_sites('siteA'))

    def test_server_error_without_network_call(self, api_client, valid_payload, transport):
        response = submit(api_client, valid_payload)

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json() == {'ok': False, 'error': 'server_error'}
        assert transport.sent == []

    def test_health_check_reports_unconfigured_mail(self, api_client):
        response = api_client.get('/api/health')

        assert response.json() == {'ok': True, 'mail_configured': False, 'allowed_sites': 1}


class TestTransportFailure:

    def test_send_failure(self, api_client, valid_payload, transport):
        transport.error = OSError('connection reset')

        response = submit(api_client, valid_payload)

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json() == {'ok': False, 'error': 'email_send_failed'}
        assert len(transport.sent) == 1


class TestHealthCheck:

    def test_reports_configuration_without_values(self, api_client):
        response = api_client.get('/api/health')

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {'ok': True, 'mail_configured': True, 'allowed_sites': 2}
        assert 'test-credential' not in response.content.decode()

    def test_reports_as_json_for_any_accept_header(self, api_client):
        response = api_client.get('/api/health', HTTP_ACCEPT='text/html')

        assert response.status_code == status.HTTP_200_OK
        assert response.json()['ok'] is True
