"""
Tests for contact form email notifications.
"""
import logging
from datetime import datetime, timedelta, timezone

import pytest
from django.core import mail

from contact.config import ContactFormConfig
from contact.notifications import (
    DjangoMailTransport,
    Notifier,
    NotifyError,
    build_subject_line,
)
from contact.validation import SubmissionPayload

SUBMITTED_AT = datetime(2026, 3, 14, 15, 9, 26, tzinfo=timezone.utc)


@pytest.fixture
def cleaned():
    return SubmissionPayload(
        name='Jane',
        email='jane@example.com',
        subject='Hello',
        message='Test',
        site='siteA',
    )


def notify(notifier, payload):
    return notifier.notify(payload, '203.0.113.7', 'Mozilla/5.0', SUBMITTED_AT)


class TestSubjectLine:

    def test_includes_site_and_subject(self, cleaned):
        assert build_subject_line(cleaned) == '[ContactForm][siteA] Hello'

    def test_placeholder_for_empty_subject(self):
        payload = SubmissionPayload(subject='', site='siteA')

        assert build_subject_line(payload) == '[ContactForm][siteA] (no subject)'

    def test_line_breaks_are_collapsed(self):
        payload = SubmissionPayload(subject='Hello\r\nBcc: victim@example.com', site='siteA')

        subject = build_subject_line(payload)

        assert '\n' not in subject
        assert '\r' not in subject


class TestEmailContent:

    def test_text_body_lists_every_field(self, contact_config, cleaned):
        email = Notifier(contact_config).build_email(
            cleaned, '203.0.113.7', 'Mozilla/5.0', SUBMITTED_AT
        )

        assert email.text_body.splitlines() == [
            'Name: Jane',
            'Email: jane@example.com',
            'Subject: Hello',
            'Message: Test',
            'Site: siteA',
            'Timestamp: 2026-03-14T15:09:26+00:00',
            'IP: 203.0.113.7',
            'User-Agent: Mozilla/5.0',
        ]

    def test_timestamp_is_rendered_in_utc(self, contact_config, cleaned):
        local_noon = datetime(2026, 3, 14, 12, 0, tzinfo=timezone(timedelta(hours=2)))
        email = Notifier(contact_config).build_email(cleaned, 'ip', 'ua', local_noon)

        assert 'Timestamp: 2026-03-14T10:00:00+00:00' in email.text_body

    def test_html_body_escapes_markup(self, contact_config, cleaned):
        payload = SubmissionPayload(
            name='<b>Jane</b>',
            email='jane@example.com',
            message='<script>alert("x")</script>',
            site='siteA',
        )
        email = Notifier(contact_config).build_email(
            payload, '203.0.113.7', '<img src=x onerror=alert(1)>', SUBMITTED_AT
        )

        assert '<script>' not in email.html_body
        assert '&lt;script&gt;alert(&quot;x&quot;)&lt;/script&gt;' in email.html_body
        assert '&lt;b&gt;Jane&lt;/b&gt;' in email.html_body
        assert '<img' not in email.html_body

    def test_html_body_keeps_message_line_breaks(self, contact_config):
        payload = SubmissionPayload(message='line one\nline two', site='siteA')
        email = Notifier(contact_config).build_email(payload, 'ip', 'ua', SUBMITTED_AT)

        assert 'line one<br/>line two' in email.html_body

    def test_html_body_normalizes_crlf_and_escapes_each_line(self, contact_config):
        payload = SubmissionPayload(message='a & b\r\n<i>c</i>', site='siteA')
        email = Notifier(contact_config).build_email(payload, 'ip', 'ua', SUBMITTED_AT)

        assert 'a &amp; b<br/>&lt;i&gt;c&lt;/i&gt;' in email.html_body
        assert '\r' not in email.html_body

    def test_html_body_uses_subject_placeholder(self, contact_config):
        payload = SubmissionPayload(site='siteA')
        email = Notifier(contact_config).build_email(payload, 'ip', 'ua', SUBMITTED_AT)

        assert '<strong>Subject:</strong> (no subject)' in email.html_body

    def test_addresses(self, contact_config, cleaned):
        email = Notifier(contact_config).build_email(cleaned, 'ip', 'ua', SUBMITTED_AT)

        assert email.from_email == 'noreply@example.com'
        assert email.to_email == 'inbox@example.com'
        assert email.reply_to == 'jane@example.com'


class TestNotify:

    def test_sends_through_transport_with_credential(self, contact_config, cleaned, transport):
        result = notify(Notifier(contact_config, transport), cleaned)

        assert result.ok
        assert result.error is None
        assert len(transport.sent) == 1
        email, credential = transport.sent[0]
        assert email.subject == '[ContactForm][siteA] Hello'
        assert credential == 'test-credential'

    @pytest.mark.parametrize('missing', ['from_email', 'to_email', 'transport_credential'])
    def test_misconfigured_without_network_call(self, cleaned, transport, missing):
        values = {
            'from_email': 'noreply@example.com',
            'to_email': 'inbox@example.com',
            'transport_credential': 'test-credential',
        }
        values[missing] = '   '
        notifier = Notifier(ContactFormConfig(**values), transport)

        result = notify(notifier, cleaned)

        assert not notifier.is_configured
        assert not result.ok
        assert result.error is NotifyError.MISCONFIGURED
        assert transport.sent == []

    def test_transport_error_is_returned_not_raised(self, contact_config, cleaned, transport):
        transport.error = ConnectionRefusedError('smtp down')

        result = notify(Notifier(contact_config, transport), cleaned)

        assert not result.ok
        assert result.error is NotifyError.SEND_FAILED
        assert len(transport.sent) == 1

    def test_message_body_never_logged(self, contact_config, transport, caplog):
        secret = 'my very private message'
        payload = SubmissionPayload(
            name='Jane', email='jane@example.com', message=secret, site='siteA'
        )
        notifier = Notifier(contact_config, transport)

        with caplog.at_level(logging.DEBUG, logger='contact'):
            notify(notifier, payload)
            transport.error = OSError('boom')
            notify(notifier, payload)

        assert secret not in caplog.text
        assert f'MessageLength: {len(secret)}' in caplog.text
        assert 'Email send failed. Site: siteA, Ip: 203.0.113.7' in caplog.text
        assert 'test-credential' not in caplog.text


class TestDjangoMailTransport:

    def test_sends_multipart_email_via_configured_backend(self, contact_config, cleaned):
        notifier = Notifier(contact_config, DjangoMailTransport())

        result = notify(notifier, cleaned)

        assert result.ok
        assert len(mail.outbox) == 1
        message = mail.outbox[0]
        assert message.subject == '[ContactForm][siteA] Hello'
        assert message.from_email == 'noreply@example.com'
        assert message.to == ['inbox@example.com']
        assert message.reply_to == ['jane@example.com']
        assert 'Message: Test' in message.body
        html, mimetype = message.alternatives[0]
        assert mimetype == 'text/html'
        assert '<strong>Name:</strong> Jane' in html
