"""
Contact Form Serializers

Checks the wire shape of a submission. Content rules (required fields,
lengths, honeypot) live in contact.validation so every failure can be
reported with its own error code.
"""
from rest_framework import serializers


class ContactFormSubmitSerializer(serializers.Serializer):
    """
    Public contact form submission serializer.

    Every field is optional on the wire; missing or null values become
    empty strings. Whitespace is left alone for the validator to trim.
    """

    name = serializers.CharField(
        required=False,
        allow_blank=True,
        allow_null=True,
        trim_whitespace=False,
        help_text="Name of the person contacting us"
    )

    email = serializers.CharField(
        required=False,
        allow_blank=True,
        allow_null=True,
        trim_whitespace=False,
        help_text="Reply address"
    )

    subject = serializers.CharField(
        required=False,
        allow_blank=True,
        allow_null=True,
        trim_whitespace=False,
        help_text="Optional subject line"
    )

    message = serializers.CharField(
        required=False,
        allow_blank=True,
        allow_null=True,
        trim_whitespace=False,
        help_text="Message content"
    )

    site = serializers.CharField(
        required=False,
        allow_blank=True,
        allow_null=True,
        trim_whitespace=False,
        help_text="Identifier of the site hosting the form"
    )

    # Honeypot field for spam prevention (should be empty)
    company = serializers.CharField(
        required=False,
        allow_blank=True,
        allow_null=True,
        trim_whitespace=False,
        help_text="Honeypot field - should be empty"
    )

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        # CharField rejects NUL and lone surrogates by default; any JSON
        # string is accepted here.
        for field in self.fields.values():
            field.validators = []

    def to_internal_value(self, data):
        values = super().to_internal_value(data)
        return {
            name: values.get(name) or ''
            for name in self.fields
        }
