"""
Contact Form Views

Public API endpoints for the contact form.
"""
from django.apps import apps
from rest_framework.negotiation import BaseContentNegotiation
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView


class JSONOnlyContentNegotiation(BaseContentNegotiation):
    """Always answer with the first renderer, whatever the Accept header says."""

    def select_parser(self, request, parsers):
        return parsers[0]

    def select_renderer(self, request, renderers, format_suffix=None):
        return (renderers[0], renderers[0].media_type)


def get_submission_handler():
    return apps.get_app_config('contact').submission_handler


class ContactFormSubmitView(APIView):
    """
    Public endpoint for contact form submissions.

    POST /api/submit

    No authentication required. Restricted to allowlisted sites and rate
    limited per client.
    """

    authentication_classes = []
    permission_classes = [AllowAny]
    content_negotiation_class = JSONOnlyContentNegotiation

    def post(self, request):
        """Submit a contact form."""
        result = get_submission_handler().handle(request.body, request.headers)
        return Response(result.body, status=result.status_code, headers=result.headers)


class HealthCheckView(APIView):
    """
    Liveness probe.

    GET /api/health

    Reports whether mail delivery is configured and how many sites are
    allowed, never the configured values themselves.
    """

    authentication_classes = []
    permission_classes = [AllowAny]
    content_negotiation_class = JSONOnlyContentNegotiation

    def get(self, request):
        config = get_submission_handler().config
        return Response({
            'ok': True,
            'mail_configured': config.mail_configured,
            'allowed_sites': len(config.allowed_sites),
        })
