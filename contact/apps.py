from django.apps import AppConfig


class ContactConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'contact'
    verbose_name = 'Contact Form'

    submission_handler = None

    def ready(self):
        """Resolve configuration and build the shared submission pipeline once."""
        from .handlers import build_submission_handler

        self.submission_handler = build_submission_handler()
