"""
console_authz Django application initialization.
"""

from django.apps import AppConfig


class ConsoleAuthzConfig(AppConfig):
    """
    Configuration for the console_authz Django application.
    """

    name = "console_authz"
    verbose_name = "Console AuthZ"
    default_auto_field = "django.db.models.BigAutoField"
