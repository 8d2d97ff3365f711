"""Initialization for the casbin_adapter Django application.

This overrides the default AppConfig so that no enforcer is built, and no
query is made, while Django is still loading apps (e.g., during migrations).
The console enforcer is built lazily on first use instead.

See console_authz/engine/enforcer.py for the enforcer implementation.
"""

from django.apps import AppConfig


class CasbinAdapterConfig(AppConfig):
    name = "casbin_adapter"

    def ready(self):
        """Skip the upstream eager enforcer initialization."""
