"""
Common settings for the console_authz app.
"""

from console_authz.constants import DEFAULT_CACHE_EXPIRE_TIME, DEFAULT_MODEL_PATH


def plugin_settings(settings):
    """
    Fill in the settings console_authz needs, keeping any the project already set.

    Call it from the project settings module, e.g.
    ``plugin_settings(sys.modules[__name__])``.

    Args:
        settings: The Django settings object
    """
    # Use the lazy casbin_adapter app config; the upstream one builds an enforcer on startup.
    casbin_adapter_app = "console_authz.engine.apps.CasbinAdapterConfig"
    if casbin_adapter_app not in settings.INSTALLED_APPS:
        settings.INSTALLED_APPS.append(casbin_adapter_app)

    # Casbin model: authority, path and method, with keyMatch2 path matching.
    if not hasattr(settings, "CASBIN_MODEL"):
        settings.CASBIN_MODEL = DEFAULT_MODEL_PATH

    # Database alias holding the casbin_rule table.
    if not hasattr(settings, "CASBIN_DB_ALIAS"):
        settings.CASBIN_DB_ALIAS = "default"

    # Seconds an enforcement decision stays in the cache.
    if not hasattr(settings, "CASBIN_CACHE_EXPIRE_TIME"):
        settings.CASBIN_CACHE_EXPIRE_TIME = DEFAULT_CACHE_EXPIRE_TIME

    # Whether policy changes made through the enforcer are written to the database.
    if not hasattr(settings, "CASBIN_AUTO_SAVE_POLICY"):
        settings.CASBIN_AUTO_SAVE_POLICY = True
