"""Tests for the plugin settings defaults."""

import os
from types import SimpleNamespace

from django.test import SimpleTestCase

from console_authz import ROOT_DIRECTORY
from console_authz.constants import DEFAULT_CACHE_EXPIRE_TIME, DEFAULT_MODEL_PATH
from console_authz.settings.common import plugin_settings

CASBIN_ADAPTER_APP = "console_authz.engine.apps.CasbinAdapterConfig"


class TestPluginSettings(SimpleTestCase):
    """Tests for plugin_settings."""

    def test_defaults(self):
        settings = SimpleNamespace(INSTALLED_APPS=["django.contrib.auth"])

        plugin_settings(settings)

        self.assertEqual(settings.INSTALLED_APPS, ["django.contrib.auth", CASBIN_ADAPTER_APP])
        self.assertEqual(settings.CASBIN_MODEL, os.path.join(ROOT_DIRECTORY, "engine", "config", "model.conf"))
        self.assertEqual(settings.CASBIN_DB_ALIAS, "default")
        self.assertEqual(settings.CASBIN_CACHE_EXPIRE_TIME, 3600)
        self.assertTrue(settings.CASBIN_AUTO_SAVE_POLICY)
        self.assertEqual(settings.CASBIN_MODEL, DEFAULT_MODEL_PATH)
        self.assertEqual(settings.CASBIN_CACHE_EXPIRE_TIME, DEFAULT_CACHE_EXPIRE_TIME)

    def test_existing_values_kept(self):
        settings = SimpleNamespace(
            INSTALLED_APPS=[CASBIN_ADAPTER_APP],
            CASBIN_MODEL="/etc/console/model.conf",
            CASBIN_DB_ALIAS="policies",
            CASBIN_CACHE_EXPIRE_TIME=60,
            CASBIN_AUTO_SAVE_POLICY=False,
        )

        plugin_settings(settings)

        self.assertEqual(settings.INSTALLED_APPS, [CASBIN_ADAPTER_APP])
        self.assertEqual(settings.CASBIN_MODEL, "/etc/console/model.conf")
        self.assertEqual(settings.CASBIN_DB_ALIAS, "policies")
        self.assertEqual(settings.CASBIN_CACHE_EXPIRE_TIME, 60)
        self.assertFalse(settings.CASBIN_AUTO_SAVE_POLICY)
