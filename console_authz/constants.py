"""
Default values shared by the settings module and the enforcer.
"""

import os

from console_authz import ROOT_DIRECTORY

# Casbin model: authority, path and method, with keyMatch2 path matching.
DEFAULT_MODEL_PATH = os.path.join(ROOT_DIRECTORY, "engine", "config", "model.conf")

# Seconds an enforcement decision stays in the cache.
DEFAULT_CACHE_EXPIRE_TIME = 60 * 60
