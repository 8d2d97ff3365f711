"""
Core authorization enforcer for the console.

Provides a process-wide Casbin SyncedEnforcer backed by the ExtendedAdapter,
plus a decision cache kept in Django's cache framework.

Components:
    - Enforcer: SyncedEnforcer instance used for policy evaluation
    - Adapter: ExtendedAdapter for database policy storage and filtered queries

Usage:
    from console_authz.engine.enforcer import ConsoleEnforcer
    allowed = ConsoleEnforcer.enforce("888", "/api/createApi", "POST")

The persisted rules and the rules held by the enforcer are two copies of the
same data. Any change written straight to the database only becomes visible
to enforcement after ``ConsoleEnforcer.load_policy()``.
"""

import hashlib
import logging
import threading
import time
from uuid import uuid4

from casbin import SyncedEnforcer
from django.conf import settings
from django.core.cache import cache

from console_authz.constants import DEFAULT_CACHE_EXPIRE_TIME, DEFAULT_MODEL_PATH
from console_authz.engine.adapter import ExtendedAdapter
from console_authz.exceptions import PolicyEngineUnavailableError

logger = logging.getLogger(__name__)


class ConsoleEnforcer:
    """Singleton holder of the Casbin SyncedEnforcer instance.

    The enforcer is built lazily, exactly once per process, the first time
    ``get_enforcer`` is called. A failure while building it is logged and not
    raised; the instance then stays ``None`` for the life of the process and
    every policy operation raises ``PolicyEngineUnavailableError``.

    Attributes:
        _enforcer (SyncedEnforcer): The singleton enforcer instance.
        _adapter (ExtendedAdapter): The singleton adapter instance.
    """

    CACHE_KEY = "console_authz_policy_last_modified_timestamp"
    DECISION_CACHE_PREFIX = "console_authz_decision"

    _enforcer = None
    _adapter = None
    _initialized = False
    _initializing = False
    _init_lock = threading.RLock()
    _last_policy_load_timestamp = None
    _policy_generation = uuid4().hex

    @classmethod
    def get_enforcer(cls) -> SyncedEnforcer | None:
        """Get the enforcer instance, creating it on first use.

        Reloads the policy when another process has changed it since the last
        local load.

        Returns:
            SyncedEnforcer | None: The singleton enforcer, or None if it could not be built.
        """
        if not cls._initialized:
            with cls._init_lock:
                # Other threads wait on the lock until the build is done. A
                # re-entrant call from the building thread sees _initializing
                # and gets None instead of starting a second build.
                if not cls._initialized and not cls._initializing:
                    cls._initializing = True
                    try:
                        cls._enforcer = cls._initialize_enforcer()
                    finally:
                        cls._initializing = False
                    cls._initialized = True

        if cls._enforcer is not None:
            cls.load_policy_if_needed()

        return cls._enforcer

    @classmethod
    def require_enforcer(cls) -> SyncedEnforcer:
        """Get the enforcer instance or fail.

        Raises:
            PolicyEngineUnavailableError: If the enforcer could not be built.
        """
        enforcer = cls.get_enforcer()
        if enforcer is None:
            raise PolicyEngineUnavailableError("Casbin enforcer is not available")
        return enforcer

    @classmethod
    def get_adapter(cls) -> ExtendedAdapter:
        """Get the adapter instance, creating it if needed.

        The adapter only needs the database, so it is available even when the
        enforcer failed to build.

        Returns:
            ExtendedAdapter: The singleton adapter instance.
        """
        if cls._adapter is None:
            cls._adapter = ExtendedAdapter(cls.get_db_alias())
        return cls._adapter

    @staticmethod
    def get_db_alias() -> str:
        return getattr(settings, "CASBIN_DB_ALIAS", "default")

    @staticmethod
    def get_cache_expire_time() -> int:
        """Seconds a cached enforcement decision stays valid."""
        return getattr(settings, "CASBIN_CACHE_EXPIRE_TIME", DEFAULT_CACHE_EXPIRE_TIME)

    @classmethod
    def enforce(cls, sub: str, obj: str, act: str) -> bool:
        """Decide a request, going through the decision cache.

        Args:
            sub: Authority identifier (e.g., ``888``).
            obj: Requested path (e.g., ``/api/getApiById``).
            act: HTTP method (e.g., ``POST``).

        Returns:
            bool: True if some policy allows the request.
        """
        enforcer = cls.require_enforcer()
        key = cls._decision_cache_key(sub, obj, act)

        allowed = cache.get(key)
        if allowed is None:
            allowed = enforcer.enforce(sub, obj, act)
            cache.set(key, allowed, cls.get_cache_expire_time())
        return allowed

    @classmethod
    def load_policy(cls):
        """Reload the whole policy from the database into the enforcer.

        Cached decisions made against the previous policy are discarded.
        """
        enforcer = cls._enforcer
        if enforcer is None:
            raise PolicyEngineUnavailableError("Casbin enforcer is not available")

        enforcer.load_policy()
        cls._last_policy_load_timestamp = time.time()
        cls._policy_generation = uuid4().hex
        logger.info(f"Reloaded console policy at {cls._last_policy_load_timestamp}")

    @classmethod
    def load_policy_if_needed(cls):
        """Load policy if the last modified timestamp is newer than the last load.

        Returns:
            None
        """
        last_modified_timestamp = cache.get(cls.CACHE_KEY)

        if last_modified_timestamp is None:
            last_modified_timestamp = cls._last_policy_load_timestamp or time.time()
            cache.set(cls.CACHE_KEY, last_modified_timestamp, None)
            logger.info(f"Initialized policy last modified timestamp in cache: {last_modified_timestamp}")

        if cls._last_policy_load_timestamp is None or last_modified_timestamp > cls._last_policy_load_timestamp:
            cls.load_policy()

    @classmethod
    def invalidate_policy_cache(cls):
        """Record that the stored policy changed, so every process reloads it.

        Returns:
            None
        """
        current_timestamp = time.time()
        cache.set(cls.CACHE_KEY, current_timestamp, None)
        logger.info(f"Invalidated policy cache at {current_timestamp}")

    @classmethod
    def mark_policy_changed(cls):
        """Record a change already applied to this process's enforcer.

        Used after mutations made through the enforcer itself: the in-memory
        policy is current, so only other processes and the decision cache
        need to hear about it.
        """
        cls.invalidate_policy_cache()
        cls._policy_generation = uuid4().hex
        cls._last_policy_load_timestamp = time.time()

    @classmethod
    def reset_enforcer(cls):
        """Forget the singleton so the next call builds a new one.

        Returns:
            None
        """
        with cls._init_lock:
            cls._enforcer = None
            cls._adapter = None
            cls._initialized = False
            cls._initializing = False
            cls._last_policy_load_timestamp = None
            cls._policy_generation = uuid4().hex

    @classmethod
    def _decision_cache_key(cls, sub: str, obj: str, act: str) -> str:
        digest = hashlib.sha256("\x00".join((sub, obj, act)).encode("utf-8")).hexdigest()
        return f"{cls.DECISION_CACHE_PREFIX}:{cls._policy_generation}:{digest}"

    @classmethod
    def _initialize_enforcer(cls) -> SyncedEnforcer | None:
        """
        Create and configure the Casbin SyncedEnforcer instance.

        Returns:
            SyncedEnforcer | None: Configured enforcer, or None if it could not be created.
        """
        try:
            adapter = cls.get_adapter()
            enforcer = SyncedEnforcer(getattr(settings, "CASBIN_MODEL", DEFAULT_MODEL_PATH), adapter)
            enforcer.enable_auto_save(getattr(settings, "CASBIN_AUTO_SAVE_POLICY", True))
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error(f"Failed to create Casbin enforcer with DB alias '{cls.get_db_alias()}': {e}")
            return None

        cls._enforcer = enforcer
        try:
            cls.load_policy()
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error(f"Failed to load console policy from the database: {e}")

        return enforcer
