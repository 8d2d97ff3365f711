"""Exceptions raised by the console authorization services."""


class DuplicateApiError(ValueError):
    """Another API record already uses the same path and method."""


class InvalidOrderFieldError(ValueError):
    """The requested sort column is not in the allowed list."""


class DuplicatePolicyError(ValueError):
    """The enforcer refused to add a batch of policy rules."""


class PolicyEngineUnavailableError(RuntimeError):
    """The Casbin enforcer could not be built for this process."""
