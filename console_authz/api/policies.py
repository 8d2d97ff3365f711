"""Public API for console policy management.

A policy grants an authority (role) access to one API path with one HTTP
method. Policies live in two places: the ``casbin_rule`` table and the
in-memory model of the process-wide enforcer.

Functions in this module either go through the enforcer, which keeps both
copies in step, or write to the database directly. The latter are marked as
such and only take effect for enforcement after ``fresh_casbin()``.
"""

import logging

from casbin_adapter.models import CasbinRule
from django.db import transaction

from console_authz.api.data import POLICY_PTYPE, PolicyIndex, PolicyInfo
from console_authz.engine.enforcer import ConsoleEnforcer
from console_authz.engine.filter import Filter
from console_authz.exceptions import DuplicatePolicyError

__all__ = [
    "update_casbin",
    "update_casbin_api",
    "rewrite_api_policies",
    "get_policy_path_by_authority_id",
    "clear_casbin",
    "remove_filtered_policy",
    "sync_policy",
    "add_policies",
    "fresh_casbin",
    "is_allowed",
]

logger = logging.getLogger(__name__)


def _rules(using: str | None = None):
    return CasbinRule.objects.using(using or ConsoleEnforcer.get_db_alias())


def update_casbin(authority_id: int, casbin_infos: list[PolicyInfo]) -> None:
    """Replace every policy of an authority.

    Existing rules of the authority are removed, then the given paths are
    added once each. Takes effect immediately.

    Args:
        authority_id: The authority whose rules are replaced.
        casbin_infos: The paths and methods the authority may call.

    Raises:
        DuplicatePolicyError: If the enforcer refuses the new rules.
    """
    authority = str(authority_id)
    clear_casbin(PolicyIndex.AUTHORITY.value, authority)

    rules = []
    seen = set()
    for info in casbin_infos:
        if (info.path, info.method) in seen:
            continue
        seen.add((info.path, info.method))
        rules.append([authority, info.path, info.method])

    if not rules:
        return

    enforcer = ConsoleEnforcer.require_enforcer()
    if not enforcer.add_policies(rules):
        raise DuplicatePolicyError(f"Could not add policies for authority {authority}: a rule already exists")

    ConsoleEnforcer.mark_policy_changed()
    logger.info(f"Replaced policies of authority {authority} with {len(rules)} rules")


def update_casbin_api(old_path: str, new_path: str, old_method: str, new_method: str) -> None:
    """Point every rule for an API at its new path and method.

    The rows are rewritten in place in the database, then the enforcer is
    reloaded so the change takes effect immediately.
    """
    rewrite_api_policies(old_path, new_path, old_method, new_method)
    fresh_casbin()


def rewrite_api_policies(old_path: str, new_path: str, old_method: str, new_method: str) -> int:
    """Rewrite the path and method of an API's rules in the database only.

    Needs ``fresh_casbin()`` to take effect.

    Returns:
        int: The number of rows rewritten.
    """
    updated = (
        ConsoleEnforcer.get_adapter()
        .query_policy(Filter(v1=[old_path], v2=[old_method]))
        .update(v1=new_path, v2=new_method)
    )
    logger.info(f"Rewrote {updated} rules from {old_method} {old_path} to {new_method} {new_path}")
    return updated


def get_policy_path_by_authority_id(authority_id: int) -> list[PolicyInfo]:
    """Get the paths and methods granted to an authority.

    Returns:
        list[PolicyInfo]: The authority's rules as currently loaded in the enforcer.
    """
    enforcer = ConsoleEnforcer.require_enforcer()
    policies = enforcer.get_filtered_policy(PolicyIndex.AUTHORITY.value, str(authority_id))
    return [
        PolicyInfo(path=policy[PolicyIndex.PATH.value], method=policy[PolicyIndex.METHOD.value])
        for policy in policies
    ]


def clear_casbin(field_index: int, *field_values: str) -> bool:
    """Remove the rules matching a filter pattern.

    Args:
        field_index: Position of the first value to match (see ``PolicyIndex``).
        *field_values: Values to match from ``field_index`` on; an empty string matches anything.

    Returns:
        bool: True if at least one rule was removed.
    """
    enforcer = ConsoleEnforcer.require_enforcer()
    removed = enforcer.remove_filtered_policy(field_index, *field_values)
    if removed:
        ConsoleEnforcer.mark_policy_changed()
    return removed


def remove_filtered_policy(authority_id: str, using: str | None = None) -> None:
    """Delete an authority's rules from the database only.

    Needs ``fresh_casbin()`` to take effect.
    """
    _rules(using).filter(v0=authority_id).delete()


def sync_policy(authority_id: str, rules: list[list[str]], using: str | None = None) -> None:
    """Replace an authority's rules in the database only.

    Both steps run in one transaction. Needs ``fresh_casbin()`` to take effect.

    Args:
        authority_id: The authority whose rows are deleted.
        rules: ``[authority, path, method]`` triples to insert.
        using: Database alias; defaults to ``CASBIN_DB_ALIAS``.
    """
    with transaction.atomic(using=using or ConsoleEnforcer.get_db_alias()):
        remove_filtered_policy(authority_id, using=using)
        add_policies(rules, using=using)


def add_policies(rules: list[list[str]], using: str | None = None) -> None:
    """Insert rules into the database only.

    Needs ``fresh_casbin()`` to take effect.

    Args:
        rules: ``[authority, path, method]`` triples.
        using: Database alias; defaults to ``CASBIN_DB_ALIAS``.
    """
    _rules(using).bulk_create(
        [
            CasbinRule(
                ptype=POLICY_PTYPE,
                v0=rule[PolicyIndex.AUTHORITY.value],
                v1=rule[PolicyIndex.PATH.value],
                v2=rule[PolicyIndex.METHOD.value],
            )
            for rule in rules
        ]
    )


def fresh_casbin() -> None:
    """Reload the enforcer from the database.

    Every process picks up the change; cached decisions are discarded.
    """
    ConsoleEnforcer.require_enforcer()
    ConsoleEnforcer.invalidate_policy_cache()
    ConsoleEnforcer.load_policy()


def is_allowed(authority_id: int | str, path: str, method: str) -> bool:
    """Check whether an authority may call an API.

    Args:
        authority_id: The authority of the caller.
        path: The requested path; rule paths may hold ``:param`` and ``*`` segments.
        method: The HTTP method.

    Returns:
        bool: True if some rule of the authority allows the request.
    """
    return ConsoleEnforcer.enforce(str(authority_id), path, method)
