"""Policy loader module.

Copies console policies from one Casbin enforcer to another, typically from a
file-based enforcer built on a ``.policy`` CSV into the database-backed
console enforcer.
"""

import logging

from casbin import Enforcer

logger = logging.getLogger(__name__)


def migrate_policy_between_enforcers(
    source_enforcer: Enforcer,
    target_enforcer: Enforcer,
) -> int:
    """Add the source enforcer's policies that the target does not hold yet.

    Policies already present in the target are skipped, so running the
    migration twice does not duplicate rows.

    Args:
        source_enforcer (Enforcer): The Casbin enforcer instance to migrate policies from (e.g., file-based).
        target_enforcer (Enforcer): The Casbin enforcer instance to migrate policies to (e.g., database).

    Returns:
        int: Number of policies and grouping policies added to the target.
    """
    try:
        source_enforcer.load_policy()
        policies = source_enforcer.get_policy()
        logger.info(f"Loaded {len(policies)} policies from source enforcer.")

        target_enforcer.load_policy()
        logger.info(f"Target enforcer has {len(target_enforcer.get_policy())} existing policies before migration.")

        added = 0
        new_policies = []
        for policy in policies:
            if target_enforcer.has_policy(*policy) or policy in new_policies:
                logger.info(f"Policy {policy} already exists in target, skipping.")
                continue
            new_policies.append(policy)

        if new_policies:
            target_enforcer.add_policies(new_policies)
            added += len(new_policies)

        for grouping in source_enforcer.get_grouping_policy():
            if target_enforcer.has_grouping_policy(*grouping):
                logger.info(f"Grouping policy {grouping} already exists in target, skipping.")
                continue
            target_enforcer.add_grouping_policy(*grouping)
            added += 1

        logger.info(f"Successfully added {added} policies from {source_enforcer.get_model()} into the database.")
        return added
    except Exception as e:
        logger.error(f"Error loading policies from file: {e}")
        raise
