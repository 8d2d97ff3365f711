"""
Extended Casbin Adapter with Filtering Support.

The ExtendedAdapter combines the Django ORM adapter shipped by
``casbin_adapter`` with Casbin's FilteredAdapter interface, and exposes the
filtered queryset so that services can rewrite policy rows in place (for
example when an API record changes its path) without going through the
enforcer.
"""

from enum import Enum

from casbin import persist
from casbin.model import Model
from casbin.persist import BatchAdapter, FilteredAdapter
from casbin_adapter.adapter import Adapter
from casbin_adapter.models import CasbinRule
from django.db.models import QuerySet

from console_authz.engine.filter import Filter


class PolicyAttribute(Enum):
    """
    Enumeration of Casbin policy attributes.

    These attributes map to the columns of the CasbinRule table. For ``p`` rows
    the console stores the authority in v0, the API path in v1 and the HTTP
    method in v2.
    """

    PTYPE = "ptype"
    V0 = "v0"
    V1 = "v1"
    V2 = "v2"
    V3 = "v3"
    V4 = "v4"
    V5 = "v5"


class ExtendedAdapter(Adapter, FilteredAdapter, BatchAdapter):
    """
    Extended Casbin adapter with filtering and batch capabilities.

    Inherits from:
        Adapter: Base Django adapter for Casbin policy persistence.
        FilteredAdapter: Interface for filtered policy loading.
        BatchAdapter: Interface for adding and removing several rules at once.
    """

    def is_filtered(self) -> bool:
        """
        Check if the adapter supports filtering.

        Returns:
            bool: Always True.
        """
        return True

    def load_filtered_policy(self, model: Model, filter: Filter) -> None:  # pylint: disable=redefined-builtin
        """
        Load policy rules from storage with filtering applied.

        IMPORTANT: This method is used internally by ``enforcer.load_filtered_policy()``.
            Do not call it directly.

        Args:
            model (Model): The Casbin model to load policy rules into.
            filter (Filter): Filter object containing criteria for policy selection.
        """
        for line in self.query_policy(filter):
            persist.load_policy_line(str(line), model)

    def query_policy(self, filter: Filter) -> QuerySet:  # pylint: disable=redefined-builtin
        """
        Get the stored policy rows matching a filter.

        Args:
            filter (Filter): Filter object containing criteria for policy selection.

        Returns:
            QuerySet: Matching CasbinRule rows on the adapter's database, ordered by id.
        """
        queryset = CasbinRule.objects.using(self.db_alias)
        return self.filter_query(queryset, filter)

    def filter_query(self, queryset: QuerySet, filter: Filter) -> QuerySet:  # pylint: disable=redefined-builtin
        """
        Apply filter criteria to the policy queryset.

        Args:
            queryset (QuerySet): Django queryset of CasbinRule objects to filter.
            filter (Filter): Filter object; empty lists are ignored.

        Returns:
            QuerySet: Filtered and ordered queryset of CasbinRule objects.
        """
        for attr in PolicyAttribute:
            filter_values = getattr(filter, attr.value)
            if len(filter_values) > 0:
                filter_kwargs = {f"{attr.value}__in": filter_values}
                queryset = queryset.filter(**filter_kwargs)
        return queryset.order_by("id")

    def add_policies(self, sec: str, ptype: str, rules: list[list[str]]) -> None:
        """Insert several policy rules with a single query.

        Unused trailing columns are stored as empty strings.
        """
        lines = []
        for rule in rules:
            columns = {f"v{index}": value for index, value in enumerate(rule)}
            lines.append(CasbinRule(ptype=ptype, **columns))
        CasbinRule.objects.using(self.db_alias).bulk_create(lines)

    def remove_policies(self, sec: str, ptype: str, rules: list[list[str]]) -> bool:
        """Delete several policy rules.

        Returns:
            bool: True if at least one row was deleted.
        """
        deleted = 0
        for rule in rules:
            columns = {f"v{index}": value for index, value in enumerate(rule)}
            deleted += CasbinRule.objects.using(self.db_alias).filter(ptype=ptype, **columns).delete()[0]
        return deleted > 0
