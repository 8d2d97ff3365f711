"""
Filter for selecting Casbin policy rows.

A ``Filter`` names, per column of the ``casbin_rule`` table, the values a row
must hold to be selected. It is used by the ``ExtendedAdapter`` both to load a
subset of the policy into an enforcer and to query the rows directly when a
service needs to rewrite them in the database.
"""

from typing import Optional

import attr


@attr.define
class Filter:
    """
    Filter class for selective Casbin policy loading and querying.

    Note:
        - Empty lists for any attribute means no filtering on that attribute
        - Non-empty lists create an "IN" filter for that attribute
        - All non-empty filters are combined with AND logic
    """

    ptype: Optional[list[str]] = attr.field(factory=list)
    """ptype (Optional[list[str]]): Policy type filter.

    - ``p``  → Policy rule (authority ↔ path ↔ method).
    - ``g``  → Grouping rule (authority ↔ parent authority).
    """

    v0: Optional[list[str]] = attr.field(factory=list)
    """v0 (Optional[list[str]]): Authority identifier filter (e.g., ``888``)."""

    v1: Optional[list[str]] = attr.field(factory=list)
    """v1 (Optional[list[str]]): API path filter (e.g., ``/api/createApi``)."""

    v2: Optional[list[str]] = attr.field(factory=list)
    """v2 (Optional[list[str]]): HTTP method filter (e.g., ``POST``)."""

    v3: Optional[list[str]] = attr.field(factory=list)
    """v3 (Optional[list[str]]): Unused by the console model."""

    v4: Optional[list[str]] = attr.field(factory=list)
    """v4 (Optional[list[str]]): Unused by the console model."""

    v5: Optional[list[str]] = attr.field(factory=list)
    """v5 (Optional[list[str]]): Unused by the console model."""
