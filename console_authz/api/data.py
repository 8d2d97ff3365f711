"""Data classes and enums for API records and policy rules."""

from enum import Enum

from attrs import define, field

__all__ = [
    "BaseEnum",
    "ApiOrderField",
    "PolicyIndex",
    "PageInfo",
    "ApiFilterData",
    "PolicyInfo",
    "POLICY_PTYPE",
]

POLICY_PTYPE = "p"


class BaseEnum(str, Enum):
    """Base enum class."""

    @classmethod
    def values(cls):
        """List the values of the enum."""
        return [e.value for e in cls]


class ApiOrderField(BaseEnum):
    """Columns an API record list may be sorted by.

    Only these names ever reach ``order_by``; anything else is rejected.
    """

    ID = "id"
    PATH = "path"
    API_GROUP = "api_group"
    DESCRIPTION = "description"
    METHOD = "method"


class PolicyIndex(Enum):
    """Index positions for fields in a console Casbin policy (p).

    Format: [authority, path, method]

    Attributes:
        AUTHORITY: Position 0 - The authority identifier (e.g., '888').
        PATH: Position 1 - The API path (e.g., '/api/createApi').
        METHOD: Position 2 - The HTTP method (e.g., 'POST').
    """

    AUTHORITY = 0
    PATH = 1
    METHOD = 2


@define
class PageInfo:
    """Page selection for list queries.

    Attributes:
        page: 1-based page number. Values below 1 select the first page.
        page_size: Number of items per page. Zero or less means no limit.
    """

    page: int = 1
    page_size: int = 10

    @property
    def limit(self) -> int | None:
        return self.page_size if self.page_size > 0 else None

    @property
    def offset(self) -> int:
        if self.limit is None:
            return 0
        return self.page_size * (max(self.page, 1) - 1)


@define
class ApiFilterData:
    """Search criteria for API records.

    Empty values do not filter. ``path`` and ``description`` match substrings,
    ``method`` and ``api_group`` match exactly.
    """

    path: str = ""
    description: str = ""
    method: str = ""
    api_group: str = ""


@define(frozen=True)
class PolicyInfo:
    """A path and method granted to an authority.

    Examples:
        >>> PolicyInfo(path="/api/createApi", method="POST")
        PolicyInfo(path='/api/createApi', method='POST')
    """

    path: str = field()
    method: str = field()
