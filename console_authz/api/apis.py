"""Public API for API record management.

An API record describes one endpoint of the console (path, method, group and
description). Policies reference records by path and method, so changing or
deleting a record also rewrites or removes the matching policies.
"""

import logging

from django.db import transaction

from console_authz.api.data import ApiFilterData, ApiOrderField, PageInfo, PolicyIndex
from console_authz.api.policies import clear_casbin, fresh_casbin, rewrite_api_policies
from console_authz.engine.enforcer import ConsoleEnforcer
from console_authz.exceptions import DuplicateApiError, InvalidOrderFieldError
from console_authz.models import SysApi

__all__ = [
    "create_api",
    "delete_api",
    "get_api_info_list",
    "get_all_apis",
    "get_api_by_id",
    "update_api",
    "delete_apis_by_ids",
]

logger = logging.getLogger(__name__)

DEFAULT_API_ORDER = ApiOrderField.API_GROUP.value

EDITABLE_API_FIELDS = ("path", "method", "api_group", "description")


def create_api(api: SysApi) -> SysApi:
    """Save a new API record.

    Args:
        api: An unsaved record.

    Returns:
        SysApi: The saved record.

    Raises:
        DuplicateApiError: If a record with the same path and method exists.
    """
    if SysApi.objects.filter(path=api.path, method=api.method).exists():
        raise DuplicateApiError(f"API {api.method} {api.path} already exists")
    api.save()
    return api


def delete_api(api_id: int) -> SysApi:
    """Delete an API record and, best effort, the policies that grant it.

    Returns:
        SysApi: The deleted record (its ``pk`` is cleared by Django).

    Raises:
        SysApi.DoesNotExist: If there is no record with this id.
    """
    api = SysApi.objects.get(pk=api_id)
    api.delete()
    _clear_api_policies(api)
    return api


def get_api_info_list(
    api_filter: ApiFilterData,
    page_info: PageInfo,
    order: str = "",
    desc: bool = False,
) -> tuple[list[SysApi], int]:
    """Get one page of API records matching a filter.

    Args:
        api_filter: Search criteria; empty fields do not filter.
        page_info: The page to return.
        order: Column to sort by, one of ``ApiOrderField``. Defaults to the API group.
        desc: Sort in descending order. Only used together with ``order``.

    Returns:
        tuple[list[SysApi], int]: The records of the page and the number of matching records.

    Raises:
        InvalidOrderFieldError: If ``order`` is not an allowed column.
    """
    if order and order not in ApiOrderField.values():
        raise InvalidOrderFieldError(f"Invalid order field: '{order}'. Must be one of {ApiOrderField.values()}")

    queryset = SysApi.objects.all()
    if api_filter.path:
        queryset = queryset.filter(path__contains=api_filter.path)
    if api_filter.description:
        queryset = queryset.filter(description__contains=api_filter.description)
    if api_filter.method:
        queryset = queryset.filter(method=api_filter.method)
    if api_filter.api_group:
        queryset = queryset.filter(api_group=api_filter.api_group)

    total = queryset.count()

    if order:
        queryset = queryset.order_by(f"-{order}" if desc else order)
    else:
        queryset = queryset.order_by(DEFAULT_API_ORDER)

    offset = page_info.offset
    if page_info.limit is None:
        return list(queryset[offset:]), total
    return list(queryset[offset : offset + page_info.limit]), total


def get_all_apis() -> list[SysApi]:
    """Get every API record."""
    return list(SysApi.objects.all())


def get_api_by_id(api_id: int) -> SysApi:
    """Get an API record by id.

    Raises:
        SysApi.DoesNotExist: If there is no record with this id.
    """
    return SysApi.objects.get(pk=api_id)


def update_api(api: SysApi) -> SysApi:
    """Save changes to an existing API record.

    Every policy granting the old path and method is moved to the new pair.
    The rule rewrite and the record save run in one transaction, and the
    enforcer is reloaded once both are written. If either write fails, the
    rules and the record keep their old values.

    Args:
        api: The new values; ``api.pk`` selects the stored record. Only the
            editable fields (path, method, group, description) are copied.

    Returns:
        SysApi: The saved record.

    Raises:
        SysApi.DoesNotExist: If there is no record with this id.
        DuplicateApiError: If another record already uses the new path and method.
    """
    with transaction.atomic(), transaction.atomic(using=ConsoleEnforcer.get_db_alias()):
        stored_api = SysApi.objects.get(pk=api.pk)
        old_path, old_method = stored_api.path, stored_api.method

        if old_path != api.path or old_method != api.method:
            duplicated = SysApi.objects.filter(path=api.path, method=api.method).exclude(pk=api.pk)
            if duplicated.exists():
                raise DuplicateApiError(f"API path {api.method} {api.path} already exists")

        rewrite_api_policies(old_path, api.path, old_method, api.method)
        for field_name in EDITABLE_API_FIELDS:
            setattr(stored_api, field_name, getattr(api, field_name))
        stored_api.save(update_fields=[*EDITABLE_API_FIELDS, "updated_at"])

    fresh_casbin()
    return stored_api


def delete_apis_by_ids(ids: list[int]) -> list[SysApi]:
    """Delete several API records and, best effort, their policies.

    Unknown ids are ignored.

    Returns:
        list[SysApi]: The deleted records.
    """
    apis = list(SysApi.objects.filter(pk__in=ids))
    SysApi.objects.filter(pk__in=[api.pk for api in apis]).delete()
    for api in apis:
        _clear_api_policies(api)
    return apis


def _clear_api_policies(api: SysApi) -> None:
    """Remove the policies granting a deleted API.

    The record is already gone, so nothing can call the API anymore; a
    failure here is logged and not raised.
    """
    try:
        clear_casbin(PolicyIndex.PATH.value, api.path, api.method)
    except Exception as exc:  # pylint: disable=broad-exception-caught
        logger.exception(
            "Error removing policies of deleted API %s %s",
            api.method,
            api.path,
            exc_info=exc,
        )
