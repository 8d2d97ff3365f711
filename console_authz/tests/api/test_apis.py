"""Test cases for the API record functions."""

from unittest.mock import patch

from casbin_adapter.models import CasbinRule
from ddt import data as ddt_data
from ddt import ddt, unpack
from django.db import DatabaseError

from console_authz.api import (
    ApiFilterData,
    PageInfo,
    PolicyInfo,
    create_api,
    delete_api,
    delete_apis_by_ids,
    get_all_apis,
    get_api_by_id,
    get_api_info_list,
    get_policy_path_by_authority_id,
    is_allowed,
    update_api,
    update_casbin,
)
from console_authz.exceptions import DuplicateApiError, InvalidOrderFieldError
from console_authz.models import SysApi
from console_authz.tests.test_utils import SUPER_ADMIN, PolicyTestCase, make_api, stored_rules


class TestCreateApi(PolicyTestCase):
    """Tests for create_api."""

    def test_create_api(self):
        """A new path and method pair is saved."""
        api = create_api(SysApi(path="/api/createApi", method="POST", api_group="api", description="Create API"))

        self.assertIsNotNone(api.pk)
        self.assertEqual(get_api_by_id(api.pk).description, "Create API")

    def test_create_duplicate_api_fails(self):
        """The same path and method cannot be saved twice."""
        make_api("/api/createApi", "POST")

        with self.assertRaises(DuplicateApiError):
            create_api(SysApi(path="/api/createApi", method="POST"))

        self.assertEqual(SysApi.objects.count(), 1)

    def test_create_same_path_other_method(self):
        """The same path with another method is a different API."""
        make_api("/api/createApi", "POST")

        create_api(SysApi(path="/api/createApi", method="PUT"))

        self.assertEqual(SysApi.objects.filter(path="/api/createApi").count(), 2)


class TestDeleteApi(PolicyTestCase):
    """Tests for delete_api and delete_apis_by_ids."""

    def setUp(self):
        super().setUp()
        self.create = make_api("/api/createApi", "POST")
        self.delete = make_api("/api/deleteApi", "DELETE")
        self.list = make_api("/api/getApiList", "POST")
        update_casbin(
            SUPER_ADMIN,
            [
                PolicyInfo(path="/api/createApi", method="POST"),
                PolicyInfo(path="/api/deleteApi", method="DELETE"),
                PolicyInfo(path="/api/getApiList", method="POST"),
            ],
        )

    def test_delete_unknown_api_fails(self):
        """Deleting an id that does not exist raises DoesNotExist."""
        with self.assertRaises(SysApi.DoesNotExist):
            delete_api(self.list.pk + 100)

    def test_delete_api_removes_policies(self):
        """The record and every policy granting it are removed."""
        delete_api(self.create.pk)

        self.assertFalse(SysApi.objects.filter(path="/api/createApi").exists())
        self.assertNotIn(["888", "/api/createApi", "POST"], stored_rules())
        self.assertNotIn(PolicyInfo(path="/api/createApi", method="POST"), get_policy_path_by_authority_id(SUPER_ADMIN))
        self.assertFalse(is_allowed(SUPER_ADMIN, "/api/createApi", "POST"))
        self.assertTrue(is_allowed(SUPER_ADMIN, "/api/deleteApi", "DELETE"))

    def test_delete_api_ignores_policy_cleanup_failure(self):
        """A failure while removing policies is logged, not raised."""
        with patch("console_authz.api.apis.clear_casbin", side_effect=RuntimeError("boom")):
            with self.assertLogs("console_authz.api.apis", level="ERROR"):
                delete_api(self.create.pk)

        self.assertFalse(SysApi.objects.filter(path="/api/createApi").exists())

    def test_delete_apis_by_ids(self):
        """Listed records are deleted with their policies; unknown ids are ignored."""
        deleted = delete_apis_by_ids([self.create.pk, self.delete.pk, self.list.pk + 100])

        self.assertEqual({api.path for api in deleted}, {"/api/createApi", "/api/deleteApi"})
        self.assertEqual(list(SysApi.objects.values_list("path", flat=True)), ["/api/getApiList"])
        self.assertEqual(stored_rules(), [["888", "/api/getApiList", "POST"]])
        self.assertEqual(get_policy_path_by_authority_id(SUPER_ADMIN), [PolicyInfo("/api/getApiList", "POST")])

    def test_delete_apis_by_ids_ignores_policy_cleanup_failure(self):
        """Every record is deleted even if policy cleanup fails."""
        with patch("console_authz.api.apis.clear_casbin", side_effect=RuntimeError("boom")):
            with self.assertLogs("console_authz.api.apis", level="ERROR"):
                delete_apis_by_ids([self.create.pk, self.delete.pk])

        self.assertEqual(SysApi.objects.count(), 1)


@ddt
class TestGetApiInfoList(PolicyTestCase):
    """Tests for get_api_info_list."""

    def setUp(self):
        super().setUp()
        make_api("/api/createApi", "POST", "api", "Create API")
        make_api("/api/deleteApi", "DELETE", "api", "Delete API")
        make_api("/user/getUserList", "POST", "user", "List users")
        make_api("/casbin/updateCasbin", "POST", "casbin", "Update policies")
        make_api("/casbin/freshCasbin", "GET", "casbin", "Reload policies")

    @ddt_data(
        ({}, 5),
        ({"path": "/api/"}, 2),
        ({"path": "casbin"}, 2),
        ({"description": "policies"}, 2),
        ({"method": "POST"}, 3),
        ({"method": "GET"}, 1),
        ({"api_group": "casbin"}, 2),
        ({"api_group": "casbin", "method": "GET"}, 1),
        ({"path": "/api/", "method": "GET"}, 0),
    )
    @unpack
    def test_filters(self, filters: dict, expected_total: int):
        """Substring filters on path and description, exact filters on method and group."""
        apis, total = get_api_info_list(ApiFilterData(**filters), PageInfo(page=1, page_size=10))

        self.assertEqual(total, expected_total)
        self.assertEqual(len(apis), expected_total)

    def test_default_order_is_api_group(self):
        """Without an order the records are sorted by group."""
        apis, _ = get_api_info_list(ApiFilterData(), PageInfo())

        self.assertEqual([api.api_group for api in apis], ["api", "api", "casbin", "casbin", "user"])

    @ddt_data(
        ("path", False, "/api/createApi"),
        ("path", True, "/user/getUserList"),
        ("method", False, "/api/deleteApi"),
        ("description", True, "/casbin/updateCasbin"),
    )
    @unpack
    def test_order(self, order: str, desc: bool, expected_first: str):
        """Allowed columns can be sorted ascending or descending."""
        apis, _ = get_api_info_list(ApiFilterData(), PageInfo(), order=order, desc=desc)

        self.assertEqual(apis[0].path, expected_first)

    @ddt_data("created_at", "path; DROP TABLE sys_apis", "-path", "id desc")
    def test_invalid_order_fails(self, order: str):
        """Columns outside the allowed list are rejected."""
        with self.assertRaises(InvalidOrderFieldError):
            get_api_info_list(ApiFilterData(), PageInfo(), order=order)

    @ddt_data(
        (1, 2, ["/api/createApi", "/api/deleteApi"]),
        (2, 2, ["/casbin/freshCasbin", "/casbin/updateCasbin"]),
        (3, 2, ["/user/getUserList"]),
        (4, 2, []),
        (0, 2, ["/api/createApi", "/api/deleteApi"]),
    )
    @unpack
    def test_pagination(self, page: int, page_size: int, expected_paths: list[str]):
        """Pages are cut after counting; the total covers every match."""
        apis, total = get_api_info_list(ApiFilterData(), PageInfo(page=page, page_size=page_size), order="path")

        self.assertEqual(total, 5)
        self.assertEqual([api.path for api in apis], expected_paths)

    def test_page_size_zero_returns_everything(self):
        """A page size of zero disables the limit."""
        apis, total = get_api_info_list(ApiFilterData(), PageInfo(page=3, page_size=0))

        self.assertEqual(total, 5)
        self.assertEqual(len(apis), 5)


class TestGetApis(PolicyTestCase):
    """Tests for get_all_apis and get_api_by_id."""

    def test_get_all_apis(self):
        make_api("/api/createApi", "POST")
        make_api("/api/deleteApi", "DELETE")

        self.assertEqual({api.path for api in get_all_apis()}, {"/api/createApi", "/api/deleteApi"})

    def test_get_all_apis_empty(self):
        self.assertEqual(get_all_apis(), [])

    def test_get_api_by_id(self):
        api = make_api("/api/createApi", "POST")

        self.assertEqual(get_api_by_id(api.pk), api)

    def test_get_unknown_api_fails(self):
        with self.assertRaises(SysApi.DoesNotExist):
            get_api_by_id(12345)


class TestUpdateApi(PolicyTestCase):
    """Tests for update_api."""

    def setUp(self):
        super().setUp()
        self.api = make_api("/api/getApiById", "POST", "api", "Get API")
        self.other = make_api("/api/getAllApis", "POST", "api", "All APIs")
        update_casbin(SUPER_ADMIN, [PolicyInfo("/api/getApiById", "POST"), PolicyInfo("/api/getAllApis", "POST")])

    def test_update_path_and_method_moves_policies(self):
        """Policies granting the old pair now grant the new one, in the database and the enforcer."""
        api = SysApi.objects.get(pk=self.api.pk)
        api.path = "/api/getApiById/:id"
        api.method = "GET"

        update_api(api)

        self.assertEqual(get_api_by_id(self.api.pk).path, "/api/getApiById/:id")
        self.assertIn(["888", "/api/getApiById/:id", "GET"], stored_rules())
        self.assertNotIn(["888", "/api/getApiById", "POST"], stored_rules())
        self.assertTrue(is_allowed(SUPER_ADMIN, "/api/getApiById/7", "GET"))
        self.assertFalse(is_allowed(SUPER_ADMIN, "/api/getApiById", "POST"))

    def test_update_to_existing_pair_fails(self):
        """Another record's path and method cannot be taken."""
        api = SysApi.objects.get(pk=self.api.pk)
        api.path = "/api/getAllApis"

        with self.assertRaises(DuplicateApiError):
            update_api(api)

        self.assertEqual(get_api_by_id(self.api.pk).path, "/api/getApiById")
        self.assertIn(["888", "/api/getApiById", "POST"], stored_rules())

    def test_update_keeping_own_pair(self):
        """Keeping the record's own path and method is not a conflict."""
        api = SysApi.objects.get(pk=self.api.pk)
        api.description = "Get one API by id"

        update_api(api)

        self.assertEqual(get_api_by_id(self.api.pk).description, "Get one API by id")
        self.assertEqual(len(stored_rules(SUPER_ADMIN)), 2)

    def test_update_unknown_api_fails(self):
        with self.assertRaises(SysApi.DoesNotExist):
            update_api(SysApi(pk=12345, path="/api/nothing", method="POST"))

    def test_update_from_detached_instance(self):
        """An unsaved instance carrying only the id and new values updates the stored record."""
        created_at = SysApi.objects.get(pk=self.api.pk).created_at

        saved = update_api(SysApi(pk=self.api.pk, path="/api/getApi", method="GET"))

        stored = get_api_by_id(self.api.pk)
        self.assertEqual(saved.pk, self.api.pk)
        self.assertEqual((stored.path, stored.method), ("/api/getApi", "GET"))
        self.assertEqual(stored.created_at, created_at)
        self.assertIn(["888", "/api/getApi", "GET"], stored_rules())
        self.assertTrue(is_allowed(SUPER_ADMIN, "/api/getApi", "GET"))

    def test_failed_save_keeps_rules(self):
        """When the record cannot be saved, its rules keep the old path and method."""
        rules_before = stored_rules()

        with patch.object(SysApi, "save", side_effect=DatabaseError("write failed")):
            with self.assertRaises(DatabaseError):
                update_api(SysApi(pk=self.api.pk, path="/api/getApi", method="GET"))

        self.assertEqual(stored_rules(), rules_before)
        self.assertEqual(get_api_by_id(self.api.pk).path, "/api/getApiById")
        self.assertTrue(is_allowed(SUPER_ADMIN, "/api/getApiById", "POST"))
        self.assertFalse(is_allowed(SUPER_ADMIN, "/api/getApi", "GET"))

    def test_update_does_not_touch_other_methods(self):
        """Only rules with the old path and the old method are rewritten."""
        CasbinRule.objects.create(ptype="p", v0="9528", v1="/api/getApiById", v2="GET")
        api = SysApi.objects.get(pk=self.api.pk)
        api.path = "/api/getApi"

        update_api(api)

        self.assertIn(["9528", "/api/getApiById", "GET"], stored_rules())
        self.assertIn(["888", "/api/getApi", "POST"], stored_rules())
