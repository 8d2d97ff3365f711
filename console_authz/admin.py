"""Admin configuration for console_authz."""

from casbin_adapter.models import CasbinRule
from django import forms
from django.contrib import admin

from console_authz import api
from console_authz.models import SysApi


class CasbinRuleForm(forms.ModelForm):
    """Custom form for CasbinRule to make v3, v4, v5 fields optional."""

    class Meta:
        """Meta class for CasbinRuleForm."""

        model = CasbinRule
        fields = "__all__"

    def __init__(self, *args, **kwargs):
        """Initialize CasbinRuleForm."""
        super().__init__(*args, **kwargs)
        # Console policies only use v0 (authority), v1 (path) and v2 (method)
        self.fields["v3"].required = False
        self.fields["v4"].required = False
        self.fields["v5"].required = False


@admin.register(CasbinRule)
class CasbinRuleAdmin(admin.ModelAdmin):
    """Admin for the raw Casbin rule rows.

    Edits here only reach the enforcer after ``api.fresh_casbin()``.
    """

    form = CasbinRuleForm
    list_display = ("id", "ptype", "v0", "v1", "v2")
    search_fields = ("v0", "v1", "v2")
    list_filter = ("ptype",)


@admin.register(SysApi)
class SysApiAdmin(admin.ModelAdmin):
    """Admin for API records.

    Saving and deleting go through ``console_authz.api`` so the policies that
    reference a record follow its changes.
    """

    list_display = ("id", "path", "method", "api_group", "description")
    search_fields = ("path", "description")
    list_filter = ("method", "api_group")
    ordering = ("api_group",)

    def save_model(self, request, obj, form, change):
        if change:
            api.update_api(obj)
        else:
            api.create_api(obj)

    def delete_model(self, request, obj):
        api.delete_api(obj.pk)

    def delete_queryset(self, request, queryset):
        api.delete_apis_by_ids(list(queryset.values_list("pk", flat=True)))
