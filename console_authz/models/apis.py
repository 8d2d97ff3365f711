"""Models for API endpoint records."""

from django.db import models

__all__ = ["SysApi"]


class SysApi(models.Model):
    """An API endpoint known to the console.

    .. no_pii:

    Policy rows in ``casbin_rule`` point at a record through its ``path`` (v1)
    and ``method`` (v2), so both are kept in sync with the rules whenever the
    record changes. The (path, method) pair is unique.
    """

    path = models.CharField(max_length=255, help_text="API path, e.g. /api/createApi")
    description = models.CharField(max_length=255, blank=True, default="")
    api_group = models.CharField(max_length=255, blank=True, default="")
    method = models.CharField(max_length=16, default="POST")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "sys_apis"
        verbose_name = "API"
        verbose_name_plural = "APIs"
        constraints = [
            models.UniqueConstraint(fields=["path", "method"], name="unique_sys_api_path_method"),
        ]

    def __str__(self):
        return f"{self.method} {self.path}"
