"""Database models for the console authorization app.

API records describe the endpoints exposed by the console. Access to those
endpoints is granted through Casbin policy rows stored by the
``casbin_adapter`` app. A rule references a record by its path and method,
not by a foreign key.
"""

from console_authz.models.apis import *
