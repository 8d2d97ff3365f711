"""Public API for the console authorization app.

API records and the Casbin policies that grant access to them are managed
through the functions exposed here. Callers never talk to the enforcer or
the ``casbin_rule`` table directly.
"""

from console_authz.api.apis import *
from console_authz.api.data import *
from console_authz.api.policies import *
