# Overview: Role policy package.
# Re-exports the public API so callers import from `fittrack.permissions`.

from .categories import Access, Action, Resource
from .definitions import POLICY, POLICY_MATRIX
from .helpers import evaluate, granted_actions, is_granted, permission_rows

__all__ = [
    "Access",
    "Action",
    "Resource",
    "POLICY",
    "POLICY_MATRIX",
    "evaluate",
    "granted_actions",
    "is_granted",
    "permission_rows",
]
