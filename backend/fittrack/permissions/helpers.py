# Overview: Policy lookups shared by the decorators, the permissions endpoint and the seeding command.

from .categories import Access
from .definitions import POLICY


def evaluate(role, resource, action):
    """Access level for a role; unknown combinations are denied."""
    return POLICY.get((role, resource, action), Access.DENY)


def is_granted(role, resource, action):
    return evaluate(role, resource, action) != Access.DENY


def granted_actions(role):
    """Map of resource -> sorted actions the role holds at any level other than deny."""
    result = {}
    for (r, resource, action), level in POLICY.items():
        if r == role and level != Access.DENY:
            result.setdefault(resource, []).append(action)
    return {resource: sorted(actions) for resource, actions in sorted(result.items())}


def permission_rows():
    """(role, resource, action) tuples for every non-deny entry, in a stable order."""
    return sorted(key for key, level in POLICY.items() if level != Access.DENY)
