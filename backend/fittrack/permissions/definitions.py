# Overview: Declarative role policy. One row per (resource, action); columns are roles.
# Anything not listed here is denied.

from ..models.users import ROLES
from .categories import Access, Action, Resource

A = Access.ALLOW
S = Access.SELF
D = Access.DENY

# (resource, action): (admin, manager, tailor, customer)
POLICY_MATRIX = {
    (Resource.CUSTOMER, Action.VIEW): (A, A, S, D),
    (Resource.CUSTOMER, Action.CREATE): (A, A, A, D),
    (Resource.CUSTOMER, Action.UPDATE): (A, A, S, D),
    (Resource.CUSTOMER, Action.DELETE): (A, D, D, D),

    (Resource.MEASUREMENT, Action.VIEW): (A, A, S, S),
    (Resource.MEASUREMENT, Action.CREATE): (A, A, A, D),
    (Resource.MEASUREMENT, Action.UPDATE): (A, A, S, D),
    (Resource.MEASUREMENT, Action.DELETE): (A, D, D, D),

    (Resource.MEASUREMENT_PROFILE, Action.VIEW): (A, A, A, D),
    (Resource.MEASUREMENT_PROFILE, Action.CREATE): (A, A, A, D),

    (Resource.TEMPLATE, Action.VIEW): (A, A, A, A),
    (Resource.TEMPLATE, Action.CREATE): (A, A, D, D),

    (Resource.ORDER, Action.VIEW): (A, A, A, D),
    (Resource.ORDER, Action.CREATE): (A, A, A, D),
    (Resource.ORDER, Action.UPDATE): (A, A, A, D),
    (Resource.ORDER, Action.DELETE): (A, D, D, D),

    (Resource.FITTING, Action.VIEW): (A, A, S, D),
    (Resource.FITTING, Action.CREATE): (A, A, A, D),
    (Resource.FITTING, Action.UPDATE): (A, A, S, D),
    (Resource.FITTING, Action.DELETE): (A, A, S, D),

    (Resource.GARMENT_FEEDBACK, Action.VIEW): (A, A, A, D),
    (Resource.GARMENT_FEEDBACK, Action.CREATE): (A, A, A, D),

    (Resource.REMINDER, Action.VIEW): (A, A, S, D),
    (Resource.REMINDER, Action.CREATE): (A, A, D, D),
    (Resource.REMINDER, Action.UPDATE): (A, A, D, D),

    (Resource.TASK, Action.VIEW): (A, A, S, D),
    (Resource.TASK, Action.CREATE): (A, A, D, D),
    (Resource.TASK, Action.UPDATE): (A, A, S, D),
    (Resource.TASK, Action.DELETE): (A, A, D, D),

    (Resource.NOTIFICATION, Action.VIEW): (S, S, S, S),
    (Resource.NOTIFICATION, Action.UPDATE): (S, S, S, S),

    (Resource.PERMISSION, Action.VIEW): (S, S, S, S),

    (Resource.USER, Action.VIEW): (A, A, D, D),

    (Resource.REPORT, Action.VIEW): (A, A, S, D),

    (Resource.BACKUP, Action.EXPORT): (A, D, D, D),

    (Resource.EXPIRY_RULE, Action.VIEW): (A, A, A, D),
    (Resource.EXPIRY_RULE, Action.CREATE): (A, A, D, D),
    (Resource.EXPIRY_RULE, Action.RUN): (A, A, D, D),

    (Resource.VALIDATION_RULE, Action.VIEW): (A, A, A, A),
    (Resource.VALIDATION_RULE, Action.CHECK): (A, A, A, A),

    (Resource.AUDIT_LOG, Action.VIEW): (A, A, D, D),

    (Resource.SETTING, Action.VIEW): (A, A, A, A),
    (Resource.SETTING, Action.UPDATE): (A, D, D, D),

    (Resource.SEARCH, Action.VIEW): (A, A, S, D),
}

# Flattened: (role, resource, action) -> access
POLICY = {
    (role, resource, action): levels[i]
    for (resource, action), levels in POLICY_MATRIX.items()
    for i, role in enumerate(ROLES)
}
