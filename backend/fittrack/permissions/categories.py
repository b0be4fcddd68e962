# Overview: Resource, action and access-level constants used by the policy table.


class Resource:
    """Resource types a policy entry can name."""
    CUSTOMER = "customer"
    MEASUREMENT = "measurement"
    MEASUREMENT_PROFILE = "measurement_profile"
    TEMPLATE = "template"
    ORDER = "order"
    FITTING = "fitting"
    GARMENT_FEEDBACK = "garment_feedback"
    REMINDER = "reminder"
    TASK = "task"
    NOTIFICATION = "notification"
    PERMISSION = "permission"
    USER = "user"
    REPORT = "report"
    BACKUP = "backup"
    EXPIRY_RULE = "expiry_rule"
    VALIDATION_RULE = "validation_rule"
    AUDIT_LOG = "audit_log"
    SETTING = "setting"
    SEARCH = "search"


class Action:
    VIEW = "view"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    EXPORT = "export"
    RUN = "run"
    CHECK = "check"


class Access:
    """
    Outcome of a policy lookup.

    SELF grants the action only on rows the principal owns; what "owns"
    means per resource is decided by permission_service.
    """
    ALLOW = "allow"
    SELF = "self"
    DENY = "deny"
