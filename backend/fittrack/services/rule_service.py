# Overview: Configurable two-field comparison rules for measurement sanity checks.

"""
A rule compares field_a to field_b with one of >=, <=, >, <. The rule is
violated when the comparison does not hold. Rules that cannot be applied
(either value missing, blank or non-numeric, or an unknown operator) are
skipped rather than reported.

Violations of `impossible` rules are blocking errors; every other rule_type
produces a warning. A check is valid iff there are no errors.
"""

from __future__ import annotations

import operator
from typing import Optional

from ..database import require_tables
from ..extensions import db
from ..models import ValidationRule
from ..validation import parse_numeric

BLOCKING_RULE_TYPE = "impossible"
DEFAULT_MESSAGE = "Validation failed"

# operator -> predicate that must hold for the rule to pass
OPERATORS = {
    ">=": operator.ge,
    "<=": operator.le,
    ">": operator.gt,
    "<": operator.lt,
}

DEFAULT_RULES = (
    {
        "rule_key": "chest_gt_neck",
        "rule_type": "impossible",
        "field_a": "chest",
        "field_b": "neck",
        "operator": ">",
        "message_template": "Chest ({{a}}) must be larger than neck ({{b}})",
    },
    {
        "rule_key": "wrist_lt_around_arm",
        "rule_type": "impossible",
        "field_a": "wrist",
        "field_b": "around_arm",
        "operator": "<",
        "message_template": "Wrist ({{a}}) must be smaller than around arm ({{b}})",
    },
    {
        "rule_key": "knee_lt_thigh",
        "rule_type": "impossible",
        "field_a": "trouser_knee",
        "field_b": "trouser_thigh",
        "operator": "<",
        "message_template": "Knee ({{a}}) must be smaller than thigh ({{b}})",
    },
    {
        "rule_key": "thigh_le_waist",
        "rule_type": "warning",
        "field_a": "trouser_thigh",
        "field_b": "trouser_waist",
        "operator": "<=",
        "message_template": "Thigh ({{a}}) is larger than waist ({{b}}); please double-check",
    },
    {
        "rule_key": "trouser_length_ge_knee",
        "rule_type": "warning",
        "field_a": "trouser_length",
        "field_b": "trouser_knee",
        "operator": ">=",
        "message_template": "Trouser length ({{a}}) is shorter than knee ({{b}})",
    },
)


def _format(n: float) -> str:
    return str(int(n)) if float(n).is_integer() else str(n)


def _attr(rule, name):
    return rule.get(name) if isinstance(rule, dict) else getattr(rule, name, None)


def run_rule(rule, data: dict) -> Optional[dict]:
    """
    Evaluate one rule against a measurement payload.

    `rule` may be a ValidationRule row or a dict with the same keys.
    Returns {rule_key, rule_type, message} on violation, else None.
    """
    check = OPERATORS.get(_attr(rule, "operator"))
    if check is None:
        return None

    a = parse_numeric((data or {}).get(_attr(rule, "field_a")))
    b = parse_numeric((data or {}).get(_attr(rule, "field_b")))
    if a is None or b is None:
        return None
    if check(a, b):
        return None

    message = (_attr(rule, "message_template") or DEFAULT_MESSAGE)
    message = message.replace("{{a}}", _format(a)).replace("{{b}}", _format(b))
    return {
        "rule_key": _attr(rule, "rule_key"),
        "rule_type": _attr(rule, "rule_type"),
        "message": message,
    }


def check_measurement(rules, data: dict) -> dict:
    errors, warnings = [], []
    for rule in rules or []:
        violation = run_rule(rule, data)
        if violation is None:
            continue
        if violation["rule_type"] == BLOCKING_RULE_TYPE:
            errors.append(violation)
        else:
            warnings.append(violation)
    return {"valid": not errors, "errors": errors, "warnings": warnings}


def active_rules() -> list[ValidationRule]:
    require_tables(ValidationRule.__tablename__)
    return (
        db.session.query(ValidationRule)
        .filter(ValidationRule.is_active.is_(True))
        .order_by(ValidationRule.rule_key)
        .all()
    )


def check_against_active_rules(data: dict) -> dict:
    return check_measurement(active_rules(), data)


def seed_default_rules() -> int:
    """Insert DEFAULT_RULES that are not present yet (matched by rule_key)."""
    require_tables(ValidationRule.__tablename__)
    existing = {key for (key,) in db.session.query(ValidationRule.rule_key).all()}
    created = 0
    for rule in DEFAULT_RULES:
        if rule["rule_key"] in existing:
            continue
        db.session.add(ValidationRule(**rule, is_active=True))
        created += 1
    db.session.commit()
    return created
