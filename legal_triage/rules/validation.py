"""Validation contract for triage rules and configuration documents.

Every function accepts either a mapping (decoded JSON) or an already-built
model, and either returns a validated model or raises
:class:`~legal_triage.core.exceptions.ValidationError` listing every
violated constraint.
"""

from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as SchemaError

from legal_triage.core.exceptions import ValidationError, ValidationIssue
from legal_triage.rules.models import (
    Condition,
    ConditionField,
    TriageConfig,
    TriageRule,
    TriageRuleDraft,
)

ModelT = TypeVar("ModelT", bound=BaseModel)

# Messages for the constraints users hit most often, keyed by wire field name
FIELD_MESSAGES = {
    "id": "Rule ID is required",
    "requestType": "Request type is required",
    "assignee": "Invalid email format for assignee",
    "priority": "Priority must be a positive integer",
    "field": "Field is required",
    "name": "Field name is required",
    "label": "Field label is required",
}


def format_path(loc: tuple[Any, ...] | list[Any]) -> str:
    """Join a pydantic error location into a dotted path."""
    return ".".join(str(part) for part in loc)


def issues_from_errors(
    errors: list[dict[str, Any]],
    prefix: tuple[Any, ...] = (),
) -> list[ValidationIssue]:
    """Convert pydantic error dicts into validation issues.

    Args:
        errors: Output of ``pydantic.ValidationError.errors()``
        prefix: Location segments to prepend (e.g. ``("rules", 0)``)

    Returns:
        One issue per error, in reporting order
    """
    issues = []
    for error in errors:
        loc = tuple(prefix) + tuple(error.get("loc", ()))
        named = [part for part in loc if isinstance(part, str) and part in FIELD_MESSAGES]
        message = error.get("msg", "Invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]

        if named and error.get("type") != "missing":
            message = FIELD_MESSAGES[named[-1]]
        elif error.get("type") == "missing":
            message = "Field required"

        issues.append(ValidationIssue(format_path(loc), message))
    return issues


def _as_data(data: Mapping[str, Any] | BaseModel) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump(mode="python", by_alias=True)
    return data


def _validate(model: type[ModelT], data: Mapping[str, Any] | BaseModel) -> ModelT:
    try:
        return model.model_validate(_as_data(data))
    except SchemaError as e:
        raise ValidationError(issues_from_errors(e.errors())) from e


def validate_condition(data: Mapping[str, Any] | Condition) -> Condition:
    """Validate a single condition."""
    return _validate(Condition, data)


def validate_condition_field(data: Mapping[str, Any] | ConditionField) -> ConditionField:
    """Validate a condition field descriptor."""
    return _validate(ConditionField, data)


def validate_rule(
    data: Mapping[str, Any] | TriageRule | TriageRuleDraft,
    require_id: bool = True,
) -> TriageRule | TriageRuleDraft:
    """Validate a triage rule.

    Args:
        data: Rule mapping or model
        require_id: If False, the rule may omit ``id`` (creation)

    Returns:
        TriageRule, or TriageRuleDraft when ``require_id`` is False
    """
    if require_id:
        return _validate(TriageRule, data)
    return _validate(TriageRuleDraft, data)


def validate_rule_draft(data: Mapping[str, Any] | TriageRuleDraft) -> TriageRuleDraft:
    """Validate a rule submitted for creation."""
    return _validate(TriageRuleDraft, data)


def _duplicate_field_name_issues(data: Any) -> list[ValidationIssue]:
    if not isinstance(data, Mapping):
        return []

    fields = data.get("conditionFields", data.get("condition_fields"))
    if not isinstance(fields, list):
        return []

    issues = []
    seen: set[str] = set()
    for index, field_data in enumerate(fields):
        if not isinstance(field_data, Mapping):
            continue
        name = field_data.get("name")
        if not isinstance(name, str) or not name:
            continue
        if name in seen:
            issues.append(ValidationIssue(
                f"conditionFields.{index}.name",
                f"Duplicate condition field name: {name}",
            ))
        seen.add(name)
    return issues


def _duplicate_rule_id_issues(data: Any) -> list[ValidationIssue]:
    if not isinstance(data, Mapping):
        return []

    rules = data.get("rules")
    if not isinstance(rules, list):
        return []

    issues = []
    seen: set[str] = set()
    for index, rule_data in enumerate(rules):
        if not isinstance(rule_data, Mapping):
            continue
        rule_id = rule_data.get("id")
        if not isinstance(rule_id, str) or not rule_id:
            continue
        if rule_id in seen:
            issues.append(ValidationIssue(f"rules.{index}.id", f"Duplicate rule id: {rule_id}"))
        seen.add(rule_id)
    return issues


def validate_config(
    data: Mapping[str, Any] | TriageConfig,
    unique_rule_ids: bool = True,
) -> TriageConfig:
    """Validate a whole configuration document.

    Every rule is validated independently, and condition field names must be
    unique. All issues are reported together.

    Args:
        data: Config mapping or model
        unique_rule_ids: If True, two rules sharing an id is an issue
    """
    raw = _as_data(data)
    issues: list[ValidationIssue] = []
    config = None

    try:
        config = TriageConfig.model_validate(raw)
    except SchemaError as e:
        issues.extend(issues_from_errors(e.errors()))

    issues.extend(_duplicate_field_name_issues(raw))
    if unique_rule_ids:
        issues.extend(_duplicate_rule_id_issues(raw))

    if issues or config is None:
        raise ValidationError(issues)
    return config
