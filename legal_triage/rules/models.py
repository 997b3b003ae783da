"""Triage rule and configuration data models.

Field names are snake_case in Python and camelCase on the wire and on disk
(``requestType``, ``conditionFields``).
"""

from enum import Enum
from typing import Annotated, Any

from email_validator import EmailNotValidError, validate_email
from pydantic import AfterValidator, BaseModel, ConfigDict, Field, StrictInt, model_validator
from pydantic.alias_generators import to_camel

NonEmptyStr = Annotated[str, Field(min_length=1)]


def validate_assignee_email(v: str) -> str:
    """Check email syntax, keeping the address exactly as entered.

    Reserved test domains (``.test``) are accepted; no DNS lookup is made.
    """
    try:
        validate_email(v, check_deliverability=False, test_environment=True)
    except EmailNotValidError as e:
        raise ValueError(str(e)) from e
    return v


AssigneeEmail = Annotated[str, AfterValidator(validate_assignee_email)]


class ConditionFieldType(str, Enum):
    """Input types for condition fields."""
    TEXT = "text"
    SELECT = "select"


class TriageModel(BaseModel):
    """Base model with camelCase aliases.

    Unknown keys are ignored so documents written by older schema versions
    (e.g. with a per-condition ``operator``) still load.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON document representation."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Condition(TriageModel):
    """A single matching predicate.

    ``value`` is either one string or an OR-set of strings.
    """
    field: NonEmptyStr
    value: str | list[str]

    @property
    def values(self) -> list[str]:
        """Return the accepted values as a list."""
        if isinstance(self.value, list):
            return list(self.value)
        return [self.value]

    @property
    def value_text(self) -> str:
        """Human-readable form of the value, list items joined by commas."""
        return ", ".join(self.values)


class ConditionField(TriageModel):
    """A routable dimension, shown in the UI and referenced by conditions."""
    name: NonEmptyStr
    label: NonEmptyStr
    type: ConditionFieldType
    options: list[str] | None = None

    @model_validator(mode="after")
    def check_select_options(self) -> "ConditionField":
        if self.type == ConditionFieldType.SELECT and not self.options:
            raise ValueError("Select fields require at least one option")
        return self


class TriageRuleBase(TriageModel):
    """Fields shared by stored rules and rule drafts."""
    request_type: NonEmptyStr
    conditions: list[Condition]
    assignee: AssigneeEmail
    priority: Annotated[StrictInt, Field(gt=0)]  # Lower = higher precedence


class TriageRule(TriageRuleBase):
    """A routing rule: conditions are AND-ed, an empty list matches all."""
    id: NonEmptyStr


class TriageRuleDraft(TriageRuleBase):
    """A rule submitted for creation, possibly without an id."""
    id: str | None = None


class TriageConfig(TriageModel):
    """The root aggregate and sole persisted unit."""
    request_types: list[NonEmptyStr]
    condition_fields: list[ConditionField]
    rules: list[TriageRule]

    def rule_ids(self) -> set[str]:
        """Return the ids of all rules in the document."""
        return {rule.id for rule in self.rules}

    def find_rule_index(self, rule_id: str) -> int | None:
        """Return the position of the rule with ``rule_id``, if present."""
        for index, rule in enumerate(self.rules):
            if rule.id == rule_id:
                return index
        return None
