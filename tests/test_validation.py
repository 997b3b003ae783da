"""Tests for the rule and configuration validation contract."""

from typing import Any

import pytest

from legal_triage.core.exceptions import ValidationError
from legal_triage.rules.models import TriageRule, TriageRuleDraft
from legal_triage.rules.validation import (
    validate_condition,
    validate_condition_field,
    validate_config,
    validate_rule,
    validate_rule_draft,
)
from tests.conftest import make_rule


def issue_fields(exc: ValidationError) -> list[str]:
    return [issue.field for issue in exc.issues]


class TestConditionValidation:
    """Tests for condition validation."""

    def test_valid_single_value(self) -> None:
        condition = validate_condition({"field": "location", "value": "Australia"})

        assert condition.values == ["Australia"]

    def test_valid_list_value(self) -> None:
        condition = validate_condition({"field": "location", "value": ["A", "B"]})

        assert condition.values == ["A", "B"]
        assert condition.value_text == "A, B"

    def test_empty_field_rejected(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_condition({"field": "", "value": "Australia"})

        assert exc_info.value.issues[0].field == "field"
        assert exc_info.value.issues[0].message == "Field is required"

    def test_unknown_field_reference_allowed(self) -> None:
        """Conditions may reference fields that are not declared."""
        condition = validate_condition({"field": "not_declared", "value": "x"})

        assert condition.field == "not_declared"

    def test_legacy_operator_ignored(self) -> None:
        """Documents written with a per-condition operator still load."""
        condition = validate_condition(
            {"field": "location", "operator": "equals", "value": "Australia"}
        )

        assert "operator" not in condition.to_dict()


class TestConditionFieldValidation:
    """Tests for condition field descriptors."""

    def test_valid_select(self) -> None:
        field = validate_condition_field({
            "name": "location", "label": "Location", "type": "select", "options": ["A"],
        })

        assert field.options == ["A"]

    def test_select_requires_options(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_condition_field({"name": "location", "label": "Location", "type": "select"})

        assert "option" in exc_info.value.issues[0].message

    def test_unknown_type_rejected(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_condition_field({"name": "x", "label": "X", "type": "number"})

        assert issue_fields(exc_info.value) == ["type"]

    def test_text_field_omits_options(self) -> None:
        field = validate_condition_field({"name": "x", "label": "X", "type": "text"})

        assert field.to_dict() == {"name": "x", "label": "X", "type": "text"}


class TestRuleValidation:
    """Tests for triage rule validation."""

    def test_valid_rule(self) -> None:
        rule = validate_rule(make_rule())

        assert isinstance(rule, TriageRule)
        assert rule.request_type == "Sales Contract"
        assert rule.priority == 1

    @pytest.mark.parametrize("priority", [0, -1])
    def test_non_positive_priority_rejected(self, priority: int) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_rule(make_rule(priority=priority))

        assert exc_info.value.issues == [("priority", "Priority must be a positive integer")]

    @pytest.mark.parametrize("priority", [1.5, 2.0, "1", True])
    def test_non_integer_priority_rejected(self, priority: Any) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_rule(make_rule(priority=priority))

        assert issue_fields(exc_info.value) == ["priority"]

    def test_invalid_email_rejected(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_rule(make_rule(assignee="not-an-email"))

        assert exc_info.value.issues == [("assignee", "Invalid email format for assignee")]

    def test_email_kept_as_entered(self) -> None:
        """The assignee is not normalised."""
        rule = validate_rule(make_rule(assignee="John.Smith@ACME.Corp"))

        assert rule.assignee == "John.Smith@ACME.Corp"

    def test_reserved_test_domain_accepted(self) -> None:
        rule = validate_rule(make_rule(assignee="legal@firm.test"))

        assert rule.assignee == "legal@firm.test"

    @pytest.mark.parametrize("assignee", ["john@", "@acme.corp", "john@@acme.corp", "john acme.corp"])
    def test_malformed_emails_rejected(self, assignee: str) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_rule(make_rule(assignee=assignee))

        assert exc_info.value.issues == [("assignee", "Invalid email format for assignee")]

    def test_empty_request_type_rejected(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_rule(make_rule(request_type=""))

        assert exc_info.value.issues == [("requestType", "Request type is required")]

    def test_id_required_by_default(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_rule(make_rule(None))

        assert issue_fields(exc_info.value) == ["id"]

    def test_empty_id_rejected(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_rule(make_rule(""))

        assert exc_info.value.issues == [("id", "Rule ID is required")]

    def test_id_optional_for_drafts(self) -> None:
        draft = validate_rule(make_rule(None), require_id=False)

        assert isinstance(draft, TriageRuleDraft)
        assert draft.id is None
        assert validate_rule_draft(make_rule(None)).id is None

    def test_all_issues_reported(self) -> None:
        """Every violated constraint is reported, not just the first."""
        data = make_rule(
            "",
            request_type="",
            conditions=[{"field": "", "value": "x"}],
            assignee="not-an-email",
            priority=0,
        )

        with pytest.raises(ValidationError) as exc_info:
            validate_rule(data)

        assert sorted(issue_fields(exc_info.value)) == sorted([
            "id", "requestType", "conditions.0.field", "assignee", "priority",
        ])

    def test_accepts_model_instances(self) -> None:
        rule = TriageRule.model_validate(make_rule())

        assert validate_rule(rule) == rule


class TestConfigValidation:
    """Tests for whole-document validation."""

    def test_valid_config(self, config_data: dict[str, Any]) -> None:
        config = validate_config(config_data)

        assert config.request_types == ["Sales Contract", "Employment Contract", "NDA"]
        assert len(config.rules) == 2

    def test_round_trips_to_camel_case(self, config_data: dict[str, Any]) -> None:
        config = validate_config(config_data)

        assert config.to_dict() == config_data

    def test_each_rule_validated(self, config_data: dict[str, Any]) -> None:
        config_data["rules"][1]["assignee"] = "nope"
        config_data["rules"][0]["priority"] = -1

        with pytest.raises(ValidationError) as exc_info:
            validate_config(config_data)

        assert sorted(issue_fields(exc_info.value)) == ["rules.0.priority", "rules.1.assignee"]

    def test_empty_request_type_rejected(self, config_data: dict[str, Any]) -> None:
        config_data["requestTypes"].append("")

        with pytest.raises(ValidationError) as exc_info:
            validate_config(config_data)

        assert issue_fields(exc_info.value) == ["requestTypes.3"]

    def test_duplicate_condition_field_names(self, config_data: dict[str, Any]) -> None:
        config_data["conditionFields"].append(
            {"name": "location", "label": "Other Location", "type": "text"}
        )

        with pytest.raises(ValidationError) as exc_info:
            validate_config(config_data)

        assert issue_fields(exc_info.value) == ["conditionFields.2.name"]

    def test_duplicate_rule_ids(self, config_data: dict[str, Any]) -> None:
        config_data["rules"].append(make_rule("rule-1", priority=3))

        with pytest.raises(ValidationError) as exc_info:
            validate_config(config_data)

        assert exc_info.value.issues == [("rules.2.id", "Duplicate rule id: rule-1")]

    def test_duplicate_rule_ids_allowed_when_requested(
        self, config_data: dict[str, Any]
    ) -> None:
        config_data["rules"].append(make_rule("rule-1", priority=3))

        config = validate_config(config_data, unique_rule_ids=False)

        assert len(config.rules) == 3

    def test_structural_and_duplicate_issues_together(self, config_data: dict[str, Any]) -> None:
        config_data["conditionFields"].append(
            {"name": "location", "label": "", "type": "text"}
        )

        with pytest.raises(ValidationError) as exc_info:
            validate_config(config_data)

        assert sorted(issue_fields(exc_info.value)) == [
            "conditionFields.2.label", "conditionFields.2.name",
        ]

    def test_missing_sections(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_config({})

        assert sorted(issue_fields(exc_info.value)) == [
            "conditionFields", "requestTypes", "rules",
        ]

    def test_error_lists_issues(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_rule(make_rule(priority=0))

        assert exc_info.value.to_list() == [
            {"field": "priority", "message": "Priority must be a positive integer"},
        ]
