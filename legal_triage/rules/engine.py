"""Deterministic triage rules engine.

Turns a triage configuration into the natural-language system prompt handed
to the chat model. Rendering is:
- Deterministic (same config = byte-identical prompt)
- Priority ordered (lowest number first, ties keep insertion order)
- Free of I/O

Precedence between rules that could match the same conversation is conveyed
to the model through the ordered list. ``find_matching_rule`` applies the
same ordering locally for previews and tests.
"""

import hashlib
import uuid
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from legal_triage.rules.models import (
    Condition,
    TriageConfig,
    TriageRule,
    TriageRuleDraft,
)

DEFAULT_ORGANIZATION = "Acme Corp"
DEFAULT_FALLBACK_EMAIL = "legal@acme.corp"

# Decides whether a fact value satisfies a condition's accepted values
ValueMatcher = Callable[[str, list[str]], bool]


def order_rules(rules: Iterable[TriageRule]) -> list[TriageRule]:
    """Sort rules by priority (ascending).

    ``sorted`` is stable, so equal priorities keep their source order.
    """
    return sorted(rules, key=lambda r: r.priority)


def format_condition(condition: Condition) -> str:
    """Render one condition as ``field is "value"``."""
    return f'{condition.field} is "{condition.value_text}"'


def format_condition_clause(conditions: list[Condition]) -> str:
    """Render the condition clause that follows a rule's request type."""
    if not conditions:
        return " (any conditions)"
    return " when " + " AND ".join(format_condition(c) for c in conditions)


def format_rule_line(rank: int, rule: TriageRule) -> str:
    """Render a rule at 1-based ``rank``."""
    return f"{rank}. {rule.request_type}{format_condition_clause(rule.conditions)} → {rule.assignee}"


def build_system_prompt(
    config: TriageConfig,
    organization_name: str = DEFAULT_ORGANIZATION,
    fallback_email: str = DEFAULT_FALLBACK_EMAIL,
) -> str:
    """Render the triage system prompt for a configuration.

    Args:
        config: Validated triage configuration
        organization_name: Organization the assistant triages for
        fallback_email: Contact to suggest when no rule matches

    Returns:
        The complete system prompt
    """
    request_types_list = "\n".join(f"- {t}" for t in config.request_types)

    ordered = order_rules(config.rules)
    rules_list = "\n".join(
        format_rule_line(rank, rule) for rank, rule in enumerate(ordered, start=1)
    )

    condition_fields_list = ", ".join(f.label for f in config.condition_fields)
    assignee_placeholder = "[assignee email]" if ordered else "the appropriate contact"

    return f"""You are a legal request triage assistant for {organization_name}.

Your task:
1. Understand the user's legal request through natural conversation
2. Ask ONLY the necessary clarifying questions to match their request to a triage rule
3. Once you have enough information, provide the appropriate team member's email

Available Request Types:
{request_types_list}

Triage Rules (in priority order):
{rules_list}

Guidelines:
- Be conversational and friendly
- Ask one question at a time
- Only ask about fields that affect routing: {condition_fields_list}
- When you've identified the correct assignee, clearly state: "Please email {assignee_placeholder} for help with your request."
- If no rules match exactly, suggest they contact {fallback_email}
- Be helpful and guide the user to the right person

Start by understanding what type of legal request they have."""


def prompt_hash(prompt: str) -> str:
    """Compute SHA-256 hash of a rendered prompt."""
    return hashlib.sha256(prompt.encode("utf-8")).hexdigest()


def generate_rule_id(existing_ids: Iterable[str] = ()) -> str:
    """Generate a rule id that does not collide with ``existing_ids``."""
    taken = set(existing_ids)
    while True:
        rule_id = f"rule-{uuid.uuid4().hex}"
        if rule_id not in taken:
            return rule_id


def assign_rule_id(
    draft: TriageRuleDraft,
    existing_ids: Iterable[str] = (),
) -> TriageRule:
    """Turn a draft into a rule, generating an id if it has none."""
    data = draft.model_dump()
    if not data.get("id"):
        data["id"] = generate_rule_id(existing_ids)
    return TriageRule.model_validate(data)


def equals_any(actual: str, accepted: list[str]) -> bool:
    """Fact equals one of the accepted values."""
    return actual in accepted


def contains_any(actual: str, accepted: list[str]) -> bool:
    """Fact contains one of the accepted values (case-insensitive)."""
    lowered = actual.lower()
    return any(value.lower() in lowered for value in accepted)


@dataclass
class RuleMatch:
    """Result of matching a request against the rule set."""

    rule_id: str
    rank: int
    priority: int
    assignee: str


def condition_holds(
    condition: Condition,
    facts: Mapping[str, Any],
    matcher: ValueMatcher = equals_any,
) -> bool:
    """Evaluate a single condition against the gathered facts.

    A missing fact never satisfies a condition.
    """
    actual = facts.get(condition.field)
    if actual is None:
        return False
    return matcher(str(actual), condition.values)


def rule_matches(
    rule: TriageRule,
    request_type: str,
    facts: Mapping[str, Any],
    matcher: ValueMatcher = equals_any,
) -> bool:
    """Evaluate all conditions (AND logic) for a request type."""
    if rule.request_type != request_type:
        return False
    return all(condition_holds(c, facts, matcher) for c in rule.conditions)


def find_matching_rule(
    config: TriageConfig,
    request_type: str,
    facts: Mapping[str, Any],
    matcher: ValueMatcher = equals_any,
) -> RuleMatch | None:
    """Find the highest-precedence rule matching a request.

    Args:
        config: Triage configuration
        request_type: The identified request type
        facts: Condition field name -> value gathered from the user
        matcher: Value comparison; ``equals_any`` unless overridden

    Returns:
        RuleMatch for the first matching rule in priority order, or None
    """
    for rank, rule in enumerate(order_rules(config.rules), start=1):
        if rule_matches(rule, request_type, facts, matcher):
            return RuleMatch(
                rule_id=rule.id,
                rank=rank,
                priority=rule.priority,
                assignee=rule.assignee,
            )
    return None
