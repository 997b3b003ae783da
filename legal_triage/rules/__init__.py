"""Triage rules: data model, validation, prompt rendering and storage.

Rendering is deterministic: the same configuration always produces the same
system prompt.
"""

from legal_triage.rules.engine import (
    RuleMatch,
    build_system_prompt,
    find_matching_rule,
    generate_rule_id,
    order_rules,
    prompt_hash,
)
from legal_triage.rules.models import (
    Condition,
    ConditionField,
    ConditionFieldType,
    TriageConfig,
    TriageRule,
    TriageRuleDraft,
)
from legal_triage.rules.store import ConfigStore
from legal_triage.rules.validation import validate_config, validate_rule, validate_rule_draft

__all__ = [
    "Condition",
    "ConditionField",
    "ConditionFieldType",
    "TriageRule",
    "TriageRuleDraft",
    "TriageConfig",
    "ConfigStore",
    "RuleMatch",
    "build_system_prompt",
    "find_matching_rule",
    "generate_rule_id",
    "order_rules",
    "prompt_hash",
    "validate_config",
    "validate_rule",
    "validate_rule_draft",
]
