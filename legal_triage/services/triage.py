"""Triage service orchestrating the config store and the rules engine."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from legal_triage.core.exceptions import (
    AppError,
    RuleNotFoundError,
    StorageError,
    ValidationError,
    ValidationIssue,
)
from legal_triage.core.logging import config_change_logger
from legal_triage.rules.engine import (
    DEFAULT_FALLBACK_EMAIL,
    DEFAULT_ORGANIZATION,
    assign_rule_id,
    build_system_prompt,
    find_matching_rule,
)
from legal_triage.rules.models import TriageConfig, TriageRule, TriageRuleDraft
from legal_triage.rules.store import ConfigStore
from legal_triage.rules.validation import validate_config, validate_rule, validate_rule_draft

logger = logging.getLogger(__name__)


@dataclass
class Resolution:
    """Who a request should be routed to."""

    matched: bool
    assignee: str
    rule_id: str | None = None


class TriageService:
    """Service for managing triage configuration and building prompts.

    Validates input before touching storage, and translates store failures
    into AppError:
    - RuleNotFoundError -> 404
    - StorageError -> 500 with a stable message
    """

    def __init__(
        self,
        store: ConfigStore,
        organization_name: str = DEFAULT_ORGANIZATION,
        fallback_email: str = DEFAULT_FALLBACK_EMAIL,
    ) -> None:
        """Initialize triage service.

        Args:
            store: Config store owning the persisted document
            organization_name: Organization named in the system prompt
            fallback_email: Contact used when no rule matches
        """
        self.store = store
        self.organization_name = organization_name
        self.fallback_email = fallback_email

    async def get_config(self) -> TriageConfig:
        """Get the complete triage configuration."""
        try:
            config = self.store.get_config()
        except StorageError as e:
            logger.error(f"Failed to fetch configuration: {e}")
            raise AppError(500, "Failed to load triage configuration") from e

        logger.debug(
            f"Configuration fetched: rules={len(config.rules)} "
            f"request_types={len(config.request_types)}"
        )
        return config

    async def save_config(self, config: TriageConfig | Mapping[str, Any]) -> TriageConfig:
        """Validate and replace the complete triage configuration."""
        config = validate_config(config)

        try:
            self.store.save_config(config)
        except StorageError as e:
            logger.error(f"Failed to save configuration: {e}")
            raise AppError(500, "Failed to save triage configuration") from e

        config_change_logger.log("config_updated", metadata={"rules_count": len(config.rules)})
        return config

    async def add_rule(self, rule: TriageRuleDraft | Mapping[str, Any]) -> TriageConfig:
        """Add a new triage rule, generating its id if absent.

        Raises:
            ValidationError: If the rule is invalid or its id already exists
            AppError: 500 if storage fails
        """
        draft = validate_rule_draft(rule)

        try:
            with self.store.lock:
                existing_ids = self.store.get_config().rule_ids()

                if draft.id and draft.id in existing_ids:
                    raise ValidationError([
                        ValidationIssue("id", f"Rule with id {draft.id} already exists"),
                    ])

                new_rule = assign_rule_id(draft, existing_ids)
                config = self.store.add_rule(new_rule)
        except StorageError as e:
            logger.error(f"Failed to add rule: {e}")
            raise AppError(500, "Failed to add triage rule") from e

        config_change_logger.log(
            "rule_added",
            new_rule.id,
            {"request_type": new_rule.request_type, "assignee": new_rule.assignee},
        )
        return config

    async def update_rule(
        self,
        rule_id: str,
        rule: TriageRuleDraft | TriageRule | Mapping[str, Any],
    ) -> TriageConfig:
        """Replace an existing triage rule, keeping its id and position.

        Raises:
            ValidationError: If the rule is invalid or names a different id
            AppError: 404 if the rule does not exist, 500 if storage fails
        """
        draft = validate_rule_draft(rule)

        if draft.id and draft.id != rule_id:
            raise ValidationError([
                ValidationIssue("id", f"Rule id {draft.id} does not match {rule_id}"),
            ])

        updated = validate_rule({**draft.model_dump(), "id": rule_id})

        try:
            config = self.store.update_rule(rule_id, updated)
        except RuleNotFoundError as e:
            logger.warning(f"Update of missing rule {rule_id}")
            raise AppError(404, f"Rule with id {rule_id} not found") from e
        except StorageError as e:
            logger.error(f"Failed to update rule {rule_id}: {e}")
            raise AppError(500, "Failed to update triage rule") from e

        config_change_logger.log(
            "rule_updated",
            rule_id,
            {"request_type": updated.request_type, "assignee": updated.assignee},
        )
        return config

    async def delete_rule(self, rule_id: str) -> TriageConfig:
        """Delete a triage rule.

        Raises:
            AppError: 404 if the rule does not exist, 500 if storage fails
        """
        try:
            config = self.store.delete_rule(rule_id)
        except RuleNotFoundError as e:
            logger.warning(f"Delete of missing rule {rule_id}")
            raise AppError(404, f"Rule with id {rule_id} not found") from e
        except StorageError as e:
            logger.error(f"Failed to delete rule {rule_id}: {e}")
            raise AppError(500, "Failed to delete triage rule") from e

        config_change_logger.log("rule_deleted", rule_id)
        return config

    async def build_system_prompt(self) -> str:
        """Build the chat system prompt from the current configuration."""
        config = await self.get_config()
        prompt = build_system_prompt(
            config,
            organization_name=self.organization_name,
            fallback_email=self.fallback_email,
        )

        logger.debug(f"System prompt built: length={len(prompt)} rules={len(config.rules)}")
        return prompt

    async def resolve_assignee(
        self,
        request_type: str,
        facts: Mapping[str, Any],
    ) -> Resolution:
        """Resolve who should handle a request, falling back when nothing matches."""
        config = await self.get_config()
        match = find_matching_rule(config, request_type, facts)

        if match is None:
            return Resolution(matched=False, assignee=self.fallback_email)

        return Resolution(matched=True, assignee=match.assignee, rule_id=match.rule_id)
