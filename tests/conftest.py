"""Pytest configuration and fixtures."""

import json
import os
from collections.abc import Generator
from pathlib import Path
from typing import Any

# Settings are read at import time
os.environ.setdefault("ENV", "test")
os.environ.setdefault("TRIAGE_SEED_ON_STARTUP", "false")
os.environ.setdefault("TRIAGE_CONFIG_PATH", "/nonexistent/triage-config.json")

import pytest
from fastapi.testclient import TestClient

from legal_triage.api.deps import get_config_store
from legal_triage.main import app
from legal_triage.rules.models import TriageConfig
from legal_triage.rules.store import ConfigStore
from legal_triage.services.triage import TriageService


def make_rule(
    rule_id: str | None = "rule-1",
    request_type: str = "Sales Contract",
    conditions: list[dict[str, Any]] | None = None,
    assignee: str = "john@acme.corp",
    priority: int = 1,
) -> dict[str, Any]:
    """Build a rule document."""
    rule: dict[str, Any] = {
        "requestType": request_type,
        "conditions": conditions if conditions is not None else [],
        "assignee": assignee,
        "priority": priority,
    }
    if rule_id is not None:
        rule["id"] = rule_id
    return rule


@pytest.fixture
def config_data() -> dict[str, Any]:
    """A small valid configuration document."""
    return {
        "requestTypes": ["Sales Contract", "Employment Contract", "NDA"],
        "conditionFields": [
            {"name": "location", "label": "Location", "type": "text"},
            {"name": "department", "label": "Department", "type": "text"},
        ],
        "rules": [
            make_rule(
                "rule-1",
                conditions=[{"field": "location", "value": "Australia"}],
                assignee="john@acme.corp",
                priority=1,
            ),
            make_rule(
                "rule-2",
                conditions=[{"field": "location", "value": "United States"}],
                assignee="jane@acme.corp",
                priority=2,
            ),
        ],
    }


@pytest.fixture
def config(config_data: dict[str, Any]) -> TriageConfig:
    """The sample configuration as a model."""
    return TriageConfig.model_validate(config_data)


@pytest.fixture
def config_path(tmp_path: Path, config_data: dict[str, Any]) -> Path:
    """Write the sample configuration to a temporary file."""
    path = tmp_path / "triage-config.json"
    path.write_text(json.dumps(config_data, indent=2), encoding="utf-8")
    return path


@pytest.fixture
def store(config_path: Path) -> ConfigStore:
    """Config store backed by the temporary file."""
    return ConfigStore(config_path)


@pytest.fixture
def triage_service(store: ConfigStore) -> TriageService:
    """Triage service backed by the temporary store."""
    return TriageService(store)


@pytest.fixture
def client(store: ConfigStore) -> Generator[TestClient, None, None]:
    """Create FastAPI test client with overridden dependencies."""
    app.dependency_overrides[get_config_store] = lambda: store

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
