"""JSON-file store for the triage configuration document.

The whole document is the unit of persistence: every rule mutation is a
read-modify-write performed under one re-entrant lock, and every write goes
through a temporary file that is atomically renamed over the target.
"""

import json
import logging
import os
import tempfile
import threading
from pathlib import Path

from legal_triage.core.exceptions import (
    RuleNotFoundError,
    StorageReadError,
    StorageWriteError,
    ValidationError,
)
from legal_triage.rules.models import TriageConfig, TriageRule
from legal_triage.rules.validation import validate_config

logger = logging.getLogger(__name__)

# Seed document shipped with the package
DEFAULT_SEED_PATH = Path(__file__).parent.parent / "data" / "triage-config.json"


class ConfigStore:
    """Durable CRUD for the single triage configuration document.

    The document is re-read on every call; there is no in-memory cache that
    could drift from the file.
    """

    def __init__(self, config_path: str | Path) -> None:
        """Initialize store.

        Args:
            config_path: Path of the JSON document
        """
        self.config_path = Path(config_path)
        self.lock = threading.RLock()

    def exists(self) -> bool:
        """Check if the document exists."""
        return self.config_path.exists()

    def initialize(self, seed_path: str | Path | None = None) -> bool:
        """Write the seed document if no document exists yet.

        Args:
            seed_path: Seed JSON file (defaults to the bundled one)

        Returns:
            True if the seed was written, False if a document already existed
        """
        seed_path = Path(seed_path) if seed_path else DEFAULT_SEED_PATH

        with self.lock:
            if self.exists():
                return False

            try:
                seed = json.loads(seed_path.read_text(encoding="utf-8"))
                config = validate_config(seed)
            except (OSError, ValueError, ValidationError) as e:
                raise StorageReadError(f"Failed to load seed configuration: {seed_path}") from e

            self.save_config(config)
            logger.info(f"Seeded triage configuration at {self.config_path}")
            return True

    def get_config(self) -> TriageConfig:
        """Read and parse the current document.

        Raises:
            StorageReadError: If the file is missing, unreadable or malformed
        """
        with self.lock:
            try:
                content = self.config_path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                logger.error(f"Error reading config file {self.config_path}: {e}")
                raise StorageReadError("Failed to load triage configuration") from e

            # add_rule does not deduplicate, so shared ids must still load
            try:
                return validate_config(json.loads(content), unique_rule_ids=False)
            except (ValueError, ValidationError) as e:
                logger.error(f"Malformed config file {self.config_path}: {e}")
                raise StorageReadError("Failed to load triage configuration") from e

    def save_config(self, config: TriageConfig) -> None:
        """Replace the whole document.

        Readers see either the old or the new document, never a partial one.

        Raises:
            StorageWriteError: If the write fails; the old document is kept
        """
        content = json.dumps(config.to_dict(), indent=2, ensure_ascii=False) + "\n"

        with self.lock:
            tmp_name = None
            try:
                self.config_path.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(
                    prefix=f".{self.config_path.name}.",
                    suffix=".tmp",
                    dir=self.config_path.parent,
                )
                with os.fdopen(fd, "w", encoding="utf-8") as tmp_file:
                    tmp_file.write(content)
                    tmp_file.flush()
                    os.fsync(tmp_file.fileno())
                os.replace(tmp_name, self.config_path)
                tmp_name = None
            except OSError as e:
                logger.error(f"Error saving config file {self.config_path}: {e}")
                raise StorageWriteError("Failed to save triage configuration") from e
            finally:
                if tmp_name is not None:
                    Path(tmp_name).unlink(missing_ok=True)

    def add_rule(self, rule: TriageRule) -> TriageConfig:
        """Append a rule and persist.

        Rules are not deduplicated by id here.
        """
        with self.lock:
            config = self.get_config()
            config.rules.append(rule)
            self.save_config(config)
            return config

    def update_rule(self, rule_id: str, rule: TriageRule) -> TriageConfig:
        """Replace the rule with ``rule_id`` in place and persist.

        Raises:
            RuleNotFoundError: If no rule has ``rule_id``
        """
        with self.lock:
            config = self.get_config()
            index = config.find_rule_index(rule_id)

            if index is None:
                raise RuleNotFoundError(rule_id)

            config.rules[index] = rule
            self.save_config(config)
            return config

    def delete_rule(self, rule_id: str) -> TriageConfig:
        """Remove the rule with ``rule_id`` and persist.

        Raises:
            RuleNotFoundError: If no rule has ``rule_id``
        """
        with self.lock:
            config = self.get_config()
            index = config.find_rule_index(rule_id)

            if index is None:
                raise RuleNotFoundError(rule_id)

            del config.rules[index]
            self.save_config(config)
            return config
