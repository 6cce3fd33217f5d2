"""
Configuration management for the dartlint engine.

Configuration lives in a YAML file (``dartlint.yaml`` or ``.dartlint.yaml``)
that is merged over the defaults below. Invalid values raise ConfigError.
"""

import copy
import dataclasses
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import yaml

from .errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILE_NAMES = ["dartlint.yaml", ".dartlint.yaml", "dartlint.yml", ".dartlint.yml"]

DEFAULT_MAX_LINE_LENGTH = 120
DEFAULT_EXCLUDE_PATTERNS = [".dart_tool/**", "build/**", ".pub/**", "packages/**"]


@dataclass
class RuleSetConfig:
    """Switches for one rule category."""
    enabled: bool = True
    disabled_rules: List[str] = field(default_factory=list)


@dataclass
class EngineConfig:
    """Configuration for the dartlint engine."""

    style_rules: RuleSetConfig = None
    runtime_rules: RuleSetConfig = None

    # Rule settings
    max_line_length: int = DEFAULT_MAX_LINE_LENGTH
    max_findings_per_file: int = 0  # 0 keeps every finding

    # Performance settings
    parallel: bool = True
    jobs: int = 0  # 0 means one worker per CPU

    # File discovery
    exclude_patterns: List[str] = None

    def __post_init__(self):
        if self.style_rules is None:
            self.style_rules = RuleSetConfig()
        if self.runtime_rules is None:
            self.runtime_rules = RuleSetConfig()
        if self.exclude_patterns is None:
            self.exclude_patterns = list(DEFAULT_EXCLUDE_PATTERNS)
        self.validate()

    def validate(self) -> None:
        if not isinstance(self.max_line_length, int) or self.max_line_length < 1:
            raise ConfigError(f"max_line_length must be a positive integer, got {self.max_line_length!r}")
        if not isinstance(self.max_findings_per_file, int) or self.max_findings_per_file < 0:
            raise ConfigError(
                f"max_findings_per_file must be a non-negative integer, got {self.max_findings_per_file!r}")
        if not isinstance(self.jobs, int) or self.jobs < 0:
            raise ConfigError(f"jobs must be a non-negative integer, got {self.jobs!r}")
        if not isinstance(self.exclude_patterns, list):
            raise ConfigError("exclude_patterns must be a list of glob patterns")

    def rule_set(self, category: str) -> RuleSetConfig:
        if category == "style":
            return self.style_rules
        if category == "runtime":
            return self.runtime_rules
        raise ConfigError(f"Unknown rule category '{category}'")

    def is_rule_enabled(self, rule_id: str, category: str) -> bool:
        rule_set = self.rule_set(category)
        return rule_set.enabled and rule_id not in rule_set.disabled_rules

    def worker_count(self) -> int:
        """Number of worker threads to use for a run."""
        if not self.parallel:
            return 1
        if self.jobs > 0:
            return self.jobs
        return os.cpu_count() or 1

    def rule_options(self) -> Dict[str, Any]:
        """Settings handed to rules through RuleContext.config."""
        return {"max_line_length": self.max_line_length}

    def with_overrides(self, **changes) -> "EngineConfig":
        return dataclasses.replace(copy.deepcopy(self), **changes)

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)


def _rule_set_from_dict(name: str, data: Any) -> RuleSetConfig:
    if data is None:
        return RuleSetConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"'{name}' must be a mapping")
    unknown = set(data) - {"enabled", "disabled_rules"}
    if unknown:
        raise ConfigError(f"Unknown keys in '{name}': {', '.join(sorted(unknown))}")
    disabled = data.get("disabled_rules") or []
    if not isinstance(disabled, list):
        raise ConfigError(f"'{name}.disabled_rules' must be a list")
    return RuleSetConfig(enabled=bool(data.get("enabled", True)), disabled_rules=[str(r) for r in disabled])


def config_from_dict(data: Dict[str, Any]) -> EngineConfig:
    """Build an EngineConfig from a parsed YAML mapping."""
    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a mapping")
    known = {f.name for f in dataclasses.fields(EngineConfig)}
    unknown = set(data) - known
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

    values = dict(data)
    values["style_rules"] = _rule_set_from_dict("style_rules", data.get("style_rules"))
    values["runtime_rules"] = _rule_set_from_dict("runtime_rules", data.get("runtime_rules"))
    if values.get("exclude_patterns") is None:
        values.pop("exclude_patterns", None)
    try:
        return EngineConfig(**values)
    except TypeError as e:
        raise ConfigError(str(e)) from e


def load_config(config_path: Optional[str] = None) -> EngineConfig:
    """
    Load configuration from file or use defaults.

    Args:
        config_path: Path to config file (YAML). If None, uses defaults.

    Returns:
        EngineConfig instance

    Raises:
        ConfigError: if the file cannot be read or holds invalid settings
    """
    if not config_path:
        return EngineConfig()

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            file_config = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigError(f"Cannot read config file {config_path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    config = config_from_dict(file_config)
    logger.info(f"Loaded configuration from {config_path}")
    return config


def get_default_config() -> EngineConfig:
    """Get default configuration without loading from file."""
    return EngineConfig()


def save_config(config: EngineConfig, config_path: str) -> None:
    """
    Save configuration to file.

    Args:
        config: EngineConfig to save
        config_path: Path where to save the config
    """
    directory = os.path.dirname(os.path.abspath(config_path))
    os.makedirs(directory, exist_ok=True)

    with open(config_path, 'w', encoding='utf-8') as f:
        yaml.safe_dump(config.to_dict(), f, default_flow_style=False, indent=2, sort_keys=False)


def find_config_file(start_path: str = ".") -> Optional[str]:
    """
    Find configuration file by walking up the directory tree.

    Args:
        start_path: File or directory to start searching from

    Returns:
        Path to config file or None if not found
    """
    current_path = os.path.abspath(start_path)
    if os.path.isfile(current_path):
        current_path = os.path.dirname(current_path)

    while True:
        for config_name in CONFIG_FILE_NAMES:
            config_path = os.path.join(current_path, config_name)
            if os.path.isfile(config_path):
                return config_path

        parent_path = os.path.dirname(current_path)
        if parent_path == current_path:
            # Reached the root directory
            break
        current_path = parent_path

    return None
