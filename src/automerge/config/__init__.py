"""Configuration loading, schema, and defaults."""

from automerge.config.loader import default_config, load, load_from_platform, validate_document
from automerge.config.schema import Rule, RuleActions, RuleConditions, RuleConfig, Settings

__all__ = [
    "Rule",
    "RuleActions",
    "RuleConditions",
    "RuleConfig",
    "Settings",
    "default_config",
    "load",
    "load_from_platform",
    "validate_document",
]
