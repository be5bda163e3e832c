"""Load and validate rule documents. Never raises: bad input degrades to defaults."""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Union

import yaml

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from automerge.config.defaults import CONFIG_FILENAME, DEFAULT_DOCUMENT
from automerge.config.schema import (
    GATE_FAILURE_MODES,
    MERGE_METHODS,
    SUPPORTED_VERSION,
    Rule,
    RuleActions,
    RuleConditions,
    RuleConfig,
    Settings,
)
from automerge.exceptions import ConfigError, PlatformError

if TYPE_CHECKING:
    from automerge.hosting.base import Platform

logger = logging.getLogger(__name__)

Source = Union[None, str, bytes, Path, Mapping[str, Any]]

# document key -> (Settings attribute, accepted types)
_SETTINGS_KEYS: Dict[str, tuple[str, tuple[type, ...]]] = {
    "aiAnalysis": ("ai_analysis", (bool,)),
    "riskThreshold": ("risk_threshold", (int, float)),
    "autoDeleteBranches": ("auto_delete_branches", (bool,)),
    "requireStatusChecks": ("require_status_checks", (bool,)),
    "gateFailureMode": ("gate_failure_mode", (str,)),
    "settleSeconds": ("settle_seconds", (int, float)),
}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


# ---- parsing ----


def _parse_text(text: str, *, toml: bool = False) -> Any:
    try:
        if toml:
            return tomllib.loads(text)
        return yaml.safe_load(text)
    except (yaml.YAMLError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Failed to parse configuration: {exc}") from exc


def read_source(source: Source) -> Any:
    """Turn any accepted source into a raw (unvalidated) document."""
    if isinstance(source, Mapping):
        return source
    if isinstance(source, Path):
        if not source.is_file():
            raise ConfigError(f"Config file not found: {source}")
        try:
            text = source.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Failed to read {source}: {exc}") from exc
        return _parse_text(text, toml=source.suffix == ".toml")
    if isinstance(source, bytes):
        try:
            source = source.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ConfigError(f"Configuration is not valid UTF-8: {exc}") from exc
    if isinstance(source, str):
        return _parse_text(source)
    raise ConfigError(f"Unsupported configuration source: {type(source).__name__}")


# ---- validation ----


def _pattern_list(value: Any, where: str) -> Optional[List[str]]:
    if value is None:
        return None
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list) or not all(isinstance(p, str) for p in value):
        raise ConfigError(f"{where} must be a list of strings")
    return list(value)


def _build_rule(entry: Any, index: int) -> Rule:
    if not isinstance(entry, Mapping):
        raise ConfigError(f"Rule {index}: must be a mapping")
    name = entry.get("name")
    if not name or not isinstance(name, str):
        raise ConfigError(f"Rule {index}: name must be a string")
    conditions = entry.get("conditions")
    if not isinstance(conditions, Mapping):
        raise ConfigError(f"Rule {index}: conditions must be an object")
    actions = entry.get("actions")
    if not isinstance(actions, Mapping):
        raise ConfigError(f"Rule {index}: actions must be an object")

    merge_method = actions.get("mergeMethod", "squash")
    if merge_method not in MERGE_METHODS:
        raise ConfigError(f"Rule {index}: Invalid merge method: {merge_method}")

    max_risk = conditions.get("maxRiskScore")
    if max_risk is not None and not _is_number(max_risk):
        raise ConfigError(f"Rule {index}: maxRiskScore must be a number")

    return Rule(
        name=name,
        description=str(entry.get("description") or ""),
        enabled=entry.get("enabled") is True,
        conditions=RuleConditions(
            author_patterns=_pattern_list(
                conditions.get("authorPatterns"), f"Rule {index}: authorPatterns"
            ),
            file_patterns=_pattern_list(
                conditions.get("filePatterns"), f"Rule {index}: filePatterns"
            ),
            block_patterns=_pattern_list(
                conditions.get("blockPatterns"), f"Rule {index}: blockPatterns"
            ),
            max_risk_score=float(max_risk) if max_risk is not None else None,
        ),
        actions=RuleActions(
            auto_approve=actions.get("autoApprove") is not False,
            auto_merge=bool(actions.get("autoMerge", False)),
            merge_method=merge_method,
            delete_branch=actions.get("deleteBranch") is not False,
        ),
    )


def merge_settings(defaults: Settings, supplied: Any) -> Settings:
    """Shallow merge: every key present in *supplied* overrides the default.

    Unknown keys are ignored; a known key with the wrong type raises.
    """
    if supplied is None:
        return Settings(**vars(defaults))
    if not isinstance(supplied, Mapping):
        raise ConfigError("settings must be an object")

    values = dict(vars(defaults))
    for key, raw in supplied.items():
        if key not in _SETTINGS_KEYS:
            logger.debug("Ignoring unknown setting %r", key)
            continue
        attr, types = _SETTINGS_KEYS[key]
        if bool not in types and isinstance(raw, bool):
            raise ConfigError(f"settings.{key} has invalid type bool")
        if not isinstance(raw, types):
            raise ConfigError(f"settings.{key} has invalid type {type(raw).__name__}")
        if attr == "gate_failure_mode" and raw not in GATE_FAILURE_MODES:
            raise ConfigError(f"settings.{key} must be one of {', '.join(GATE_FAILURE_MODES)}")
        values[attr] = float(raw) if float in types else raw
    return Settings(**values)


def validate_document(raw: Any) -> RuleConfig:
    """Validate a raw document and build a ``RuleConfig``. Raises ``ConfigError``."""
    if not isinstance(raw, Mapping):
        raise ConfigError("Configuration must be an object")

    version = raw.get("version")
    if version is not None and str(version) != SUPPORTED_VERSION:
        raise ConfigError(f"Unsupported configuration version: {version}")

    rules = raw.get("rules")
    if not isinstance(rules, list):
        raise ConfigError("rules must be an array")

    return RuleConfig(
        version=SUPPORTED_VERSION,
        rules=[_build_rule(entry, i) for i, entry in enumerate(rules)],
        settings=merge_settings(Settings(), raw.get("settings")),
    )


# ---- public API ----


def default_config() -> RuleConfig:
    """Return a fresh copy of the built-in configuration."""
    cfg = validate_document(DEFAULT_DOCUMENT)
    cfg.is_default = True
    return cfg


def _apply_env_overrides(cfg: RuleConfig) -> None:
    """Apply AUTOMERGE_* environment variable overrides."""
    if val := os.environ.get("AUTOMERGE_AI_ANALYSIS"):
        if val.lower() in ("1", "true", "yes"):
            cfg.settings.ai_analysis = True
        elif val.lower() in ("0", "false", "no"):
            cfg.settings.ai_analysis = False
    if val := os.environ.get("AUTOMERGE_GATE_FAILURE_MODE"):
        if val in GATE_FAILURE_MODES:
            cfg.settings.gate_failure_mode = val  # type: ignore[assignment]
    if val := os.environ.get("AUTOMERGE_SETTLE_SECONDS"):
        try:
            cfg.settings.settle_seconds = max(0.0, float(val))
        except ValueError:
            pass


def load(source: Source = None) -> RuleConfig:
    """Load a rule document from *source*; any failure yields the defaults."""
    if source is None:
        logger.info("No configuration supplied, using defaults")
        cfg = default_config()
    else:
        try:
            cfg = validate_document(read_source(source))
        except ConfigError as exc:
            logger.warning("Config load failed, using defaults: %s", exc)
            cfg = default_config()

    _apply_env_overrides(cfg)
    return cfg


def find_config_file(repo_root: Path, override: Optional[str] = None) -> Optional[Path]:
    """Locate the config file. *override* takes precedence."""
    if override:
        return Path(override)
    for name in (CONFIG_FILENAME, ".automerge.yaml", ".automerge.toml"):
        candidate = repo_root / name
        if candidate.is_file():
            return candidate
    return None


def load_from_platform(platform: "Platform", path: str = CONFIG_FILENAME) -> RuleConfig:
    """Fetch the rule document from the repository itself."""
    try:
        text = platform.fetch_file(path)
    except PlatformError as exc:
        logger.warning("Config load failed for %s, using defaults: %s", path, exc)
        return load(None)

    if text is None:
        logger.info("No %s found in repository, using defaults", path)
        return load(None)

    if path.endswith(".toml"):
        try:
            return load(_parse_text(text, toml=True))
        except ConfigError as exc:
            logger.warning("Config load failed, using defaults: %s", exc)
            return load(None)
    return load(text)
