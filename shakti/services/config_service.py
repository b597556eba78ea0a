### Description ###
# Shakti - Loan Recovery Management Platform
# - Configuration Service -
# Author: Shakti Platform Team
# Date: 10/16/2026
# Python: 3.11
####################

"""
Configuration Service

Operator-editable view of config.yaml. Reads and writes go through
ruamel.yaml so comments and layout survive an edit; every update is
validated against the AppConfig schema before it touches the file.

Editable sections: domain, auth, tenants, application. The bootstrap
section (operator password hash) is never exposed or written here.
"""

import warnings
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from shakti.config import DEFAULT_CONFIG, get_config_path
from shakti.config_schema import AppConfig, format_validation_error, get_validation_errors, validate_config

EDITABLE_SECTIONS = ("domain", "auth", "tenants", "application")


def _merge(base: dict, update: dict) -> dict:
    merged = dict(base)
    for key, value in update.items():
        if isinstance(merged.get(key), dict) and isinstance(value, dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _flatten(values: dict, prefix: str = "") -> dict[str, Any]:
    """{"auth": {"lockout": {"enabled": True}}} -> {"auth.lockout.enabled": True}"""
    flat = {}
    for key, value in values.items():
        path = f"{prefix}.{key}" if prefix else key
        if isinstance(value, dict):
            flat.update(_flatten(value, path))
        else:
            flat[path] = value
    return flat


class ConfigService:
    """
    Comment-preserving access to config.yaml

    Usage:
        service = ConfigService()
        errors = service.validate_update({"auth": {"lockout": {"max_attempts": 3}}})
        if not errors:
            changed = service.update_from_dict(...)
            service.save()
    """

    def __init__(self, config_path: str | Path | None = None):
        self.config_path = Path(config_path) if config_path else get_config_path()
        self.yaml = YAML()
        self.yaml.preserve_quotes = True
        self.yaml.indent(mapping=2, sequence=4, offset=2)
        self._config: CommentedMap | None = None

        if not self.config_path.exists():
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            self.config_path.write_text(DEFAULT_CONFIG, encoding="utf-8")

    @property
    def data(self) -> CommentedMap:
        if self._config is None:
            self.reload()
        return self._config

    def reload(self, validate: bool = True) -> CommentedMap:
        """
        Re-read config.yaml from disk.

        Schema violations only warn here; missing keys fall back to
        defaults wherever the settings are read.
        """
        with open(self.config_path, encoding="utf-8") as f:
            self._config = self.yaml.load(f) or CommentedMap()

        if validate:
            for error in get_validation_errors(dict(self._config)):
                warnings.warn(f"Config validation warning: {error}", UserWarning, stacklevel=2)
        return self._config

    def save(self) -> None:
        if self._config is None:
            raise ValueError("No config loaded to save")
        with open(self.config_path, "w", encoding="utf-8") as f:
            self.yaml.dump(self._config, f)

    def get(self, path: str, default: Any = None) -> Any:
        """
        Value at a dot-notation path.

        Example: get("domain.base_domain") -> "yourapp.com"
        """
        node: Any = self.data
        for key in path.split("."):
            if not isinstance(node, dict) or key not in node:
                return default
            node = node[key]
        return node

    def set(self, path: str, value: Any) -> None:
        """Set a value, creating intermediate mappings as needed"""
        *parents, leaf = path.split(".")
        node = self.data
        for key in parents:
            if not isinstance(node.get(key), dict):
                node[key] = CommentedMap()
            node = node[key]
        node[leaf] = value

    def get_section(self, section: str) -> dict:
        return dict(self.data.get(section) or {})

    def get_editable_config(self) -> dict:
        """
        Editable sections with schema defaults filled in.

        Falls back to pure defaults for a section that fails validation,
        so the operator can still see and fix it.
        """
        raw = {section: self.get_section(section) for section in EDITABLE_SECTIONS}
        try:
            effective = validate_config(raw)
        except ValidationError:
            effective = AppConfig()
        return effective.model_dump(include=set(EDITABLE_SECTIONS))

    def validate_update(self, updates: dict) -> list[str]:
        """
        Validate a partial update merged over the current config.

        Returns:
            Error messages (empty if valid)
        """
        unknown = sorted(set(updates) - set(EDITABLE_SECTIONS))
        if unknown:
            return [f"{section}: section is not editable" for section in unknown]
        try:
            validate_config(_merge(self.get_editable_config(), updates))
        except ValidationError as e:
            return format_validation_error(e)
        return []

    def update_from_dict(self, updates: dict) -> list[str]:
        """
        Apply a nested update in place.

        Returns:
            Dot paths whose value actually changed
        """
        changed = []
        for path, value in _flatten(updates).items():
            if self.get(path) != value:
                self.set(path, value)
                changed.append(path)
        return changed


_config_service: ConfigService | None = None


def get_config_service() -> ConfigService:
    """Process-wide ConfigService"""
    global _config_service
    if _config_service is None:
        _config_service = ConfigService()
    return _config_service


def clear_config_cache() -> None:
    """Drop the process-wide instance; the next call re-reads config.yaml"""
    global _config_service
    _config_service = None
