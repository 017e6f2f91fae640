"""Configuration for the tags plugin."""

import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from .parsing import DEFAULT_DELIMITER

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "PAGETAGS_CONFIG"

# Environment variables overriding single fields, applied after the file
ENV_OVERRIDES = {
    "PAGETAGS_DELIMITER": "delimiter",
    "PAGETAGS_AUTO_FILTER": "auto_filter",
    "PAGETAGS_COLLECT_ALL_TAGS": "collect_all_tags",
}

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off", "")


class ConfigError(ValueError):
    """Raised when a tags configuration is invalid."""


@dataclass
class TagsConfig:
    """Settings for the tags plugin.

    Attributes:
        tags_header: Raw meta header holding a page's own tags.
        filter_header: Raw meta header holding the tags a page filters by.
        delimiter: Separator between tags in both headers.
        filter_name: Name of the template filter narrowing a page list.
        all_tags_function: Name of the template function listing all tags.
        collect_all_tags: Whether to collect every tag while pages load.
        auto_filter: Whether the pages-loaded hook narrows the page list
            itself instead of leaving that to templates.
    """
    tags_header: str = "Tags"
    filter_header: str = "Filter"
    delimiter: str = DEFAULT_DELIMITER
    filter_name: str = "apply_tag_filter"
    all_tags_function: str = "get_all_tags"
    collect_all_tags: bool = True
    auto_filter: bool = False

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "TagsConfig":
        """Build a config from a plain mapping, validating every key.

        Raises:
            ConfigError: On unknown keys, wrong types or empty names.
        """
        data = dict(data or {})
        known = {f.name: f for f in fields(cls)}

        unknown = sorted(set(data) - set(known))
        if unknown:
            raise ConfigError(f"Unknown tags config keys: {', '.join(unknown)}")

        for key, value in data.items():
            expected = known[key].type
            if expected in (bool, "bool"):
                if not isinstance(value, bool):
                    raise ConfigError(f"'{key}' must be a boolean, got {type(value).__name__}")
            elif not isinstance(value, str) or not value:
                raise ConfigError(f"'{key}' must be a non-empty string")

        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be a boolean flag, got '{value}'")


def read_config_file(path: Union[str, Path]) -> Dict[str, Any]:
    """Read a JSON or YAML config file into a dict.

    Raises:
        ConfigError: If the file is missing, unparsable or not a mapping.
    """
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e

    try:
        if path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(content)
        else:
            data = json.loads(content)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigError(f"Invalid config file {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file must contain a mapping: {path}")

    # Allow the settings to live under a "tags" section of a shared file
    section = data.get("tags")
    if isinstance(section, dict):
        data = section

    logger.debug("Loaded tags config from %s", path)
    return data


def apply_env_overrides(data: Dict[str, Any],
                        environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """Return a copy of ``data`` with PAGETAGS_* environment overrides applied."""
    environ = os.environ if environ is None else environ
    result = dict(data)
    for env_name, key in ENV_OVERRIDES.items():
        if env_name not in environ:
            continue
        raw = environ[env_name]
        if key == "delimiter":
            result[key] = raw
        else:
            result[key] = _parse_bool(env_name, raw)
        logger.debug("Config override from %s: %s=%r", env_name, key, result[key])
    return result


def load_config(path: Optional[Union[str, Path]] = None,
                environ: Optional[Mapping[str, str]] = None) -> TagsConfig:
    """Load the tags config.

    The file is ``path`` if given, else the file named by PAGETAGS_CONFIG,
    else defaults only. Environment overrides are applied last.
    """
    environ = os.environ if environ is None else environ
    if path is None:
        path = environ.get(CONFIG_ENV_VAR) or None

    data = read_config_file(path) if path is not None else {}
    return TagsConfig.from_dict(apply_env_overrides(data, environ))
