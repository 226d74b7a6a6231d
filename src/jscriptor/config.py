"""Project configuration: `jscriptor.yaml` loading and source file discovery."""

from __future__ import annotations

import fnmatch
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "jscriptor.yaml"

DEFAULT_CONFIG: dict[str, Any] = {
    "include": ["src/**/*.js"],
    "exclude": ["node_modules/**", "dist/**", "build/**"],
    "log_level": "WARNING",
    "format": {
        "indent_size": 2,
        "use_spaces": True,
    },
}


class ConfigError(Exception):
    """Configuration file is unreadable or malformed."""


@dataclass
class Config:
    include: list[str]
    exclude: list[str]
    log_level: str
    indent_size: int
    use_spaces: bool
    base_dir: Path = field(default_factory=Path.cwd)
    path: Path | None = None

    @property
    def indent(self) -> str:
        if self.use_spaces:
            return " " * self.indent_size
        return "\t"


def merge_config(defaults: dict[str, Any], user: dict[str, Any]) -> dict[str, Any]:
    """Overlay user values on defaults. Nested mappings merge one level deep."""
    merged = dict(defaults)
    for key, value in user.items():
        if value is None:
            continue
        if isinstance(value, dict) and isinstance(defaults.get(key), dict):
            inner = dict(defaults[key])
            inner.update(value)
            merged[key] = inner
        else:
            merged[key] = value
    return merged


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        raw_text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"cannot read configuration {path}: {exc}") from exc
    try:
        data = yaml.safe_load(raw_text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"failed to parse configuration {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("configuration root must be a mapping")
    return data


def _string_list(data: dict[str, Any], key: str) -> list[str]:
    value = data[key]
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"'{key}' must be a string or a list of strings")
    return list(value)


def load_config(path: str | Path | None = None, base_dir: str | Path | None = None) -> Config:
    """Load `path` (default: `jscriptor.yaml` in base_dir) merged over defaults.

    An explicit path that does not exist is an error; a missing default file
    just means defaults.
    """
    base = Path(base_dir) if base_dir is not None else Path.cwd()
    user: dict[str, Any] = {}
    config_path: Path | None = None
    if path is not None:
        config_path = Path(path)
        if not config_path.exists():
            raise ConfigError(f"configuration file not found: {config_path}")
        user = _read_yaml(config_path)
        if base_dir is None:
            base = config_path.resolve().parent
    else:
        candidate = base / CONFIG_FILENAME
        if candidate.exists():
            config_path = candidate
            user = _read_yaml(candidate)
        else:
            logger.debug("no %s in %s, using defaults", CONFIG_FILENAME, base)

    for key in user:
        if key not in DEFAULT_CONFIG:
            logger.warning("ignoring unknown configuration key '%s'", key)
    data = merge_config(DEFAULT_CONFIG, user)
    fmt = data["format"]
    if not isinstance(fmt, dict):
        raise ConfigError("'format' must be a mapping")
    indent_size = fmt.get("indent_size")
    if not isinstance(indent_size, int) or isinstance(indent_size, bool) or indent_size < 0:
        raise ConfigError("'format.indent_size' must be a non-negative integer")
    log_level = str(data["log_level"]).upper()
    if log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        raise ConfigError(f"unknown log_level '{data['log_level']}'")
    return Config(
        include=_string_list(data, "include"),
        exclude=_string_list(data, "exclude"),
        log_level=log_level,
        indent_size=indent_size,
        use_spaces=bool(fmt.get("use_spaces", True)),
        base_dir=base,
        path=config_path,
    )


def _excluded(rel: str, patterns: list[str]) -> bool:
    for pattern in patterns:
        if fnmatch.fnmatchcase(rel, pattern):
            return True
    return False


def resolve_files(config: Config) -> list[Path]:
    """Expand include globs under base_dir, minus exclude matches. Sorted, unique."""
    base = config.base_dir
    found: set[Path] = set()
    for pattern in config.include:
        target = base / pattern
        if target.is_dir():
            matches = list(target.glob("**/*.js"))
        elif target.is_file():
            matches = [target]
        else:
            matches = list(base.glob(pattern))
        for match in matches:
            if match.is_file():
                found.add(match)
    result: list[Path] = []
    for path in found:
        try:
            rel = path.relative_to(base).as_posix()
        except ValueError:
            rel = path.as_posix()
        if _excluded(rel, config.exclude):
            logger.debug("excluded %s", rel)
            continue
        result.append(path)
    result.sort()
    return result
