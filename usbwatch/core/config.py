"""Optional YAML configuration, validated against a packaged JSON Schema."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validators

from usbwatch.core.errors import ConfigLoadError, ConfigValidationError
from usbwatch.core.lsusb import DEFAULT_BOOTLOADER_MARKERS, DEFAULT_COMMAND
from usbwatch.core.poller import DEFAULT_INTERVAL_S
from usbwatch.core.tty import (
    DEFAULT_DEV_ROOT,
    DEFAULT_MAX_DEPTH,
    DEFAULT_PREFIXES,
    DEFAULT_PROBE_COUNT,
    DEFAULT_SYS_ROOT,
)

CONFIG_FILENAME = "config.yaml"
LOGGER = logging.getLogger(__name__)


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that rejects duplicate mapping keys."""


def _construct_mapping(loader: UniqueKeyLoader, node: yaml.Node, deep: bool = False) -> dict[str, Any]:
    mapping: dict[str, Any] = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            raise ConfigValidationError(f"Duplicate key '{key}' in YAML document")
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


@dataclass(frozen=True)
class WatchConfig:
    lsusb_command: tuple[str, ...] = DEFAULT_COMMAND
    poll_interval_s: float = DEFAULT_INTERVAL_S
    bootloader_markers: tuple[str, ...] = DEFAULT_BOOTLOADER_MARKERS
    terminal_prefixes: tuple[str, ...] = DEFAULT_PREFIXES
    terminal_probe_count: int = DEFAULT_PROBE_COUNT
    sysfs_max_depth: int = DEFAULT_MAX_DEPTH
    dev_root: str = DEFAULT_DEV_ROOT
    sys_root: str = DEFAULT_SYS_ROOT


@dataclass(frozen=True)
class LoadedConfig:
    config: WatchConfig = field(default_factory=WatchConfig)
    source: Path | None = None
    warnings: tuple[str, ...] = ()


def default_config_path() -> Path:
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return xdg_config / "usbwatch" / CONFIG_FILENAME


def _load_schema_validator() -> Any:
    schema_text = resources.files("usbwatch.schemas").joinpath("config.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigLoadError(f"Could not read config file {path}: {exc}") from exc

    try:
        loaded = yaml.load(content, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise ConfigValidationError(f"Invalid YAML in {path}: {exc}") from exc

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigValidationError(f"Config file {path} must contain a mapping at root")
    return loaded


def _build_config(doc: dict[str, Any], source: Path) -> tuple[WatchConfig, tuple[str, ...]]:
    validator = _load_schema_validator()
    try:
        validator.validate(doc)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        raise ConfigValidationError(f"Schema validation failed for {source}{where}: {exc.message}") from exc

    defaults = WatchConfig()
    warnings: list[str] = []

    markers = tuple(m.lower() for m in doc.get("bootloader_markers", defaults.bootloader_markers))
    if not markers:
        warnings.append(f"{source}: no bootloader markers configured; DFU detection is disabled")

    prefixes = tuple(doc.get("terminal_prefixes", defaults.terminal_prefixes))
    probe_count = int(doc.get("terminal_probe_count", defaults.terminal_probe_count))
    if not prefixes or probe_count == 0:
        warnings.append(f"{source}: terminal probing is disabled; only /dev/serial/by-id is used")

    interval_ms = doc.get("poll_interval_ms")
    config = WatchConfig(
        lsusb_command=tuple(doc.get("lsusb_command", defaults.lsusb_command)),
        poll_interval_s=interval_ms / 1000.0 if interval_ms is not None else defaults.poll_interval_s,
        bootloader_markers=markers,
        terminal_prefixes=prefixes,
        terminal_probe_count=probe_count,
        sysfs_max_depth=int(doc.get("sysfs_max_depth", defaults.sysfs_max_depth)),
        dev_root=doc.get("dev_root", defaults.dev_root),
        sys_root=doc.get("sys_root", defaults.sys_root),
    )
    return config, tuple(warnings)


def load_config(path: Path | None = None) -> LoadedConfig:
    """Load the config file, falling back to defaults when it does not exist.

    An explicitly given ``path`` must exist; the default XDG location is
    optional.
    """
    explicit = path is not None
    config_path = path if path is not None else default_config_path()

    if not config_path.exists():
        if explicit:
            raise ConfigLoadError(f"Config file {config_path} does not exist")
        return LoadedConfig()

    doc = _read_yaml(config_path)
    config, warnings = _build_config(doc, config_path)
    for warning in warnings:
        LOGGER.warning(warning)
    LOGGER.debug("Loaded config from %s", config_path)
    return LoadedConfig(config=config, source=config_path, warnings=warnings)
