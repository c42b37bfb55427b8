"""Config loading and validation for YAML-based mihomectl configuration."""

from __future__ import annotations

import importlib
import json
import logging
import os
from collections.abc import Callable
from dataclasses import dataclass
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validators

from mihomectl.core.errors import ConfigLoadError, ConfigValidationError, InvalidParameterError
from mihomectl.core.model import CID_DEFAULT, QUEUE_SIZE_DEFAULT, REPEAT_DEFAULT, DriverConfig, DriverFactories
from mihomectl.core.ook import parse_device_address

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
class LoadedConfig:
    config: DriverConfig
    drivers: DriverFactories
    sources: tuple[str, ...]
    warnings: tuple[str, ...]


def _load_schema_validator() -> Any:
    schema_text = resources.files("mihomectl.schemas").joinpath("config.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def _user_config_path() -> Path:
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return xdg_config / "mihomectl/config.yaml"


def _read_yaml(path: Path | Traversable) -> dict[str, Any]:
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


def _validate(doc: dict[str, Any], source: Path | Traversable, validator: Any) -> None:
    try:
        validator.validate(doc)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        hint = ""
        if path == "cid" and exc.validator == "type":
            hint = " (quote the cid so YAML reads it as a string)"
        raise ConfigValidationError(f"Schema validation failed for {source}{where}: {exc.message}{hint}") from exc


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _build_config(doc: dict[str, Any]) -> tuple[DriverConfig, DriverFactories]:
    cid = doc.get("cid", CID_DEFAULT)
    try:
        address = parse_device_address(cid)
    except InvalidParameterError as exc:
        raise ConfigValidationError(f"cid: {exc}") from exc
    if len(address) != 3:
        # Legacy receivers only understand a 3-byte (6 hex digit) address.
        raise ConfigValidationError(f"cid '{cid}' must decode to 3 bytes, got {len(address)}")

    pins = doc.get("pins", {})
    events = doc.get("events", {})
    drivers = doc.get("drivers", {})
    config = DriverConfig(
        cid=cid,
        repeat=int(doc.get("repeat", REPEAT_DEFAULT)),
        temp_offset=float(doc.get("temp_offset", 0.0)),
        reset_pin=pins.get("reset"),
        led1_pin=pins.get("led1"),
        led2_pin=pins.get("led2"),
        queue_size=int(events.get("queue_size", QUEUE_SIZE_DEFAULT)),
    )
    factories = DriverFactories(
        gpio=drivers.get("gpio"),
        radio=drivers.get("radio"),
        decoder=drivers.get("decoder"),
    )
    return config, factories


def load_config(path: Path | str | None = None) -> LoadedConfig:
    """Load packaged defaults, then the user config, then `path` if given."""
    validator = _load_schema_validator()
    layers: list[tuple[Path | Traversable, dict[str, Any]]] = []

    packaged = resources.files("mihomectl.defaults").joinpath("config.yaml")
    layers.append((packaged, _read_yaml(packaged)))

    user_path = _user_config_path()
    if user_path.is_file():
        layers.append((user_path, _read_yaml(user_path)))

    if path is not None:
        explicit = Path(path)
        if not explicit.is_file():
            raise ConfigLoadError(f"Config file {explicit} does not exist")
        layers.append((explicit, _read_yaml(explicit)))

    merged: dict[str, Any] = {}
    warnings: list[str] = []
    for source, doc in layers:
        _validate(doc, source, validator)
        if merged and "cid" in doc and doc["cid"] != merged.get("cid"):
            warning = f"{source} overrides cid with '{doc['cid']}'"
            LOGGER.warning(warning)
            warnings.append(warning)
        merged = _merge(merged, doc)

    config, factories = _build_config(merged)
    return LoadedConfig(
        config=config,
        drivers=factories,
        sources=tuple(str(source) for source, _ in layers),
        warnings=tuple(warnings),
    )


def resolve_factory(spec: str) -> Callable[..., Any]:
    """Import the callable named by a "package.module:attribute" string."""
    module_name, sep, attr_path = spec.partition(":")
    if not sep or not module_name or not attr_path:
        raise ConfigLoadError(f"Driver factory '{spec}' must look like 'package.module:attribute'")
    try:
        target: Any = importlib.import_module(module_name)
    except ImportError as exc:
        raise ConfigLoadError(f"Could not import driver module '{module_name}': {exc}") from exc
    for attr in attr_path.split("."):
        try:
            target = getattr(target, attr)
        except AttributeError as exc:
            raise ConfigLoadError(f"Driver factory '{spec}' not found: {exc}") from exc
    if not callable(target):
        raise ConfigLoadError(f"Driver factory '{spec}' is not callable")
    return target
