"""Rule file loading and validation for YAML-based uadevice rules."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validators

from uadevice.core.errors import ConfigurationError, RulesLoadError
from uadevice.core.model import DeviceRule
from uadevice.core.rule_compiler import compile_rules

RULES_ENV_VAR = "UADEVICE_REGEXES"
DEVICE_SECTION = "device_parsers"
LOGGER = logging.getLogger(__name__)

# Rule fields are always text; keep "on", "1", "1.0" and friends as strings.
_STRING_ONLY_TAGS = {
    "tag:yaml.org,2002:bool",
    "tag:yaml.org,2002:int",
    "tag:yaml.org,2002:float",
}


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that rejects duplicate mapping keys."""


UniqueKeyLoader.yaml_implicit_resolvers = {
    key: list(value) for key, value in yaml.SafeLoader.yaml_implicit_resolvers.items()
}

for first_char, mappings in list(UniqueKeyLoader.yaml_implicit_resolvers.items()):
    UniqueKeyLoader.yaml_implicit_resolvers[first_char] = [
        (tag, regexp)
        for tag, regexp in mappings
        if tag not in _STRING_ONLY_TAGS
    ]


def _construct_mapping(loader: UniqueKeyLoader, node: yaml.Node, deep: bool = False) -> dict[str, Any]:
    mapping: dict[str, Any] = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            raise ConfigurationError(f"Duplicate key '{key}' in YAML document")
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


@dataclass(frozen=True)
class LoadedRules:
    rules: tuple[DeviceRule, ...]
    sources: tuple[str, ...]
    warnings: tuple[str, ...]


def _load_schema_validator() -> Any:
    schema_text = resources.files("uadevice.schemas").joinpath("regexes.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def _rule_dirs() -> tuple[Path, Path]:
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    xdg_data = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local/share"))
    return xdg_config / "uadevice/rules", xdg_data / "uadevice/rules"


def _read_yaml(path: Path | Traversable) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise RulesLoadError(f"Could not read rules file {path}: {exc}") from exc

    try:
        loaded = yaml.load(content, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {path}: {exc}") from exc
    except ConfigurationError as exc:
        raise ConfigurationError(f"{exc} ({path})") from exc

    if not isinstance(loaded, dict):
        raise ConfigurationError(f"Rules file {path} must contain a mapping at root")
    return loaded


def _build_rules(doc: dict[str, Any], source: Path | Traversable, validator: Any) -> tuple[DeviceRule, ...]:
    try:
        validator.validate(doc)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        raise ConfigurationError(f"Schema validation failed for {source}{where}: {exc.message}") from exc

    try:
        return compile_rules(doc[DEVICE_SECTION])
    except ConfigurationError as exc:
        raise ConfigurationError(f"{source}: {exc}") from exc


def load_rules_file(path: Path | Traversable, *, validator: Any = None) -> tuple[DeviceRule, ...]:
    LOGGER.debug("Loading device rules from %s", path)
    if validator is None:
        validator = _load_schema_validator()
    return _build_rules(_read_yaml(path), path, validator)


def _iter_packaged_rule_paths() -> list[Traversable]:
    rules_root = resources.files("uadevice.rules")
    return [item for item in rules_root.iterdir() if item.name.endswith((".yml", ".yaml"))]


def _iter_user_rule_paths() -> list[Path]:
    return [
        candidate
        for directory in _rule_dirs()
        if directory.is_dir()
        for candidate in sorted(directory.iterdir())
        if candidate.suffix in {".yml", ".yaml"}
    ]


def load_rules(path: str | Path | None = None) -> LoadedRules:
    """Load the ordered device rule sequence.

    An explicit ``path`` (or the ``UADEVICE_REGEXES`` environment variable)
    selects a single rules file. Otherwise user rule files are evaluated
    before the packaged rules.
    """
    explicit = path if path is not None else os.environ.get(RULES_ENV_VAR)
    if explicit:
        source = Path(explicit)
        return LoadedRules(rules=load_rules_file(source), sources=(str(source),), warnings=())

    validator = _load_schema_validator()
    rules: list[DeviceRule] = []
    sources: list[str] = []
    warnings: list[str] = []

    for user_path in _iter_user_rule_paths():
        rules.extend(load_rules_file(user_path, validator=validator))
        sources.append(str(user_path))
        warning = f"User rules file '{user_path}' takes precedence over packaged rules"
        LOGGER.warning(warning)
        warnings.append(warning)

    for packaged_path in sorted(_iter_packaged_rule_paths(), key=lambda p: p.name):
        rules.extend(load_rules_file(packaged_path, validator=validator))
        sources.append(f"package:{packaged_path.name}")

    return LoadedRules(rules=tuple(rules), sources=tuple(sources), warnings=tuple(warnings))
