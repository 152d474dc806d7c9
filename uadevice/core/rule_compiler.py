"""Compile raw device rule records into executable rules."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import Any

from uadevice.core.errors import ConfigurationError
from uadevice.core.model import DeviceRule

_REPLACEMENT_KEYS = ("device_replacement", "brand_replacement", "model_replacement")


def _template(record: Mapping[str, Any], key: str) -> str | None:
    value = record.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigurationError(f"Device rule field '{key}' must be a string, got {type(value).__name__}")
    return value


def compile_rule(record: Mapping[str, Any]) -> DeviceRule:
    """Build a rule from one record.

    Only ``regex_flag: "i"`` has an effect; any other flag value compiles the
    pattern case-sensitively. Patterns use ASCII character classes and ASCII-only
    case folding so shared rule files behave the same across engines.
    """
    regex = record.get("regex")
    if regex is None or regex == "":
        raise ConfigurationError("Device rule is missing regex")
    if not isinstance(regex, str):
        raise ConfigurationError(f"Device rule regex must be a string, got {type(regex).__name__}")

    flags = re.ASCII
    if record.get("regex_flag") == "i":
        flags |= re.IGNORECASE
    try:
        pattern = re.compile(regex, flags)
    except re.error as exc:
        raise ConfigurationError(f"Device rule regex {regex!r} does not compile: {exc}") from exc

    device, brand, model = (_template(record, key) for key in _REPLACEMENT_KEYS)
    return DeviceRule(
        pattern=pattern,
        device_replacement=device,
        brand_replacement=brand,
        model_replacement=model,
    )


def compile_rules(records: Iterable[Mapping[str, Any]]) -> tuple[DeviceRule, ...]:
    rules: list[DeviceRule] = []
    for index, record in enumerate(records):
        if not isinstance(record, Mapping):
            raise ConfigurationError(f"Device rule #{index} must be a mapping")
        try:
            rules.append(compile_rule(record))
        except ConfigurationError as exc:
            raise ConfigurationError(f"Device rule #{index}: {exc}") from exc
    return tuple(rules)
