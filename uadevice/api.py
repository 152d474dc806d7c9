"""Stable public API for building tooling on top of uadevice.

This module is the supported integration surface for third-party callers.
Avoid importing from private/internal modules unless intentionally depending on
non-stable internals.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from uadevice.core.device_match import DeviceParser
from uadevice.core.errors import ConfigurationError, RulesLoadError, UADeviceError
from uadevice.core.model import Device, DeviceRule, RuleSummary
from uadevice.core.rule_compiler import compile_rule, compile_rules
from uadevice.core.rule_loader import LoadedRules, load_rules
from uadevice.core.service import DeviceService

__all__ = [
    "UADeviceError",
    "ConfigurationError",
    "RulesLoadError",
    "Device",
    "DeviceRule",
    "RuleSummary",
    "DeviceParser",
    "LoadedRules",
    "compile_rule",
    "compile_rules",
    "load_rules",
    "Client",
]


class Client:
    """Public client for classifying user-agent strings.

    A `Client` instance loads the device rules once and reuses them for every
    call; it is safe to share between threads.
    """

    def __init__(self, *, rules_path: str | Path | None = None) -> None:
        self._service = DeviceService(rules_path=rules_path)

    @property
    def load_warnings(self) -> tuple[str, ...]:
        return self._service.load_warnings

    @property
    def sources(self) -> tuple[str, ...]:
        return self._service.sources

    def parse(self, agent: str | None) -> Device | None:
        return self._service.parse(agent)

    def parse_many(self, agents: Iterable[str | None]) -> list[Device | None]:
        return self._service.parse_many(agents)

    def list_rules(self) -> list[RuleSummary]:
        return self._service.describe_rules()
