"""Service layer used by CLI and the public API."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from uadevice.core.device_match import DeviceParser
from uadevice.core.model import Device, DeviceRule, RuleSummary
from uadevice.core.rule_loader import load_rules

LOGGER = logging.getLogger(__name__)


class DeviceService:
    def __init__(self, *, rules_path: str | Path | None = None) -> None:
        loaded = load_rules(rules_path)
        self.parser = DeviceParser(loaded.rules)
        self.sources = loaded.sources
        self.load_warnings = loaded.warnings
        LOGGER.debug("Loaded %d device rules from %s", len(loaded.rules), ", ".join(loaded.sources))

    @property
    def rules(self) -> tuple[DeviceRule, ...]:
        return self.parser.rules

    def parse(self, agent: str | None) -> Device | None:
        return self.parser.parse(agent)

    def parse_many(self, agents: Iterable[str | None]) -> list[Device | None]:
        return [self.parser.parse(agent) for agent in agents]

    def describe_rules(self) -> list[RuleSummary]:
        return [
            RuleSummary(
                index=index,
                regex=rule.pattern.pattern,
                case_insensitive=rule.case_insensitive,
                device_replacement=rule.device_replacement,
                brand_replacement=rule.brand_replacement,
                model_replacement=rule.model_replacement,
            )
            for index, rule in enumerate(self.parser.rules)
        ]
