"""Core data models used across compiler, matcher, loader, and CLI."""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass

OTHER_DEVICE = "Other"


@dataclass(frozen=True)
class Device:
    device: str = OTHER_DEVICE
    brand: str | None = None
    model: str | None = None

    def to_dict(self) -> dict[str, str | None]:
        return asdict(self)


@dataclass(frozen=True)
class DeviceRule:
    pattern: re.Pattern[str]
    device_replacement: str | None = None
    brand_replacement: str | None = None
    model_replacement: str | None = None

    @property
    def case_insensitive(self) -> bool:
        return bool(self.pattern.flags & re.IGNORECASE)


@dataclass(frozen=True)
class RuleSummary:
    index: int
    regex: str
    case_insensitive: bool
    device_replacement: str | None
    brand_replacement: str | None
    model_replacement: str | None
