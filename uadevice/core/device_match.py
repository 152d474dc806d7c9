"""User-agent to device matching logic."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from uadevice.core.model import OTHER_DEVICE, Device, DeviceRule
from uadevice.core.rule_compiler import compile_rules

_SUBSTITUTION_RE = re.compile(r"\$\d")
# Control characters and space only; other Unicode whitespace is kept.
_TRIM_CHARS = "".join(map(chr, range(0x21)))


def _group(match: re.Match[str], index: int) -> str | None:
    if match.re.groups < index:
        return None
    return match.group(index)


def render_template(template: str, match: re.Match[str]) -> str:
    """Expand ``$0``..``$9`` placeholders in ``template`` from ``match``.

    Missing or non-participating groups expand to an empty string and the
    result is stripped of control characters and spaces. A template without
    ``$`` is returned untouched.
    """
    if "$" not in template:
        return template

    def _replace(placeholder: re.Match[str]) -> str:
        return _group(match, int(placeholder.group()[1:])) or ""

    return _SUBSTITUTION_RE.sub(_replace, template).strip(_TRIM_CHARS)


def match_rule(rule: DeviceRule, agent: str) -> Device | None:
    match = rule.pattern.search(agent)
    if match is None:
        return None

    if rule.device_replacement is not None:
        device = render_template(rule.device_replacement, match)
    else:
        device = _group(match, 1)

    brand = None
    if rule.brand_replacement is not None:
        brand = render_template(rule.brand_replacement, match)

    if rule.model_replacement is not None:
        model = render_template(rule.model_replacement, match)
    else:
        model = _group(match, 1)

    return Device(
        device=device or OTHER_DEVICE,
        brand=brand or None,
        model=model or None,
    )


class DeviceParser:
    """Ordered, first-match-wins device rule evaluation."""

    def __init__(self, rules: Sequence[DeviceRule]) -> None:
        self._rules = tuple(rules)

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> DeviceParser:
        return cls(compile_rules(records))

    @property
    def rules(self) -> tuple[DeviceRule, ...]:
        return self._rules

    def parse(self, agent: str | None) -> Device | None:
        if agent is None:
            return None
        for rule in self._rules:
            device = match_rule(rule, agent)
            if device is not None:
                return device
        return Device()
