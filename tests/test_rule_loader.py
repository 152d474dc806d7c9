from __future__ import annotations

from pathlib import Path

import pytest

from uadevice.core.device_match import DeviceParser
from uadevice.core.errors import ConfigurationError, RulesLoadError
from uadevice.core.rule_loader import load_rules, load_rules_file

IPHONE_UA = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 16_0 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/16.0 Mobile/15E148 Safari/604.1"
)


def _write_rules(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def test_load_packaged_rules() -> None:
    loaded = load_rules()
    assert loaded.rules
    assert loaded.sources == ("package:regexes.yaml",)
    assert loaded.warnings == ()


def test_user_rules_take_precedence(tmp_path: Path) -> None:
    _write_rules(
        tmp_path / "cfg" / "uadevice" / "rules" / "custom.yaml",
        """
device_parsers:
  - regex: 'iPhone'
    device_replacement: 'Custom Phone'
    brand_replacement: 'Custom'
""",
    )

    loaded = load_rules()
    assert len(loaded.sources) == 2
    assert loaded.sources[0].endswith("custom.yaml")
    assert any("takes precedence" in warning for warning in loaded.warnings)

    device = DeviceParser(loaded.rules).parse(IPHONE_UA)
    assert device is not None
    assert device.device == "Custom Phone"
    assert device.brand == "Custom"


def test_explicit_path_replaces_packaged_rules(tmp_path: Path) -> None:
    path = _write_rules(
        tmp_path / "only.yaml",
        """
device_parsers:
  - regex: 'Foo'
    device_replacement: 'Foo'
""",
    )

    loaded = load_rules(path)
    assert len(loaded.rules) == 1
    assert loaded.sources == (str(path),)
    assert DeviceParser(loaded.rules).parse(IPHONE_UA).device == "Other"


def test_env_var_selects_rules_file(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    path = _write_rules(
        tmp_path / "env.yaml",
        """
device_parsers:
  - regex: 'a'
  - regex: 'b'
""",
    )
    monkeypatch.setenv("UADEVICE_REGEXES", str(path))

    loaded = load_rules()
    assert len(loaded.rules) == 2
    assert loaded.sources == (str(path),)


def test_scalars_stay_strings_and_other_sections_ignored(tmp_path: Path) -> None:
    path = _write_rules(
        tmp_path / "scalars.yaml",
        """
user_agent_parsers:
  - regex: '(Firefox)/(\\d+)'
os_parsers:
  - regex: '(Windows NT)'
device_parsers:
  - regex: 'Gadget'
    device_replacement: on
    brand_replacement: ~
    model_replacement: 5
""",
    )

    rules = load_rules_file(path)
    assert len(rules) == 1
    assert rules[0].device_replacement == "on"
    assert rules[0].brand_replacement is None
    assert rules[0].model_replacement == "5"


def test_missing_device_section_rejected(tmp_path: Path) -> None:
    path = _write_rules(
        tmp_path / "missing.yaml",
        """
os_parsers:
  - regex: 'Windows'
""",
    )

    with pytest.raises(ConfigurationError):
        load_rules_file(path)


def test_missing_regex_rejected(tmp_path: Path) -> None:
    path = _write_rules(
        tmp_path / "noregex.yaml",
        """
device_parsers:
  - device_replacement: 'Phone'
""",
    )

    with pytest.raises(ConfigurationError):
        load_rules_file(path)


def test_uncompilable_regex_rejected(tmp_path: Path) -> None:
    path = _write_rules(
        tmp_path / "bad.yaml",
        """
device_parsers:
  - regex: 'fine'
  - regex: '(broken'
""",
    )

    with pytest.raises(ConfigurationError, match="#1"):
        load_rules_file(path)


def test_duplicate_yaml_keys_rejected(tmp_path: Path) -> None:
    path = _write_rules(
        tmp_path / "dup.yaml",
        """
device_parsers:
  - regex: 'a'
    device_replacement: 'A'
    device_replacement: 'B'
""",
    )

    with pytest.raises(ConfigurationError):
        load_rules_file(path)


def test_invalid_yaml_rejected(tmp_path: Path) -> None:
    path = _write_rules(tmp_path / "broken.yaml", "device_parsers: [\n")

    with pytest.raises(ConfigurationError):
        load_rules_file(path)


def test_non_mapping_root_rejected(tmp_path: Path) -> None:
    path = _write_rules(tmp_path / "list.yaml", "- regex: 'a'\n")

    with pytest.raises(ConfigurationError):
        load_rules_file(path)


def test_unreadable_file_raises_load_error(tmp_path: Path) -> None:
    with pytest.raises(RulesLoadError):
        load_rules(tmp_path / "does-not-exist.yaml")


def test_bad_user_rules_file_fails_fast(tmp_path: Path) -> None:
    _write_rules(
        tmp_path / "data" / "uadevice" / "rules" / "bad.yml",
        """
device_parsers:
  - regex: '['
""",
    )

    with pytest.raises(ConfigurationError):
        load_rules()


def test_schema_validator_built_once_per_load(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    from uadevice.core import rule_loader

    _write_rules(
        tmp_path / "cfg" / "uadevice" / "rules" / "extra.yaml",
        """
device_parsers:
  - regex: 'Gadget'
""",
    )
    calls: list[int] = []
    build = rule_loader._load_schema_validator

    def counting_build():
        calls.append(1)
        return build()

    monkeypatch.setattr(rule_loader, "_load_schema_validator", counting_build)

    loaded = load_rules()
    assert len(loaded.sources) == 2
    assert len(calls) == 1
