"""Tests for the YAML check file loader."""

from __future__ import annotations

from pathlib import Path

import pytest

from healthcheck.errors import ConfigurationError
from healthcheck.loader import expand_env, load_check_file, parse_checks

CHECK_FILE = """\
checks:
  - type: ping-url
    id: example-home
    name: Example home page
    url: https://www.example.com/
    headers:
      Authorization: Bearer ${PING_TOKEN}
    businessImpact: impact
    technicalSummary: summary
    panicGuide: guide
  - type: graphite-threshold
    id: error-rate
    graphiteKey: ${GRAPHITE_KEY}
    threshold: 100
"""


class TestExpandEnv:
    def test_nested_values(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TOKEN", "abc")
        value = {"a": "${TOKEN}", "b": ["x-${TOKEN}", 3], "c": {"d": "${TOKEN}"}}
        assert expand_env(value) == {"a": "abc", "b": ["x-abc", 3], "c": {"d": "abc"}}

    def test_unset_variable_is_empty(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("NOT_SET_ANYWHERE", raising=False)
        assert expand_env("key=${NOT_SET_ANYWHERE}") == "key="

    def test_non_strings_untouched(self) -> None:
        assert expand_env(42) == 42
        assert expand_env(None) is None


class TestParseChecks:
    @pytest.mark.parametrize("raw", [None, [], {"checks": "nope"}, {"other": []}])
    def test_requires_checks_list(self, raw: object) -> None:
        with pytest.raises(ConfigurationError, match="expected a top-level 'checks' list"):
            parse_checks(raw, source="inline")

    def test_entries_must_be_mappings(self) -> None:
        with pytest.raises(ConfigurationError, match="inline: check #2 must be a mapping"):
            parse_checks({"checks": [{"type": "cpu"}, "cpu"]}, source="inline")


class TestLoadCheckFile:
    def test_loads_and_expands(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PING_TOKEN", "t0k3n")
        monkeypatch.setenv("GRAPHITE_KEY", "graphite-secret")
        path = tmp_path / "checks.yaml"
        path.write_text(CHECK_FILE, encoding="utf-8")

        checks = load_check_file(path)
        assert [c["id"] for c in checks] == ["example-home", "error-rate"]
        assert checks[0]["headers"] == {"Authorization": "Bearer t0k3n"}
        assert checks[1]["graphiteKey"] == "graphite-secret"
        assert checks[1]["threshold"] == 100

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="Cannot read check file"):
            load_check_file(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "checks.yaml"
        path.write_text("checks: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Failed to parse"):
            load_check_file(path)

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "checks.yaml"
        path.write_text("", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="expected a top-level 'checks' list"):
            load_check_file(path)

    def test_example_file_is_valid(self) -> None:
        checks = load_check_file(Path(__file__).parent.parent / "checks.yaml")
        assert {c["type"] for c in checks} == {"ping-url", "tcp-ip", "memory", "cpu", "disk-space"}
