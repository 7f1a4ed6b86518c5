"""
Tests for dfaudit.config module.
"""

import pytest

from dfaudit.config import AuditConfig, ExclusionConfig
from dfaudit.exceptions import ConfigurationError
from dfaudit.reconciler import ExclusionRule


class TestExclusionConfig:
    """Test ExclusionConfig."""

    def test_to_rule(self):
        config = ExclusionConfig(table_names=["a", "b"], table_patterns=["^tmp_"])

        rule = config.to_rule()

        assert isinstance(rule, ExclusionRule)
        assert rule.exact_names == {"a", "b"}
        assert rule.name_patterns == ["^tmp_"]

    def test_blank_entries_dropped(self):
        config = ExclusionConfig(table_names=["", "a"], table_patterns=[""])

        assert config.table_names == ["a"]
        assert config.table_patterns == []


class TestAuditConfig:
    """Test AuditConfig loading and overrides."""

    def test_defaults(self):
        config = AuditConfig()

        assert config.deletion.enabled is False
        assert config.deletion.auto_approve is False
        assert config.warehouse.provider == "bigquery"
        assert config.exclusions.table_names == []

    def test_from_yaml(self, tmp_path, monkeypatch):
        monkeypatch.setenv("AUDIT_LOCATION", "EU")
        path = tmp_path / "dfaudit.yaml"
        path.write_text(
            """
exclusions:
  table_names: [legacy_orders]
  table_patterns: ["^tmp_"]
deletion:
  enabled: true
warehouse:
  location: "${AUDIT_LOCATION}"
logging:
  level: DEBUG
""",
            encoding="utf-8",
        )

        config = AuditConfig.from_yaml(path)

        assert config.exclusions.table_names == ["legacy_orders"]
        assert config.exclusions.table_patterns == ["^tmp_"]
        assert config.deletion.enabled is True
        assert config.warehouse.location == "EU"
        assert config.logging.level == "DEBUG"

    def test_from_empty_yaml(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")

        assert AuditConfig.from_yaml(path).deletion.enabled is False

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError) as exc_info:
            AuditConfig.from_yaml(tmp_path / "missing.yaml")

        assert "not found" in str(exc_info.value)

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("exclusions: [unclosed", encoding="utf-8")

        with pytest.raises(ConfigurationError) as exc_info:
            AuditConfig.from_yaml(path)

        assert "Invalid YAML" in str(exc_info.value)

    def test_invalid_values(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("logging:\n  level: LOUD\n", encoding="utf-8")

        with pytest.raises(ConfigurationError) as exc_info:
            AuditConfig.from_yaml(path)

        assert "Invalid configuration" in str(exc_info.value)

    def test_environment_variables(self, monkeypatch):
        monkeypatch.setenv("DFAUDIT_DELETION__AUTO_APPROVE", "true")

        assert AuditConfig().deletion.auto_approve is True

    def test_with_overrides_extends_config(self):
        config = AuditConfig(exclusions={"table_names": ["a"], "table_patterns": ["^x"]})

        merged = config.with_overrides(
            table_names=["b", ""],
            table_pattern="^y",
            delete=True,
            auto_approve=False,
        )

        assert merged.exclusions.table_names == ["a", "b"]
        assert merged.exclusions.table_patterns == ["^x", "^y"]
        assert merged.deletion.enabled is True
        assert merged.deletion.auto_approve is False
        # Original is untouched
        assert config.exclusions.table_names == ["a"]
        assert config.deletion.enabled is False

    def test_with_overrides_keeps_config_flags(self):
        config = AuditConfig(deletion={"enabled": True, "auto_approve": True})

        merged = config.with_overrides()

        assert merged.deletion.enabled is True
        assert merged.deletion.auto_approve is True
