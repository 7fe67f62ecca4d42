"""Unit tests for configuration loading."""

import pytest

from pkg_sec.config import ScannerConfig, NpmrcSetting, load_config


class TestConfig:
    """Test defaults and overrides."""

    def test_defaults(self):
        cfg = load_config()

        assert cfg.npm_bin == "npm"
        assert cfg.coverage_threshold == 95.0
        assert cfg.review_max_age_days == 90
        assert [str(s) for s in cfg.required_settings] == [
            "ignore-scripts=true", "audit-level", "package-lock=true", "strict-ssl=true"
        ]

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("PKG_SEC_NPM_BIN", "/opt/node/bin/npm")
        monkeypatch.setenv("PKG_SEC_REBUILD_TIMEOUT", "120")
        cfg = load_config()

        assert cfg.npm_bin == "/opt/node/bin/npm"
        assert cfg.rebuild_timeout_seconds == 120

    def test_config_file(self, tmp_path):
        (tmp_path / ".pkgsec.toml").write_text(
            '[pkg-sec]\ncoverage_threshold = 99.0\nlockfile_name = "npm-shrinkwrap.json"\n'
        )
        cfg = load_config(tmp_path)

        assert cfg.coverage_threshold == 99.0
        assert cfg.lockfile_name == "npm-shrinkwrap.json"

    def test_environment_beats_config_file(self, tmp_path, monkeypatch):
        (tmp_path / ".pkgsec.toml").write_text("review_max_age_days = 30\n")
        monkeypatch.setenv("PKG_SEC_REVIEW_MAX_AGE_DAYS", "45")

        assert load_config(tmp_path).review_max_age_days == 45

    def test_invalid_config_file(self, tmp_path):
        (tmp_path / ".pkgsec.toml").write_text("this is = = not toml")
        with pytest.raises(ValueError):
            load_config(tmp_path)

    def test_custom_required_settings(self):
        cfg = ScannerConfig(required_settings=[{"key": "ignore-scripts", "expected": "true"}])

        assert cfg.required_settings == [NpmrcSetting(key="ignore-scripts", expected="true")]
