#!/usr/bin/env python3
"""Tests for the .env loader and typed environment helpers."""

import os

import pytest

from fitmotion import config


class TestEnvFile:
    def test_loads_pairs_without_overriding(self, tmp_path, monkeypatch):
        env = tmp_path / ".env"
        env.write_text(
            "# comment\n"
            "export FM_TEST_A=\"quoted value\"  # trailing\n"
            "FM_TEST_B=2\n"
            "not a pair\n"
            "FM_TEST_C='kept'\n",
            encoding="utf-8",
        )
        for name in ("FM_TEST_A", "FM_TEST_B"):
            monkeypatch.setenv(name, "unset")
            monkeypatch.delenv(name)
        monkeypatch.setenv("FM_TEST_C", "from environment")

        config._load_env_file(env)

        assert config._int_env("FM_TEST_B", 0) == 2
        assert os.environ["FM_TEST_A"] == "quoted value"
        assert os.environ["FM_TEST_C"] == "from environment"

    def test_missing_file_is_ignored(self, tmp_path):
        config._load_env_file(tmp_path / "absent.env")


class TestTypedEnv:
    @pytest.mark.parametrize("raw,expected", [("1", True), ("Yes", True), ("off", False), ("", True)])
    def test_bool(self, monkeypatch, raw, expected):
        monkeypatch.setenv("FM_TEST_FLAG", raw)
        assert config._bool_env("FM_TEST_FLAG", True) is expected

    def test_invalid_numbers_fall_back(self, monkeypatch):
        monkeypatch.setenv("FM_TEST_NUM", "abc")
        assert config._float_env("FM_TEST_NUM", 0.5) == 0.5
        assert config._int_env("FM_TEST_NUM", 7) == 7

    def test_defaults(self):
        assert 0 <= config.QUIET_HOURS_END <= config.QUIET_HOURS_START <= 24
        assert config.REASONABLE_HOURS_START < config.REASONABLE_HOURS_END
        assert config.REMINDER_LEAD_MIN >= 0


if __name__ == "__main__":
    pytest.main([__file__, "-v", "--tb=short"])
