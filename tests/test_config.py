"""Tests for YAML / environment / CLI configuration layering."""

import argparse

from cli_config import apply_cli_overrides, env_config, load_runtime_config
from constants import Constants, _load_yaml_config, apply_config


def _args(**overrides):
    base = {"CONFIG": None, "REGISTRY_URL": None, "TIMEOUT": None}
    base.update(overrides)
    return argparse.Namespace(**base)


class TestYamlConfig:
    """Test config file loading."""

    def test_load_explicit_file(self, tmp_path):
        path = tmp_path / "depsolver.yml"
        path.write_text("registry_url: https://mirror.example/pypi/\nhttp_retry_max: 5\n", encoding="utf-8")
        assert _load_yaml_config(str(path)) == {"registry_url": "https://mirror.example/pypi/", "http_retry_max": 5}

    def test_missing_file(self, tmp_path):
        assert _load_yaml_config(str(tmp_path / "nope.yml")) == {}

    def test_invalid_yaml_is_ignored(self, tmp_path):
        path = tmp_path / "bad.yml"
        path.write_text("registry_url: [unclosed\n", encoding="utf-8")
        assert _load_yaml_config(str(path)) == {}

    def test_non_mapping_is_ignored(self, tmp_path):
        path = tmp_path / "list.yml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        assert _load_yaml_config(str(path)) == {}

    def test_env_points_at_config(self, tmp_path, monkeypatch):
        path = tmp_path / "custom.yml"
        path.write_text("cache_ttl_sec: 42\n", encoding="utf-8")
        monkeypatch.setenv("DEPSOLVER_CONFIG", str(path))
        assert _load_yaml_config() == {"cache_ttl_sec": 42}


class TestApplyConfig:
    """Test applying values onto Constants."""

    def test_known_keys_coerced(self):
        apply_config({"request_timeout": "7", "resolution_timeout": 2, "unknown": "x"})
        assert Constants.REQUEST_TIMEOUT == 7
        assert Constants.RESOLUTION_TIMEOUT_SEC == 2.0

    def test_bad_value_skipped(self):
        before = Constants.HTTP_RETRY_MAX
        apply_config({"http_retry_max": "many"})
        assert Constants.HTTP_RETRY_MAX == before

    def test_env_config(self):
        environ = {"DEPSOLVER_REGISTRY_URL": "https://env.example/", "DEPSOLVER_CACHE_TTL_SEC": "", "HOME": "/"}
        assert env_config(environ) == {"registry_url": "https://env.example/"}

    def test_cli_overrides(self):
        apply_cli_overrides(_args(REGISTRY_URL="https://cli.example/", TIMEOUT=3))
        assert Constants.REGISTRY_URL_PYPI == "https://cli.example/"
        assert Constants.RESOLUTION_TIMEOUT_SEC == 3.0

    def test_precedence(self, tmp_path, monkeypatch):
        path = tmp_path / "depsolver.yml"
        path.write_text("registry_url: https://yaml.example/\nrequest_timeout: 11\n", encoding="utf-8")
        monkeypatch.setenv("DEPSOLVER_REGISTRY_URL", "https://env.example/")
        load_runtime_config(_args(CONFIG=str(path)))
        assert Constants.REGISTRY_URL_PYPI == "https://env.example/"
        assert Constants.REQUEST_TIMEOUT == 11
        load_runtime_config(_args(CONFIG=str(path), REGISTRY_URL="https://cli.example/"))
        assert Constants.REGISTRY_URL_PYPI == "https://cli.example/"
