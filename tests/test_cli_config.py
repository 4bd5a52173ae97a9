"""Tests for configuration loading and override precedence."""

from types import SimpleNamespace

from deptree.cli_config import (
    apply_cli_overrides,
    apply_config,
    apply_env_overrides,
    configure_runtime,
    load_config,
)
from deptree.constants import Constants


def write(tmp_path, text, name="deptree.yml"):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return str(path)


class TestLoadConfig:
    """Config file parsing."""

    def test_section(self, tmp_path):
        path = write(tmp_path, "deptree:\n  concurrency: 8\n  platform:\n    os: darwin\n")

        assert load_config(path) == {"concurrency": 8, "platform": {"os": "darwin"}}

    def test_top_level_keys(self, tmp_path):
        assert load_config(write(tmp_path, "registry: https://mirror.example/\n")) == {
            "registry": "https://mirror.example/"
        }

    def test_json_config(self, tmp_path):
        path = write(tmp_path, '{"deptree": {"request_timeout": 5}}', name="deptree.json")

        assert load_config(path) == {"request_timeout": 5}

    def test_missing_file(self, tmp_path):
        assert load_config(str(tmp_path / "nope.yml")) == {}

    def test_invalid_yaml(self, tmp_path):
        assert load_config(write(tmp_path, "deptree: [unclosed\n")) == {}

    def test_no_path(self):
        assert load_config(None) == {}


class TestApplyConfig:
    """Applying settings to Constants."""

    def test_values_applied(self):
        apply_config({
            "registry": "https://mirror.example/",
            "request_timeout": "12.5",
            "concurrency": 7,
            "cache_max_age": 60,
            "platform": {"os": "win32", "cpu": "ia32", "libc": "musl"},
        })

        assert Constants.REGISTRY_URL_NPM == "https://mirror.example/"
        assert Constants.REQUEST_TIMEOUT == 12.5
        assert Constants.PACKUMENT_FETCH_CONCURRENCY == 7
        assert Constants.PACKUMENT_CACHE_MAX_AGE_SEC == 60
        assert (Constants.TARGET_OS, Constants.TARGET_CPU, Constants.TARGET_LIBC) == ("win32", "ia32", "musl")

    def test_invalid_values_ignored(self):
        before = Constants.PACKUMENT_FETCH_CONCURRENCY

        apply_config({"concurrency": "lots"})
        apply_config({"concurrency": 0})

        assert Constants.PACKUMENT_FETCH_CONCURRENCY == before


class TestPrecedence:
    """CLI > environment > config file."""

    def test_env_overrides_config(self, monkeypatch):
        monkeypatch.setenv("DEPTREE_REGISTRY_URL", "https://env.example/")
        apply_config({"registry": "https://config.example/"})

        apply_env_overrides()

        assert Constants.REGISTRY_URL_NPM == "https://env.example/"

    def test_cli_overrides_everything(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DEPTREE_REGISTRY_URL", "https://env.example/")
        path = write(tmp_path, "deptree:\n  registry: https://config.example/\n  concurrency: 3\n")
        args = SimpleNamespace(
            CONFIG=path, REGISTRY="https://cli.example/", CONCURRENCY=None, TIMEOUT=None,
            TARGET_OS=None, TARGET_CPU=None, TARGET_LIBC="musl",
        )

        configure_runtime(args)

        assert Constants.REGISTRY_URL_NPM == "https://cli.example/"
        assert Constants.PACKUMENT_FETCH_CONCURRENCY == 3
        assert Constants.TARGET_LIBC == "musl"

    def test_cli_overrides_tolerate_missing_attributes(self):
        before = Constants.REGISTRY_URL_NPM

        apply_cli_overrides(SimpleNamespace())

        assert Constants.REGISTRY_URL_NPM == before
