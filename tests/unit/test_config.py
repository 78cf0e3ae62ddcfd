"""Test cases for configuration system."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from classmap.config import (
    DEFAULT_TABLE_PATH,
    ClassmapConfig,
    _load_from_env,
    _load_from_pyproject_toml,
    load_config,
)


@pytest.fixture
def clean_env() -> dict[str, str]:
    """Environment without any CLASSMAP_ variables."""
    return {k: v for k, v in os.environ.items() if not k.startswith("CLASSMAP_")}


class TestClassmapConfig:
    """Test cases for ClassmapConfig Pydantic model."""

    def test_default_values(self) -> None:
        config = ClassmapConfig()
        assert config.table_path == DEFAULT_TABLE_PATH
        assert config.vendor_dir is None
        assert config.authoritative is False
        assert config.prepend is True
        assert config.platform_check is True
        assert config.verbose is False

    def test_extra_fields_forbidden(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            ClassmapConfig(extra_field="should_fail")  # type: ignore[call-arg]

        assert any("extra" in str(error).lower() for error in exc_info.value.errors())


class TestLoadFromEnv:
    """Test cases for _load_from_env function."""

    def test_load_all_env_variables(self, clean_env: dict[str, str]) -> None:
        env_vars = {
            "CLASSMAP_TABLE": "build/table.json",
            "CLASSMAP_VENDOR_DIR": "build",
            "CLASSMAP_AUTHORITATIVE": "true",
            "CLASSMAP_PREPEND": "0",
            "CLASSMAP_PLATFORM_CHECK": "no",
            "CLASSMAP_VERBOSE": "on",
        }

        with patch.dict(os.environ, {**clean_env, **env_vars}, clear=True):
            config = _load_from_env()

        assert config == {
            "table_path": "build/table.json",
            "vendor_dir": "build",
            "authoritative": True,
            "prepend": False,
            "platform_check": False,
            "verbose": True,
        }

    def test_load_no_env_variables(self, clean_env: dict[str, str]) -> None:
        with patch.dict(os.environ, clean_env, clear=True):
            assert _load_from_env() == {}


class TestLoadFromPyproject:
    """Test cases for _load_from_pyproject_toml function."""

    def test_section_found_in_parent(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "pyproject.toml").write_text(
            "[tool.classmap]\n"
            'table_path = "vendor/autoload/t.json"\n'
            "authoritative = true\n",
            encoding="utf-8",
        )
        nested = tmp_path / "pkg" / "sub"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)

        config = _load_from_pyproject_toml()

        assert config["table_path"] == tmp_path.resolve() / "vendor/autoload/t.json"
        assert config["authoritative"] is True

    def test_pyproject_without_section_is_skipped(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "pyproject.toml").write_text(
            '[tool.classmap]\nvendor_dir = "/opt/vendor"\n', encoding="utf-8"
        )
        inner = tmp_path / "inner"
        inner.mkdir()
        (inner / "pyproject.toml").write_text('[project]\nname = "x"\n', encoding="utf-8")
        monkeypatch.chdir(inner)

        config = _load_from_pyproject_toml()

        assert Path(config["vendor_dir"]) == Path("/opt/vendor")


class TestLoadConfig:
    """Test cases for load_config priority."""

    def test_runtime_overrides_env_and_file(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        clean_env: dict[str, str],
    ) -> None:
        (tmp_path / "pyproject.toml").write_text(
            "[tool.classmap]\nverbose = true\nprepend = false\n", encoding="utf-8"
        )
        monkeypatch.chdir(tmp_path)
        env = {**clean_env, "CLASSMAP_PREPEND": "true", "CLASSMAP_TABLE": "env.json"}

        with patch.dict(os.environ, env, clear=True):
            config = load_config(table_path="runtime.json")

        assert config.table_path == Path("runtime.json")
        assert config.prepend is True
        assert config.verbose is True

    def test_defaults_when_nothing_set(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        clean_env: dict[str, str],
    ) -> None:
        monkeypatch.chdir(tmp_path)

        with patch.dict(os.environ, clean_env, clear=True):
            with patch(
                "classmap.config._load_from_pyproject_toml", return_value={}
            ):
                config = load_config()

        assert config == ClassmapConfig()
