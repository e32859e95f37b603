"""Unit tests for configuration system."""

import logging
from pathlib import Path

import pytest
import yaml

from pagewright.config import (
    PagewrightConfig,
    RendererConfig,
    create_default_config,
    find_config_file,
    load_config,
    load_config_from_dict,
    substitute_env_vars,
)
from pagewright.errors import ConfigurationError


class TestSubstituteEnvVars:
    """Tests for environment variable substitution."""

    def test_substitute_string(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test substituting env var in string."""
        monkeypatch.setenv("TEST_VAR", "test_value")

        result = substitute_env_vars("prefix_${TEST_VAR}_suffix")

        assert result == "prefix_test_value_suffix"

    def test_substitute_in_nested_dict(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test substituting env vars in nested dictionaries and lists."""
        monkeypatch.setenv("SITE_NAME", "Acme")
        monkeypatch.setenv("THEME", "dark")

        data = {"globals": {"site_name": "${SITE_NAME}", "themes": ["${THEME}", "light"]}}
        result = substitute_env_vars(data)

        assert result == {"globals": {"site_name": "Acme", "themes": ["dark", "light"]}}

    def test_missing_env_var_raises(self) -> None:
        """Test that missing env var raises ValueError."""
        with pytest.raises(ValueError, match="Environment variable not set"):
            substitute_env_vars("${PAGEWRIGHT_NONEXISTENT_VAR}")

    def test_default_for_unset_var(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test ${VAR:-default} falls back when the variable is unset."""
        monkeypatch.delenv("PAGEWRIGHT_THEME", raising=False)

        assert substitute_env_vars("${PAGEWRIGHT_THEME:-light}") == "light"

    def test_set_var_wins_over_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test a set variable is used instead of the default."""
        monkeypatch.setenv("PAGEWRIGHT_THEME", "dark")

        assert substitute_env_vars("${PAGEWRIGHT_THEME:-light}") == "dark"

    def test_passthrough_non_string(self) -> None:
        """Test that non-string values pass through unchanged."""
        assert substitute_env_vars(123) == 123
        assert substitute_env_vars(True) is True
        assert substitute_env_vars(None) is None


class TestFindConfigFile:
    """Tests for config file discovery."""

    def test_find_dir_config(self, tmp_path: Path) -> None:
        """Test finding .pagewright/config.yaml."""
        config_dir = tmp_path / ".pagewright"
        config_dir.mkdir()
        config_file = config_dir / "config.yaml"
        config_file.write_text("renderer: {}")

        assert find_config_file(tmp_path) == config_file

    def test_find_root_config(self, tmp_path: Path) -> None:
        """Test finding pagewright.yaml at root."""
        config_file = tmp_path / "pagewright.yaml"
        config_file.write_text("renderer: {}")

        assert find_config_file(tmp_path) == config_file

    def test_prefer_dir_over_root(self, tmp_path: Path) -> None:
        """Test .pagewright/config.yaml is preferred over pagewright.yaml."""
        config_dir = tmp_path / ".pagewright"
        config_dir.mkdir()
        preferred = config_dir / "config.yaml"
        preferred.write_text("# preferred")
        (tmp_path / "pagewright.yaml").write_text("# fallback")

        assert find_config_file(tmp_path) == preferred

    def test_no_config_returns_none(self, tmp_path: Path) -> None:
        """Test returns None when no config found."""
        assert find_config_file(tmp_path) is None


class TestLoadConfigFromDict:
    """Tests for loading config from dictionary."""

    def test_default_values(self) -> None:
        """Test default configuration values."""
        config = load_config_from_dict({})

        assert config.renderer.layout == "layouts/base.html.j2"
        assert config.renderer.template_dir == "pages"
        assert config.renderer.base_path == "templates"
        assert config.renderer.extension == ".html.j2"
        assert config.renderer.fallback_name == "default"
        assert config.renderer.autoescape is True
        assert config.renderer.cache_dir is None
        assert config.renderer.passthrough_templates == ["admin"]
        assert config.globals is None

    def test_custom_renderer(self) -> None:
        """Test custom renderer configuration."""
        config = load_config_from_dict({
            "renderer": {
                "layout": "layouts/site.j2",
                "template_dir": "views",
                "extension": ".j2",
                "fallback_name": "page",
                "autoescape": False,
                "passthrough_templates": ["admin", "api"],
            }
        })

        assert config.renderer.layout == "layouts/site.j2"
        assert config.renderer.template_dir == "views"
        assert config.renderer.extension == ".j2"
        assert config.renderer.fallback_name == "page"
        assert config.renderer.autoescape is False
        assert config.renderer.passthrough_templates == ["admin", "api"]

    def test_globals_mapping(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test global params with env substitution."""
        monkeypatch.setenv("ANALYTICS_ID", "UA-1")

        config = load_config_from_dict({"globals": {"analytics_id": "${ANALYTICS_ID}"}})

        assert config.globals == {"analytics_id": "UA-1"}

    def test_globals_path(self) -> None:
        """Test global params given as a file path are kept as-is."""
        config = load_config_from_dict({"globals": "globals.yaml"})

        assert config.globals == "globals.yaml"

    def test_invalid_globals(self) -> None:
        """Test global params of another type are rejected."""
        with pytest.raises(ConfigurationError, match="globals"):
            load_config_from_dict({"globals": ["a", "b"]})

    def test_invalid_passthrough(self) -> None:
        """Test passthrough_templates must be a list."""
        with pytest.raises(ConfigurationError, match="passthrough_templates"):
            load_config_from_dict({"renderer": {"passthrough_templates": "admin"}})


class TestRendererConfig:
    """Tests for renderer configuration validation."""

    def test_layout_required(self) -> None:
        """Test an empty layout is rejected."""
        with pytest.raises(ConfigurationError, match="renderer.layout"):
            RendererConfig(layout="")

    def test_extension_needs_dot(self) -> None:
        """Test extensions must start with a dot."""
        with pytest.raises(ConfigurationError, match="must start with"):
            RendererConfig(extension="html")

    def test_fallback_name_validated(self) -> None:
        """Test the fallback name must be a safe template name."""
        with pytest.raises(ConfigurationError, match="fallback"):
            RendererConfig(fallback_name="../default")


class TestPaths:
    """Tests for config path resolution."""

    def test_paths_relative_to_config_file(self, tmp_path: Path) -> None:
        """Test base_path and cache_dir resolve against the config file directory."""
        config_file = tmp_path / "pagewright.yaml"
        config_file.write_text(
            yaml.safe_dump({"renderer": {"base_path": "site", "cache_dir": ".cache"}})
        )

        config = load_config(config_file)

        assert config.config_path == config_file
        assert config.base_dir == tmp_path.resolve() / "site"
        assert config.cache_dir == tmp_path.resolve() / ".cache"

    def test_paths_relative_to_cwd(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test paths resolve against the working directory without a config file."""
        monkeypatch.chdir(tmp_path)

        config = PagewrightConfig()

        assert config.base_dir == tmp_path.resolve() / "templates"
        assert config.cache_dir is None

    def test_absolute_base_path(self, tmp_path: Path) -> None:
        """Test absolute base paths are used as given."""
        config = PagewrightConfig(renderer=RendererConfig(base_path=str(tmp_path)))

        assert config.base_dir == tmp_path


class TestLoadConfig:
    """Tests for loading config files."""

    def test_missing_explicit_file(self, tmp_path: Path) -> None:
        """Test an explicit missing path raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_empty_file(self, tmp_path: Path) -> None:
        """Test an empty file yields defaults."""
        config_file = tmp_path / "pagewright.yaml"
        config_file.write_text("")

        config = load_config(config_file)

        assert config.renderer == RendererConfig()

    def test_no_discovery(self) -> None:
        """Test defaults when discovery is disabled."""
        config = load_config(auto_discover=False)

        assert config.config_path is None

    def test_default_config_is_loadable(self) -> None:
        """Test the generated default config parses to the defaults."""
        data = yaml.safe_load(create_default_config())

        config = load_config_from_dict(data)

        assert config.renderer == RendererConfig()
        assert config.globals is None

    def test_non_mapping_file(self, tmp_path: Path) -> None:
        """Test a config file holding a list is rejected."""
        config_file = tmp_path / "pagewright.yaml"
        config_file.write_text("- renderer\n")

        with pytest.raises(ConfigurationError, match="must contain a mapping"):
            load_config(config_file)

    def test_globals_path_anchored_to_config_dir(self, tmp_path: Path) -> None:
        """Test a relative globals file path resolves against the config file."""
        config_file = tmp_path / "pagewright.yaml"
        config_file.write_text("globals: params/globals.yaml\n")

        config = load_config(config_file)

        assert config.globals == str(tmp_path.resolve() / "params" / "globals.yaml")

    def test_missing_template_paths_warn(
        self,
        tmp_path: Path,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Test a missing layout and page directory are reported as warnings."""
        (tmp_path / "templates").mkdir()
        config_file = tmp_path / "pagewright.yaml"
        config_file.write_text("renderer: {}\n")

        with caplog.at_level(logging.WARNING, logger="pagewright.config"):
            load_config(config_file)

        assert "renderer.layout not found" in caplog.text
        assert "renderer.template_dir not found" in caplog.text

    def test_missing_base_path_warns(
        self,
        tmp_path: Path,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Test a missing template base path is reported once."""
        config_file = tmp_path / "pagewright.yaml"
        config_file.write_text("renderer: {}\n")

        with caplog.at_level(logging.WARNING, logger="pagewright.config"):
            load_config(config_file)

        assert "Template base path does not exist" in caplog.text
        assert "renderer.layout" not in caplog.text

    def test_site_config_loads_quietly(
        self,
        tmp_path: Path,
        templates_dir: Path,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Test a complete template tree produces no warnings."""
        config_file = tmp_path / "pagewright.yaml"
        config_file.write_text(yaml.safe_dump({"renderer": {"base_path": str(templates_dir)}}))

        with caplog.at_level(logging.WARNING, logger="pagewright.config"):
            load_config(config_file)

        assert caplog.records == []
