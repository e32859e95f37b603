"""pagewright configuration system.

Configuration is YAML-based. Supports environment variable substitution
(${VAR}, ${VAR:-default}) in config files.

Configuration file discovery (in priority order):
1. CLI --config argument
2. ./.pagewright/config.yaml
3. ./pagewright.yaml

Relative paths (base_path, cache_dir) are resolved against the directory of
the loaded config file, or the working directory when no file was loaded.
Layout and template directory are resolved against base_path.
"""

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from pagewright.errors import ConfigurationError
from pagewright.resolver import DEFAULT_EXTENSION, DEFAULT_FALLBACK_NAME
from pagewright.scope import is_valid_template_name

logger = logging.getLogger(__name__)

DEFAULT_LAYOUT = "layouts/base.html.j2"
DEFAULT_TEMPLATE_DIR = "pages"
DEFAULT_BASE_PATH = "templates"

# =============================================================================
# Configuration Dataclasses
# =============================================================================


@dataclass
class RendererConfig:
    """Template lookup and engine settings.

    Attributes:
        layout: Layout file, relative to base_path unless absolute
        template_dir: Page template directory, relative to base_path unless absolute
        base_path: Root of the template tree
        extension: Template file extension
        fallback_name: Template used when no page-specific template exists
        autoescape: HTML-escape variable output
        cache_dir: Directory for compiled template cache (disabled if None)
        passthrough_templates: Template names rendered outside pagewright
    """

    layout: str = DEFAULT_LAYOUT
    template_dir: str = DEFAULT_TEMPLATE_DIR
    base_path: str = DEFAULT_BASE_PATH
    extension: str = DEFAULT_EXTENSION
    fallback_name: str = DEFAULT_FALLBACK_NAME
    autoescape: bool = True
    cache_dir: str | None = None
    passthrough_templates: list[str] = field(default_factory=lambda: ["admin"])

    def __post_init__(self) -> None:
        """Validate renderer configuration."""
        if not self.layout:
            raise ConfigurationError("renderer.layout")

        if not self.extension.startswith("."):
            raise ConfigurationError(
                "renderer.extension",
                f"Template extension must start with '.': {self.extension}",
            )

        if not is_valid_template_name(self.fallback_name):
            raise ConfigurationError(
                "renderer.fallback_name",
                f"Invalid fallback template name: {self.fallback_name!r}",
            )


@dataclass
class PagewrightConfig:
    """Top-level pagewright configuration.

    Attributes:
        renderer: Template lookup and engine settings
        globals: Global params shared by every render (mapping), or a
            params file path (not supported, fails at render time)
    """

    renderer: RendererConfig = field(default_factory=RendererConfig)
    globals: dict[str, Any] | str | None = None

    _config_path: Path | None = field(default=None, repr=False)

    @property
    def config_path(self) -> Path | None:
        """Get the path to the config file that was loaded."""
        return self._config_path

    @property
    def root_dir(self) -> Path:
        """Directory relative config paths are anchored to."""
        if self._config_path is not None:
            return self._config_path.parent.resolve()
        return Path.cwd()

    @property
    def base_dir(self) -> Path:
        """Absolute root of the template tree."""
        base = Path(self.renderer.base_path)
        return base if base.is_absolute() else self.root_dir / base

    @property
    def cache_dir(self) -> Path | None:
        """Absolute compiled-template cache directory, if enabled."""
        if self.renderer.cache_dir is None:
            return None
        cache = Path(self.renderer.cache_dir)
        return cache if cache.is_absolute() else self.root_dir / cache


# =============================================================================
# Environment Variable Substitution
# =============================================================================


# ${NAME} or ${NAME:-default}
ENV_VAR_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-([^}]*))?\}")


def _expand_env(match: re.Match[str]) -> str:
    name, default = match.group(1), match.group(2)
    value = os.environ.get(name, default)
    if value is None:
        raise ValueError(f"Environment variable not set: {name}")
    return value


def substitute_env_vars(value: Any) -> Any:
    """Substitute environment variables in config values.

    Supports ${VAR} and ${VAR:-default}. Unset variables without a default
    raise ValueError. Strings nested in mappings and lists are substituted,
    other values pass through.
    """
    if isinstance(value, str):
        return ENV_VAR_PATTERN.sub(_expand_env, value)
    if isinstance(value, dict):
        return {key: substitute_env_vars(item) for key, item in value.items()}
    if isinstance(value, list):
        return [substitute_env_vars(item) for item in value]
    return value


# =============================================================================
# Config File Discovery
# =============================================================================

# Searched in order, relative to the start directory
CONFIG_FILE_CANDIDATES = (
    Path(".pagewright") / "config.yaml",
    Path("pagewright.yaml"),
)


def find_config_file(start_path: Path | None = None) -> Path | None:
    """Return the first config file found under start_path (default: cwd)."""
    root = (start_path or Path.cwd()).resolve()
    return next(
        (root / candidate for candidate in CONFIG_FILE_CANDIDATES if (root / candidate).is_file()),
        None,
    )


# =============================================================================
# Config Loading
# =============================================================================


def load_config_from_dict(data: dict[str, Any]) -> PagewrightConfig:
    """Load configuration from a dictionary.

    Args:
        data: Configuration dictionary

    Returns:
        PagewrightConfig instance

    Raises:
        ConfigurationError: If a setting has an invalid value
    """
    data = substitute_env_vars(data)

    config = PagewrightConfig()

    if "renderer" in data:
        renderer_data = data["renderer"] or {}
        defaults = RendererConfig()
        passthrough = renderer_data.get("passthrough_templates", defaults.passthrough_templates)
        if not isinstance(passthrough, list):
            raise ConfigurationError(
                "renderer.passthrough_templates",
                "renderer.passthrough_templates must be a list of template names",
            )
        config.renderer = RendererConfig(
            layout=renderer_data.get("layout", defaults.layout),
            template_dir=renderer_data.get("template_dir", defaults.template_dir),
            base_path=renderer_data.get("base_path", defaults.base_path),
            extension=renderer_data.get("extension", defaults.extension),
            fallback_name=renderer_data.get("fallback_name", defaults.fallback_name),
            autoescape=renderer_data.get("autoescape", defaults.autoescape),
            cache_dir=renderer_data.get("cache_dir", defaults.cache_dir),
            passthrough_templates=[str(name) for name in passthrough],
        )

    if "globals" in data:
        globals_data = data["globals"]
        if globals_data is not None and not isinstance(globals_data, (dict, str)):
            raise ConfigurationError(
                "globals",
                "globals must be a mapping or a params file path",
            )
        config.globals = globals_data

    return config


def _check_renderer_paths(config: PagewrightConfig) -> None:
    base_dir = config.base_dir
    if not base_dir.is_dir():
        logger.warning("Template base path does not exist: %s", base_dir)
        return

    for setting, value, exists in (
        ("renderer.layout", config.renderer.layout, Path.is_file),
        ("renderer.template_dir", config.renderer.template_dir, Path.is_dir),
    ):
        path = Path(value)
        path = path if path.is_absolute() else base_dir / path
        if not exists(path):
            logger.warning("%s not found: %s", setting, path)


def load_config(
    config_path: Path | None = None,
    auto_discover: bool = True,
) -> PagewrightConfig:
    """Load configuration from file.

    A globals file path is anchored to the config file's directory. Missing
    template paths are logged as warnings; rendering reports them as errors.

    Args:
        config_path: Explicit path to config file
        auto_discover: Whether to search for config file if not specified

    Returns:
        PagewrightConfig instance

    Raises:
        FileNotFoundError: If config_path specified but doesn't exist
        ConfigurationError: If the file is not a YAML mapping or a setting is invalid
    """
    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        found_path = config_path
    elif auto_discover:
        found_path = find_config_file()
    else:
        found_path = None

    if found_path is None:
        return PagewrightConfig()

    with open(found_path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigurationError("config", f"Config file must contain a mapping: {found_path}")

    config = load_config_from_dict(data)
    config._config_path = found_path

    if isinstance(config.globals, str) and not Path(config.globals).is_absolute():
        config.globals = str(config.root_dir / config.globals)

    _check_renderer_paths(config)
    logger.debug("Loaded config from %s (templates: %s)", found_path, config.base_dir)
    return config


def create_default_config() -> str:
    """Create default configuration YAML content.

    Returns:
        YAML string with default configuration and comments
    """
    return '''# pagewright configuration

renderer:
  base_path: "templates"              # Root of the template tree
  layout: "layouts/base.html.j2"      # Layout every page template extends ("@layout")
  template_dir: "pages"               # <template_dir>/<template><extension>
  extension: ".html.j2"
  fallback_name: "default"            # Used when no page-specific template exists
  autoescape: true
  # cache_dir: ".pagewright/cache"    # Compiled template cache
  passthrough_templates:
    - "admin"

# Params available to every template (lower priority than per-page values)
# globals:
#   site_name: "My Site"
#   analytics_id: "${ANALYTICS_ID}"
'''
