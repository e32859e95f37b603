"""Render orchestrator.

Validates template identities, resolves template files, assembles the render
scope and delegates rendering to a RenderingEngine.

Usage:
    orchestrator = RenderOrchestrator(
        JinjaEngine(search_paths=[Path("templates")]),
        layout="layouts/base.html.j2",
        base_path=Path("templates"),
    )
    orchestrator.set_global_params({"site_name": "Example"})

    html = orchestrator.render_document_to_string({"page": page})
    header = orchestrator.render_fragment_from_template_name("home", {"page": page}, "header")

Paths are resolved relative to base_path (default: working directory) unless
absolute. The layout is registered with the engine once, under the reference
name "@layout"; page templates inherit from it with {% extends "@layout" %}.
"""

import logging
import os
import sys
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any, TextIO

from pagewright.engine.base import LAYOUT_REFERENCE, RenderingEngine
from pagewright.errors import ConfigurationError, UnreadableTemplate
from pagewright.resolver import (
    DEFAULT_EXTENSION,
    DEFAULT_FALLBACK_NAME,
    TemplateResolver,
    is_readable,
)
from pagewright.scope import (
    PAGE_KEY,
    GlobalParamsFile,
    GlobalParamsStore,
    Params,
    ScopeContributor,
    apply_contributors,
    extract_template_name,
    is_valid_template_name,
    merge_layers,
    page_params,
    validate_template_name,
)
from pagewright.utils.logging import get_logger

if TYPE_CHECKING:
    from pagewright.config import PagewrightConfig

logger = get_logger(__name__)

DEFAULT_TEMPLATE_DIR = "pages"


class RenderOrchestrator:
    """Resolves page templates and renders documents or single blocks.

    Each render call is independent. The only mutable state is the global
    params layer, replaced through set_global_params().
    """

    def __init__(
        self,
        engine: RenderingEngine,
        layout: str | Path | None,
        template_dir: str | Path | None = None,
        base_path: Path | None = None,
        runtime_globals: Mapping[str, Any] | None = None,
        extension: str = DEFAULT_EXTENSION,
        fallback_name: str = DEFAULT_FALLBACK_NAME,
        scope_contributors: Iterable[ScopeContributor] = (),
    ) -> None:
        """Initialize the orchestrator.

        Args:
            engine: Rendering engine to delegate to
            layout: Layout file every page template extends (required)
            template_dir: Page template directory (default: "pages")
            base_path: Base for relative paths (default: working directory)
            runtime_globals: Lowest-precedence scope layer
            extension: Template file extension
            fallback_name: Template used when no page-specific file exists
            scope_contributors: Functions taking and returning the per-call
                vars, applied in order before the layers are merged

        Raises:
            ConfigurationError: If no layout is given
        """
        if not layout:
            raise ConfigurationError("layout", "Layout path is required.")

        self.engine = engine
        self.base_path = Path(base_path) if base_path is not None else Path.cwd()
        self.layout = self._resolve_path(layout)
        self.template_dir = self._resolve_path(template_dir or DEFAULT_TEMPLATE_DIR)
        self.resolver = TemplateResolver(self.template_dir, extension, fallback_name)

        self._runtime_globals: dict[str, Any] = dict(runtime_globals or {})
        self._global_params = GlobalParamsStore()
        self._contributors = tuple(scope_contributors)

        self.engine.register_reference(LAYOUT_REFERENCE, self.layout)
        logger.debug("Orchestrator ready (layout=%s, pages=%s)", self.layout, self.template_dir)

    @classmethod
    def from_config(
        cls,
        config: "PagewrightConfig",
        engine: RenderingEngine | None = None,
        runtime_globals: Mapping[str, Any] | None = None,
        scope_contributors: Iterable[ScopeContributor] = (),
    ) -> "RenderOrchestrator":
        """Build an orchestrator (and, by default, a JinjaEngine) from config."""
        renderer = config.renderer
        base_dir = config.base_dir

        if engine is None:
            from pagewright.engine.jinja import JinjaEngine

            engine = JinjaEngine(
                search_paths=[base_dir],
                autoescape=renderer.autoescape,
                cache_dir=config.cache_dir,
            )

        orchestrator = cls(
            engine,
            layout=renderer.layout,
            template_dir=renderer.template_dir,
            base_path=base_dir,
            runtime_globals=runtime_globals,
            extension=renderer.extension,
            fallback_name=renderer.fallback_name,
            scope_contributors=scope_contributors,
        )
        if config.globals is not None:
            orchestrator.set_global_params(config.globals)
        return orchestrator

    def _resolve_path(self, path: str | Path) -> Path:
        path = Path(path)
        return path if path.is_absolute() else self.base_path / path

    # -------------------------------------------------------------------------
    # Scope
    # -------------------------------------------------------------------------

    def set_global_params(
        self,
        params: Mapping[str, Any] | GlobalParamsFile | str | os.PathLike[str],
    ) -> "RenderOrchestrator":
        """Replace the global params available to all templates.

        Args:
            params: Mapping of params, or a params file path (not supported
                yet: rendering raises NotImplementedError while it is set)

        Returns:
            self, for chaining
        """
        self._global_params.set(params)
        return self

    def build_scope(self, vars: Mapping[str, Any]) -> dict[str, Any]:
        """Merge the four scope layers for one render call.

        Scope contributors run on vars first. Precedence, lowest first:
        runtime globals, global params, contributed vars, page params.
        """
        vars = apply_contributors(dict(vars), self._contributors)
        params = page_params(vars.get(PAGE_KEY))
        return merge_layers(
            self._runtime_globals,
            self._global_params.snapshot(),
            vars,
            params.values if isinstance(params, Params) else {},
        )

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def has_template(self, template_name: str) -> bool:
        """Check whether a template (or the fallback) exists for a name."""
        if not is_valid_template_name(template_name):
            return False
        return self.resolver.exists(template_name)

    def find_template(self, template_name: str) -> Path:
        """Validate a template name and resolve it to a file.

        Raises:
            InvalidTemplateName: If the name is not a safe identifier
            TemplateNotFound: If neither the template nor the fallback exists
        """
        return self.resolver.resolve(validate_template_name(template_name))

    # -------------------------------------------------------------------------
    # Documents
    # -------------------------------------------------------------------------

    def _prepare_document(self, vars: Mapping[str, Any]) -> tuple[Path, dict[str, Any]]:
        template_name = extract_template_name(vars)
        path = self.resolver.resolve(template_name)
        return path, self.build_scope(vars)

    def render_document(self, vars: Mapping[str, Any], stream: TextIO | None = None) -> None:
        """Render the full document for the page in vars to a stream.

        Args:
            vars: Template variables, including "page"
            stream: Output stream (default: stdout)

        Raises:
            InvalidTemplateName: If the page's template name is missing or unsafe
            TemplateNotFound: If no template file matches
        """
        path, scope = self._prepare_document(vars)
        self.engine.render(path, scope, stream or sys.stdout)
        logger.structured(logging.DEBUG, "Rendered document", template=str(path))

    def render_document_to_string(self, vars: Mapping[str, Any]) -> str:
        """Render the full document for the page in vars and return it."""
        path, scope = self._prepare_document(vars)
        output = self.engine.render_to_string(path, scope)
        logger.structured(logging.DEBUG, "Rendered document", template=str(path), chars=len(output))
        return output

    def render_partial(self, path: str | Path, vars: Mapping[str, Any]) -> str:
        """Render a whole partial template file with the merged scope.

        Raises:
            UnreadableTemplate: If the file does not exist or is not readable
        """
        path = Path(path)
        if not is_readable(path):
            raise UnreadableTemplate(path)

        output = self.engine.render_to_string(path, self.build_scope(vars))
        logger.structured(logging.DEBUG, "Rendered partial", template=str(path), chars=len(output))
        return output

    # -------------------------------------------------------------------------
    # Fragments
    # -------------------------------------------------------------------------

    def render_fragment_from_file(
        self,
        path: str | Path,
        vars: Mapping[str, Any],
        fragment: str,
    ) -> str:
        """Render one named block of a template file.

        The block is rendered with the file's inheritance chain available, so
        it sees inherited context, but only the block's own markup is returned.

        Args:
            path: Template file
            vars: Template variables
            fragment: Block name

        Returns:
            Rendered block markup

        Raises:
            UnreadableTemplate: If the file does not exist or is not readable
            FragmentNotFound: If the block is not defined in the template chain
        """
        path = Path(path)
        if not is_readable(path):
            raise UnreadableTemplate(path)

        scope = self.build_scope(vars)
        output = self.engine.render_to_string(path, scope, fragment)
        logger.structured(logging.DEBUG, "Rendered block", template=str(path), block=fragment)
        return output

    def render_fragment_from_template_name(
        self,
        template_name: str,
        vars: Mapping[str, Any],
        fragment: str,
    ) -> str:
        """Resolve a template name and render one named block of it.

        Raises:
            InvalidTemplateName: If the name is not a safe identifier
            TemplateNotFound: If no template file matches
            FragmentNotFound: If the block is not defined in the template chain
        """
        return self.render_fragment_from_file(self.find_template(template_name), vars, fragment)
