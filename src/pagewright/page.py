"""Page rendering for embedding applications.

PageRenderer is the entry point applications use to render pages:
1. build_page_scope() creates the base scope for a page; the registered
   scope contributors then run on it, in registration order, for every render
2. render_page() renders the full document (page template extending the layout)
3. render_blocks() renders selected blocks only, from the same page template,
   so inherited layout context stays intact

Pages whose template is listed in renderer.passthrough_templates are not
rendered by pagewright; they are handed to the passthrough callable.
"""

import logging
import os
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from pagewright.config import PagewrightConfig
from pagewright.engine.base import RenderingEngine
from pagewright.orchestrator import RenderOrchestrator
from pagewright.scope import (
    PAGE_KEY,
    GlobalParamsFile,
    ScopeContributor,
    template_name_of,
)

logger = logging.getLogger(__name__)


@dataclass
class Page:
    """Minimal page identity.

    Attributes:
        template: Template name used to find the page template
        params: Page-specific template params (highest scope precedence)
    """

    template: str
    params: dict[str, Any] = field(default_factory=dict)

    def get_template_params(self) -> dict[str, Any]:
        return dict(self.params)


class PageRenderer:
    """Renders pages through a lazily created RenderOrchestrator.

    Usage:
        renderer = PageRenderer(config, scope_contributors=[add_navigation])
        html = renderer.render_page(page)
        partial = renderer.render_blocks(page, ["header", "main"])
    """

    def __init__(
        self,
        config: PagewrightConfig | None = None,
        runtime_globals: Mapping[str, Any] | None = None,
        scope_contributors: Iterable[ScopeContributor] = (),
        engine: RenderingEngine | None = None,
        passthrough: Callable[[Any], str] | None = None,
    ) -> None:
        """Initialize the page renderer.

        Args:
            config: pagewright configuration (defaults apply if None)
            runtime_globals: Lowest-precedence scope layer
            scope_contributors: Functions taking and returning the page scope,
                applied in order
            engine: Rendering engine (JinjaEngine built from config if None)
            passthrough: Renders pages whose template is a passthrough template
        """
        self.config = config or PagewrightConfig()
        self._runtime_globals = dict(runtime_globals or {})
        self._contributors = tuple(scope_contributors)
        self._engine = engine
        self._passthrough = passthrough
        self._orchestrator: RenderOrchestrator | None = None

    @property
    def orchestrator(self) -> RenderOrchestrator:
        """The orchestrator, created on first use."""
        if self._orchestrator is None:
            self._orchestrator = RenderOrchestrator.from_config(
                self.config,
                engine=self._engine,
                runtime_globals=self._runtime_globals,
                scope_contributors=self._contributors,
            )
        return self._orchestrator

    def set_global_params(
        self,
        params: Mapping[str, Any] | GlobalParamsFile | str | os.PathLike[str],
    ) -> "PageRenderer":
        """Set global params available to all templates."""
        self.orchestrator.set_global_params(params)
        return self

    def build_page_scope(self, page: Any) -> dict[str, Any]:
        """Build the base per-call scope for a page."""
        return {
            PAGE_KEY: page,
            "config": self.config,
        }

    def render_page(self, page: Any) -> str:
        """Render the full page document.

        Returns:
            Rendered document, or the passthrough output for passthrough templates
        """
        template_name = template_name_of(page)
        if template_name in self.config.renderer.passthrough_templates:
            logger.debug("Template %s is passthrough; skipping render", template_name)
            return self._passthrough(page) if self._passthrough is not None else ""

        return self.orchestrator.render_document_to_string(self.build_page_scope(page))

    def render_blocks(self, page: Any, block_names: Iterable[str]) -> str:
        """Render selected blocks of the page template.

        Args:
            page: Page identity
            block_names: Blocks to render, in output order

        Returns:
            Concatenated block markup
        """
        scope = self.build_page_scope(page)
        template_name = template_name_of(page)

        output = []
        for block_name in block_names:
            output.append(
                self.orchestrator.render_fragment_from_template_name(
                    template_name,  # type: ignore[arg-type]
                    scope,
                    block_name,
                )
            )

        return "".join(output)
