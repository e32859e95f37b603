"""Jinja2 rendering engine.

Templates are addressed by absolute file path or by a registered reference
name (see LAYOUT_REFERENCE). Relative names used inside templates
({% include %}, {% import %}, constant {% extends %}) are looked up on the
configured search paths.
"""

import logging
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from typing import Any, TextIO

from jinja2 import (
    ChoiceLoader,
    Environment,
    FileSystemBytecodeCache,
    FileSystemLoader,
    FunctionLoader,
    Template,
    nodes,
)

from pagewright.engine.base import RenderingEngine
from pagewright.errors import FragmentNotFound

logger = logging.getLogger(__name__)

SourceTuple = tuple[str, str, Callable[[], bool]]


class JinjaEngine(RenderingEngine):
    """Rendering engine backed by a Jinja2 Environment.

    Usage:
        engine = JinjaEngine(search_paths=[Path("templates")])
        engine.register_reference("@layout", Path("templates/layouts/base.html.j2"))
        html = engine.render_to_string(Path("templates/pages/home.html.j2"), scope)
    """

    def __init__(
        self,
        search_paths: Iterable[Path] = (),
        autoescape: bool = True,
        cache_dir: Path | None = None,
        filters: Mapping[str, Callable[..., Any]] | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            search_paths: Directories for relative template names
            autoescape: Whether to HTML-escape variable output
            cache_dir: Directory for Jinja2's compiled bytecode cache
            filters: Extra filters to register on the environment
        """
        self._references: dict[str, Path] = {}

        loaders: list[Any] = [FunctionLoader(self._load_source)]
        paths = [str(p) for p in search_paths]
        if paths:
            loaders.append(FileSystemLoader(paths))

        bytecode_cache = None
        if cache_dir is not None:
            cache_dir.mkdir(parents=True, exist_ok=True)
            bytecode_cache = FileSystemBytecodeCache(str(cache_dir))

        self._env = Environment(
            loader=ChoiceLoader(loaders),
            autoescape=autoescape,
            bytecode_cache=bytecode_cache,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )

        if filters:
            self._env.filters.update(filters)

    @property
    def environment(self) -> Environment:
        """The underlying Jinja2 environment."""
        return self._env

    def register_reference(self, name: str, path: Path) -> None:
        self._references[name] = Path(path)
        logger.debug("Registered template reference %s -> %s", name, path)

    def _load_source(self, name: str) -> SourceTuple | None:
        """Load a registered reference or an absolute template path."""
        path = self._references.get(name)
        if path is None:
            path = Path(name)
            if not path.is_absolute():
                return None

        if not path.is_file():
            return None

        mtime = path.stat().st_mtime
        source = path.read_text(encoding="utf-8")

        def uptodate() -> bool:
            try:
                return path.stat().st_mtime == mtime
            except OSError:
                return False

        return source, str(path), uptodate

    def _get_template(self, path: Path) -> Template:
        return self._env.get_template(str(Path(path).absolute()))

    def render(self, path: Path, scope: Mapping[str, Any], stream: TextIO) -> None:
        output = self._get_template(path).render(dict(scope))
        stream.write(output)

    def render_to_string(
        self,
        path: Path,
        scope: Mapping[str, Any],
        fragment: str | None = None,
    ) -> str:
        template = self._get_template(path)
        if fragment is None:
            return template.render(dict(scope))
        return self._render_block(template, scope, fragment)

    def fragments(self, path: Path) -> list[str]:
        """Return the block names of a template and its constant ancestors.

        Listing happens without a scope, so only parents named by a constant
        {% extends %} are followed.
        """
        names: set[str] = set()
        seen: set[str | None] = set()
        template: Template | None = self._get_template(path)

        while template is not None and template.name not in seen:
            seen.add(template.name)
            names.update(template.blocks)
            parent_name = self._constant_parent(template)
            template = self._env.get_template(parent_name) if parent_name else None

        return sorted(names)

    # -------------------------------------------------------------------------
    # Block rendering
    # -------------------------------------------------------------------------

    def _render_block(
        self,
        template: Template,
        scope: Mapping[str, Any],
        fragment: str,
    ) -> str:
        """Render one block after running the template's top-level code.

        The root render function is drained first and its output discarded.
        That runs top-level imports and sets of the template and every
        ancestor, and lets Jinja2 stack the parent blocks on the context as
        it does for a full render, so super() and layout-only blocks resolve.
        """
        context = template.new_context(dict(scope))
        output: str | None = None

        try:
            for _ in template.root_render_func(context):
                pass
            block_stack = context.blocks.get(fragment)
            if block_stack:
                output = self._env.concat(block_stack[0](context))  # type: ignore[attr-defined]
        except Exception:
            self._env.handle_exception()

        if output is None:
            raise FragmentNotFound(
                template.filename or template.name or "", fragment, sorted(context.blocks)
            )
        return output

    def _constant_parent(self, template: Template) -> str | None:
        if template.name is None or self._env.loader is None:
            return None

        source, _, _ = self._env.loader.get_source(self._env, template.name)
        extends = self._env.parse(source, template.name, template.filename).find(nodes.Extends)
        if extends is not None and isinstance(extends.template, nodes.Const):
            return str(extends.template.value)
        return None
