"""Variable scope assembly.

A render scope is the shallow merge of four layers, later layers winning
key-for-key:

1. Runtime globals (framework-wide objects)
2. Global params (set on the orchestrator, shared by every render)
3. Per-call vars (including the ``page`` entry)
4. Page params (from the page's ``get_template_params()``, if provided)

This module also owns template-name extraction and validation, which must
happen before any file-system access.
"""

import os
import re
import threading
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Protocol, runtime_checkable

from pagewright.errors import InvalidTemplateName

# Letters, digits, underscore and hyphen only. Rejects separators and dots,
# so a template name can never escape the template directory.
TEMPLATE_NAME_PATTERN = re.compile(r"[A-Za-z0-9_-]+")

PAGE_KEY = "page"

ScopeContributor = Callable[[dict[str, Any]], dict[str, Any]]


# =============================================================================
# Template Names
# =============================================================================


def is_valid_template_name(template_name: object) -> bool:
    """Return True if template_name is a safe template identifier."""
    return isinstance(template_name, str) and bool(
        TEMPLATE_NAME_PATTERN.fullmatch(template_name)
    )


def validate_template_name(template_name: object) -> str:
    """Validate a template name.

    Args:
        template_name: Candidate template name

    Returns:
        The template name, unchanged

    Raises:
        InvalidTemplateName: If the name is missing or not a safe identifier
    """
    if not is_valid_template_name(template_name):
        raise InvalidTemplateName(template_name)
    return template_name  # type: ignore[return-value]


def template_name_of(page: object) -> str | None:
    """Extract the template name from a page identity.

    The page's ``template`` attribute may be the name itself or an object
    with a ``name`` attribute.
    """
    if page is None:
        return None
    template = getattr(page, "template", None)
    if template is None or isinstance(template, str):
        return template
    name = getattr(template, "name", None)
    return name if isinstance(name, str) else None


def extract_template_name(variables: Mapping[str, Any]) -> str:
    """Extract and validate the template name from per-call vars.

    Raises:
        InvalidTemplateName: If there is no page, no template name, or the
            name is not a safe identifier
    """
    return validate_template_name(template_name_of(variables.get(PAGE_KEY)))


# =============================================================================
# Page Params
# =============================================================================


@runtime_checkable
class TemplateParamsProvider(Protocol):
    """Capability of page objects that contribute their own template params."""

    def get_template_params(self) -> Any: ...


@dataclass(frozen=True)
class NoParams:
    """The page provides no template params."""


@dataclass(frozen=True)
class Params:
    """Template params provided by a page."""

    values: Mapping[str, Any] = field(default_factory=dict)


PageParams = NoParams | Params


def _to_mapping(value: Any) -> Mapping[str, Any]:
    if isinstance(value, Mapping):
        return value
    if hasattr(value, "__dict__"):
        return {k: v for k, v in vars(value).items() if not k.startswith("_")}
    raise TypeError(
        f"get_template_params() must return a mapping or an object, "
        f"got {type(value).__name__}"
    )


def page_params(page: object) -> PageParams:
    """Query a page for its template params.

    Args:
        page: Page identity object (may be None)

    Returns:
        NoParams if the page lacks the capability or returns None,
        otherwise Params with a shallow copy of the returned values
    """
    if page is None or not isinstance(page, TemplateParamsProvider):
        return NoParams()

    value = page.get_template_params()
    if value is None:
        return NoParams()
    return Params(dict(_to_mapping(value)))


# =============================================================================
# Global Params
# =============================================================================


@dataclass(frozen=True)
class GlobalParamsFile:
    """Placeholder for global params loaded from a file.

    Accepted by set_global_params() but not supported: building a scope while
    a file source is configured raises NotImplementedError.
    """

    path: Path


GlobalParams = Mapping[str, Any] | GlobalParamsFile


class GlobalParamsStore:
    """Copy-on-write holder for the global params layer.

    Writers swap in a new read-only mapping under a lock; renders take a
    snapshot reference and never observe a half-applied update.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._params: GlobalParams | None = None

    def set(self, params: Mapping[str, Any] | GlobalParamsFile | str | os.PathLike[str]) -> None:
        """Replace the global params.

        Args:
            params: Mapping of params, or a file path placeholder

        Raises:
            TypeError: If params is neither a mapping nor a path
        """
        value: GlobalParams
        if isinstance(params, GlobalParamsFile):
            value = params
        elif isinstance(params, (str, os.PathLike)):
            value = GlobalParamsFile(Path(params))
        elif isinstance(params, Mapping):
            value = MappingProxyType(dict(params))
        else:
            raise TypeError(
                f"Global params must be a mapping or a file path, got {type(params).__name__}"
            )

        with self._lock:
            self._params = value

    def snapshot(self) -> Mapping[str, Any]:
        """Return the current global params mapping.

        Raises:
            NotImplementedError: If a file source was configured
        """
        with self._lock:
            params = self._params

        if params is None:
            return {}
        if isinstance(params, GlobalParamsFile):
            raise NotImplementedError(
                f"File-based global params are not supported: {params.path}"
            )
        return params


# =============================================================================
# Merging
# =============================================================================


def merge_layers(*layers: Mapping[str, Any]) -> dict[str, Any]:
    """Shallow-merge scope layers; later layers overwrite earlier ones."""
    merged: dict[str, Any] = {}
    for layer in layers:
        merged.update(layer)
    return merged


def apply_contributors(
    scope: dict[str, Any],
    contributors: list[ScopeContributor] | tuple[ScopeContributor, ...],
) -> dict[str, Any]:
    """Run scope contributors in order, each receiving the previous result."""
    for contributor in contributors:
        result = contributor(scope)
        if not isinstance(result, dict):
            raise TypeError(
                f"Scope contributor {getattr(contributor, '__name__', contributor)!r} "
                f"must return a dict, got {type(result).__name__}"
            )
        scope = result
    return scope
