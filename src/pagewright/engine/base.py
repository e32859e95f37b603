"""Abstract rendering capability.

The orchestrator never compiles or executes template syntax itself. It talks
to an engine through this interface, so a different template language can be
plugged in without touching resolution or scope logic.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path
from typing import Any, TextIO

# Reserved reference name under which the layout is registered.
# Page templates inherit from it with {% extends "@layout" %}.
LAYOUT_REFERENCE = "@layout"


class RenderingEngine(ABC):
    """Interface for template engines used by the orchestrator.

    An engine:
    1. Resolves named references (the layout) registered at construction time
    2. Compiles and executes a template file against a scope
    3. Executes a single named block of a file, with the file's full
       inheritance chain available
    """

    @abstractmethod
    def register_reference(self, name: str, path: Path) -> None:
        """Register a named template reference.

        Args:
            name: Reference name templates use to refer to the file
            path: Template file the name points at
        """
        pass

    @abstractmethod
    def render(self, path: Path, scope: Mapping[str, Any], stream: TextIO) -> None:
        """Render a template file and write the output to a stream."""
        pass

    @abstractmethod
    def render_to_string(
        self,
        path: Path,
        scope: Mapping[str, Any],
        fragment: str | None = None,
    ) -> str:
        """Render a template file, or one named block of it, to a string.

        Raises:
            FragmentNotFound: If fragment is not defined in the template chain
        """
        pass

    @abstractmethod
    def fragments(self, path: Path) -> list[str]:
        """Return the names of all blocks renderable from a template file."""
        pass
