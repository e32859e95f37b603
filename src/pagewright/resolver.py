"""Template resolver: maps a template name to a file on disk.

Lookup convention:
1. <directory>/<template_name><extension>
2. <directory>/<fallback_name><extension>

The resolver only reads file-system metadata. Callers are responsible for
validating template names before calling it (see pagewright.scope).
"""

import logging
import os
from pathlib import Path

from pagewright.errors import TemplateNotFound

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = ".html.j2"
DEFAULT_FALLBACK_NAME = "default"


def is_readable(path: Path) -> bool:
    """Return True if path is an existing regular file the process can read."""
    return path.is_file() and os.access(path, os.R_OK)


class TemplateResolver:
    """Finds the best-matching template file for a template name.

    Usage:
        resolver = TemplateResolver(Path("templates/pages"))
        path = resolver.resolve("basic-page")
    """

    def __init__(
        self,
        directory: Path,
        extension: str = DEFAULT_EXTENSION,
        fallback_name: str = DEFAULT_FALLBACK_NAME,
    ) -> None:
        """Initialize the resolver.

        Args:
            directory: Directory containing page templates
            extension: File extension appended to template names
            fallback_name: Template used when no specific file exists
        """
        self.directory = Path(directory)
        self.extension = extension
        self.fallback_name = fallback_name

    def candidates(self, template_name: str) -> list[Path]:
        """Return the ordered list of paths searched for a template name."""
        paths = [self.directory / f"{template_name}{self.extension}"]
        if template_name != self.fallback_name:
            paths.append(self.directory / f"{self.fallback_name}{self.extension}")
        return paths

    def _find(self, template_name: str) -> Path | None:
        for path in self.candidates(template_name):
            if is_readable(path):
                return path
        return None

    def resolve(self, template_name: str) -> Path:
        """Resolve a template name to a readable file path.

        Args:
            template_name: Validated template name (e.g., "home", "basic-page")

        Returns:
            Path to the specific template, or to the fallback template

        Raises:
            TemplateNotFound: If neither file exists or is readable
        """
        path = self._find(template_name)
        if path is None:
            logger.debug("No template for %s in %s", template_name, self.directory)
            raise TemplateNotFound(template_name, self.candidates(template_name))

        logger.debug("Resolved template %s to %s", template_name, path)
        return path

    def exists(self, template_name: str) -> bool:
        """Check whether resolve() would succeed for a template name."""
        return self._find(template_name) is not None
