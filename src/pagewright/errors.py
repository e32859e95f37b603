"""Error taxonomy for template resolution and rendering.

Every failure detected by pagewright itself is a subclass of PagewrightError.
Errors raised inside the rendering engine (template syntax errors, undefined
variables, runtime errors) are not wrapped and pass through unchanged.
"""

from pathlib import Path


class PagewrightError(Exception):
    """Base class for all pagewright errors."""


class ConfigurationError(PagewrightError):
    """Raised when the renderer is constructed with invalid or missing settings."""

    def __init__(self, setting: str, message: str | None = None) -> None:
        self.setting = setting
        self.message = message or f"Missing required setting: {setting}"
        super().__init__(self.message)


class InvalidTemplateName(PagewrightError, ValueError):
    """Raised when a template identity is absent or not a safe identifier."""

    def __init__(self, template_name: object) -> None:
        self.template_name = template_name
        if template_name is None:
            message = "Invalid or missing template name."
        else:
            message = f"Invalid template name: {template_name!r}"
        super().__init__(message)


class TemplateNotFound(PagewrightError, LookupError):
    """Raised when neither the named template nor the fallback template exists."""

    def __init__(self, template_name: str, searched: list[Path] | None = None) -> None:
        self.template_name = template_name
        self.searched = list(searched or [])
        message = f"Template not found for '{template_name}'"
        if self.searched:
            message += " (searched: " + ", ".join(str(p) for p in self.searched) + ")"
        super().__init__(message)


class UnreadableTemplate(PagewrightError, LookupError):
    """Raised when an explicit template file path does not exist or is not readable."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        super().__init__(f"Template not found or not readable: {self.path}")


class FragmentNotFound(PagewrightError, LookupError):
    """Raised when a named block is not defined anywhere in a template's chain."""

    def __init__(
        self,
        path: str | Path,
        fragment: str,
        available: list[str] | None = None,
    ) -> None:
        self.path = Path(path)
        self.fragment = fragment
        self.available = list(available or [])
        message = f"Block '{fragment}' not found in {self.path}"
        if self.available:
            message += f". Available blocks: {', '.join(self.available)}"
        super().__init__(message)
