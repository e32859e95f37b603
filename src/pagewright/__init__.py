"""pagewright - template resolution and scoped rendering.

pagewright sits between a content runtime and a template engine. Given a
page identity and a bag of variables it:
- Resolves the page's template file by name, falling back to a default template
- Merges runtime globals, global params, call vars and page params into one scope
- Renders the full document, or single named blocks, with layout inheritance intact
"""

from pagewright.engine import LAYOUT_REFERENCE, JinjaEngine, RenderingEngine
from pagewright.errors import (
    ConfigurationError,
    FragmentNotFound,
    InvalidTemplateName,
    PagewrightError,
    TemplateNotFound,
    UnreadableTemplate,
)
from pagewright.orchestrator import RenderOrchestrator
from pagewright.page import Page, PageRenderer
from pagewright.resolver import TemplateResolver

__version__ = "0.1.0"
__author__ = "pagewright contributors"

__all__ = [
    "LAYOUT_REFERENCE",
    "ConfigurationError",
    "FragmentNotFound",
    "InvalidTemplateName",
    "JinjaEngine",
    "Page",
    "PageRenderer",
    "PagewrightError",
    "RenderOrchestrator",
    "RenderingEngine",
    "TemplateNotFound",
    "TemplateResolver",
    "UnreadableTemplate",
]
