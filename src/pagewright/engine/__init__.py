"""Rendering engines.

The orchestrator depends only on RenderingEngine; JinjaEngine is the default
implementation.
"""

from pagewright.engine.base import LAYOUT_REFERENCE, RenderingEngine
from pagewright.engine.jinja import JinjaEngine

__all__ = ["LAYOUT_REFERENCE", "JinjaEngine", "RenderingEngine"]
