"""Shared pytest fixtures for pagewright tests.

Fixtures are organized by category:
- Path fixtures: the sample site shipped with the tests
- Site fixtures: a writable copy of the sample site per test
- Renderer fixtures: engines and orchestrators wired to the copy
"""

import shutil
from pathlib import Path
from typing import Any

import pytest

from pagewright.engine import JinjaEngine
from pagewright.orchestrator import RenderOrchestrator
from pagewright.page import Page
from tests.fixtures import SITE_TEMPLATES_DIR

# =============================================================================
# Path Fixtures
# =============================================================================


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


# =============================================================================
# Site Fixtures
# =============================================================================


@pytest.fixture
def templates_dir(tmp_path: Path) -> Path:
    """Copy the sample templates tree into a temporary directory."""
    target = tmp_path / "templates"
    shutil.copytree(SITE_TEMPLATES_DIR, target)
    return target


@pytest.fixture
def pages_dir(templates_dir: Path) -> Path:
    """Return the page template directory of the temporary site."""
    return templates_dir / "pages"


# =============================================================================
# Renderer Fixtures
# =============================================================================


@pytest.fixture
def engine(templates_dir: Path) -> JinjaEngine:
    """Create a Jinja engine searching the temporary site."""
    return JinjaEngine(search_paths=[templates_dir])


@pytest.fixture
def orchestrator(engine: JinjaEngine, templates_dir: Path) -> RenderOrchestrator:
    """Create an orchestrator for the temporary site."""
    return RenderOrchestrator(
        engine,
        layout="layouts/base.html.j2",
        template_dir="pages",
        base_path=templates_dir,
    )


@pytest.fixture
def home_page() -> Page:
    """Return a page using the home template."""
    return Page(template="home")


@pytest.fixture
def home_vars(home_page: Page) -> dict[str, Any]:
    """Return per-call vars for rendering the home page."""
    return {
        "page": home_page,
        "heading": "Welcome",
        "body": "Hello from home",
        "site_name": "Acme",
        "nav": ["Home", "About"],
    }
