"""Test fixtures for pagewright.

Sample Sites:
- site/templates: layout, page templates (home, default) and a partial
"""

from pathlib import Path

# Path to fixtures directory
FIXTURES_DIR = Path(__file__).parent

# Sample site with a templates tree
SITE_DIR = FIXTURES_DIR / "site"
SITE_TEMPLATES_DIR = SITE_DIR / "templates"
