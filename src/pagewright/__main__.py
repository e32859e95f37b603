"""Entry point for running pagewright as a module.

Usage:
    python -m pagewright [command] [options]

Example:
    python -m pagewright render home --var title=Welcome
    python -m pagewright check basic-page
"""

from pagewright.cli import app

if __name__ == "__main__":
    app()
