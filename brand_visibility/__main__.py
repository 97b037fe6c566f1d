"""
Entry point for running Brand Visibility as a module.

Enables execution via:
    python -m brand_visibility [command] [options]

This is equivalent to running the installed CLI:
    brand-visibility [command] [options]
"""

from brand_visibility.cli import app

if __name__ == "__main__":
    app()
