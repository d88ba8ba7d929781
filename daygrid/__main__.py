"""
Convenience entry point for running daygrid directly.

Usage: python -m daygrid [command] [options]
"""

from .cli.app import app

if __name__ == "__main__":
    app()
