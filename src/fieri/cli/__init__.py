"""
Command-line interface: entry point, interactive shell and command set.
"""

from fieri.cli.main import app, run
from fieri.cli.shell import Shell

__all__ = [
    "Shell",
    "app",
    "run",
]
