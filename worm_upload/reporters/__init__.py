"""Reporter modules for outputting run results."""

from .base import Reporter
from .console import ConsoleReporter

__all__ = ["Reporter", "ConsoleReporter"]
