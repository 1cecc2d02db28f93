"""
runmd - Executable markdown renderer

Runs the fenced python blocks of a markdown document and shows their real
output directly below each block.
"""

__version__ = "1.0.0"

from .lib import Renderer, Assembler, Watcher, ConfigurationError, LOG, state_connectToLogger

__all__ = ["Renderer", "Assembler", "Watcher", "ConfigurationError", "LOG", "state_connectToLogger", "__version__"]
