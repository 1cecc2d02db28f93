"""
runmd - Executable markdown renderer

Runs fenced python blocks in a markdown document and splices their output
back into the rendered text.
"""

__version__ = "1.0.0"

from .assembler import Assembler
from .context import ContextRegistry, ExecutionContext
from .directives import directive_parse
from .errors import RunmdError, ConfigurationError
from .executor import block_run
from .log import LOG, state_connectToLogger
from .renderer import Renderer
from .transform import LineTransform
from .watch import Watcher

__all__ = [
    "Assembler",
    "ContextRegistry",
    "ExecutionContext",
    "directive_parse",
    "RunmdError",
    "ConfigurationError",
    "block_run",
    "LOG",
    "state_connectToLogger",
    "Renderer",
    "LineTransform",
    "Watcher",
    "__version__",
]
