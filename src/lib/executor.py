"""
Block executor

Runs the collected source of one block synchronously inside an execution
context. The source is padded with blank lines so that the compiled code's
line numbers are the document's line numbers: a traceback (or SyntaxError)
raised by block code points at the right line of the markdown file.
"""

from typing import Any

from .context import ExecutionContext
from .log import LOG


def code_compile(source: str, line_offset: int, filename: str) -> Any:
    """
    Compile block source with line numbers shifted by line_offset

    Args:
        source: Block source text
        line_offset: Number of document lines before the block's first line
        filename: Reported in tracebacks (the markdown file path)

    Returns:
        Code object ready for exec()

    Raises:
        SyntaxError: With lineno relative to the document
    """
    return compile('\n' * line_offset + source, filename, 'exec')


def block_run(source: str, context: ExecutionContext, line_offset: int, filename: str) -> None:
    """
    Execute block source against a context's namespace

    Exceptions raised by the block propagate unchanged; there is no
    per-block recovery.

    Args:
        source: Block source text
        context: Execution context providing the namespace
        line_offset: Number of document lines before the block's first line
        filename: Markdown file path used for error reporting
    """
    LOG(
        f"Running block at line {line_offset + 1} in "
        f"{'context ' + repr(context.name) if context.name else 'anonymous context'}",
        level=3,
    )
    code = code_compile(source, line_offset, filename)
    exec(code, context.namespace)
