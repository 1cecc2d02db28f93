"""
Line transforms installed by executed block code

Block code calls set_line_transformer() to rewrite or drop every document
line emitted afterwards, until the next block starts executing.

Example (inside a runmd block):
    set_line_transformer(lambda line, in_block: line.upper())
    set_line_transformer(lambda line, in_block: None if not line.strip() else line)
    set_line_transformer(None)   # clear
"""

from typing import Any, Callable, Optional, Protocol, runtime_checkable


@runtime_checkable
class LineTransform(Protocol):
    """Rewrites one emitted line; returning None drops the line"""

    def apply(self, line: str, in_block: bool) -> Optional[str]:
        ...


class FunctionTransform:
    """
    Adapts a plain callable (line, in_block) -> str | None to LineTransform
    """

    def __init__(self, func: Callable[[str, bool], Optional[str]]) -> None:
        self.func = func

    def apply(self, line: str, in_block: bool) -> Optional[str]:
        result = self.func(line, in_block)
        return None if result is None else str(result)

    def __repr__(self) -> str:
        return f"FunctionTransform({self.func!r})"


def transform_make(obj: Any) -> Optional[LineTransform]:
    """
    Coerce whatever block code handed to set_line_transformer()

    Args:
        obj: None (clear), an object with apply(line, in_block), or a callable

    Returns:
        LineTransform or None

    Raises:
        TypeError: obj is neither None, a LineTransform nor callable
    """
    if obj is None:
        return None
    if isinstance(obj, LineTransform):
        return obj
    if callable(obj):
        return FunctionTransform(obj)
    raise TypeError(
        f"Line transformer must be callable or define apply(), got {type(obj).__name__}"
    )
