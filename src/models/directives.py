"""
Block directive model

Defines the structured result of recognising an executable fence line,
produced by lib.directives.directive_parse() and consumed by the assembler.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set


# Flag values (as strings) that count as "on" for boolean directives
TRUTHY_VALUES: Set[str] = {'true', 'yes', 'on', '1'}


@dataclass
class BlockDirective:
    """
    Parsed opening fence of an executable block

    Exists only from the moment the fence is recognised until the block
    has been executed.

    Attributes:
        fence: Opening fence line with the flag string stripped
               (e.g. "```python"), emitted in place of the original line
        hide: Suppress the block's fences and source in the output
        context: Name of a shared execution context, None for anonymous
        flags: Every parsed flag, including ones runmd does not interpret
        positionals: Bare tokens found in the flag string
        line_number: 1-based document line of the opening fence

    Example:
        For "```python --hide --context=setup" on line 3:
        BlockDirective(
            fence="```python",
            hide=True,
            context="setup",
            flags={"hide": True, "context": "setup"},
            positionals=[],
            line_number=3
        )
    """
    fence: str
    hide: bool = False
    context: Optional[str] = None
    flags: Dict[str, Any] = field(default_factory=dict)
    positionals: List[str] = field(default_factory=list)
    line_number: int = 0

    def flag_get(self, name: str, default: Any = None) -> Any:
        """Look up a raw flag value by name"""
        return self.flags.get(name, default)


def flag_isTrue(value: Any) -> bool:
    """Interpret a parsed flag value as a boolean"""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in TRUTHY_VALUES
    return bool(value)
