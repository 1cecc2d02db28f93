"""
Directive parser for executable fence lines

Recognises the opening fence of an executable block and extracts its flags.

Syntax:
    ```python                       plain fence, not executed
    ```python --run                 executable, anonymous context
    ```python --hide                source hidden, output shown
    ```python --context=setup       shares bindings with other 'setup' blocks
    ```python --context setup --hide
    ```python title="x" --run       info string kept, flags stripped

Flags follow minimist conventions:
    --name          → True
    --no-name       → False
    --name=value    → "value"
    --name value    → "value" (when value does not start with '-')
    bare tokens     → positionals

Parsing is a pure function of the line: no state is shared between calls.
"""

import re
from functools import lru_cache
from typing import Any, Dict, List, Optional, Pattern, Tuple

from ..models.directives import BlockDirective, flag_isTrue


FENCE_MARK = '```'

# First whitespace-delimited token starting with '--', through end of line
FLAG_STRING_PATTERN = re.compile(r'(?:^|\s)(--.*)$')


@lru_cache(maxsize=None)
def fencePattern_get(language: str) -> Pattern[str]:
    """
    Build the opening-fence regex for a language tag

    Group 1 is the fence with its language tag, group 2 the remainder of
    the line (possibly empty).
    """
    return re.compile(
        rf'^({re.escape(FENCE_MARK)}{re.escape(language)})(?=\s|$)\s*(.*)$',
        re.IGNORECASE,
    )


def fence_isClose(line: str) -> bool:
    """Check whether a line closes a fenced block"""
    return line.startswith(FENCE_MARK)


def flags_parse(text: str) -> Tuple[Dict[str, Any], List[str]]:
    """
    Parse a flag string into a dict of flags and a list of positionals

    Args:
        text: Flag string, e.g. "--hide --context=setup"

    Returns:
        (flags, positionals)

    Example:
        >>> flags_parse("--hide --context setup extra")
        ({'hide': True, 'context': 'setup'}, ['extra'])
    """
    flags: Dict[str, Any] = {}
    positionals: List[str] = []
    tokens = text.split()
    i = 0

    while i < len(tokens):
        token = tokens[i]
        i += 1

        if token == '--':
            # Everything after a bare '--' is positional
            positionals.extend(tokens[i:])
            break

        if not token.startswith('--'):
            positionals.append(token)
            continue

        body = token[2:]
        if '=' in body:
            name, value = body.split('=', 1)
            flags[name] = value
        elif body.startswith('no-'):
            flags[body[3:]] = False
        elif i < len(tokens) and not tokens[i].startswith('-'):
            flags[body] = tokens[i]
            i += 1
        else:
            flags[body] = True

    return flags, positionals


def directive_parse(
    line: str,
    line_number: int = 0,
    language: str = 'python',
    require_flags: bool = True,
) -> Optional[BlockDirective]:
    """
    Recognise an executable fence line

    Args:
        line: Candidate document line
        line_number: 1-based line number, recorded on the directive
        language: Fence language tag that marks executable blocks
        require_flags: Only accept fences that carry a '--' flag string;
                       with False every fence tagged with language executes

    Returns:
        BlockDirective if the line opens an executable block, else None

    Example:
        >>> d = directive_parse("```python --hide --context=demo")
        >>> (d.fence, d.hide, d.context)
        ('```python', True, 'demo')
        >>> directive_parse("```js") is None
        True
    """
    match = fencePattern_get(language).match(line)
    if not match:
        return None

    fence, remainder = match.group(1), match.group(2).strip()

    # Only the flag string is stripped; other info-string text stays on the fence
    flag_match = FLAG_STRING_PATTERN.search(remainder)
    flag_text = flag_match.group(1) if flag_match else ''
    info = remainder[:flag_match.start()].strip() if flag_match else remainder
    if info:
        fence = f"{fence} {info}"

    if require_flags and not flag_text:
        return None

    flags, positionals = flags_parse(flag_text)

    context = flags.get('context')
    if not isinstance(context, str) or not context:
        context = None

    return BlockDirective(
        fence=fence,
        hide=flag_isTrue(flags.get('hide', False)),
        context=context,
        flags=flags,
        positionals=positionals,
        line_number=line_number,
    )
