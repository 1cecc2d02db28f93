"""
Render pass state model

Transient state for one top-to-bottom processing of a document. A fresh
RenderPassState is created for every render and discarded afterwards.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import List, Optional, TYPE_CHECKING

from .directives import BlockDirective

if TYPE_CHECKING:
    from ..lib.transform import LineTransform


class AssemblerPhase(Enum):
    """
    Phases of the document assembler state machine
    """
    PROSE = "prose"              # passthrough, waiting for an executable fence
    COLLECTING = "collecting"    # inside an executable block, gathering source


@dataclass
class RenderPassState:
    """
    Mutable state of a single render pass

    Attributes:
        phase: Current assembler phase
        hide: Suppress emission of passthrough lines (and captured output
              while set)
        transform: Active line transform, None when no transform installed
        directive: Directive of the block being collected
        script_lines: Source lines collected for the current block
        line_offset: Number of document lines preceding the block's first
                     source line
        output_lines: Rendered output buffer (append-only)
        block_count: Number of blocks executed so far
    """
    phase: AssemblerPhase = AssemblerPhase.PROSE
    hide: bool = False
    transform: Optional['LineTransform'] = None
    directive: Optional[BlockDirective] = None
    script_lines: List[str] = field(default_factory=list)
    line_offset: int = 0
    output_lines: List[str] = field(default_factory=list)
    block_count: int = 0

    @property
    def collecting(self) -> bool:
        """True while inside an executable block"""
        return self.phase is AssemblerPhase.COLLECTING

    def block_reset(self) -> None:
        """Return to prose after a block has been executed"""
        self.phase = AssemblerPhase.PROSE
        self.directive = None
        self.script_lines = []
