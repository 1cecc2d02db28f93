"""
Document assembler

Walks a markdown document line by line, executes the executable fenced
blocks it finds, and builds the rendered output.

The assembler is a two-phase state machine:

    PROSE ──(executable fence)──▶ COLLECTING ──(closing fence)──▶ PROSE
                                       │
                                  source lines

Every line, whatever the phase, goes through the same emission policy:
hidden lines are skipped, the active line transform (if any) rewrites the
line, and a transform result of None drops it.

On a closing fence the fence line is emitted, hiding is lifted, a blank
separator is written (for visible blocks), and the block is executed.
Whatever the block prints therefore lands directly below it, even when the
block itself was hidden.

A block left open at the end of the document is never executed.
"""

from pathlib import Path
from typing import List, Optional

from ..config import AppSettings, appsettings
from ..models.directives import BlockDirective
from ..models.render import AssemblerPhase, RenderPassState
from .context import ContextRegistry
from .directives import directive_parse, fence_isClose
from .executor import block_run
from .log import LOG


class Assembler:
    """
    Renders one document in a single pass

    Responsibilities:
    - Detect executable fences and collect block source
    - Execute blocks in fresh or shared contexts
    - Apply hiding and line transforms
    - Accumulate the output buffer
    """

    def __init__(
        self,
        source: str,
        input_file: Path,
        settings: Optional[AppSettings] = None,
    ) -> None:
        """
        Initialize assembler

        Args:
            source: Full document text
            input_file: Path of the document; blocks report errors against it
                        and require() resolves relative to its directory
            settings: Application settings (defaults to the appsettings singleton)
        """
        self.source = source
        self.input_file = Path(input_file)
        self.settings = settings or appsettings
        self.state = RenderPassState()
        self.registry = ContextRegistry(self.state, self.input_file, self.settings)

    def assemble(self) -> List[str]:
        """
        Process every line of the document

        Returns:
            Rendered output lines

        Raises:
            Exception: Whatever executed block code raises
        """
        lines = self.source.split('\n')
        LOG(f"Assembling {len(lines)} lines from {self.input_file.name}", level=2)

        try:
            for index, line in enumerate(lines):
                self.line_process(line, index)
        finally:
            self.registry.modules_release()

        if self.state.collecting:
            LOG(
                f"Block opened at line {self.state.line_offset} never closed; not executed",
                level=2,
            )

        LOG(f"Executed {self.state.block_count} blocks", level=2)
        return self.state.output_lines

    def line_process(self, line: str, index: int) -> None:
        """
        Dispatch one document line according to the current phase

        Args:
            line: Raw document line
            index: 0-based line index
        """
        if not self.state.collecting:
            directive = directive_parse(
                line,
                line_number=index + 1,
                language=self.settings.fence_language,
                require_flags=self.settings.require_flags,
            )
            if directive:
                self.fenceOpen_handle(directive, index)
            else:
                self.line_emit(line)
        elif fence_isClose(line):
            self.fenceClose_handle(line)
        else:
            self.state.script_lines.append(line)
            self.line_emit(line, in_block=True)

    def fenceOpen_handle(self, directive: BlockDirective, index: int) -> None:
        """Enter COLLECTING for an executable block"""
        self.state.phase = AssemblerPhase.COLLECTING
        self.state.directive = directive
        self.state.script_lines = []
        self.state.hide = directive.hide
        self.state.line_offset = index + 1
        self.line_emit(directive.fence, in_block=True)

    def fenceClose_handle(self, line: str) -> None:
        """
        Close the current block, execute it and splice in its output

        Args:
            line: The closing fence line
        """
        directive = self.state.directive
        # The block has ended: the closing fence is transformed as prose
        self.line_emit(line, in_block=False)

        # Output of a hidden block is still shown
        self.state.hide = False
        if directive is None or not directive.hide:
            self.output_write('')

        self.block_execute(directive)
        self.state.block_reset()

    def block_execute(self, directive: Optional[BlockDirective]) -> None:
        """Run the collected source in the context the directive names"""
        context_name = directive.context if directive else None
        context = self.registry.context_get(context_name)
        script = '\n'.join(self.state.script_lines)
        block_run(script, context, self.state.line_offset, str(self.input_file))
        context.console.pending_flush()
        self.state.block_count += 1

    def line_emit(self, line: str, in_block: bool = False) -> None:
        """
        Apply hiding and the active line transform, then write

        Args:
            line: Document line to emit
            in_block: True for the opening fence and source lines of executable blocks
        """
        if self.state.hide:
            return

        transformed: Optional[str] = line
        if self.state.transform is not None:
            transformed = self.state.transform.apply(line, in_block)

        if transformed is not None:
            self.output_write(transformed)

    def output_write(self, line: str) -> None:
        """Append a line to the output buffer unless hiding"""
        if not self.state.hide:
            self.state.output_lines.append(line)
