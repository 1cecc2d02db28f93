"""
Program state model and pipeline helper

Defines ProgramState dataclass for the functional pipeline pattern and
the pipeline() helper for composing CLI stages.
"""

from argparse import Namespace
from typing import Any, Optional, Type, TypeVar, List, Dict, Callable
from dataclasses import dataclass, field


PS = TypeVar("PS", bound="ProgramState")


@dataclass
class ProgramState:
    """
    Central state container for the CLI pipeline (state bus pattern).

    This dataclass carries all program state through the functional pipeline,
    with each stage adding new fields as rendering progresses.

    Pipeline stages and their state additions:
        - Initial: inputFiles, output, watch, lame, verbosity
        - options_check: inputFile, optionsOK
        - renderer_create: renderer
        - document_render: renderResult
        - document_watch: (no additions, runs until interrupted)
        - results_report: (no additions, terminal stage)

    Attributes:
        inputFiles: Positional input files given on the command line
        output: Optional output .md file (stdout when None)
        watch: Re-render whenever the input file changes
        lame: Suppress the attribution footer
        verbosity: Logging verbosity level (1-3)
        optionsOK: Option validation passed
        inputFile: The single validated input file
        renderer: Renderer bound to the input/output pair
        renderResult: Render statistics (output, line_count, block_count)
    """

    # CLI arguments
    inputFiles: List[str] = field(default_factory=list)
    output: Optional[str] = field(default=None)
    watch: bool = field(default=False)
    lame: bool = field(default=False)
    verbosity: int = field(default=1)

    # Pipeline state
    optionsOK: bool = field(default=False)
    inputFile: str = field(default="")
    renderer: Optional[Any] = field(default=None)  # Renderer at runtime
    renderResult: Optional[Dict] = field(default=None)

    @classmethod
    def state_createFromNamespace(cls: Type["ProgramState"], options: Namespace) -> "ProgramState":
        """
        Create ProgramState from an argparse Namespace.

        Args:
            options: Parsed CLI arguments

        Returns:
            ProgramState instance with all known CLI options as attributes
        """
        import dataclasses
        valid_fields = {f.name for f in dataclasses.fields(cls)}

        # Keep only options that correspond to ProgramState fields
        filtered_options = {k: v for k, v in vars(options).items() if k in valid_fields}
        return cls(**filtered_options)

    def copy(self: PS) -> PS:
        """
        Creates a shallow copy of the ProgramState instance.

        Returns:
            A new ProgramState instance.
        """
        return type(self)(**self.__dict__)


def pipeline(
    initial_state: ProgramState, *stages: Callable[[ProgramState], ProgramState]
) -> ProgramState:
    """
    Execute a functional pipeline of state transformations.

    Each stage is a function (ProgramState) -> ProgramState that receives
    the output of the previous stage and returns a new state.

    Args:
        initial_state: Starting ProgramState
        *stages: Variable number of stage functions to execute in order

    Returns:
        Final ProgramState after all transformations

    Example:
        final_state = pipeline(
            initial_state,
            options_check,
            renderer_create,
            document_render,
            results_report
        )
    """
    from functools import reduce
    return reduce(lambda state, stage: stage(state), stages, initial_state)
