#!/usr/bin/env python3
"""
runmd - Executable markdown renderer

Runs the fenced python blocks of a markdown document and splices their
real output into the rendered markdown, directly below each block.

Philosophy:
    - Samples in documentation must actually run
    - The output readers see is the output the code produced
    - Markdown in, markdown out: no templating, no AST

Block syntax:
    ```python --context=demo --hide
    greeting = "hello"
    ```

Usage:
    runmd README-src.md --output=README.md

Examples:
    # Render to stdout
    runmd docs/guide.src.md

    # Render to a file, without the attribution footer
    runmd docs/guide.src.md --output=docs/guide.md --lame

    # Re-render whenever the source changes
    runmd docs/guide.src.md --output=docs/guide.md --watch
"""

import sys
from argparse import ArgumentParser, Namespace, ArgumentDefaultsHelpFormatter
from typing import List, Optional

from .config import appsettings
from .lib import Renderer, Watcher, ConfigurationError, __version__, LOG, state_connectToLogger
from .lib.renderer import options_validate
from .models import ProgramState, pipeline


# Define CLI arguments
parser = ArgumentParser(
    prog="runmd",
    description="runmd - render markdown with the output of its executable python blocks",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

parser.add_argument(
    "inputFiles", nargs="*", metavar="inputFile", help="Markdown file to render (exactly one)"
)

parser.add_argument(
    "--output",
    default=None,
    type=str,
    help="Output file (must end in .md). Rendered markdown goes to stdout when omitted",
)

parser.add_argument(
    "--watch",
    action="store_true",
    help="Re-render whenever the input file changes (requires --output)",
)

parser.add_argument(
    "--lame",
    action="store_true",
    help="Omit the 'Page rendered by' attribution footer",
)

parser.add_argument(
    "-v",
    "--verbosity",
    action="count",
    default=1,
    help="Increase output verbosity (can be repeated: -v, -vv)",
)

parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")


def configuration_fail(message: str) -> None:
    """Report a configuration error and exit"""
    print(f"Error: {message}", file=sys.stderr)
    sys.exit(1)


def options_check(inputstate: ProgramState) -> ProgramState:
    """
    Validate CLI options before any rendering happens.

    Args:
        inputstate: Initial program state with CLI options

    Returns:
        ProgramState with added fields:
            - inputFile: The single input file
            - optionsOK: True if options are consistent

    Exits:
        1 unless exactly one input file is given, or if --watch is
        given without --output
    """
    state = inputstate.copy()

    LOG("Checking options...", level=2)

    try:
        state.inputFile = options_validate(state.inputFiles, state.output, state.watch)
    except ConfigurationError as e:
        configuration_fail(e.message)

    state.optionsOK = True
    return state


def renderer_create(inputstate: ProgramState) -> ProgramState:
    """
    Bind the input file and output destination to a Renderer.

    Returns:
        ProgramState with added field:
            - renderer: Renderer instance

    Exits:
        1 if the output file does not have the .md extension
    """
    state = inputstate.copy()

    try:
        state.renderer = Renderer(state.inputFile, state.output)
    except ConfigurationError as e:
        configuration_fail(e.message)

    LOG(f"Input file: {state.renderer.input_file}", level=2)
    LOG(f"Output: {state.renderer.output_file or '<stdout>'}", level=2)
    return state


def renderError_report(state: ProgramState, error: Exception) -> None:
    """Report an error that ended a render pass and exit"""
    print(f"Render error: {type(error).__name__}: {error}", file=sys.stderr)
    if state.verbosity >= 3:
        import traceback

        traceback.print_exc()
    sys.exit(1)


def document_render(inputstate: ProgramState) -> ProgramState:
    """
    Render the document once.

    Returns:
        ProgramState with added field:
            - renderResult: Dict containing output, line_count, block_count

    Exits:
        1 if reading, executing a block, or writing fails
    """
    state = inputstate.copy()

    LOG(f"Rendering {state.inputFile}...", level=2)

    try:
        state.renderResult = state.renderer.render(lame=state.lame)
    except Exception as e:
        renderError_report(state, e)

    return state


def document_watch(inputstate: ProgramState) -> ProgramState:
    """
    Re-render whenever the input file's modification time advances.

    Runs until interrupted. A failing render pass ends the process.
    """
    state = inputstate.copy()

    LOG(f"Watching {state.inputFile} every {appsettings.watch_interval}s", level=1)
    watcher = Watcher(state.renderer, interval=appsettings.watch_interval, lame=state.lame)

    try:
        watcher.run()
    except KeyboardInterrupt:
        LOG("Watch stopped", level=1)
    except Exception as e:
        renderError_report(state, e)

    return state


def results_report(inputstate: ProgramState) -> ProgramState:
    """
    Display render results.

    Returns:
        ProgramState unchanged (terminal pipeline stage)
    """
    state: ProgramState = inputstate.copy()
    if not state.renderResult:
        print("Error: Rendering failed", file=sys.stderr)
        sys.exit(1)

    LOG(f"Rendered {state.inputFile}", level=1)
    LOG(f"  Output: {state.renderResult['output']}", level=2)
    LOG(f"  Blocks: {state.renderResult['block_count']}", level=2)
    LOG(f"  Lines: {state.renderResult['line_count']}", level=2)
    return state


def main(argv: Optional[List[str]] = None) -> None:
    """
    Main entry point - render a markdown document.

    Orchestrates the pipeline:
        1. options_check: Validate the input/output/watch combination
        2. renderer_create: Bind input and output, check the .md extension
        3. document_render: Render once (or document_watch: render on change)
        4. results_report: Display results to user

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])
    """
    options: Namespace = parser.parse_args(argv)
    state: ProgramState = ProgramState.state_createFromNamespace(options)

    # Connect state to logger for entire pipeline
    state_connectToLogger(state)

    if state.watch:
        pipeline(state, options_check, renderer_create, document_watch)
    else:
        pipeline(state, options_check, renderer_create, document_render, results_report)


if __name__ == "__main__":
    main()
