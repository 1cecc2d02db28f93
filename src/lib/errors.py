"""
runmd exception hierarchy

Errors raised by code inside executed blocks are NOT wrapped: they propagate
unchanged so their tracebacks point at the original document lines.
"""


class RunmdError(Exception):
    """Base class for errors raised by runmd itself"""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigurationError(RunmdError):
    """
    Invalid invocation detected before any rendering happens

    Raised for a missing or repeated input file, an output file without
    the .md extension, or --watch without --output.
    """
    pass
