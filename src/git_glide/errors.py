"""Exception types raised by git-glide.

Every failure surfaced by a verb is a `GlideError`, so the CLI can tell
expected failures (git refused, output did not parse) from bugs.
"""


class GlideError(Exception):
    """Base class for all git-glide errors."""


class ExecutionError(GlideError):
    """Raised when git could not be run or reported a failure.

    Attributes:
        command (list[str]): The full command line that was attempted.
        returncode (int | None): The exit status, or None if the process never
            started or its output could not be decoded.
        stderr (str): Captured standard error, if any.
    """

    def __init__(
        self,
        command: list[str],
        message: str,
        returncode: int | None = None,
        stderr: str = "",
    ):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)


class ParseError(GlideError):
    """Raised when git output does not have the expected shape.

    Attributes:
        command (list[str]): The command whose output was rejected.
        output (str): The raw output.
    """

    def __init__(self, command: list[str], output: str, message: str):
        self.command = command
        self.output = output
        super().__init__(message)


class NotFoundError(GlideError):
    """Raised when something a verb needs does not exist."""

    def __init__(self, what: str):
        self.what = what
        super().__init__(f"Not found: {what}")
