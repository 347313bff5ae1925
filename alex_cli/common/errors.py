"""Error kinds raised by the pipeline stages.

Every subclass of :class:`AlexCliError` is fatal for the run and maps to
exit code 1.
"""

from __future__ import annotations


class AlexCliError(Exception):
    """Base class for all errors the CLI reports to the user."""


class ConfigValidationError(AlexCliError):
    """A flag is missing/invalid or an input file is unreadable or malformed."""


class AuthenticationError(AlexCliError):
    """ALEX rejected the supplied credentials."""


class NameResolutionError(AlexCliError):
    """A symbol or parameter name has no match in the imported catalog."""


class NetworkError(AlexCliError):
    """A request to ALEX failed, timed out, or returned an unusable body."""

    def __init__(self, message: str, *, url: str = "", status: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status = status


class PollTimeoutError(AlexCliError):
    """A polling loop exceeded its maximum wait."""


class PollCancelledError(AlexCliError):
    """A polling loop was cancelled before the server finished."""


class ServerReportedFailure(AlexCliError):
    """Tests failed or the learner finished with an error payload."""
