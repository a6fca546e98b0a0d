"""Exception hierarchy for httpstep.

All exceptions inherit from :class:`HttpStepError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`httpstep.exit_codes`.
The spec loader catches :class:`SpecLoadError` at its boundary and turns it
into a failed :class:`~httpstep.models.LoadResult`; the CLI entry point
catches ``HttpStepError`` and exits with the matching code.

Subclass hierarchy::

    HttpStepError (exit 1)
    +-- InvalidUsageError      (exit 2)
    +-- UnknownTimeUnitError   (exit 2)
    +-- SpecLoadError          (exit 7)
    |   +-- MalformedUrlError  (exit 8)
    +-- ConfigError            (exit 1)
"""

from httpstep.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_MALFORMED_URL,
    EXIT_SPEC_LOAD_ERROR,
)


class HttpStepError(Exception):
    """Base exception for all httpstep errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(HttpStepError):
    """Raised for invalid arguments, e.g. selecting an endpoint index that does not exist."""

    exit_code = EXIT_INVALID_USAGE


class UnknownTimeUnitError(HttpStepError):
    """Raised by the strict unit lookup when a unit is not in the time-unit table."""

    exit_code = EXIT_INVALID_USAGE


class SpecLoadError(HttpStepError):
    """Raised when an OpenAPI document cannot be fetched, parsed, or validated."""

    exit_code = EXIT_SPEC_LOAD_ERROR


class MalformedUrlError(SpecLoadError):
    """Raised when a spec document URL has no http(s) scheme or no host."""

    exit_code = EXIT_MALFORMED_URL


class ConfigError(HttpStepError):
    """Raised for configuration problems (invalid JSON, missing saved steps)."""

    exit_code = EXIT_GENERIC_FAILURE
