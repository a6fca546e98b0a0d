"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~httpstep.exceptions.HttpStepError` subclass.
Scripts wrapping ``httpstep`` can inspect the exit code to tell a bad spec
from a bad argument without parsing stderr.

Example::

    $ httpstep endpoints https://example.com/broken.json
    $ echo $?
    7   # EXIT_SPEC_LOAD_ERROR -- the document could not be loaded
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or an unknown selection."""

EXIT_SPEC_LOAD_ERROR = 7
"""The OpenAPI document could not be fetched, parsed or validated."""

EXIT_MALFORMED_URL = 8
"""The spec document URL is not a usable http(s) URL."""
