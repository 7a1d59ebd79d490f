"""Exception hierarchy for specir.

All exceptions inherit from :class:`SpecirError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`specir.exit_codes`.
The CLI catches ``SpecirError`` and exits with the appropriate code.

Exceptions raised by a policy implementation are *not* wrapped; they reach
the caller unmodified.

Subclass hierarchy::

    SpecirError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- DescriptionError    (exit 3)
    +-- ProcessorError      (exit 4)
    +-- PolicyError         (exit 5)
    +-- ConfigError         (exit 1)
"""

from specir.exit_codes import (
    EXIT_DESCRIPTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_POLICY_ERROR,
    EXIT_PROCESSOR_ERROR,
)


class SpecirError(Exception):
    """Base exception for all specir errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(SpecirError):
    """Raised for invalid CLI arguments."""

    exit_code = EXIT_INVALID_USAGE


class DescriptionError(SpecirError):
    """Raised when the API description cannot be loaded, parsed, or decoded."""

    exit_code = EXIT_DESCRIPTION_ERROR


class ProcessorError(SpecirError):
    """Raised on a contract violation while building the IR.

    Examples are a schema reference missing from the registry, a policy that
    returns no module names, or a request method outside the supported set.
    """

    exit_code = EXIT_PROCESSOR_ERROR


class PolicyError(SpecirError):
    """Raised when a policy cannot be located, imported, or instantiated."""

    exit_code = EXIT_POLICY_ERROR


class ConfigError(SpecirError):
    """Raised for configuration problems (invalid JSON, failed validation)."""

    exit_code = EXIT_GENERIC_FAILURE
