"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~specir.exceptions.SpecirError` subclass.

Example::

    $ specir process broken.yaml
    $ echo $?
    3   # EXIT_DESCRIPTION_ERROR -- the document could not be decoded
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_DESCRIPTION_ERROR = 3
"""The API description could not be loaded or decoded."""

EXIT_PROCESSOR_ERROR = 4
"""The processor hit a contract violation (bad reference, bad policy result)."""

EXIT_POLICY_ERROR = 5
"""A policy implementation could not be located or instantiated."""
