"""specir -- Turn OpenAPI 3.0/3.1 descriptions into a code-generation IR.

This package reads an OpenAPI description, walks every operation, and builds
an intermediate representation (operations plus the schemas they reference)
that a rendering stage can turn into client code. Decisions about naming,
filtering and body extraction are delegated to a replaceable policy object.

Typical workflow::

    specir process openapi.yaml           # print the IR as tables
    specir process openapi.yaml --json    # dump the IR as JSON

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models for the IR and configuration.
    description: Raw description nodes produced by the reader.
    config: Configuration loading and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
