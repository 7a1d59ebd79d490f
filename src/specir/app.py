"""Typer application and CLI entry point for specir.

The CLI runs the read and process phases and prints the resulting IR::

    specir process openapi.yaml
    specir --json process https://example.com/openapi.json > ir.json
    specir process openapi.yaml --policy my_pkg.policy:MyPolicy --ignore '^/internal'

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``.

See Also:
    :mod:`specir.config`: Configuration resolution behind ``--config``.
    :mod:`specir.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
from typing import Any, Optional

import typer

from specir import __version__
from specir.exceptions import InvalidUsageError, SpecirError
from specir.exit_codes import EXIT_SUCCESS
from specir.models import ArrayType, EnumType, MapType, SchemaRef, SchemaType, UnionType
from specir.output import (
    OutputFormat,
    OutputManager,
    error,
    get_output,
    info,
    print_document,
    print_table,
    set_output,
)
from specir.processor.state import ProcessorState


app = typer.Typer(
    name="specir",
    help="Turn OpenAPI 3.0/3.1 descriptions into a code-generation IR.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Eager --version handler."""
    if value:
        typer.echo(f"specir {__version__}")
        raise typer.Exit(code=EXIT_SUCCESS)


def _output_format(json_output: bool, plain_output: bool) -> OutputFormat:
    if json_output and plain_output:
        raise InvalidUsageError("--json and --plain cannot be used together")
    if json_output:
        return OutputFormat.JSON
    if plain_output:
        return OutputFormat.PLAIN
    return OutputFormat.AUTO


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="Print the IR as a JSON document."),
    plain_output: bool = typer.Option(False, "--plain", help="Print tab-separated tables."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Hide the run summary on stderr."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log processor decisions to stderr."),
    output_file: Optional[str] = typer.Option(
        None, "-o", "--output", help="Append IR output to this file."
    ),
) -> None:
    """Root callback: set up output formatting and logging before any sub-command."""
    try:
        fmt = _output_format(json_output, plain_output)
    except SpecirError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    set_output(
        OutputManager(
            format=fmt,
            no_color=no_color,
            quiet=quiet,
            verbose=verbose,
            output_file=output_file,
        )
    )
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


@app.command("process")
def process_command(
    source: str = typer.Argument(
        ..., help="OpenAPI document: file path, http(s) URL, or '-' for stdin."
    ),
    config_file: Optional[str] = typer.Option(
        None, "--config", "-c", help="JSON config file (overrides specir.json)."
    ),
    policy: Optional[str] = typer.Option(
        None, "--policy", help="Policy entry-point name or 'module:Class' path."
    ),
    base_module: Optional[str] = typer.Option(
        None, "--base-module", help="Prefix for every generated module name."
    ),
    ignore: Optional[list[str]] = typer.Option(
        None, "--ignore", help="Regex of paths/schemas to ignore (repeatable)."
    ),
    show_schemas: bool = typer.Option(
        True, "--schemas/--no-schemas", help="Include processed schemas in the output."
    ),
) -> None:
    """Read an OpenAPI document and print the operations and schemas it yields.

    Example::

        specir process petstore.yaml --base-module petstore
    """
    from specir.config import resolve_config
    from specir.policy import load_policy
    from specir.processor import run
    from specir.reader import load_document, read_description, validate_openapi_version

    try:
        config = resolve_config(
            cli_config=config_file,
            cli_base_module=base_module,
            cli_policy=policy,
            cli_ignore=ignore,
        )
        document = load_document(source)
        version = validate_openapi_version(document)
        get_output().debug(f"OpenAPI {version} document loaded from {source}")
        description = read_description(document)
        state = run(description, policy=load_policy(config.policy), config=config)
    except SpecirError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    if get_output().format == OutputFormat.JSON:
        print_document(_state_document(state, show_schemas))
        return

    _print_operations(state)
    if show_schemas:
        _print_schemas(state)
    info(
        f"{len(state.operations)} operations, {len(state.schemas_by_ref)} schemas "
        f"from {description.title} {description.version}"
    )


@app.command("policies")
def policies_command() -> None:
    """List the policies registered by installed packages.

    Example::

        specir policies
    """
    from specir.policy.manager import ENTRY_POINT_GROUP, available_policies

    names = available_policies()
    print_table(["Policy"], [["default"], *([name] for name in names)], title="Policies")
    info(f"{len(names)} registered in '{ENTRY_POINT_GROUP}'; 'module:Class' paths also work")


# ------------------------------------------------------------------ #
# Rendering helpers
# ------------------------------------------------------------------ #


def _state_document(state: ProcessorState, show_schemas: bool) -> dict[str, Any]:
    document: dict[str, Any] = {
        "title": state.description.title,
        "version": state.description.version,
        "operations": [op.model_dump(mode="json") for op in state.operations],
    }
    if show_schemas:
        document["schemas"] = {
            ref: schema.model_dump(mode="json")
            for ref, schema in sorted(state.schemas_by_ref.items())
        }
    return document


def _print_operations(state: ProcessorState) -> None:
    rows: list[list[str]] = []
    for op in state.operations:
        params = [p.name for p in op.request_path_parameters + op.request_query_parameters]
        request = ", ".join(
            f"{ct}: {_describe(state, t)}" for ct, t in op.request_body
        )
        responses = "; ".join(
            f"{status} "
            + (", ".join(_describe(state, t) for _, t in content) if content else "-")
            for status, content in op.responses
        )
        rows.append([
            op.module_name,
            op.function_name,
            op.request_method.value.upper(),
            op.request_path,
            ", ".join(params) or "-",
            request or "-",
            responses or "-",
        ])
    print_table(
        ["Module", "Function", "Method", "Path", "Params", "Request", "Responses"],
        rows,
        title=f"{state.description.title} -- Operations ({len(rows)})",
    )


def _print_schemas(state: ProcessorState) -> None:
    rows: list[list[str]] = []
    for ref, schema in sorted(state.schemas_by_ref.items()):
        if schema.ignored:
            rows.append([ref, "-", "map (ignored)", "-"])
            continue
        fields = ", ".join(
            f"{field.name}{'' if field.required else '?'}: {_describe(state, field.type)}"
            for field in schema.fields
        )
        rows.append([ref, schema.module_name or "-", schema.type_name, fields or "-"])
    print_table(
        ["Ref", "Module", "Type", "Fields"],
        rows,
        title=f"Schemas ({len(rows)})",
    )


def _describe(state: ProcessorState, schema_type: SchemaType) -> str:
    """Short human-readable rendering of a type value."""
    if isinstance(schema_type, SchemaRef):
        schema = state.schemas_by_ref.get(schema_type.ref)
        if schema is None:
            return schema_type.ref
        if schema.ignored:
            return "map"
        return f"{schema.module_name}.{schema.type_name}"
    if isinstance(schema_type, ArrayType):
        return f"[{_describe(state, schema_type.items)}]"
    if isinstance(schema_type, MapType):
        return f"map[{_describe(state, schema_type.values)}]"
    if isinstance(schema_type, UnionType):
        return " | ".join(_describe(state, member) for member in schema_type.types)
    if isinstance(schema_type, EnumType):
        return "enum(" + ", ".join(repr(value) for value in schema_type.values) + ")"
    return str(schema_type)


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def main() -> None:
    """CLI entry point invoked by the ``specir`` console script."""
    _setup_signal_handlers()
    app()
