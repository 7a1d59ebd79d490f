"""Terminal output for the specir CLI.

Processed IR goes to stdout (or ``--output`` file); everything else goes to
stderr so that ``specir --json process api.yaml | jq`` stays clean. Rich
styling is used only when stdout is an interactive terminal and colour has
not been turned off by ``--no-color``, ``NO_COLOR`` or ``TERM=dumb``.

The CLI callback builds one :class:`OutputManager` and installs it with
:func:`set_output`; the rest of the code reaches it through :func:`get_output`
or the thin module-level wrappers at the bottom of this file.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Sequence

from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table


class OutputFormat(str, Enum):
    """How processed IR is rendered."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


# kind -> (plain prefix, rich prefix, hidden by --quiet)
_DIAGNOSTICS: dict[str, tuple[str, str, bool]] = {
    "info": ("", "", True),
    "warning": ("Warning: ", "[yellow]Warning:[/yellow] ", False),
    "error": ("Error: ", "[bold red]Error:[/bold red] ", False),
    "debug": ("[debug] ", "[dim]\\[debug][/dim] ", False),
}


class OutputManager:
    """Writes IR documents and tables to stdout, diagnostics to stderr.

    Args:
        format: Requested format; ``AUTO`` picks ``RICH`` for a colour
            terminal and ``PLAIN`` for everything else.
        no_color: Strip colour and markup even on a terminal.
        quiet: Hide ``info`` messages.
        verbose: Show ``debug`` messages.
        output_file: Append data output to this file instead of stdout.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
        output_file: Optional[str] = None,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose
        self._target = Path(output_file) if output_file else None
        self._format = _resolve_format(format, self._no_color)
        self._console = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=self._format == OutputFormat.RICH,
        )
        self._err_console = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def _styled(self) -> bool:
        return self._format == OutputFormat.RICH and self._target is None

    # -- data ------------------------------------------------------------

    def print_data(self, text: str) -> None:
        """Write one chunk of data, newline-terminated."""
        line = text if text.endswith("\n") else text + "\n"
        if self._target is None:
            sys.stdout.write(line)
            sys.stdout.flush()
            return
        with self._target.open("a", encoding="utf-8") as fh:
            fh.write(line)

    def print_document(self, document: Any) -> None:
        """Write *document* as indented JSON, syntax-highlighted in rich mode."""
        text = json.dumps(document, indent=2, ensure_ascii=False, default=str)
        if self._styled:
            self._console.print(Syntax(text, "json", word_wrap=True))
        else:
            self.print_data(text)

    def print_table(
        self,
        headers: Sequence[str],
        rows: Sequence[Sequence[str]],
        title: Optional[str] = None,
    ) -> None:
        """Write *rows* under *headers*.

        JSON mode emits a list of header-keyed records, plain mode emits
        tab-separated lines, rich mode draws a table.
        """
        if self._format == OutputFormat.JSON:
            records = [dict(zip(headers, row)) for row in rows]
            self.print_data(json.dumps(records, indent=2, ensure_ascii=False))
            return
        if not self._styled:
            self.print_data("\n".join("\t".join(cells) for cells in [headers, *rows]))
            return

        table = Table(title=title, header_style="bold cyan")
        for header in headers:
            table.add_column(header, overflow="fold")
        for row in rows:
            table.add_row(*row)
        self._console.print(table)

    # -- diagnostics -----------------------------------------------------

    def info(self, message: str) -> None:
        self._emit("info", message)

    def warning(self, message: str) -> None:
        self._emit("warning", message)

    def error(self, message: str) -> None:
        self._emit("error", message)

    def debug(self, message: str) -> None:
        if self._verbose:
            self._emit("debug", message)

    def _emit(self, kind: str, message: str) -> None:
        plain, markup, quietable = _DIAGNOSTICS[kind]
        if quietable and self._quiet:
            return
        if self._no_color:
            sys.stderr.write(f"{plain}{message}\n")
            sys.stderr.flush()
        else:
            self._err_console.print(f"{markup}{message}")


def _resolve_format(requested: OutputFormat, no_color: bool) -> OutputFormat:
    if requested != OutputFormat.AUTO:
        return requested
    if _is_tty() and not no_color:
        return OutputFormat.RICH
    return OutputFormat.PLAIN


def _is_tty() -> bool:
    isatty = getattr(sys.stdout, "isatty", None)
    return bool(isatty and isatty())


def _should_disable_color() -> bool:
    """``NO_COLOR`` (any value, even empty) or ``TERM=dumb`` turns colour off."""
    return "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb"


_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed manager, creating a default one on first use."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    global _output
    _output = None


def print_document(document: Any) -> None:
    get_output().print_document(document)


def print_table(
    headers: Sequence[str],
    rows: Sequence[Sequence[str]],
    title: Optional[str] = None,
) -> None:
    get_output().print_table(headers, rows, title)


def info(message: str) -> None:
    get_output().info(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)


def debug(message: str) -> None:
    get_output().debug(message)
