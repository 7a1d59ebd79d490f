"""Tests for the output formatting system.

Covers:
- OutputFormat resolution (auto -> rich/plain based on TTY)
- NO_COLOR / TERM=dumb color disabling
- stdout vs stderr discipline
- Quiet and verbose modes
- print_document and print_table in each format
- Output file redirection
- Global instance management
"""

from __future__ import annotations

import json

import pytest

from specir import output as output_module
from specir.output import (
    OutputFormat,
    OutputManager,
    _should_disable_color,
    get_output,
    reset_output,
    set_output,
)


# ------------------------------------------------------------------ #
# Fixtures
# ------------------------------------------------------------------ #


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.delenv("TERM", raising=False)


@pytest.fixture()
def non_tty(monkeypatch):
    """Patch stdout.isatty() to return False."""
    monkeypatch.setattr("specir.output._is_tty", lambda: False)


@pytest.fixture()
def tty(monkeypatch):
    """Patch stdout.isatty() to return True."""
    monkeypatch.setattr("specir.output._is_tty", lambda: True)


# ------------------------------------------------------------------ #
# Format resolution and colour
# ------------------------------------------------------------------ #


class TestOutputFormatResolution:
    """AUTO resolves by TTY and colour support."""

    def test_auto_plain_when_not_tty(self, non_tty):
        assert OutputManager().format == OutputFormat.PLAIN

    def test_auto_rich_when_tty(self, tty):
        assert OutputManager().format == OutputFormat.RICH

    def test_auto_plain_when_tty_but_no_color(self, tty):
        assert OutputManager(no_color=True).format == OutputFormat.PLAIN

    def test_explicit_json_stays_json(self, tty):
        assert OutputManager(format=OutputFormat.JSON).format == OutputFormat.JSON


class TestColorDisabling:
    """NO_COLOR and TERM=dumb."""

    def test_no_color_env_any_value(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "")
        assert _should_disable_color() is True

    def test_term_dumb(self, monkeypatch):
        monkeypatch.setenv("TERM", "dumb")
        assert _should_disable_color() is True

    def test_normal_term_keeps_color(self, monkeypatch):
        monkeypatch.setenv("TERM", "xterm-256color")
        assert _should_disable_color() is False


# ------------------------------------------------------------------ #
# Stream discipline
# ------------------------------------------------------------------ #


class TestStdoutStderrDiscipline:
    """Data to stdout, diagnostics to stderr."""

    def test_print_data_goes_to_stdout(self, capfd, non_tty):
        OutputManager(no_color=True).print_data("payload")
        out, err = capfd.readouterr()
        assert out == "payload\n"
        assert err == ""

    @pytest.mark.parametrize(
        ("method", "prefix"),
        [("info", ""), ("warning", "Warning: "), ("error", "Error: ")],
    )
    def test_diagnostics_go_to_stderr(self, capfd, non_tty, method, prefix):
        getattr(OutputManager(no_color=True), method)("message")
        out, err = capfd.readouterr()
        assert out == ""
        assert err == f"{prefix}message\n"

    def test_quiet_suppresses_info_not_errors(self, capfd, non_tty):
        manager = OutputManager(no_color=True, quiet=True)
        manager.info("hidden")
        manager.error("shown")
        _, err = capfd.readouterr()
        assert err == "Error: shown\n"

    def test_debug_only_when_verbose(self, capfd, non_tty):
        OutputManager(no_color=True).debug("quiet")
        OutputManager(no_color=True, verbose=True).debug("loud")
        _, err = capfd.readouterr()
        assert err == "[debug] loud\n"


# ------------------------------------------------------------------ #
# Documents and tables
# ------------------------------------------------------------------ #


class TestPrintDocument:
    """JSON documents."""

    def test_plain_prints_indented_json(self, capfd, non_tty):
        OutputManager(no_color=True).print_document({"b": 1, "a": [1, 2]})
        out, _ = capfd.readouterr()
        assert json.loads(out) == {"b": 1, "a": [1, 2]}
        assert out.startswith('{\n  "b": 1')

    def test_json_format(self, capfd, non_tty):
        OutputManager(format=OutputFormat.JSON).print_document({"ok": True})
        out, _ = capfd.readouterr()
        assert json.loads(out) == {"ok": True}

    def test_output_file(self, tmp_path, capfd, tty):
        target = tmp_path / "ir.json"
        OutputManager(output_file=str(target)).print_document({"ok": True})
        out, _ = capfd.readouterr()
        assert out == ""
        assert json.loads(target.read_text()) == {"ok": True}


class TestPrintTable:
    """Tables in each format."""

    def test_plain_is_tab_separated(self, capfd, non_tty):
        OutputManager(no_color=True).print_table(["A", "B"], [["1", "2"], ["3", "4"]])
        out, _ = capfd.readouterr()
        assert out.splitlines() == ["A\tB", "1\t2", "3\t4"]

    def test_json_is_list_of_records(self, capfd, non_tty):
        OutputManager(format=OutputFormat.JSON).print_table(["A", "B"], [["1", "2"]])
        out, _ = capfd.readouterr()
        assert json.loads(out) == [{"A": "1", "B": "2"}]

    def test_rich_renders_title_and_cells(self, capfd, non_tty):
        OutputManager(format=OutputFormat.RICH).print_table(
            ["Module", "Function"], [["pets", "list_pets"]], title="Operations"
        )
        out, _ = capfd.readouterr()
        assert "Operations" in out
        assert "list_pets" in out


# ------------------------------------------------------------------ #
# Global instance
# ------------------------------------------------------------------ #


class TestGlobalOutput:
    """get_output / set_output / reset_output and module helpers."""

    def test_lazy_default(self, non_tty):
        reset_output()
        assert isinstance(get_output(), OutputManager)
        assert get_output() is get_output()

    def test_set_and_reset(self, non_tty):
        manager = OutputManager(format=OutputFormat.JSON)
        set_output(manager)
        assert get_output() is manager
        reset_output()
        assert get_output() is not manager

    def test_module_helpers_delegate(self, capfd, non_tty):
        set_output(OutputManager(no_color=True))
        output_module.warning("careful")
        output_module.print_table(["X"], [["1"]])
        out, err = capfd.readouterr()
        assert out == "X\n1\n"
        assert err == "Warning: careful\n"
