"""Tests for metrics, status lines and the run summary."""

import io

from rich.console import Console

import FontNameCore.core_console_styles as cs
from FontNameCore.core_logging_config import (
    HandlerAPI,
    MetricsTracker,
    Verbosity,
    print_summary,
    setup_logging,
)


def _console():
    return Console(
        file=io.StringIO(), width=200, color_system=None, theme=cs.CUSTOM_THEME
    )


def test_metrics_tracker():
    metrics = MetricsTracker()
    metrics.increment("resolved")
    metrics.increment("not_found")
    metrics.increment("errors")
    metrics.increment("bogus")
    metrics.track_backend("sfnt")
    metrics.track_backend("sfnt")
    metrics.track_backend(None)
    assert metrics.processed == 3
    assert (metrics.resolved, metrics.not_found, metrics.errors) == (1, 1, 1)
    assert metrics.backend_counts == {"sfnt": 2}


def test_handler_counts_even_when_quiet():
    metrics = MetricsTracker()
    handler = HandlerAPI(Verbosity.QUIET, metrics)
    handler.resolved("A.ttf", 4, "Example Font", "sfnt")
    handler.not_found("B.ttf", "no record")
    assert metrics.resolved == 1
    assert metrics.not_found == 1
    assert metrics.backend_counts == {"sfnt": 1}


def test_strip_markup():
    assert cs.strip_markup("[field]nameID[/field]: 4") == "nameID: 4"


def test_resolved_status_line():
    console = _console()
    indicator = cs.StatusIndicator("resolved").add_field("nameID", 4)
    indicator.add_file("/fonts/Example.ttf").add_values(value="Example Font")
    indicator.emit(console)
    out = console.file.getvalue()
    assert "RESOLVED" in out
    assert "nameID: 4" in out
    assert "Example.ttf" in out
    assert "/fonts" not in out
    assert "Example Font" in out


def test_value_markup_is_escaped():
    console = _console()
    cs.StatusIndicator("resolved").add_values(value="[bold]Odd[/bold]").emit(console)
    assert "[bold]Odd[/bold]" in console.file.getvalue()


def test_print_summary():
    setup_logging(Verbosity.BRIEF)
    metrics = MetricsTracker()
    metrics.increment("resolved")
    metrics.track_backend("fonttools")
    metrics.increment("errors")
    console = _console()
    print_summary(metrics, console=console)
    out = console.file.getvalue()
    assert "Name Extraction Complete" in out
    assert "fonttools" in out
    setup_logging(Verbosity.QUIET)


def test_print_summary_skips_empty_run():
    console = _console()
    print_summary(MetricsTracker(), console=console)
    assert console.file.getvalue() == ""


def test_paths_and_messages_are_escaped():
    console = _console()
    indicator = cs.StatusIndicator("error")
    indicator.add_file("x[/b]/f[b].ttf", filename_only=False)
    indicator.with_explanation("No such file or directory: x[/b]/f.ttf").emit(console)
    out = console.file.getvalue()
    assert "x[/b]/f[b].ttf" in out
    assert "No such file or directory: x[/b]/f.ttf" in out


def test_bracketed_message_is_literal():
    console = _console()
    cs.StatusIndicator("info").add_message("[parser] odd").emit(console)
    assert "[parser] odd" in console.file.getvalue()
