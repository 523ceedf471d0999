"""Unified logging and output management for name extraction.

Combines Python logging for diagnostics with console_styles-powered HandlerAPI
for UX events. Tracks metrics and prints a final summary.
"""

from __future__ import annotations

import logging
from enum import IntEnum
from typing import Dict, Optional, Tuple


class Verbosity(IntEnum):
    """Verbosity levels following Ubuntu CLI guidelines."""

    QUIET = 0  # Minimal output, errors only
    BRIEF = 1  # Normal user interface messages (default)
    VERBOSE = 2  # Descriptive, thorough descriptions
    DEBUG = 3  # Internal execution steps, developer-focused
    TRACE = 4  # System-generated information


VERBOSITY_TO_LEVEL = {
    Verbosity.QUIET: logging.ERROR,
    Verbosity.BRIEF: logging.WARNING,
    Verbosity.VERBOSE: logging.INFO,
    Verbosity.DEBUG: logging.DEBUG,
    Verbosity.TRACE: logging.DEBUG,
}


class MetricsTracker:
    def __init__(self) -> None:
        self.processed: int = 0
        self.resolved: int = 0
        self.not_found: int = 0
        self.errors: int = 0
        # Which table source produced the bytes for each resolved file
        self.backend_counts: Dict[str, int] = {}

    def increment(self, metric: str) -> None:
        if hasattr(self, metric):
            setattr(self, metric, getattr(self, metric) + 1)
            if metric in {"resolved", "not_found", "errors"}:
                self.processed += 1

    def track_backend(self, backend: Optional[str]) -> None:
        if not backend:
            return
        self.backend_counts[backend] = self.backend_counts.get(backend, 0) + 1


class HandlerAPI:
    def __init__(self, verbosity: Verbosity, metrics: MetricsTracker) -> None:
        self.verbosity = verbosity
        self.metrics = metrics

    def parsing(self, filename: str) -> None:
        if self.verbosity < Verbosity.VERBOSE:
            return
        import FontNameCore.core_console_styles as cs

        cs.StatusIndicator("parsing").add_file(filename).emit()

    def resolved(
        self,
        filename: str,
        name_id: int,
        text: str,
        backend: Optional[str] = None,
    ) -> None:
        self.metrics.increment("resolved")
        self.metrics.track_backend(backend)
        if self.verbosity < Verbosity.BRIEF:
            return
        import FontNameCore.core_console_styles as cs

        indicator = cs.StatusIndicator("resolved").add_field("nameID", name_id)
        indicator.add_file(filename).add_values(value=text)
        if backend and self.verbosity >= Verbosity.VERBOSE:
            indicator.add_item(f"via {backend}")
        indicator.emit()

    def not_found(self, filename: str, message: str) -> None:
        self.metrics.increment("not_found")
        if self.verbosity < Verbosity.BRIEF:
            return
        import FontNameCore.core_console_styles as cs

        cs.StatusIndicator("missing").add_file(filename).with_explanation(
            message
        ).emit()

    def info(
        self,
        message: str,
        handler_name: Optional[str] = None,
        verbose_only: bool = True,
    ) -> None:
        min_level = Verbosity.VERBOSE if verbose_only else Verbosity.BRIEF
        if self.verbosity < min_level:
            return
        import FontNameCore.core_console_styles as cs

        prefix = f"[{handler_name}] " if handler_name else ""
        cs.StatusIndicator("info").add_message(f"{prefix}{message}").emit()

    def warning(
        self,
        message: str,
        handler_name: Optional[str] = None,
        filename: Optional[str] = None,
    ) -> None:
        if self.verbosity < Verbosity.BRIEF:
            return
        import FontNameCore.core_console_styles as cs

        indicator = cs.StatusIndicator("warning")
        if filename:
            indicator.add_file(filename)
        prefix = f"[{handler_name}] " if handler_name else ""
        indicator.with_explanation(f"{prefix}{message}").emit()

    def error(
        self,
        message: str,
        handler_name: Optional[str] = None,
        filename: Optional[str] = None,
    ) -> None:
        import FontNameCore.core_console_styles as cs

        indicator = cs.StatusIndicator("error")
        if filename:
            indicator.add_file(filename)
        prefix = f"[{handler_name}] " if handler_name else ""
        indicator.with_explanation(f"{prefix}{message}").emit()
        self.metrics.increment("errors")


def print_summary(metrics: MetricsTracker, console=None) -> None:
    if metrics.processed == 0:
        return
    import FontNameCore.core_console_styles as cs

    current_verbosity = _handler_api.verbosity if _handler_api else Verbosity.BRIEF
    if current_verbosity < Verbosity.BRIEF:
        return

    cs.emit(f"\n{'=' * 60}", console=console)
    cs.StatusIndicator("info").add_message("Name Extraction Complete").emit(console)
    cs.fmt_processing_summary(
        resolved=metrics.resolved,
        not_found=metrics.not_found,
        errors=metrics.errors,
        console=console,
    )
    if metrics.backend_counts:
        cs.StatusIndicator("info").add_message("Table Sources Used:").emit(console)
        for backend, count in sorted(
            metrics.backend_counts.items(), key=lambda x: x[0].lower()
        ):
            cs.emit(f"{cs.indent(1)}• {backend}: {cs.fmt_count(count)}", console=console)
    cs.emit(f"{'=' * 60}\n", console=console)


_logger: Optional[logging.Logger] = None
_handler_api: Optional[HandlerAPI] = None
_metrics: Optional[MetricsTracker] = None
_initialized: bool = False


def setup_logging(
    verbosity: Verbosity = Verbosity.BRIEF, console=None
) -> Tuple[logging.Logger, HandlerAPI, MetricsTracker]:
    global _logger, _handler_api, _metrics, _initialized
    if _initialized:
        if _handler_api:
            _handler_api.verbosity = verbosity
        logging.getLogger().setLevel(VERBOSITY_TO_LEVEL[verbosity])
        return (_logger, _handler_api, _metrics)
    _metrics = MetricsTracker()
    _handler_api = HandlerAPI(verbosity, _metrics)
    logging.basicConfig(
        level=VERBOSITY_TO_LEVEL[verbosity],
        format="%(levelname)s: %(message)s",
        force=True,
    )
    _logger = logging.getLogger("FontNameExtractor")
    _initialized = True
    return (_logger, _handler_api, _metrics)


def reset_metrics() -> MetricsTracker:
    """Start a fresh metrics run on the shared handler (one per CLI invocation)."""
    global _metrics
    _metrics = MetricsTracker()
    if _handler_api is not None:
        _handler_api.metrics = _metrics
    return _metrics


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
