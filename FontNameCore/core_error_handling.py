#!/usr/bin/env python3
"""
Error taxonomy and context tracking for name-table extraction.

Two layers live here:

- Typed exceptions raised at the point of violation by the parser, decoder
  and table sources (``NameTableError`` and its subclasses).
- Structured error records (``ErrorInfo``) and an aggregating
  ``ErrorTracker`` used by batch tooling to report failures per file.

Usage:
    from FontNameCore.core_error_handling import (
        ErrorContext, ErrorTracker, NameNotFoundError, NameTableError,
    )

    tracker = ErrorTracker()
    try:
        name = get_full_font_name(path)
    except NameTableError as e:
        tracker.add_from_exception(e.context, e, filepath=path)

    summary = tracker.get_summary()
    print(f"Encountered {summary['total_errors']} errors")
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Dict, Any
from pathlib import Path
import traceback
from datetime import datetime
from FontNameCore.core_logging_config import get_logger

logger = get_logger(__name__)


class ErrorContext(Enum):
    """
    Error context categories for precise failure point identification.

    Each context represents a distinct phase of name extraction where
    errors can occur.
    """

    # Acquiring table bytes
    FILE_IO = "file_io"  # Disk read errors
    SOURCE = "source"  # Font table source could not supply the table
    DIRECTORY = "directory"  # sfnt / collection table directory

    # name table structure
    HEADER = "header"  # name table header
    RECORDS = "records"  # Record array and string ranges

    # Resolution
    SELECTION = "selection"  # No record matched the request
    DECODING = "decoding"  # Platform/encoding decoding

    # Tooling
    CONFIG = "config"  # Configuration file or CLI values

    UNKNOWN = "unknown"

    @property
    def is_recoverable_by_default(self) -> bool:
        """
        Check if errors in this context are typically recoverable.

        Recoverable errors allow processing to continue with other files.
        """
        non_recoverable = {
            ErrorContext.CONFIG,
            ErrorContext.UNKNOWN,
        }
        return self not in non_recoverable

    @property
    def severity(self) -> str:
        """Get default severity level for this context."""
        critical = {
            ErrorContext.CONFIG,
        }
        warning = {
            ErrorContext.SELECTION,
        }

        if self in critical:
            return "critical"
        elif self in warning:
            return "warning"
        else:
            return "error"


# ============================================================================
# EXCEPTIONS
# ============================================================================


class NameTableError(Exception):
    """Base class for every failure surfaced by name extraction."""

    kind: str = "error"
    context: ErrorContext = ErrorContext.UNKNOWN

    def __init__(
        self, message: str, context: Optional[ErrorContext] = None, **details: Any
    ):
        super().__init__(message)
        self.message = message
        if context is not None:
            self.context = context
        self.details: Dict[str, Any] = details


class MalformedTableError(NameTableError):
    """The buffer is too short for the header, record array or a string range."""

    kind = "malformed"
    context = ErrorContext.RECORDS


class OutOfBoundsError(MalformedTableError):
    """A read would run past the end of the buffer."""

    kind = "out_of_bounds"


class UnsupportedFormatError(NameTableError):
    kind = "unsupported_format"
    context = ErrorContext.HEADER


class NameNotFoundError(NameTableError):
    """No record matches the requested name ID under the preference list."""

    kind = "name_not_found"
    context = ErrorContext.SELECTION


class UnsupportedEncodingError(NameTableError):
    kind = "unsupported_encoding"
    context = ErrorContext.DECODING


class SourceUnavailableError(NameTableError):
    """The font table source could not supply the requested table bytes."""

    kind = "source_unavailable"
    context = ErrorContext.SOURCE


# ============================================================================
# STRUCTURED ERROR RECORDS
# ============================================================================


class ErrorSeverity(Enum):
    """Error severity levels."""

    DEBUG = "debug"  # Minor issues, logged only
    INFO = "info"  # Informational, no action needed
    WARNING = "warning"  # Potential problem, processing continues
    ERROR = "error"  # Error occurred, file skipped
    CRITICAL = "critical"  # Severe error, may need to stop processing


@dataclass
class ErrorInfo:
    """
    Detailed error information with context.

    Captures all relevant information about an error for logging,
    reporting, and recovery decisions.
    """

    context: ErrorContext
    message: str
    filepath: Optional[str] = None
    exception: Optional[Exception] = None
    recoverable: Optional[bool] = None  # None = use context default
    severity: Optional[ErrorSeverity] = None  # None = use context default
    timestamp: datetime = field(default_factory=datetime.now)
    additional_info: Dict[str, Any] = field(default_factory=dict)
    stack_trace: Optional[str] = None

    def __post_init__(self):
        if self.recoverable is None:
            self.recoverable = self.context.is_recoverable_by_default

        if self.severity is None:
            self.severity = ErrorSeverity(self.context.severity)

        if self.exception and not self.stack_trace:
            self.stack_trace = "".join(
                traceback.format_exception(
                    type(self.exception), self.exception, self.exception.__traceback__
                )
            )

    @classmethod
    def from_exception(
        cls,
        context: Optional[ErrorContext],
        exception: Exception,
        filepath: Optional[str] = None,
        message: Optional[str] = None,
        **kwargs,
    ) -> "ErrorInfo":
        """
        Create ErrorInfo from an exception.

        Args:
            context: Error context (None = take it from a NameTableError,
                UNKNOWN for anything else)
            exception: The exception that occurred
            filepath: Optional file path where error occurred
            message: Optional custom message (uses exception message if not provided)
            **kwargs: Additional ErrorInfo fields

        Returns:
            Populated ErrorInfo instance

        Examples:
            >>> try:
            ...     find_name(data, 4)
            ... except NameTableError as e:
            ...     error = ErrorInfo.from_exception(None, e, filepath="font.ttf")
            >>> error.kind
            'name_not_found'
        """
        if context is None:
            context = getattr(exception, "context", ErrorContext.UNKNOWN)
        if message is None:
            message = str(exception)

        if isinstance(exception, NameTableError) and exception.details:
            additional = dict(exception.details)
            additional.update(kwargs.pop("additional_info", {}))
            kwargs["additional_info"] = additional

        return cls(
            context=context,
            message=message,
            filepath=filepath,
            exception=exception,
            **kwargs,
        )

    @property
    def filename(self) -> Optional[str]:
        """Get just the filename from filepath."""
        if self.filepath:
            return Path(self.filepath).name
        return None

    @property
    def exception_type(self) -> Optional[str]:
        if self.exception:
            return type(self.exception).__name__
        return None

    @property
    def kind(self) -> str:
        """Taxonomy kind of the underlying exception ("error" for foreign ones)."""
        return getattr(self.exception, "kind", "error")

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to dictionary for serialization.

        Returns:
            Dictionary representation suitable for JSON/logging
        """
        return {
            "context": self.context.value,
            "kind": self.kind,
            "message": self.message,
            "filepath": self.filepath,
            "filename": self.filename,
            "exception_type": self.exception_type,
            "recoverable": self.recoverable,
            "severity": self.severity.value if self.severity else None,
            "timestamp": self.timestamp.isoformat(),
            "additional_info": self.additional_info,
        }

    def to_log_message(self) -> str:
        parts = [
            f"Context: {self.context.value}",
            f"Severity: {self.severity.value if self.severity else 'unknown'}",
            f"Message: {self.message}",
        ]

        if self.filepath:
            parts.append(f"File: {self.filepath}")

        if self.exception:
            parts.append(f"Exception: {self.exception_type}: {str(self.exception)}")

        if self.additional_info:
            parts.append(f"Additional Info: {self.additional_info}")

        if not self.recoverable:
            parts.append("Recoverable: NO")

        return " | ".join(parts)


class ErrorTracker:
    """
    Track and aggregate errors during batch processing.

    Provides centralized error collection, categorization, and reporting
    for batch name extraction.
    """

    def __init__(self):
        self.errors: List[ErrorInfo] = []
        self._errors_by_context: Dict[ErrorContext, List[ErrorInfo]] = {}
        self._errors_by_file: Dict[str, List[ErrorInfo]] = {}

    def add_error(self, error: ErrorInfo) -> None:
        """
        Add an error to the tracker.

        Args:
            error: ErrorInfo instance to track
        """
        self.errors.append(error)

        self._errors_by_context.setdefault(error.context, []).append(error)
        if error.filepath:
            self._errors_by_file.setdefault(error.filepath, []).append(error)

        log_message = error.to_log_message()
        if error.severity == ErrorSeverity.CRITICAL:
            logger.error(log_message)
            if error.stack_trace:
                logger.debug(f"Stack trace:\n{error.stack_trace}")
        elif error.severity == ErrorSeverity.ERROR:
            logger.error(log_message)
        elif error.severity == ErrorSeverity.WARNING:
            logger.warning(log_message)
        else:
            logger.info(log_message)

    def add_from_exception(
        self,
        context: Optional[ErrorContext],
        exception: Exception,
        filepath: Optional[str] = None,
        message: Optional[str] = None,
        **kwargs,
    ) -> ErrorInfo:
        """
        Create and add error from exception.

        Returns:
            The created ErrorInfo instance
        """
        error = ErrorInfo.from_exception(
            context, exception, filepath, message, **kwargs
        )
        self.add_error(error)
        return error

    def get_summary(self) -> Dict[str, Any]:
        """
        Get error summary statistics.

        Returns:
            Dictionary with error counts and breakdowns
        """
        kinds: Dict[str, int] = {}
        for e in self.errors:
            kinds[e.kind] = kinds.get(e.kind, 0) + 1

        return {
            "total_errors": len(self.errors),
            "recoverable_errors": sum(1 for e in self.errors if e.recoverable),
            "non_recoverable_errors": sum(1 for e in self.errors if not e.recoverable),
            "by_context": {
                ctx.value: len(errs) for ctx, errs in self._errors_by_context.items()
            },
            "by_kind": kinds,
            "by_severity": {
                sev.value: sum(1 for e in self.errors if e.severity == sev)
                for sev in ErrorSeverity
            },
            "files_with_errors": len(self._errors_by_file),
        }

    def print_summary(self, console=None) -> None:
        """
        Print error summary to console.

        Args:
            console: Optional Rich console instance
        """
        from FontNameCore.core_console_styles import (
            emit,
            fmt_header,
            fmt_count,
            ERROR_LABEL,
        )

        summary = self.get_summary()

        if summary["total_errors"] == 0:
            return

        emit("", console=console)
        fmt_header("ERROR SUMMARY", console=console)
        emit("", console=console)

        emit(
            f"{ERROR_LABEL} Total errors: {fmt_count(summary['total_errors'])}",
            console=console,
        )

        if summary["non_recoverable_errors"] > 0:
            emit(
                f"{ERROR_LABEL} Non-recoverable: {fmt_count(summary['non_recoverable_errors'])}",
                console=console,
            )

        emit("", console=console)
        emit("  Errors by kind:", console=console)
        for kind, count in sorted(summary["by_kind"].items()):
            emit(f"    {kind:20} : {fmt_count(count)}", console=console)

        emit("", console=console)
        emit("  Errors by context:", console=console)
        for context, count in sorted(summary["by_context"].items()):
            emit(f"    {context:20} : {fmt_count(count)}", console=console)

    def clear(self) -> None:
        """Clear all tracked errors."""
        self.errors.clear()
        self._errors_by_context.clear()
        self._errors_by_file.clear()


__all__ = [
    "ErrorContext",
    "ErrorSeverity",
    "ErrorInfo",
    "ErrorTracker",
    "NameTableError",
    "MalformedTableError",
    "OutOfBoundsError",
    "UnsupportedFormatError",
    "NameNotFoundError",
    "UnsupportedEncodingError",
    "SourceUnavailableError",
]
