#!/usr/bin/env python3
"""
Shared console styling for name extraction output.

Primary API: StatusIndicator class for unified console output formatting.
Secondary APIs: formatting primitives, tables and summary helpers.

Usage:
from FontNameCore.core_console_styles import (
    RICH_AVAILABLE, RESOLVED_LABEL, MISSING_LABEL, ERROR_LABEL, WARNING_LABEL,
    INFO_LABEL, PARSING_LABEL, SUCCESS_LABEL,
    INDENT, indent,
    fmt_field, fmt_file, fmt_value, fmt_count, fmt_pair, fmt_header,
    fmt_processing_summary,
    emit, get_console, create_table,
    StatusIndicator,
)

These helpers auto-detect Rich. When Rich is available, they output styled markup;
otherwise, they fall back to plain text with no markup.
"""

from __future__ import annotations

import importlib.util as importlib_util
from typing import Optional
from pathlib import Path
import re

from FontNameCore.core_logging_config import get_logger

logger = get_logger(__name__)

# ============================================================================
# CONFIGURATION & AVAILABILITY
# ============================================================================
CONSOLE_CONFIG = {
    "label_width": 11,  # width for labels (keeps alignment)
    "indent_size": 12,  # base indent spaces
    "use_rich": True,  # set False to force non-rich fallback
}

RICH_AVAILABLE: bool = (
    importlib_util.find_spec("rich") is not None
    if CONSOLE_CONFIG["use_rich"]
    else False
)

if RICH_AVAILABLE:
    from rich.console import Console as _Console
    from rich.theme import Theme
    from rich.panel import Panel
    from rich.table import Table as _Table
    from rich import box
    from rich.align import Align
    from rich.markup import escape

# ============================================================================
# THEME DEFINITION
# ============================================================================
if RICH_AVAILABLE:
    try:
        CUSTOM_THEME = Theme(
            {
                # Text colors
                "darktext": "#282a39",
                "lighttext": "grey100",
                # Label backgrounds
                "info": "dodger_blue1",
                "info.bright": "deep_sky_blue1",
                "resolved": "green_yellow",
                "missing": "orange1",
                "error": "red3",
                "warning": "gold1",
                "parsing": "grey37",
                "success": "green",
                "header": "deep_sky_blue1",
                # Content styling
                "value.name": "magenta2",
                "value.unchanged": "dim turquoise2",
                "value.error": "red3",
                "file.name": "green",
                "file.path": "grey37",
                "count": "bold turquoise2",
                "field": "honeydew2",
                "field.number": "bold honeydew2",
                "pair": "cyan3",
                # Rich's internal fallback color names
                "repr.number": "bold turquoise2",
                "repr.str": "grey100",
                "repr.path": "grey37",
                "repr.filename": "green",
            }
        )
    except Exception as e:
        logger.error(f"Failed to initialize custom theme: {e}")
        CUSTOM_THEME = Theme({})

    _console_singleton: Optional[_Console] = None


# ============================================================================
# CONSOLE INFRASTRUCTURE
# ============================================================================


def get_console() -> Optional["_Console"]:
    """
    Get the Rich console instance if available, otherwise None.
    """
    global _console_singleton
    if RICH_AVAILABLE:
        if _console_singleton is None:
            try:
                _console_singleton = _Console(theme=CUSTOM_THEME)
            except Exception as e:
                logger.warning(f"Failed to initialize Rich console: {e}")
                return None
        return _console_singleton
    logger.debug("Rich not available, using plain text output")
    return None


def strip_markup(message: str) -> str:
    return re.sub(r"\[/?[^\]]+\]", "", message)


def emit(
    message: str, highlight=None, console: Optional["_Console"] = None, end: str = "\n"
) -> None:
    """
    Emit a message via Rich console if available, otherwise print().
    """
    target = (console or get_console()) if RICH_AVAILABLE else None
    if target is not None:
        target.print(message, end=end, overflow="fold", no_wrap=False)
    else:
        print(strip_markup(message), end=end)


def indent(level: int = 1, additional: int = 0) -> str:
    """
    Generate indentation for hierarchical output.
    """
    if level <= 0:
        return ""

    base = CONSOLE_CONFIG.get("indent_size", 12)
    level_spacing = (level - 1) * 2  # Each level adds 2 spaces
    return " " * (base + level_spacing + additional)


# ============================================================================
# STATUS LABELS
# ============================================================================


def _build_status_label(
    text: str, foreground_theme_key: str, background_theme_key: str = "lighttext"
) -> str:
    """
    Build a formatted status label using theme colors.

    Args:
        text: The label text to display
        foreground_theme_key: Theme key for foreground color
        background_theme_key: Theme key for background color
    """
    width = CONSOLE_CONFIG.get("label_width", 11)
    if RICH_AVAILABLE:
        foreground_color = CUSTOM_THEME.styles.get(foreground_theme_key, "yellow1")
        background_color = CUSTOM_THEME.styles.get(background_theme_key, "red3")
        style = f"bold {foreground_color} on {background_color}"
        return f"[{style}]{text:<{width}}[/{style}]"
    return f"{text:<{width}}"


INFO_LABEL: str = _build_status_label(" INFO", "lighttext", "info")
RESOLVED_LABEL: str = _build_status_label(" RESOLVED", "darktext", "resolved")
MISSING_LABEL: str = _build_status_label(" NOT FOUND", "darktext", "missing")
ERROR_LABEL: str = _build_status_label(" ERROR", "lighttext", "error")
WARNING_LABEL: str = _build_status_label(" WARNING", "darktext", "warning")
PARSING_LABEL: str = _build_status_label(" PARSING", "lighttext", "parsing")
SUCCESS_LABEL: str = _build_status_label(" SUCCESS", "darktext", "success")

INDENT: str = " " * CONSOLE_CONFIG.get("indent_size", 12)


# ============================================================================
# CORE FORMATTING PRIMITIVES
# ============================================================================


def fmt_field(field_name: str, value: str | int) -> str:
    """
    Format a field as name: value with automatic number styling.

    Example:
        >>> fmt_field("nameID", 4)
        "nameID: 4"  # (with field styling when Rich available)
    """
    if not RICH_AVAILABLE:
        return f"{field_name}: {value}"
    if isinstance(value, int):
        return f"[field]{field_name}[/field]: [field.number]{value}[/field.number]"
    return f"[field]{field_name}[/field]: {value}"


def fmt_value(value: str | int, style: str = "plain") -> str:
    """
    Format a value with different styling options.

    Args:
        value: The value to format
        style: "plain", "name", "unchanged" or "error"
    """
    if not RICH_AVAILABLE:
        return str(value)
    # Font names may contain brackets
    text = escape(str(value))
    if style == "plain":
        return text
    key = f"value.{style}"
    return f"[{key}]{text}[/{key}]"


def _plain(text: str) -> str:
    # Messages carry paths and font strings, never markup
    return escape(str(text)) if RICH_AVAILABLE else str(text)


def fmt_count(value: int | str) -> str:
    return f"[count]{value}[/count]" if RICH_AVAILABLE else str(value)


def fmt_pair(platform_id: int, encoding_id: int) -> str:
    """
    Format a platform/encoding pair.

    Example:
        >>> fmt_pair(3, 1)
        "3,1"  # (cyan when Rich available)
    """
    text = f"{platform_id},{encoding_id}"
    return f"[pair]{text}[/pair]" if RICH_AVAILABLE else text


def fmt_file(path: str, filename_only: bool = True) -> str:
    """
    Format a file path with consistent styling.

    Example:
        >>> fmt_file("/path/to/MyFont-Bold.otf")
        "MyFont-Bold.otf"  # (with green filename styling when Rich available)
    """
    if not RICH_AVAILABLE:
        return Path(path).name if filename_only else path

    if filename_only:
        return f"[file.name]{escape(Path(path).name)}[/file.name]"
    path_obj = Path(path)
    parent = str(path_obj.parent) + "/" if path_obj.parent != Path(".") else ""
    parent, name = escape(parent), escape(path_obj.name)
    return f"[file.path]{parent}[/file.path][file.name]{name}[/file.name]"


def fmt_header(text: str, console: Optional["_Console"] = None) -> None:
    """
    Create a centered header with panel styling.

    Example:
        >>> fmt_header("ERROR SUMMARY")
    """
    if RICH_AVAILABLE:
        console = console or get_console()
        panel = Panel(
            Align.center(text),
            box=box.HORIZONTALS,
            border_style="dodger_blue1",
            style="bold grey100",
            padding=0,
            expand=True,
        )
        console.print(panel)
    else:
        print(f"=== {text} ===")


# ============================================================================
# MAIN API - STATUS INDICATOR CLASS
# ============================================================================


class StatusIndicator:
    """
    Universal status indicator for consistent message formatting.

    Builds messages in layers:
    - Level 1: Base label (RESOLVED, ERROR, etc.)
    - Level 2: Context (file, field, etc.)
    - Level 3: The resolved value
    - Level 4: Additional details with indentation

    Usage:
        StatusIndicator("info").add_message("Scanning 12 files").emit()

        StatusIndicator("resolved")
            .add_field("nameID", 4)
            .add_file("font.otf")
            .add_values(value="Example Font Bold")
            .emit()

        StatusIndicator("error")
            .add_file("broken.ttf")
            .with_explanation("name table is 3 bytes")
            .emit()
    """

    STATUS_THEMES = {
        "resolved": {
            "label": RESOLVED_LABEL,
            "template": "{context}",
            "value_style": "name",
        },
        "missing": {
            "label": MISSING_LABEL,
            "template": "{context}{details}",
            "value_style": "plain",
        },
        "parsing": {
            "label": PARSING_LABEL,
            "template": "{context}",
            "value_style": "plain",
        },
        "success": {
            "label": SUCCESS_LABEL,
            "template": "{context}{details}",
            "value_style": "plain",
        },
        "info": {
            "label": INFO_LABEL,
            "template": "{context}{details}",
            "value_style": "plain",
        },
        "warning": {
            "label": WARNING_LABEL,
            "template": "{context}{details}",
            "value_style": "plain",
        },
        "error": {
            "label": ERROR_LABEL,
            "template": "{context}: {details}",
            "value_style": "error",
        },
    }

    def __init__(self, status: str):
        if status not in self.STATUS_THEMES:
            available = ", ".join(sorted(self.STATUS_THEMES.keys()))
            raise ValueError(f"Unknown status: '{status}'. Available: {available}")
        self.status = status
        self.theme = self.STATUS_THEMES[status]
        self.context_parts = []
        self.explanation = None
        self.value = None
        self.value_style_override = None

    def _apply_style(self, content: str, style: str = None) -> str:
        if style and RICH_AVAILABLE:
            return f"[{style}]{content}[/{style}]"
        return content

    def add_message(self, message: str, style: str = None):
        self.context_parts.append(self._apply_style(_plain(message), style))
        return self

    def add_file(self, filepath: str, filename_only: bool = True):
        self.context_parts.append(fmt_file(filepath, filename_only))
        return self

    def add_field(self, field_name: str, value: int, style: str = None):
        """Add a structured field (e.g., 'nameID: 4') to the main message."""
        self.context_parts.append(self._apply_style(fmt_field(field_name, value), style))
        return self

    def add_values(self, value: str = None, style: str = None):
        """Show ``value`` on its own indented line below the context."""
        if value is not None:
            self.value = value
        if style:
            self.value_style_override = style
        return self

    def with_explanation(self, message: str, style: str = None):
        """Add a trailing message or reason (errors, missing names)."""
        self.explanation = self._apply_style(_plain(message), style)
        return self

    def add_item(self, text: str, indent_level: int = 1, style: str = None):
        """Add an indented, subordinate line of information."""
        styled_text = self._apply_style(text, style)
        self.context_parts.append(f"\n{indent(indent_level)}{styled_text}")
        return self

    def with_summary_block(
        self,
        resolved: int = 0,
        not_found: int = 0,
        errors: int = 0,
        additional_info: list = None,
    ):
        """Append a final, formatted block of statistics."""
        summary = " | ".join(
            [
                fmt_field("resolved", resolved),
                fmt_field("not found", not_found),
                fmt_field("errors", errors),
            ]
        )
        self.context_parts.append(f"\n{INDENT}{summary}")
        for info in additional_info or []:
            self.context_parts.append(f"\n{INDENT}{info}")
        return self

    def build(self) -> str:
        """Build the final formatted status message."""
        context = " ".join(self.context_parts)
        details = self.explanation or ""
        if (
            details
            and not details.startswith(" ")
            and context
            and "{context}{details}" in self.theme["template"]
        ):
            details = f" {details}"
        message = self.theme["template"].format(context=context, details=details)

        if self.value is not None:
            if self.value_style_override and RICH_AVAILABLE:
                value_text = self._apply_style(
                    fmt_value(self.value), self.value_style_override
                )
            else:
                value_text = fmt_value(self.value, self.theme["value_style"])
            message += f"\n{INDENT} {value_text}"

        return f"{self.theme['label']} {message}"

    def emit(self, console=None):
        emit(self.build(), console=console)


# ============================================================================
# HIGH-LEVEL HELPERS
# ============================================================================


def fmt_processing_summary(
    resolved: int = 0,
    not_found: int = 0,
    errors: int = 0,
    console=None,
    additional_info: list = None,
) -> None:
    """
    Display a standardized processing summary.

    Args:
        resolved: Number of inputs whose name was resolved
        not_found: Number of inputs without a matching record
        errors: Number of inputs that failed
        console: Optional console instance
        additional_info: Optional list of additional info lines to display

    Example:
        >>> fmt_processing_summary(resolved=35, not_found=3, errors=2)
        # Displays "Processing Completed! resolved: 35 | not found: 3 | errors: 2"
    """
    if console is None:
        console = get_console()

    emit("", console=console)
    StatusIndicator("success").add_message("Processing Completed!").with_summary_block(
        resolved=resolved,
        not_found=not_found,
        errors=errors,
        additional_info=additional_info,
    ).emit(console)


# ============================================================================
# STRUCTURED OUTPUT HELPERS
# ============================================================================


def create_table(
    title: Optional[str] = None,
    show_header: bool = True,
    row_styles: Optional[list] = None,
) -> Optional["_Table"]:
    """
    Create a Rich Table with consistent styling (None without Rich).
    """
    if not RICH_AVAILABLE:
        return None

    return _Table(
        title=title,
        title_justify="center",
        title_style="bold deep_sky_blue1",
        show_header=show_header,
        header_style="bold dodger_blue1",
        border_style="dim",
        row_styles=row_styles,
    )


__all__ = [
    "CONSOLE_CONFIG",
    "RICH_AVAILABLE",
    "INFO_LABEL",
    "RESOLVED_LABEL",
    "MISSING_LABEL",
    "ERROR_LABEL",
    "WARNING_LABEL",
    "PARSING_LABEL",
    "SUCCESS_LABEL",
    "INDENT",
    "get_console",
    "strip_markup",
    "emit",
    "indent",
    "fmt_field",
    "fmt_value",
    "fmt_count",
    "fmt_pair",
    "fmt_file",
    "fmt_header",
    "StatusIndicator",
    "fmt_processing_summary",
    "create_table",
]
