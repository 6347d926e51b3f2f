"""Reporting module - text listing and JSON reports."""

from .json_reporter import JsonReporter, error_output
from .text_reporter import TextReporter, format_server, format_services, truncate_line

__all__ = [
    "JsonReporter",
    "error_output",
    "TextReporter",
    "format_server",
    "format_services",
    "truncate_line",
]
