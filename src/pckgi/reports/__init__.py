"""
Report export module.

Renders scanner results as JSON, CSV or Markdown.
"""

from pckgi.reports.formatters import (
    CSVFormatter,
    Formatter,
    JSONFormatter,
    MarkdownFormatter,
    get_formatter,
)

__all__ = [
    "Formatter",
    "JSONFormatter",
    "CSVFormatter",
    "MarkdownFormatter",
    "get_formatter",
]
