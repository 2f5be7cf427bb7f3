"""
Export formatters for scanner results.

Each formatter renders search results, package reports and comparison
outcomes to a string in one output format.
"""

import csv
import io
import json
from abc import ABC, abstractmethod
from typing import Any, Sequence

from pckgi.core.models import CompareResult, PackageReport, SearchResult

SEARCH_COLUMNS = (
    "name",
    "version",
    "author",
    "license",
    "final",
    "quality",
    "popularity",
    "maintenance",
    "description",
)

REPORT_COLUMNS = (
    "name",
    "version",
    "license",
    "last_update",
    "days_since_update",
    "weekly_downloads",
    "monthly_downloads",
    "status",
    "quality",
    "popularity",
    "maintenance",
    "final",
    "deprecated",
    "total_versions",
    "dependencies",
)

COMPARISON_COLUMNS = REPORT_COLUMNS + ("error",)


def search_row(result: SearchResult) -> dict[str, Any]:
    """Flatten a SearchResult into a table row."""
    return {
        "name": result.name,
        "version": result.version,
        "author": result.author,
        "license": result.license,
        "final": result.score.final,
        "quality": result.score.quality,
        "popularity": result.score.popularity,
        "maintenance": result.score.maintenance,
        "description": result.description,
    }


def report_row(report: PackageReport) -> dict[str, Any]:
    """Flatten a PackageReport into a table row."""
    return {
        "name": report.name,
        "version": report.version,
        "license": report.license,
        "last_update": report.last_update.date().isoformat() if report.last_update else "",
        "days_since_update": report.days_since_update,
        "weekly_downloads": report.downloads.weekly,
        "monthly_downloads": report.downloads.monthly,
        "status": report.health.status.value,
        "quality": report.health.quality,
        "popularity": report.health.popularity,
        "maintenance": report.health.maintenance,
        "final": report.health.final,
        "deprecated": report.deprecated,
        "total_versions": report.total_versions,
        "dependencies": report.dependency_counts.prod,
    }


def comparison_row(result: CompareResult) -> dict[str, Any]:
    """Flatten a CompareResult into a table row; failures keep only name and error."""
    if result.success and result.report:
        row = report_row(result.report)
        row["error"] = ""
        return row
    row = {column: "" for column in REPORT_COLUMNS}
    row["name"] = result.name
    row["error"] = result.error or ""
    return row


class Formatter(ABC):
    """Base class for export formatters."""

    @abstractmethod
    def format_search(self, results: Sequence[SearchResult]) -> str:
        """Format search results."""

    @abstractmethod
    def format_reports(self, reports: Sequence[PackageReport]) -> str:
        """Format package reports."""

    @abstractmethod
    def format_comparison(self, results: Sequence[CompareResult]) -> str:
        """Format comparison outcomes."""


class JSONFormatter(Formatter):
    """Pretty-printed JSON using each record's ``to_dict()``."""

    def __init__(self, indent: int = 2):
        self.indent = indent

    def _dump(self, records: Sequence[Any]) -> str:
        return json.dumps([r.to_dict() for r in records], indent=self.indent)

    def format_search(self, results: Sequence[SearchResult]) -> str:
        return self._dump(results)

    def format_reports(self, reports: Sequence[PackageReport]) -> str:
        return self._dump(reports)

    def format_comparison(self, results: Sequence[CompareResult]) -> str:
        return self._dump(results)


class CSVFormatter(Formatter):
    """Comma-separated values with a header row."""

    def _write(self, columns: Sequence[str], rows: Sequence[dict[str, Any]]) -> str:
        buffer = io.StringIO()
        writer = csv.DictWriter(buffer, fieldnames=list(columns), lineterminator="\n")
        writer.writeheader()
        writer.writerows(rows)
        return buffer.getvalue()

    def format_search(self, results: Sequence[SearchResult]) -> str:
        return self._write(SEARCH_COLUMNS, [search_row(r) for r in results])

    def format_reports(self, reports: Sequence[PackageReport]) -> str:
        return self._write(REPORT_COLUMNS, [report_row(r) for r in reports])

    def format_comparison(self, results: Sequence[CompareResult]) -> str:
        return self._write(COMPARISON_COLUMNS, [comparison_row(r) for r in results])


class MarkdownFormatter(Formatter):
    """GitHub-flavoured Markdown tables."""

    @staticmethod
    def _cell(value: Any) -> str:
        text = "" if value is None else str(value)
        return text.replace("|", "\\|").replace("\n", " ")

    def _table(self, columns: Sequence[str], rows: Sequence[dict[str, Any]]) -> str:
        lines = [
            "| " + " | ".join(columns) + " |",
            "| " + " | ".join("---" for _ in columns) + " |",
        ]
        for row in rows:
            lines.append("| " + " | ".join(self._cell(row[c]) for c in columns) + " |")
        return "\n".join(lines) + "\n"

    def format_search(self, results: Sequence[SearchResult]) -> str:
        return self._table(SEARCH_COLUMNS, [search_row(r) for r in results])

    def format_reports(self, reports: Sequence[PackageReport]) -> str:
        return self._table(REPORT_COLUMNS, [report_row(r) for r in reports])

    def format_comparison(self, results: Sequence[CompareResult]) -> str:
        return self._table(COMPARISON_COLUMNS, [comparison_row(r) for r in results])


FORMATTERS: dict[str, type[Formatter]] = {
    "json": JSONFormatter,
    "csv": CSVFormatter,
    "markdown": MarkdownFormatter,
}


def get_formatter(name: str) -> Formatter:
    """Return a formatter instance by name.

    Raises:
        ValueError: If the format is not recognized.
    """
    formatter_cls = FORMATTERS.get(name)
    if formatter_cls is None:
        raise ValueError(
            f"Unknown format: {name}. Available formats: {list(FORMATTERS.keys())}"
        )
    return formatter_cls()
