"""Output formatters for CLI commands.

Commands hand a list of models (or a summary dict) to the formatter
chosen by ``--output``; the formatter decides how it is printed.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from collections.abc import Sequence
from enum import StrEnum
from typing import Any

import yaml
from rich.console import Console
from rich.table import Table


class OutputFormat(StrEnum):
    """Supported output formats for CLI commands."""

    TABLE = "table"
    JSON = "json"
    YAML = "yaml"


def _as_dict(item: Any) -> dict[str, Any]:
    if hasattr(item, "model_dump"):
        data: dict[str, Any] = item.model_dump(exclude_none=True)
        return data
    return dict(item)


class Formatter(ABC):
    """Abstract base class for output formatters."""

    def __init__(self, console: Console) -> None:
        self.console = console

    @abstractmethod
    def format_list(
        self,
        items: Sequence[Any],
        columns: list[tuple[str, str]],
        title: str = "",
    ) -> None:
        """Format and display a list of items."""

    @abstractmethod
    def format_dict(self, data: dict[str, Any], title: str = "") -> None:
        """Format and display a dictionary."""


class TableFormatter(Formatter):
    """Rich table output formatter."""

    def format_list(
        self,
        items: Sequence[Any],
        columns: list[tuple[str, str]],
        title: str = "",
    ) -> None:
        table = Table(title=title or None, show_header=True)
        for _field_name, header in columns:
            style = "cyan" if header.lower() in ("name", "namespace") else None
            table.add_column(header, style=style, overflow="fold")

        for item in items:
            data = item.model_dump() if hasattr(item, "model_dump") else item
            table.add_row(*(self._format_cell(data.get(field)) for field, _ in columns))

        self.console.print(table)
        self.console.print(f"\n[dim]Total: {len(items)}[/dim]")

    def format_dict(self, data: dict[str, Any], title: str = "") -> None:
        table = Table(title=title or None, show_header=True)
        table.add_column("Key", style="cyan", no_wrap=True)
        table.add_column("Value", style="green")
        for key, value in data.items():
            table.add_row(key, self._format_cell(value))
        self.console.print(table)

    @staticmethod
    def _format_cell(value: Any) -> str:
        if isinstance(value, bool):
            return "Yes" if value else "No"
        if value is None:
            return "-"
        if isinstance(value, list):
            return ", ".join(str(v) for v in value) or "-"
        return str(value)


class JsonFormatter(Formatter):
    """JSON output formatter."""

    def format_list(
        self,
        items: Sequence[Any],
        columns: list[tuple[str, str]],
        title: str = "",
    ) -> None:
        data = [_as_dict(i) for i in items]
        output = {"data": data, "total": len(data)}
        self.console.print_json(json.dumps(output, default=str))

    def format_dict(self, data: dict[str, Any], title: str = "") -> None:
        self.console.print_json(json.dumps(data, default=str))


class YamlFormatter(Formatter):
    """YAML output formatter."""

    def format_list(
        self,
        items: Sequence[Any],
        columns: list[tuple[str, str]],
        title: str = "",
    ) -> None:
        data = [_as_dict(i) for i in items]
        self.console.print(
            yaml.safe_dump(data, default_flow_style=False, sort_keys=False), end="", markup=False
        )

    def format_dict(self, data: dict[str, Any], title: str = "") -> None:
        self.console.print(
            yaml.safe_dump(data, default_flow_style=False, sort_keys=False), end="", markup=False
        )


def get_formatter(format_type: OutputFormat, console: Console | None = None) -> Formatter:
    """Factory function to get the appropriate formatter."""
    if console is None:
        console = Console()

    formatters: dict[OutputFormat, type[Formatter]] = {
        OutputFormat.TABLE: TableFormatter,
        OutputFormat.JSON: JsonFormatter,
        OutputFormat.YAML: YamlFormatter,
    }
    return formatters.get(format_type, TableFormatter)(console)
