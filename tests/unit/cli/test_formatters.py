"""Unit tests for CLI output formatters."""

from __future__ import annotations

import json
from io import StringIO

import pytest
import yaml
from rich.console import Console

from flux2argo.cli.formatters import (
    JsonFormatter,
    OutputFormat,
    TableFormatter,
    YamlFormatter,
    get_formatter,
)
from flux2argo.integrations.kubernetes.models.flux import KustomizationSummary
from flux2argo.services.migration import MigrationCandidate

COLUMNS = [("name", "Name"), ("migratable", "Migratable"), ("reason", "Reason")]


def _candidate(name: str, reason: str | None = None) -> MigrationCandidate:
    return MigrationCandidate(
        kind="Kustomization",
        name=name,
        namespace="flux-system",
        migratable=reason is None,
        reason=reason,
        resource=KustomizationSummary(name=name),
    )


@pytest.fixture
def console_output() -> StringIO:
    """Create StringIO for capturing console output."""
    return StringIO()


@pytest.fixture
def console(console_output: StringIO) -> Console:
    """Create Console that writes to StringIO."""
    return Console(file=console_output, force_terminal=False, width=120)


@pytest.mark.unit
class TestGetFormatter:
    """Tests for get_formatter factory function."""

    @pytest.mark.parametrize(
        ("format_type", "expected"),
        [
            (OutputFormat.TABLE, TableFormatter),
            (OutputFormat.JSON, JsonFormatter),
            (OutputFormat.YAML, YamlFormatter),
        ],
    )
    def test_get_formatter(
        self, console: Console, format_type: OutputFormat, expected: type
    ) -> None:
        """get_formatter should return the matching formatter on the given console."""
        formatter = get_formatter(format_type, console)
        assert isinstance(formatter, expected)
        assert formatter.console is console

    def test_get_formatter_defaults_to_console(self) -> None:
        """get_formatter should create a Console if none is provided."""
        assert get_formatter(OutputFormat.TABLE).console is not None

    def test_output_format_is_str(self) -> None:
        """OutputFormat values are plain strings for Typer."""
        assert OutputFormat("yaml") is OutputFormat.YAML
        assert isinstance(OutputFormat.JSON, str)


@pytest.mark.unit
class TestTableFormatter:
    """Tests for TableFormatter."""

    def test_format_list(self, console: Console, console_output: StringIO) -> None:
        """Rows show every column with readable cells and a total."""
        items = [_candidate("apps"), _candidate("oci", "unsupported source kind 'OCIRepository'")]

        TableFormatter(console).format_list(items, COLUMNS, title="Flux resources")
        output = console_output.getvalue()

        assert "Flux resources" in output
        assert "apps" in output
        assert "Yes" in output
        assert "No" in output
        assert "OCIRepository" in output
        assert "Total: 2" in output

    def test_format_list_empty(self, console: Console, console_output: StringIO) -> None:
        """An empty list still prints the total."""
        TableFormatter(console).format_list([], COLUMNS)
        assert "Total: 0" in console_output.getvalue()

    def test_format_dict(self, console: Console, console_output: StringIO) -> None:
        """Dictionaries render as key/value rows."""
        TableFormatter(console).format_dict({"crds": 12, "namespace": "-"}, title="Flux uninstall")
        output = console_output.getvalue()

        assert "Flux uninstall" in output
        assert "crds" in output
        assert "12" in output

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(True, "Yes"), (False, "No"), (None, "-"), ([], "-"), (["a", "b"], "a, b"), (3, "3")],
    )
    def test_format_cell(self, value: object, expected: str) -> None:
        """Cells are rendered as short strings."""
        assert TableFormatter._format_cell(value) == expected


@pytest.mark.unit
class TestJsonFormatter:
    """Tests for JsonFormatter."""

    def test_format_list(self, console: Console, console_output: StringIO) -> None:
        """Lists are wrapped with a total; None fields are dropped."""
        JsonFormatter(console).format_list([_candidate("apps")], COLUMNS)

        data = json.loads(console_output.getvalue())

        assert data["total"] == 1
        assert data["data"][0]["name"] == "apps"
        assert "reason" not in data["data"][0]
        assert "resource" not in data["data"][0]

    def test_format_dict(self, console: Console, console_output: StringIO) -> None:
        """Dictionaries are printed as-is."""
        JsonFormatter(console).format_dict({"dry_run": True, "crds": 3})
        assert json.loads(console_output.getvalue()) == {"dry_run": True, "crds": 3}


@pytest.mark.unit
class TestYamlFormatter:
    """Tests for YamlFormatter."""

    def test_format_list(self, console: Console, console_output: StringIO) -> None:
        """Lists become a YAML sequence."""
        YamlFormatter(console).format_list([_candidate("apps")], COLUMNS)

        data = yaml.safe_load(console_output.getvalue())

        assert data[0]["kind"] == "Kustomization"
        assert data[0]["migratable"] is True

    def test_format_dict_keeps_brackets(self, console: Console, console_output: StringIO) -> None:
        """Text is not interpreted as rich markup."""
        YamlFormatter(console).format_dict({"reason": "[red]x[/red]"})
        assert yaml.safe_load(console_output.getvalue()) == {"reason": "[red]x[/red]"}
