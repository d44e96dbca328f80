"""CLI for the ``bank_import`` package.

A thin Typer console over :func:`bank_import.pipeline.run_import`. Settings
overrides (``BANK_IMPORT_*``) are loaded from a local ``.env`` using
``python-dotenv`` before any command runs. Reading the CSV is the only I/O;
nothing is written back.
"""

from __future__ import annotations

import csv
import sys
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from pydantic import TypeAdapter, ValidationError
from typer.models import OptionInfo

from .categories import KeywordCategorizer
from .errors import BankImportError
from .logging_setup import configure_logging
from .mapping import describe_conflicts
from .models import (
    AmountInterpretation,
    BankFormat,
    ColumnMapping,
    IssueSeverity,
    LedgerRecord,
)
from .pipeline import ImportResult, resolve_mapping, run_import

app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help="Preview a bank statement CSV import: detect the layout, classify rows, "
    "check for duplicates against an existing ledger and report data issues.",
)

_LEDGER_ADAPTER = TypeAdapter(list[LedgerRecord])

# Module-level option object to satisfy ruff B008 (no calls in parameter
# defaults).
CSV_PATH_OPTION: OptionInfo = typer.Option(
    ...,
    "--csv-path",
    help="Path to a bank statement CSV export",
    dir_okay=False,
    file_okay=True,
    exists=False,  # the handler reports missing files itself
)


def _fail(message: str) -> typer.Exit:
    print(f"Error: {message}", file=sys.stderr)
    return typer.Exit(1)


def read_statement(path: Path) -> tuple[list[str], list[list[str]]]:
    """Return ``(headers, rows)`` from a CSV file; blank lines are dropped."""

    try:
        with open(path, encoding="utf-8-sig", newline="") as f:
            reader = csv.reader(f)
            try:
                headers = next(reader)
            except StopIteration:
                raise _fail(f"CSV has no header row: {path}") from None
            rows = [row for row in reader if any(cell.strip() for cell in row)]
    except FileNotFoundError:
        raise _fail(f"File not found: {path}") from None
    except PermissionError:
        raise _fail(f"Permission denied: {path}") from None
    except csv.Error as e:
        raise _fail(f"Failed to parse CSV: {e}") from e
    return [h.strip() for h in headers], rows


def load_ledger(path: Path | None) -> list[LedgerRecord]:
    """Validate a JSON list of ledger records (empty when no path is given)."""

    if path is None:
        return []
    try:
        data = path.read_bytes()
    except FileNotFoundError:
        raise _fail(f"Ledger file not found: {path}") from None
    try:
        return _LEDGER_ADAPTER.validate_json(data)
    except ValidationError as e:
        raise _fail(f"Invalid ledger JSON: {e.error_count()} validation error(s)\n{e}") from e


def _print_mapping(mapping: ColumnMapping) -> None:
    for role, column in mapping.roles().items():
        print(f"  {role.name.lower()}: {column}")
    print(f"  date_format: {mapping.date_format or '(not set)'}")
    print(f"  interpretation: {mapping.amount_interpretation}")


# ---- commands -------------------------------------------------------------------


@app.command("detect")
def detect_cmd(csv_path: Annotated[Path, CSV_PATH_OPTION]) -> None:
    """Print the detected bank format and the column mapping it implies."""

    headers, _rows = read_statement(csv_path)
    bank_format, mapping = resolve_mapping(headers)
    print(f"Bank format: {bank_format}")
    print("Mapping:")
    _print_mapping(mapping)
    missing = mapping.missing_requirements()
    if missing:
        print("Missing: " + ", ".join(missing))
    for line in describe_conflicts(mapping):
        print(f"Conflict: {line}")


@app.command("preview")
def preview_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    *,
    date_format: str | None = typer.Option(
        None, "--date-format", help="Date pattern, e.g. dd/MM/yyyy (overrides detection)."
    ),
    interpretation: AmountInterpretation | None = typer.Option(
        None,
        "--interpretation",
        case_sensitive=False,
        help="How amount signs map to income/expense (overrides detection).",
    ),
    ledger_json: Path | None = typer.Option(
        None, "--ledger-json", help="JSON list of existing ledger records to match against."
    ),
    categorize: bool = typer.Option(
        True, "--categorize/--no-categorize", help="Suggest categories from descriptions."
    ),
) -> None:
    """Classify a CSV and print what an import would do."""

    headers, rows = read_statement(csv_path)
    ledger = load_ledger(ledger_json)

    bank_format, mapping = resolve_mapping(headers)
    if date_format:
        mapping = mapping.with_date_format(date_format)
    if interpretation is not None:
        mapping = mapping.with_interpretation(interpretation)

    try:
        result = run_import(
            headers,
            rows,
            mapping,
            ledger=ledger,
            suggester=KeywordCategorizer() if categorize else None,
        )
    except BankImportError as e:
        raise _fail(str(e)) from e
    except ValidationError as e:
        raise _fail(f"Invalid BANK_IMPORT_* settings:\n{e}") from e

    _print_result(bank_format, result)


def _print_result(bank_format: BankFormat, result: ImportResult) -> None:
    review = result.review
    errors = result.batch.errors
    summary = review.summary()
    print(f"Bank format: {bank_format}")
    print(f"Rows: {len(result.batch.transactions)} classified, {len(errors)} failed")
    print(f"Income: {summary.income_count} totalling {summary.formatted_income_total}")
    print(f"Expenses: {summary.expense_count} totalling {summary.formatted_expense_total}")
    print(
        f"Matches: {review.new_count} new, {review.likely_count} likely, "
        f"{review.exact_count} exact"
    )
    if errors:
        print("Row errors:")
        for err in errors:
            print(f"  {err}")
    report = result.report
    if report.is_all_clear():
        print("Issues: none")
        return
    print("Issues:")
    for severity in IssueSeverity:
        for issue in report.issues_by_severity(severity):
            print(f"  [{severity}] {issue.summary}")
            for detail in issue.sample_details:
                print(f"      {detail}")


@app.callback()
def _root() -> None:
    """Load ``.env`` from the working directory and configure logging."""

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging()


if __name__ == "__main__":  # pragma: no cover
    app()
