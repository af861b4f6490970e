"""CLI entrypoint for the study planner."""

from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from rich.console import Console

from studyplan.engine import aggregate_by_subject, run_planner
from studyplan.engine.runner import extract_chapters
from studyplan.io import read_json, read_records, write_json
from studyplan.logging_setup import configure_logging
from studyplan.metrics import collect_metrics
from studyplan.models import InvalidInputError
from studyplan.normalization import normalize_request, resolve_effective_settings
from studyplan.reporting import (
    build_error_report,
    build_error_report_with_validation,
    build_success_report,
)
from studyplan.reporting.console import render_daily_plan, render_subject_stats
from studyplan.validation import (
    ValidationError,
    ValidationReport,
    validate_domain_inputs,
    validate_inputs_with_schema,
    validate_plan_request,
)

logger = logging.getLogger(__name__)

_PATH_TARGETS = {
    "chapters_path": "chapters",
    "exams_path": "exams",
    "off_days_path": "off_days",
    "settings_path": "settings",
}


@dataclass(slots=True)
class PreparedRequest:
    """Outcome of reading and validating a plan request."""

    loaded: dict[str, Any] = field(default_factory=dict)
    validation_report: ValidationReport = field(default_factory=ValidationReport)
    errors: list[ValidationError] = field(default_factory=list)
    error_code: str | None = None

    def error_report(self) -> dict[str, Any]:
        if self.error_code in {"request_read_error", "request_error"}:
            return build_error_report(self.errors, code=self.error_code)
        return build_error_report_with_validation(
            self.errors,
            validation_report=self.validation_report,
            code=self.error_code or "validation_error",
        )


def _resolve_input_path(request_file: Path, value: str) -> Path:
    path = Path(value)
    if path.is_absolute():
        return path
    return (request_file.parent / path).resolve()


def _load_referenced_inputs(request_file: Path, request: dict[str, Any]) -> tuple[dict[str, Any], list[ValidationError]]:
    loaded: dict[str, Any] = {}
    errors: list[ValidationError] = []

    for path_field, target_field in _PATH_TARGETS.items():
        if not request.get(path_field):
            continue
        resolved = _resolve_input_path(request_file, request[path_field])
        try:
            if target_field == "settings":
                loaded[target_field] = read_json(resolved)
            else:
                loaded[target_field] = read_records(resolved, target_field)
        except FileNotFoundError:
            errors.append(
                ValidationError(
                    code="file_not_found",
                    message=f"Referenced file not found: {resolved}",
                    path=f"$.{path_field}",
                )
            )
        except ValueError as exc:
            errors.append(ValidationError(code="invalid_json", message=str(exc), path=f"$.{path_field}"))

    return loaded, errors


def prepare_request(request_path: str) -> PreparedRequest:
    """Read, load and validate everything a run needs, collecting all errors."""
    prepared = PreparedRequest()

    try:
        request_payload = read_json(request_path)
    except (OSError, ValueError) as exc:
        prepared.errors = [ValidationError(code="invalid_request", message=str(exc), path="$.request")]
        prepared.error_code = "request_read_error"
        return prepared

    request_payload = normalize_request(request_payload)
    errors = validate_plan_request(request_payload)
    if errors:
        prepared.errors = errors
        prepared.error_code = "request_error"
        return prepared

    loaded, load_errors = _load_referenced_inputs(Path(request_path), request_payload)
    if load_errors:
        prepared.errors = load_errors
        prepared.error_code = "input_load_error"
        return prepared

    loaded["plan_request"] = request_payload
    loaded["effective_settings"] = resolve_effective_settings(loaded, prepared.validation_report)
    prepared.validation_report.extend(validate_inputs_with_schema(loaded))
    prepared.validation_report.extend(validate_domain_inputs(loaded))
    prepared.loaded = loaded

    if prepared.validation_report.has_errors:
        prepared.errors = [issue.as_error() for issue in prepared.validation_report.errors]
        prepared.error_code = "validation_error"
    for issue in prepared.validation_report.infos:
        logger.info("%s at %s: %s", issue.code, issue.field_path, issue.message)
    return prepared


def run_plan_command(request_path: str, output_path: str) -> int:
    prepared = prepare_request(request_path)
    if prepared.error_code is not None:
        logger.warning("plan request rejected (%s, %d errors)", prepared.error_code, len(prepared.errors))
        write_json(output_path, prepared.error_report())
        return 2

    result = run_planner(prepared.loaded)
    metrics = collect_metrics(result)
    write_json(output_path, build_success_report(result, metrics, prepared.validation_report))
    return 0


def run_today_command(request_path: str, console: Console | None = None) -> int:
    console = console or Console()
    prepared = prepare_request(request_path)
    if prepared.error_code is not None:
        console.print(f"[red]Cannot build plan ({prepared.error_code}):[/red]")
        for err in prepared.errors:
            console.print(f"  [red]{err.path}[/red] {err.message}")
        return 2

    render_daily_plan(console, run_planner(prepared.loaded))
    return 0


def run_stats_command(chapters_path: str, console: Console | None = None) -> int:
    console = console or Console()
    try:
        payload = {"chapters": read_records(chapters_path, "chapters")}
        chapters = extract_chapters(payload)
    except FileNotFoundError:
        console.print(f"[red]File not found:[/red] {chapters_path}")
        return 2
    except (InvalidInputError, ValueError) as exc:
        console.print(f"[red]Invalid chapters file:[/red] {exc}")
        return 2

    stats = aggregate_by_subject(chapters)
    render_subject_stats(console, {subject: entry.as_dict() for subject, entry in stats.items()})
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="studyplan", description="Exam-driven daily study planner")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING)")
    parser.add_argument("--log-file", default=None, help="Optional JSON-lines log file")
    subparsers = parser.add_subparsers(dest="command", required=True)

    plan_parser = subparsers.add_parser("plan", help="Generate a daily plan from plan_request JSON")
    plan_parser.add_argument("--request", required=True, help="Path to plan_request.json")
    plan_parser.add_argument("--output", required=True, help="Path to plan_output.json")

    today_parser = subparsers.add_parser("today", help="Print the daily plan as a table")
    today_parser.add_argument("--request", required=True, help="Path to plan_request.json")

    stats_parser = subparsers.add_parser("stats", help="Print per-subject progress")
    stats_parser.add_argument("--chapters", required=True, help="Path to chapters.json")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level.upper(), log_file=args.log_file)

    if args.command == "plan":
        return run_plan_command(args.request, args.output)
    if args.command == "today":
        return run_today_command(args.request)
    if args.command == "stats":
        return run_stats_command(args.chapters)

    parser.error("Unknown command")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
