"""Validation for the plan request payload."""

from __future__ import annotations

from typing import Any

from studyplan.models import InvalidInputError, to_date

from .errors import ValidationError

REQUIRED_PATH_FIELDS = (
    "chapters_path",
    "exams_path",
    "off_days_path",
)
OPTIONAL_PATH_FIELDS = ("settings_path",)


def _check_path_field(payload: dict[str, Any], field: str, errors: list[ValidationError]) -> None:
    value = payload.get(field)
    if not isinstance(value, str) or not value.strip():
        errors.append(
            ValidationError(
                code="invalid_type",
                message=f"Field must be a non-empty string path: {field}",
                path=f"$.{field}",
            )
        )


def validate_plan_request(payload: dict[str, Any]) -> list[ValidationError]:
    """Validate plan_request shape: input paths and the target date."""
    errors: list[ValidationError] = []

    for field in REQUIRED_PATH_FIELDS:
        if payload.get(field) is None:
            errors.append(
                ValidationError(
                    code="missing_field",
                    message=f"Missing required field: {field}",
                    path=f"$.{field}",
                )
            )
        else:
            _check_path_field(payload, field, errors)

    for field in OPTIONAL_PATH_FIELDS:
        if payload.get(field) is not None:
            _check_path_field(payload, field, errors)

    current_date = payload.get("current_date")
    if current_date is not None:
        try:
            to_date(current_date)
        except InvalidInputError as exc:
            errors.append(ValidationError(code="invalid_date", message=str(exc), path="$.current_date"))

    return errors
