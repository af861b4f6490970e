"""Resolve effective planner settings from layered inputs."""

from __future__ import annotations

import math
from typing import Any

from studyplan.validation import ValidationReport

DEFAULT_SETTINGS: dict[str, Any] = {
    "daily_study_hours": 4,
    "study_session_minutes": 45,
    "break_minutes": 15,
}

MAX_DAILY_STUDY_HOURS = 24

_CAMEL_CASE_KEYS = {
    "dailyStudyHours": "daily_study_hours",
    "studySessionMinutes": "study_session_minutes",
    "breakMinutes": "break_minutes",
}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def normalize_setting_keys(source: dict[str, Any]) -> dict[str, Any]:
    """Map the camelCase keys older exports use onto snake_case ones."""
    normalized: dict[str, Any] = {}
    for key, value in source.items():
        normalized[_CAMEL_CASE_KEYS.get(key, key)] = value
    return normalized


def resolve_effective_settings(
    loaded_payload: dict[str, Any],
    validation_report: ValidationReport,
) -> dict[str, Any]:
    """Build engine-ready settings: defaults first, then the settings file.

    ``daily_study_hours`` above a full day is clamped and reported as info.
    Anything that is not a finite positive number is left for domain
    validation.
    """

    settings = dict(DEFAULT_SETTINGS)
    source = loaded_payload.get("settings")
    if isinstance(source, dict):
        settings.update(normalize_setting_keys(source))
    settings.pop("schema_version", None)

    daily_hours = settings.get("daily_study_hours")
    if _is_number(daily_hours) and daily_hours > MAX_DAILY_STUDY_HOURS:
        settings["daily_study_hours"] = MAX_DAILY_STUDY_HOURS
        validation_report.add_info(
            code="INFO_CLAMP_DAILY_HOURS_APPLIED",
            message=f"daily_study_hours was clamped to {MAX_DAILY_STUDY_HOURS}",
            field_path="$.settings.daily_study_hours",
            extra={"applied_value": MAX_DAILY_STUDY_HOURS},
        )

    return settings
