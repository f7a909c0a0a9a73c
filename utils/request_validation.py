"""Utilities for validating incoming Flask requests."""

from __future__ import annotations

import re
from datetime import date
from typing import Iterable

from flask import Request
from werkzeug.exceptions import BadRequest

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
TIME_PATTERN = re.compile(r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$")


def parse_json_request(
    req: Request,
    *,
    required_keys: Iterable[str] | None = None,
    allow_empty: bool = False,
) -> dict:
    """Return the parsed JSON body or raise a 400 error."""

    if not req.is_json:
        raise BadRequest("Request content type must be application/json.")

    data = req.get_json(silent=True)
    if data is None:
        raise BadRequest("Request JSON body is required.")

    if not isinstance(data, dict):
        raise BadRequest("Request JSON payload must be an object.")

    if not data and not allow_empty:
        raise BadRequest("Request JSON body must not be empty.")

    if required_keys:
        missing = [key for key in required_keys if not data.get(key)]
        if missing:
            raise BadRequest(
                "Missing required fields: {}.".format(
                    ", ".join(sorted(missing))
                )
            )

    return data


def require_string(
    data: dict,
    key: str,
    *,
    min_length: int = 1,
    max_length: int | None = None,
    required: bool = True,
) -> str | None:
    """Return a stripped string field, enforcing length bounds."""

    value = data.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        if required:
            raise BadRequest(f"{key} is required.")
        return None
    if not isinstance(value, str):
        raise BadRequest(f"{key} must be a string.")

    value = value.strip()
    if len(value) < min_length:
        raise BadRequest(f"{key} must be at least {min_length} characters long.")
    if max_length is not None and len(value) > max_length:
        raise BadRequest(f"{key} must be at most {max_length} characters long.")
    return value


def parse_iso_date(value: object, field: str) -> date:
    """Parse a ``YYYY-MM-DD`` (optionally with a time part) string into a date."""

    if not isinstance(value, str) or not value.strip():
        raise BadRequest(f"{field} must be an ISO 8601 date.")
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError as exc:
        raise BadRequest(f"{field} must be an ISO 8601 date.") from exc


def parse_time(value: object, field: str = "time") -> str:
    """Validate a 24h ``HH:MM`` string and return it zero padded."""

    if not isinstance(value, str) or not TIME_PATTERN.match(value.strip()):
        raise BadRequest(f"{field} must be in HH:MM format.")
    hours, minutes = value.strip().split(":")
    return f"{int(hours):02d}:{minutes}"


def parse_positive_int(value: object, field: str, default: int) -> int:
    if value in (None, ""):
        return default
    try:
        number = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise BadRequest(f"{field} must be an integer.") from exc
    if number < 1:
        raise BadRequest(f"{field} must be greater than zero.")
    return number


def parse_bool(value: object) -> bool | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in {"1", "true", "yes", "y"}:
        return True
    if text in {"0", "false", "no", "n"}:
        return False
    return None
