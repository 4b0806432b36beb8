"""Shared configuration validation helpers."""

from __future__ import annotations

REPORT_FORMATS = {"text", "json", "markdown"}


def require_positive_int(value: int, field_name: str) -> int:
    """Validate a positive integer input and return it."""
    if value <= 0:
        raise ValueError(f"{field_name} must be greater than zero.")
    return value


def parse_positive_int(raw_value: str, field_name: str) -> int:
    """Parse a string into a positive integer."""
    try:
        value = int(raw_value.strip())
    except ValueError as exc:
        raise ValueError(f"{field_name} must be an integer, got {raw_value!r}.") from exc
    return require_positive_int(value, field_name)


def validate_choice(value: str, field_name: str, allowed: set[str]) -> str:
    """Validate that a string value is within a set of allowed options."""
    if value not in allowed:
        options = ", ".join(sorted(allowed))
        raise ValueError(f"{field_name} must be one of: {options}.")
    return value


def validate_report_format(value: str) -> str:
    """Validate architecture report output format."""
    return validate_choice(value, "format", REPORT_FORMATS)


def split_csv(raw_value: str | None) -> tuple[str, ...]:
    """Split a comma-separated value into trimmed, non-empty items."""
    if not raw_value:
        return ()
    return tuple(item.strip() for item in raw_value.split(",") if item.strip())
