# brewlog_backend/app/services/validation.py
from __future__ import annotations

import math
import re
from typing import Any, Dict, Mapping, Optional, Union
from uuid import UUID

from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticSerializationError

from brewlog_backend.app.config.manifest import DEFAULT_GRINDER, Settings
from brewlog_backend.app.schemas import (
    BrewLogFields,
    BrewLogRecord,
    BrewMethod,
    RoastLevel,
    TemperatureUnit,
    WaterTemperature,
    tag_text,
)
from brewlog_backend.app.utils.strings import null_to_none_or_strip

FieldsLike = Union[BrewLogFields, Mapping[str, Any]]

_DIGITS = re.compile(r"[0-9]+")
# plain decimal as typed in a form: no exponent, no "_" separators
_DECIMAL = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)")


class ValidationError(ValueError):
    """
    Raw form input cannot become a record. `errors` maps field name to message.
    """

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        detail = "; ".join(f"{k}: {v}" for k, v in self.errors.items())
        super().__init__(f"invalid brew log: {detail}")


class FormatError(ValidationError):
    """A brew time string is not MM:SS."""

    def __init__(self, text: str, reason: str):
        self.text = text
        super().__init__({"brew_time": f"{reason} ({text!r})"})


# ---------------------------------------------------------------------------
# MM:SS
# ---------------------------------------------------------------------------

def parse_brew_time(text: str) -> int:
    """
    "MM:SS" -> total seconds. Exactly one ':' with digit-only parts on both
    sides, seconds below 60. Minutes are unbounded.
    """
    raw = (text or "").strip()
    parts = raw.split(":")
    if len(parts) != 2:
        raise FormatError(raw, "expected minutes:seconds")
    minutes_s, seconds_s = parts
    if not _DIGITS.fullmatch(minutes_s) or not _DIGITS.fullmatch(seconds_s):
        raise FormatError(raw, "minutes and seconds must be non-negative integers")
    minutes, seconds = int(minutes_s), int(seconds_s)
    if seconds >= 60:
        raise FormatError(raw, "seconds must be below 60")
    return minutes * 60 + seconds

def format_brew_time(total_seconds: float) -> str:
    """Total seconds -> zero-padded "MM:SS"; fractions are truncated."""
    if total_seconds is None or not math.isfinite(total_seconds) or total_seconds < 0:
        raise ValueError(f"brew time must be a non-negative number, got {total_seconds!r}")
    whole = int(total_seconds)
    return f"{whole // 60:02d}:{whole % 60:02d}"


# ---------------------------------------------------------------------------
# Field parsing
# ---------------------------------------------------------------------------

def _parse_number(text: str) -> Optional[float]:
    t = text.strip()
    if not _DECIMAL.fullmatch(t):
        return None
    value = float(t)
    return value if math.isfinite(value) else None

def _parse_rating(text: str) -> Optional[int]:
    t = text.strip()
    if not re.fullmatch(r"[+]?[0-9]+", t):
        return None
    value = int(t)
    return value if 1 <= value <= 5 else None

def _as_fields(fields: FieldsLike) -> BrewLogFields:
    if isinstance(fields, BrewLogFields):
        return fields
    try:
        return BrewLogFields.model_validate(dict(fields))
    except PydanticValidationError as e:
        raise ValidationError({str(err["loc"][0]): err["msg"] for err in e.errors()}) from e

def validate_fields(
    fields: FieldsLike,
    *,
    settings: Optional[Settings] = None,
    require_water_amount: Optional[bool] = None,
    grinder_type: Optional[str] = None,
    record_id: Optional[UUID] = None,
) -> BrewLogRecord:
    """
    Build a record from raw form input, or raise ValidationError listing every
    failing field. Nothing is partially accepted.

    Policy comes from the explicit keywords first, then `settings`
    (`require_water_amount`, `default_grinder`), then the built-in defaults.
    A grinder named in the fields beats the configured default.
    `record_id` keeps an existing id when editing; a new record gets a fresh one.
    """
    f = _as_fields(fields)
    if require_water_amount is None:
        require_water_amount = settings.require_water_amount if settings else True
    fallback_grinder = settings.default_grinder if settings else DEFAULT_GRINDER
    errors: Dict[str, str] = {}

    name = f.coffee_name.strip()
    if not name:
        errors["coffee_name"] = "coffee name is required"

    dose = _parse_number(f.dose)
    if dose is None:
        errors["dose"] = "dose must be a number"
    elif dose <= 0:
        errors["dose"] = "dose must be greater than zero"

    water_amount: Optional[float]
    if f.water_amount.strip():
        water_amount = _parse_number(f.water_amount)
        if water_amount is None:
            errors["water_amount"] = "water amount must be a number"
        elif water_amount < 0:
            errors["water_amount"] = "water amount cannot be negative"
    elif require_water_amount:
        water_amount = None
        errors["water_amount"] = "water amount is required"
    else:
        water_amount = 0.0

    temperature: Optional[WaterTemperature] = None
    if f.water_temperature.strip():
        value = _parse_number(f.water_temperature)
        unit = TemperatureUnit.parse(f.temperature_unit or TemperatureUnit.CELSIUS.value)
        if value is None:
            errors["water_temperature"] = "water temperature must be a number"
        elif unit is None:
            errors["temperature_unit"] = f"unknown temperature unit: {f.temperature_unit!r}"
        else:
            temperature = WaterTemperature(value=value, unit=unit)

    brew_time: Optional[int] = None
    if f.brew_time.strip():
        try:
            brew_time = parse_brew_time(f.brew_time)
        except FormatError as e:
            errors.update(e.errors)

    rating: Optional[int] = None
    if f.rating.strip():
        rating = _parse_rating(f.rating)
        if rating is None:
            errors["rating"] = "rating must be a whole number from 1 to 5"

    if errors:
        raise ValidationError(errors)

    values: Dict[str, Any] = {
        "coffee_name": name,
        "dose": dose,
        "grind_setting": f.grind_setting.strip(),
        "water_amount": water_amount,
        "method": tag_text(f.method) or BrewMethod.OTHER.value,
        "roast_level": tag_text(f.roast_level) or RoastLevel.UNKNOWN.value,
        "water_temperature": temperature,
        "brew_time": float(brew_time) if brew_time is not None else None,
        "notes": null_to_none_or_strip(f.notes),
        "rating": rating,
        "grinder_type": (grinder_type or f.grinder_type or fallback_grinder).strip(),
    }
    if f.timestamp is not None:
        values["timestamp"] = f.timestamp
    if record_id is not None:
        values["id"] = record_id

    try:
        return BrewLogRecord(**values)
    except PydanticValidationError as e:
        raise ValidationError(_record_errors(e)) from e

def revalidate(record: BrewLogRecord) -> BrewLogRecord:
    """
    Run a record through the model checks again. model_copy(update=...) skips
    validation, so an edited copy can carry a bad value (dose=0, a float
    where a WaterTemperature belongs).
    """
    try:
        return BrewLogRecord.model_validate(record.model_dump(warnings=False))
    except PydanticValidationError as e:
        raise ValidationError(_record_errors(e)) from e
    except PydanticSerializationError as e:
        raise ValidationError({"record": str(e)}) from e

def _record_errors(e: PydanticValidationError) -> Dict[str, str]:
    return {".".join(str(p) for p in err["loc"]) or "record": err["msg"] for err in e.errors()}

def is_form_valid(fields: FieldsLike, **policy: Any) -> bool:
    """Save-button predicate: True iff validate_fields() would succeed."""
    try:
        validate_fields(fields, **policy)
    except ValidationError:
        return False
    return True


__all__ = [
    "ValidationError", "FormatError",
    "parse_brew_time", "format_brew_time",
    "validate_fields", "is_form_valid", "revalidate",
]
