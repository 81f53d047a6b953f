# schemas.py  (brew log record, enums, raw form input)

from __future__ import annotations
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from brewlog_backend.app.config.manifest import DEFAULT_GRINDER


# ===================== Enums =====================

class _TagEnum(str, Enum):
    """
    Closed tag set with display labels. Stored values stay plain text so a
    custom entry ("Add New...") survives; parse() maps text back to a member.
    """

    @property
    def label(self) -> str:
        return _LABELS[self]

    @classmethod
    def parse(cls, text: Any) -> Optional["_TagEnum"]:
        if isinstance(text, cls):
            return text
        key = _squash(str(text or ""))
        if not key:
            return None
        for member in cls:
            if key in (_squash(member.value), _squash(member.name), _squash(member.label)):
                return member
        return None

    @classmethod
    def labels(cls) -> list[str]:
        return [m.label for m in cls]


class BrewMethod(_TagEnum):
    POUR_OVER = "pour-over"
    AEROPRESS = "aeropress"
    FRENCH_PRESS = "french-press"
    ESPRESSO = "espresso"
    SIPHON = "siphon"
    COLD_BREW = "cold-brew"
    MOKA_POT = "moka-pot"
    TURKISH = "turkish"
    OTHER = "other"             # free-text escape

class RoastLevel(_TagEnum):
    LIGHT = "light"
    MEDIUM_LIGHT = "medium-light"
    MEDIUM = "medium"
    MEDIUM_DARK = "medium-dark"
    DARK = "dark"
    UNKNOWN = "unknown"

class TemperatureUnit(_TagEnum):
    CELSIUS = "celsius"
    FAHRENHEIT = "fahrenheit"

    @property
    def symbol(self) -> str:
        return "°C" if self is TemperatureUnit.CELSIUS else "°F"

    @classmethod
    def parse(cls, text: Any) -> Optional["TemperatureUnit"]:
        key = _squash(str(text or "")).lstrip("°")
        if key == "c":
            return cls.CELSIUS
        if key == "f":
            return cls.FAHRENHEIT
        return super().parse(text)  # type: ignore[return-value]


_LABELS: Dict[Enum, str] = {
    BrewMethod.POUR_OVER: "Pour Over",
    BrewMethod.AEROPRESS: "Aeropress",
    BrewMethod.FRENCH_PRESS: "French Press",
    BrewMethod.ESPRESSO: "Espresso",
    BrewMethod.SIPHON: "Siphon",
    BrewMethod.COLD_BREW: "Cold Brew",
    BrewMethod.MOKA_POT: "Moka Pot",
    BrewMethod.TURKISH: "Turkish",
    BrewMethod.OTHER: "Other",
    RoastLevel.LIGHT: "Light",
    RoastLevel.MEDIUM_LIGHT: "Medium-Light",
    RoastLevel.MEDIUM: "Medium",
    RoastLevel.MEDIUM_DARK: "Medium-Dark",
    RoastLevel.DARK: "Dark",
    RoastLevel.UNKNOWN: "Unknown",
    TemperatureUnit.CELSIUS: "Celsius",
    TemperatureUnit.FAHRENHEIT: "Fahrenheit",
}

def _squash(s: str) -> str:
    # "Medium-Light", "medium_light", "mediumLight" -> "mediumlight"
    return "".join(ch for ch in s.strip().lower() if ch.isalnum() or ch == "°")

def tag_text(value: Any) -> str:
    """Plain stored text for an enum member or free-text entry."""
    if isinstance(value, Enum):
        return str(value.value)
    return str(value or "").strip()


# ===================== Record =====================

class WaterTemperature(BaseModel):
    # value and unit always travel together
    value: float = Field(allow_inf_nan=False)
    unit: TemperatureUnit = TemperatureUnit.CELSIUS

    model_config = ConfigDict(frozen=True)

    def display(self) -> str:
        return f"{self.value:.1f} {self.unit.symbol}"


# persisted key order for one record
BLOB_FIELDS = (
    "id", "timestamp", "coffeeName", "dose", "grindSetting", "waterAmount",
    "method", "roastLevel", "waterTemperature", "temperatureUnit",
    "brewTime", "notes", "rating", "grinderType",
)

class BrewLogRecord(BaseModel):
    """
    One logged brewing session. Immutable; edits go through
    model_copy(update=...) and the store's update().
    """
    id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(default_factory=lambda: datetime.now().astimezone())
    coffee_name: str = Field(min_length=1)
    dose: float = Field(gt=0, allow_inf_nan=False)             # grams
    grind_setting: str = ""
    water_amount: float = Field(ge=0, allow_inf_nan=False)     # grams or ml
    method: str = BrewMethod.POUR_OVER.value
    roast_level: str = RoastLevel.MEDIUM.value
    water_temperature: Optional[WaterTemperature] = None
    brew_time: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)  # seconds
    notes: Optional[str] = None
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    grinder_type: str = DEFAULT_GRINDER

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("coffee_name", mode="before")
    @classmethod
    def _strip_name(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("method", "roast_level", "grinder_type", mode="before")
    @classmethod
    def _plain_tag(cls, v: Any) -> Any:
        return tag_text(v) if isinstance(v, Enum) else v

    # ---- convenience views ----
    @property
    def brew_method(self) -> Optional[BrewMethod]:
        return BrewMethod.parse(self.method)  # type: ignore[return-value]

    @property
    def roast(self) -> Optional[RoastLevel]:
        return RoastLevel.parse(self.roast_level)  # type: ignore[return-value]

    # ---- blob codec ----
    def to_blob(self) -> Dict[str, Any]:
        temp = self.water_temperature
        return {
            "id": str(self.id),
            "timestamp": self.timestamp.isoformat(),
            "coffeeName": self.coffee_name,
            "dose": self.dose,
            "grindSetting": self.grind_setting,
            "waterAmount": self.water_amount,
            "method": self.method,
            "roastLevel": self.roast_level,
            "waterTemperature": temp.value if temp else None,
            "temperatureUnit": temp.unit.value if temp else None,
            "brewTime": self.brew_time,
            "notes": self.notes,
            "rating": self.rating,
            "grinderType": self.grinder_type,
        }

    @classmethod
    def from_blob(cls, obj: Any) -> "BrewLogRecord":
        """
        Inverse of to_blob(). Raises ValueError (pydantic's ValidationError is
        one) when the object does not describe a valid record.
        """
        if not isinstance(obj, dict):
            raise ValueError(f"record must be an object, got {type(obj).__name__}")
        missing = [k for k in ("id", "timestamp", "coffeeName", "dose", "waterAmount") if k not in obj]
        if missing:
            raise ValueError(f"record missing fields: {', '.join(missing)}")

        t_val, t_unit = obj.get("waterTemperature"), obj.get("temperatureUnit")
        if (t_val is None) != (t_unit is None):
            raise ValueError("waterTemperature and temperatureUnit must be set together")
        temperature = None
        if t_val is not None:
            unit = TemperatureUnit.parse(t_unit)
            if unit is None:
                raise ValueError(f"unknown temperature unit: {t_unit!r}")
            temperature = WaterTemperature(value=t_val, unit=unit)

        ts = obj["timestamp"]
        if not isinstance(ts, str):
            raise ValueError("timestamp must be an ISO 8601 string")

        return cls(
            id=UUID(str(obj["id"])),
            timestamp=datetime.fromisoformat(ts),
            coffee_name=obj["coffeeName"],
            dose=obj["dose"],
            grind_setting=obj.get("grindSetting") or "",
            water_amount=obj["waterAmount"],
            method=obj.get("method") or BrewMethod.OTHER.value,
            roast_level=obj.get("roastLevel") or RoastLevel.UNKNOWN.value,
            water_temperature=temperature,
            brew_time=obj.get("brewTime"),
            notes=obj.get("notes"),
            rating=obj.get("rating"),
            grinder_type=obj.get("grinderType") or DEFAULT_GRINDER,
        )


# ===================== Form input =====================

class BrewLogFields(BaseModel):
    """
    Raw form state, everything as the text fields hold it.
    Pickers default to Pour Over / Medium / Celsius like a fresh form.
    """
    coffee_name: str = ""
    dose: str = ""
    grind_setting: str = ""
    water_amount: str = ""
    method: str = BrewMethod.POUR_OVER.value
    roast_level: str = RoastLevel.MEDIUM.value
    water_temperature: str = ""
    temperature_unit: str = TemperatureUnit.CELSIUS.value
    brew_time: str = ""                 # "MM:SS"
    notes: str = ""
    rating: str = ""
    timestamp: Optional[datetime] = None
    grinder_type: Optional[str] = None

    # ignore unknown keys so a UI can hand over its whole state dict
    model_config = ConfigDict(extra="ignore")

    @field_validator(
        "coffee_name", "dose", "grind_setting", "water_amount", "method", "roast_level",
        "water_temperature", "temperature_unit", "brew_time", "notes", "rating",
        mode="before",
    )
    @classmethod
    def _as_text(cls, v: Any) -> Any:
        if v is None:
            return ""
        if isinstance(v, Enum):
            return tag_text(v)
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v
