# brewlog_backend/app/services/log_views.py
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Tuple

from brewlog_backend.app.schemas import (
    BrewLogFields,
    BrewLogRecord,
    BrewMethod,
    RoastLevel,
    TemperatureUnit,
)
from brewlog_backend.app.utils.strings import fold_key
from .validation import format_brew_time

# Read-only helpers for list/card/detail/edit screens. Nothing here mutates
# a record or the store.

NA = "N/A"


# ---- ratio ----
def brew_ratio(record: BrewLogRecord) -> Optional[float]:
    """water / dose; display only, never persisted."""
    if record.dose <= 0:
        return None
    return record.water_amount / record.dose

def format_ratio(record: BrewLogRecord, digits: int = 1) -> str:
    ratio = brew_ratio(record)
    if ratio is None:
        return "-"
    return f"1:{ratio:.{digits}f}"


# ---- list helpers ----
def distinct_coffee_names(logs: Iterable[BrewLogRecord]) -> List[str]:
    """Autocomplete source: first spelling seen wins, case-insensitive."""
    seen: set[str] = set()
    out: List[str] = []
    for rec in logs:
        key = fold_key(rec.coffee_name)
        if not key or key in seen:
            continue
        seen.add(key)
        out.append(rec.coffee_name.strip())
    return out

def filter_by_coffee(logs: Iterable[BrewLogRecord], query: str) -> List[BrewLogRecord]:
    q = fold_key(query)
    if not q:
        return list(logs)
    return [rec for rec in logs if q in fold_key(rec.coffee_name)]

def newest_first(logs: Iterable[BrewLogRecord]) -> List[BrewLogRecord]:
    return sorted(logs, key=lambda r: r.timestamp, reverse=True)


# ---- labels ----
def method_label(record: BrewLogRecord) -> str:
    m = record.brew_method
    return m.label if m else record.method

def roast_label(record: BrewLogRecord) -> str:
    r = record.roast
    return r.label if r else record.roast_level

def rating_stars(rating: Optional[int]) -> str:
    filled = rating or 0
    return "★" * filled + "☆" * (5 - filled)

def brew_time_label(seconds: Optional[float]) -> str:
    if seconds is None or seconds <= 0:
        return NA
    return format_brew_time(seconds)


# ---- screens ----
def card_summary(record: BrewLogRecord) -> Dict[str, Any]:
    ratio = brew_ratio(record)
    return {
        "id": str(record.id),
        "title": record.coffee_name,
        "date": record.timestamp.strftime("%d %b %Y"),
        "stars": rating_stars(record.rating),
        "dose": f"{record.dose:.1f}g",
        "water": f"{record.water_amount:.0f}ml",
        "method": method_label(record),
        # card shows the whole-number ratio
        "ratio": f"1:{int(ratio)}" if ratio is not None else "-",
    }

def detail_rows(record: BrewLogRecord) -> List[Tuple[str, str]]:
    temp = record.water_temperature
    return [
        ("Coffee", record.coffee_name),
        ("Roast Level", roast_label(record)),
        ("Date", record.timestamp.strftime("%d %b %Y %H:%M")),
        ("Method", method_label(record)),
        ("Dose", f"{record.dose:.1f} g"),
        ("Grind Setting", record.grind_setting or NA),
        ("Grinder", record.grinder_type),
        ("Water Amount", f"{record.water_amount:.1f} ml"),
        ("Ratio", format_ratio(record)),
        ("Water Temp", temp.display() if temp else NA),
        ("Brew Time", brew_time_label(record.brew_time)),
        ("Rating", f"{record.rating}/5" if record.rating is not None else NA),
        ("Notes", record.notes or NA),
    ]

def form_fields_for(record: Optional[BrewLogRecord] = None) -> BrewLogFields:
    """
    Initial form state. A new form gets empty text and picker defaults with
    rating 3; editing prefills from the record.
    """
    if record is None:
        return BrewLogFields(rating="3")
    temp = record.water_temperature
    return BrewLogFields(
        coffee_name=record.coffee_name,
        dose=f"{record.dose:.1f}",
        grind_setting=record.grind_setting,
        water_amount=f"{record.water_amount:.1f}",
        method=record.method or BrewMethod.POUR_OVER.value,
        roast_level=record.roast_level or RoastLevel.MEDIUM.value,
        water_temperature=f"{temp.value:.1f}" if temp else "",
        temperature_unit=(temp.unit if temp else TemperatureUnit.CELSIUS).value,
        brew_time=format_brew_time(record.brew_time) if record.brew_time is not None else "",
        notes=record.notes or "",
        rating=str(record.rating if record.rating is not None else 3),
        timestamp=record.timestamp,
        grinder_type=record.grinder_type,
    )
