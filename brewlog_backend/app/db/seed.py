# brewlog_backend/app/db/seed.py
from __future__ import annotations

from typing import List

from brewlog_backend.app.schemas import (
    BrewLogRecord,
    BrewMethod,
    RoastLevel,
    TemperatureUnit,
    WaterTemperature,
)

# First-run examples, only used when settings.seed_samples is on.
def sample_logs() -> List[BrewLogRecord]:
    return [
        BrewLogRecord(
            coffee_name="Morning Delight", dose=18.5, grind_setting="Medium-Fine",
            water_amount=300, method=BrewMethod.POUR_OVER, roast_level=RoastLevel.LIGHT,
            water_temperature=WaterTemperature(value=96, unit=TemperatureUnit.CELSIUS),
            brew_time=180, notes="First attempt with new beans.", rating=4,
        ),
        BrewLogRecord(
            coffee_name="Dark Roast", dose=20.0, grind_setting="Coarse",
            water_amount=320, method=BrewMethod.FRENCH_PRESS, roast_level=RoastLevel.DARK,
            water_temperature=WaterTemperature(value=92, unit=TemperatureUnit.CELSIUS),
            brew_time=240, notes="Strong and bold.", rating=5,
        ),
    ]
