"""
Distance units.

Every ruler expresses its results in one `DistanceUnit`. The conversion table maps
each unit to the factor that turns kilometers into that unit; the ruler multiplies
its kilometer-based curvature terms by it.
"""

from __future__ import annotations

from enum import Enum


class DistanceUnit(str, Enum):
    """Units a ruler can express distances in."""

    KILOMETERS = "kilometers"
    MILES = "miles"
    NAUTICAL_MILES = "nautical_miles"
    METERS = "meters"
    YARDS = "yards"
    FEET = "feet"
    INCHES = "inches"

    @classmethod
    def parse(cls, value: str | DistanceUnit) -> DistanceUnit:
        """Resolve a unit from its name or a common abbreviation (`km`, `mi`, `ft`, ...)."""
        if isinstance(value, DistanceUnit):
            return value
        key = str(value).strip().lower().replace("-", "_").replace(" ", "_")
        unit = _ALIASES.get(key)
        if unit is None:
            raise ValueError(f"Unknown distance unit '{value}'")
        return unit

    def factor_to_kilometers(self) -> float:
        return factor_to_kilometers(self)


_FACTORS: dict[DistanceUnit, float] = {
    DistanceUnit.KILOMETERS: 1.0,
    DistanceUnit.MILES: 1000.0 / 1609.344,
    DistanceUnit.NAUTICAL_MILES: 1000.0 / 1852.0,
    DistanceUnit.METERS: 1000.0,
    DistanceUnit.YARDS: 1000.0 / 0.9144,
    DistanceUnit.FEET: 1000.0 / 0.3048,
    DistanceUnit.INCHES: 1000.0 / 0.0254,
}

_ALIASES: dict[str, DistanceUnit] = {
    **{u.value: u for u in DistanceUnit},
    **{u.name.lower(): u for u in DistanceUnit},
    "km": DistanceUnit.KILOMETERS,
    "kilometer": DistanceUnit.KILOMETERS,
    "mi": DistanceUnit.MILES,
    "mile": DistanceUnit.MILES,
    "nmi": DistanceUnit.NAUTICAL_MILES,
    "nm": DistanceUnit.NAUTICAL_MILES,
    "nauticalmiles": DistanceUnit.NAUTICAL_MILES,
    "m": DistanceUnit.METERS,
    "meter": DistanceUnit.METERS,
    "yd": DistanceUnit.YARDS,
    "yard": DistanceUnit.YARDS,
    "ft": DistanceUnit.FEET,
    "foot": DistanceUnit.FEET,
    "in": DistanceUnit.INCHES,
    "inch": DistanceUnit.INCHES,
}


def factor_to_kilometers(unit: DistanceUnit) -> float:
    """Return the factor converting kilometers into `unit`."""
    return _FACTORS[DistanceUnit(unit)]
