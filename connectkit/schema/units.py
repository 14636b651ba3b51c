# -*- coding: utf-8 -*-
"""Physical dimensions, accepted unit symbols and canonical conversion.

Every dimension owns a whitelist of symbols. Conversion is fail-fast: a symbol
that is not in the dimension's whitelist raises :class:`InvalidUnit` with the
full list of valid symbols, it is never reinterpreted as a default unit.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from ..errors import InvalidUnit


class Dimension(Enum):
    MASS = "mass"
    LENGTH = "length"
    ENERGY = "energy"
    POWER = "power"
    PRESSURE = "pressure"
    TEMPERATURE = "temperature"
    VOLUME = "volume"
    BLOOD_GLUCOSE = "bloodGlucose"
    FREQUENCY = "frequency"
    VELOCITY = "velocity"
    TIME = "time"
    RATE = "rate"  # count per minute (heart rate, cadence, respiration)
    VO2 = "vo2"  # mL/(kg*min)
    SOUND_LEVEL = "soundLevel"  # dB(A) SPL
    HEARING_LEVEL = "hearingLevel"  # dB HL
    COUNT = "count"
    PERCENT = "percent"


# Dimensions where zero or negative values are physically meaningless.
POSITIVE_DIMENSIONS = frozenset(
    {
        Dimension.MASS,
        Dimension.LENGTH,
        Dimension.VOLUME,
        Dimension.PRESSURE,
        Dimension.BLOOD_GLUCOSE,
        Dimension.FREQUENCY,
    }
)
NON_NEGATIVE_DIMENSIONS = frozenset(
    {
        Dimension.COUNT,
        Dimension.PERCENT,
        Dimension.ENERGY,
        Dimension.POWER,
        Dimension.VELOCITY,
        Dimension.TIME,
        Dimension.RATE,
        Dimension.VO2,
    }
)


@dataclass(frozen=True)
class Unit:
    symbol: str
    dimension: Dimension
    factor: float = 1.0
    offset: float = 0.0
    aliases: Tuple[str, ...] = ()

    def to_canonical(self, value: float, delta: bool = False) -> float:
        if delta:
            return value * self.factor
        return value * self.factor + self.offset


@dataclass(frozen=True)
class CanonicalValue:
    """A value expressed in the canonical unit of its dimension."""

    value: float
    dimension: Dimension

    @property
    def unit(self) -> str:
        return CANONICAL_SYMBOLS[self.dimension]

    def to_dict(self) -> Dict[str, object]:
        return {"value": self.value, "unit": self.unit, "dimension": self.dimension.value}


_UNITS: List[Unit] = [
    # mass -> kg
    Unit("kg", Dimension.MASS, 1.0, aliases=("kilogram", "kilograms")),
    Unit("g", Dimension.MASS, 1e-3, aliases=("gram", "grams")),
    Unit("mg", Dimension.MASS, 1e-6, aliases=("milligram", "milligrams")),
    Unit("mcg", Dimension.MASS, 1e-9, aliases=("μg", "µg", "ug", "microgram", "micrograms")),
    Unit("lb", Dimension.MASS, 0.45359237, aliases=("lbs", "pound", "pounds")),
    Unit("oz", Dimension.MASS, 0.028349523125, aliases=("ounce", "ounces")),
    # length -> m
    Unit("m", Dimension.LENGTH, 1.0, aliases=("meter", "meters", "metre", "metres")),
    Unit("km", Dimension.LENGTH, 1000.0, aliases=("kilometer", "kilometers")),
    Unit("cm", Dimension.LENGTH, 0.01, aliases=("centimeter", "centimeters")),
    Unit("mi", Dimension.LENGTH, 1609.344, aliases=("mile", "miles")),
    Unit("ft", Dimension.LENGTH, 0.3048, aliases=("foot", "feet")),
    Unit("in", Dimension.LENGTH, 0.0254, aliases=("inch", "inches")),
    # energy -> kcal
    Unit("kcal", Dimension.ENERGY, 1.0, aliases=("kilocalorie", "kilocalories", "cal_nutritional")),
    Unit("cal", Dimension.ENERGY, 1e-3, aliases=("calorie", "calories")),
    Unit("kJ", Dimension.ENERGY, 1.0 / 4.184, aliases=("kilojoule", "kilojoules")),
    Unit("J", Dimension.ENERGY, 1.0 / 4184.0, aliases=("joule", "joules")),
    # power -> W
    Unit("W", Dimension.POWER, 1.0, aliases=("watt", "watts")),
    Unit("kW", Dimension.POWER, 1000.0, aliases=("kilowatt", "kilowatts")),
    Unit("kcal/day", Dimension.POWER, 4184.0 / 86400.0, aliases=("kilocalories/day", "kilocaloriesperday")),
    # pressure -> mmHg
    Unit("mmHg", Dimension.PRESSURE, 1.0, aliases=("millimeterofmercury", "millimetersofmercury")),
    # temperature -> celsius
    Unit("C", Dimension.TEMPERATURE, 1.0, aliases=("°c", "celsius", "degc")),
    Unit("F", Dimension.TEMPERATURE, 5.0 / 9.0, -32.0 * 5.0 / 9.0, aliases=("°f", "fahrenheit", "degf")),
    Unit("K", Dimension.TEMPERATURE, 1.0, -273.15, aliases=("kelvin",)),
    # volume -> L
    Unit("L", Dimension.VOLUME, 1.0, aliases=("liter", "liters", "litre", "litres")),
    Unit("mL", Dimension.VOLUME, 1e-3, aliases=("milliliter", "milliliters")),
    Unit("fl oz", Dimension.VOLUME, 0.0295735295625, aliases=("fl. oz", "floz", "fluidounce", "fluidounces", "fluidounceus")),
    # blood glucose -> mmol/L
    Unit("mmol/L", Dimension.BLOOD_GLUCOSE, 1.0, aliases=("mmol", "millimolesperliter")),
    Unit("mg/dL", Dimension.BLOOD_GLUCOSE, 1.0 / 18.0, aliases=("mgdl", "milligramsperdeciliter")),
    # frequency -> Hz
    Unit("Hz", Dimension.FREQUENCY, 1.0, aliases=("hertz",)),
    Unit("kHz", Dimension.FREQUENCY, 1000.0, aliases=("kilohertz",)),
    # velocity -> m/s
    Unit("m/s", Dimension.VELOCITY, 1.0, aliases=("meterspersecond", "meters/second")),
    Unit("km/h", Dimension.VELOCITY, 1000.0 / 3600.0, aliases=("kph", "kmh", "kilometersperhour", "kilometers/hour")),
    Unit("mph", Dimension.VELOCITY, 1609.344 / 3600.0, aliases=("milesperhour", "miles/hour")),
    # time -> s
    Unit("s", Dimension.TIME, 1.0, aliases=("sec", "second", "seconds")),
    Unit("ms", Dimension.TIME, 1e-3, aliases=("millisecond", "milliseconds")),
    Unit("min", Dimension.TIME, 60.0, aliases=("minute", "minutes")),
    Unit("h", Dimension.TIME, 3600.0, aliases=("hr", "hour", "hours")),
    # rate -> count/min
    Unit("count/min", Dimension.RATE, 1.0, aliases=("bpm", "beats/min", "rpm", "breaths/min", "perminute")),
    Unit("count/s", Dimension.RATE, 60.0, aliases=("persecond",)),
    # vo2 -> mL/(kg*min)
    Unit("mL/kg/min", Dimension.VO2, 1.0, aliases=("ml/(kg*min)", "ml/kg·min", "mlperkgperminute")),
    # sound
    Unit("dBASPL", Dimension.SOUND_LEVEL, 1.0, aliases=("dba", "db", "dbspl", "db(a)")),
    Unit("dBHL", Dimension.HEARING_LEVEL, 1.0, aliases=("db hl",)),
    # scalars
    Unit("count", Dimension.COUNT, 1.0, aliases=("steps", "floors", "times")),
    Unit("%", Dimension.PERCENT, 1.0, aliases=("percent", "percentage")),
]

CANONICAL_SYMBOLS: Dict[Dimension, str] = {
    Dimension.MASS: "kg",
    Dimension.LENGTH: "m",
    Dimension.ENERGY: "kcal",
    Dimension.POWER: "W",
    Dimension.PRESSURE: "mmHg",
    Dimension.TEMPERATURE: "C",
    Dimension.VOLUME: "L",
    Dimension.BLOOD_GLUCOSE: "mmol/L",
    Dimension.FREQUENCY: "Hz",
    Dimension.VELOCITY: "m/s",
    Dimension.TIME: "s",
    Dimension.RATE: "count/min",
    Dimension.VO2: "mL/kg/min",
    Dimension.SOUND_LEVEL: "dBASPL",
    Dimension.HEARING_LEVEL: "dBHL",
    Dimension.COUNT: "count",
    Dimension.PERCENT: "%",
}

# Scalar dimensions where an absent unit means the canonical one.
UNITLESS_DIMENSIONS = frozenset({Dimension.COUNT, Dimension.PERCENT, Dimension.RATE})


def _normalize(symbol: str) -> str:
    return re.sub(r"\s+", "", symbol).lower()


def _build_lookup() -> Dict[Dimension, Dict[str, Unit]]:
    lookup: Dict[Dimension, Dict[str, Unit]] = {d: {} for d in Dimension}
    for unit in _UNITS:
        table = lookup[unit.dimension]
        for key in (unit.symbol, *unit.aliases):
            table[_normalize(key)] = unit
    return lookup


_LOOKUP = _build_lookup()


def valid_symbols(dimension: Dimension) -> List[str]:
    return [u.symbol for u in _UNITS if u.dimension is dimension]


def find_unit(symbol: str, dimension: Dimension) -> Optional[Unit]:
    return _LOOKUP[dimension].get(_normalize(symbol))


def convert(
    raw_value: float,
    unit_symbol: Optional[str],
    dimension: Dimension,
    field_context: str = "value",
    delta: bool = False,
) -> CanonicalValue:
    """Convert ``raw_value`` tagged with ``unit_symbol`` into ``dimension``'s canonical unit.

    ``field_context`` names the field in error messages. Scalar dimensions
    (count, percent, rate) accept a missing unit; every other dimension
    requires one.
    """
    if isinstance(raw_value, bool) or not isinstance(raw_value, (int, float)):
        raise InvalidUnit(
            f"Expected numeric value for '{field_context}', got {type(raw_value).__name__}",
            field_name=field_context,
        )
    try:
        number = float(raw_value)
    except OverflowError:
        number = math.inf
    if not math.isfinite(number):
        raise InvalidUnit(
            f"Value for '{field_context}' must be a finite number, got {number}",
            field_name=field_context,
        )
    if unit_symbol is None:
        if dimension in UNITLESS_DIMENSIONS:
            return CanonicalValue(number, dimension)
        raise InvalidUnit(
            f"Missing required {dimension.value} unit for '{field_context}'. "
            f"Supported units: {', '.join(valid_symbols(dimension))}",
            field_name=field_context,
        )
    if not isinstance(unit_symbol, str):
        raise InvalidUnit(
            f"Unit for '{field_context}' must be a string, got {type(unit_symbol).__name__}",
            field_name=field_context,
        )
    unit = find_unit(unit_symbol, dimension)
    if unit is None:
        raise InvalidUnit(
            f"Unknown {dimension.value} unit '{unit_symbol}' for '{field_context}'. "
            f"Supported units: {', '.join(valid_symbols(dimension))}",
            field_name=field_context,
        )
    canonical = unit.to_canonical(number, delta=delta)
    if not math.isfinite(canonical):
        raise InvalidUnit(
            f"Value for '{field_context}' is out of range in {CANONICAL_SYMBOLS[dimension]}",
            field_name=field_context,
        )
    return CanonicalValue(canonical, dimension)
