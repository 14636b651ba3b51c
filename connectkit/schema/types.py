# -*- coding: utf-8 -*-
"""Type registry.

Every record/field type is registered once at import time. Composite types
(``bloodPressure``, ``nutrition``, ``sleepSession``, ``workout``) own a fixed
set of component types; the parent/child relation is stored here when the
composite is registered, so lookups never parse dotted names.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from ..errors import UnknownType
from .units import Dimension

ANDROID = "android"
IOS = "ios"
BOTH: FrozenSet[str] = frozenset({ANDROID, IOS})
ANDROID_ONLY: FrozenSet[str] = frozenset({ANDROID})
IOS_ONLY: FrozenSet[str] = frozenset({IOS})


class ValuePattern(Enum):
    QUANTITY = "quantity"
    SAMPLES = "samples"
    CATEGORY = "category"
    MULTIPLE = "multiple"
    LABEL = "label"
    NONE = "none"


class TimePattern(Enum):
    INSTANTANEOUS = "instantaneous"
    INTERVAL = "interval"


@dataclass(frozen=True)
class FieldSpec:
    """One named sub-field of a ``multiple`` value."""

    name: str
    pattern: ValuePattern
    dimension: Optional[Dimension] = None
    vocabulary: Optional[str] = None
    required: bool = False
    delta: bool = False


@dataclass(frozen=True)
class Type:
    name: str
    value_pattern: ValuePattern
    time_pattern: TimePattern
    platforms: FrozenSet[str] = BOTH
    dimension: Optional[Dimension] = None
    vocabulary: Optional[str] = None
    fields: Tuple[FieldSpec, ...] = ()
    writable: bool = True

    def supported_on(self, platform: str) -> bool:
        return platform in self.platforms

    def field(self, name: str) -> Optional[FieldSpec]:
        for spec in self.fields:
            if spec.name == name:
                return spec
        return None

    def __str__(self) -> str:
        return self.name


class TypeRegistry:
    def __init__(self) -> None:
        self._types: Dict[str, Type] = {}
        self._components: Dict[str, Tuple[Type, ...]] = {}
        self._parents: Dict[str, str] = {}
        # What each composite expands to. Defaults to all of its components.
        self._expansions: Dict[str, Tuple[Type, ...]] = {}

    def register(self, type_: Type) -> Type:
        if type_.name in self._types:
            raise ValueError(f"Type '{type_.name}' is already registered")
        self._types[type_.name] = type_
        return type_

    def register_composite(
        self,
        type_: Type,
        components: Sequence[Type],
        expands_to: Optional[Sequence[Type]] = None,
    ) -> Type:
        """Register a composite and its components.

        ``expands_to`` narrows what ``expand`` yields for this composite. It may
        name the composite itself, which then stays a concrete member of its
        own expansion.
        """
        if not components:
            raise ValueError(f"Composite type '{type_.name}' needs at least one component")
        for component in components:
            if component.name in self._components:
                raise ValueError(
                    f"Component '{component.name}' of '{type_.name}' is itself a composite"
                )
        expansion = tuple(components) if expands_to is None else tuple(expands_to)
        allowed = {type_.name, *(c.name for c in components)}
        stray = sorted(t.name for t in expansion if t.name not in allowed)
        if stray or not expansion:
            raise ValueError(
                f"Expansion of '{type_.name}' must be drawn from the composite and its components"
                + (f", got {', '.join(stray)}" if stray else "")
            )
        self.register(type_)
        for component in components:
            self.register(component)
            self._parents[component.name] = type_.name
        self._components[type_.name] = tuple(components)
        self._expansions[type_.name] = expansion
        return type_

    def get(self, identifier: str) -> Optional[Type]:
        return self._types.get(identifier)

    def resolve(self, identifier: str) -> Type:
        if not isinstance(identifier, str):
            raise UnknownType(repr(identifier))
        type_ = self._types.get(identifier)
        if type_ is None:
            raise UnknownType(identifier)
        return type_

    def is_valid(self, identifier: str) -> bool:
        return identifier in self._types

    def is_composite(self, type_: Type) -> bool:
        return type_.name in self._components

    def components_of(self, type_: Type) -> Tuple[Type, ...]:
        return self._components.get(type_.name, ())

    def parent_of(self, type_: Type) -> Optional[Type]:
        parent = self._parents.get(type_.name)
        return self._types[parent] if parent else None

    def expand(self, types: Iterable[Type]) -> FrozenSet[Type]:
        """Replace every composite with its components; other types pass through.

        Applying ``expand`` to its own output returns the same set.
        """
        expanded = set()
        for type_ in types:
            expansion = self._expansions.get(type_.name)
            if expansion is None:
                expanded.add(type_)
                continue
            expanded.update(expansion)
        return frozenset(expanded)

    def expand_names(self, identifiers: Iterable[str]) -> List[str]:
        return sorted(t.name for t in self.expand(self.resolve(i) for i in identifiers))

    def all_types(self) -> List[Type]:
        return list(self._types.values())

    def all_names(self) -> List[str]:
        return list(self._types)

    def supported_names(self, platform: str) -> List[str]:
        return [t.name for t in self._types.values() if t.supported_on(platform)]


Q = ValuePattern.QUANTITY
S = ValuePattern.SAMPLES
C = ValuePattern.CATEGORY
M = ValuePattern.MULTIPLE
INSTANT = TimePattern.INSTANTANEOUS
INTERVAL = TimePattern.INTERVAL

NUTRIENT_MASS_COMPONENTS = (
    "protein",
    "totalCarbohydrate",
    "totalFat",
    "dietaryFiber",
    "sugar",
    "saturatedFat",
    "unsaturatedFat",
    "monounsaturatedFat",
    "polyunsaturatedFat",
    "transFat",
    "cholesterol",
    "calcium",
    "chloride",
    "chromium",
    "copper",
    "iodine",
    "iron",
    "magnesium",
    "manganese",
    "molybdenum",
    "phosphorus",
    "potassium",
    "selenium",
    "sodium",
    "zinc",
    "vitaminA",
    "vitaminB6",
    "vitaminB12",
    "vitaminC",
    "vitaminD",
    "vitaminE",
    "vitaminK",
    "thiamin",
    "riboflavin",
    "niacin",
    "folate",
    "biotin",
    "pantothenicAcid",
)

SLEEP_STAGE_COMPONENTS = ("inBed", "asleep", "awake", "light", "deep", "rem", "outOfBed")


def _temperature_fields(location_vocabulary: str) -> Tuple[FieldSpec, ...]:
    return (
        FieldSpec("temperature", Q, Dimension.TEMPERATURE, required=True),
        FieldSpec("measurementLocation", C, vocabulary=location_vocabulary),
    )


def _simple_types() -> List[Type]:
    return [
        # activity
        Type("activeEnergy", Q, INTERVAL, dimension=Dimension.ENERGY),
        Type("restingEnergy", Q, INSTANT, dimension=Dimension.POWER),
        Type("totalEnergy", Q, INTERVAL, dimension=Dimension.ENERGY),
        Type("speed", S, INTERVAL, dimension=Dimension.VELOCITY),
        Type("steps", Q, INTERVAL, dimension=Dimension.COUNT),
        Type("distance", Q, INTERVAL, dimension=Dimension.LENGTH),
        Type("floorsClimbed", Q, INTERVAL, dimension=Dimension.COUNT),
        Type("runningPower", S, INTERVAL, dimension=Dimension.POWER),
        Type("cyclingPower", S, INTERVAL, dimension=Dimension.POWER),
        Type("elevation", Q, INTERVAL, ANDROID_ONLY, dimension=Dimension.LENGTH),
        Type("power", S, INTERVAL, ANDROID_ONLY, dimension=Dimension.POWER),
        Type("cyclingPedalingCadence", S, INTERVAL, ANDROID_ONLY, dimension=Dimension.RATE),
        Type("wheelchairPushes", Q, INTERVAL, ANDROID_ONLY, dimension=Dimension.COUNT),
        Type("activityIntensity", C, INTERVAL, ANDROID_ONLY, vocabulary="ActivityIntensityType"),
        Type("distanceCycling", Q, INTERVAL, IOS_ONLY, dimension=Dimension.LENGTH),
        Type("distanceWheelchair", Q, INTERVAL, IOS_ONLY, dimension=Dimension.LENGTH),
        Type("distanceSwimming", Q, INTERVAL, IOS_ONLY, dimension=Dimension.LENGTH),
        Type("distanceDownhillSnowSports", Q, INTERVAL, IOS_ONLY, dimension=Dimension.LENGTH),
        Type("pushCount", Q, INTERVAL, IOS_ONLY, dimension=Dimension.COUNT),
        Type("swimmingStrokeCount", Q, INTERVAL, IOS_ONLY, dimension=Dimension.COUNT),
        Type("walkingSpeed", S, INTERVAL, IOS_ONLY, dimension=Dimension.VELOCITY),
        Type("walkingStepLength", Q, INTERVAL, IOS_ONLY, dimension=Dimension.LENGTH),
        Type(
            "walkingAsymmetry",
            M,
            INTERVAL,
            IOS_ONLY,
            fields=(FieldSpec("percentage", Q, Dimension.PERCENT, required=True),),
        ),
        Type("walkingDoubleSupportPercentage", Q, INSTANT, IOS_ONLY, dimension=Dimension.PERCENT),
        Type("stairSpeed", S, INTERVAL, IOS_ONLY, dimension=Dimension.VELOCITY),
        Type("sixMinuteWalkDistance", Q, INTERVAL, IOS_ONLY, dimension=Dimension.LENGTH),
        # body measurement
        Type("height", Q, INSTANT, dimension=Dimension.LENGTH),
        Type("weight", Q, INSTANT, dimension=Dimension.MASS),
        Type("bodyFat", Q, INSTANT, dimension=Dimension.PERCENT),
        Type("leanBodyMass", Q, INSTANT, dimension=Dimension.MASS),
        Type("bodyWaterMass", Q, INSTANT, ANDROID_ONLY, dimension=Dimension.MASS),
        Type("boneMass", Q, INSTANT, ANDROID_ONLY, dimension=Dimension.MASS),
        Type(
            "bodyMassIndex",
            M,
            INSTANT,
            IOS_ONLY,
            fields=(FieldSpec("bmi", Q, Dimension.COUNT, required=True),),
        ),
        # characteristics are set by the user in the platform UI
        Type("biologicalSex", M, INSTANT, IOS_ONLY, writable=False),
        Type("bloodType", M, INSTANT, IOS_ONLY, writable=False),
        Type("dateOfBirth", M, INSTANT, IOS_ONLY, writable=False),
        Type("fitzpatrickSkinType", M, INSTANT, IOS_ONLY, writable=False),
        # cycle tracking
        Type("menstrualFlow", C, INSTANT, vocabulary="MenstruationFlow"),
        Type(
            "cervicalMucus",
            M,
            INSTANT,
            fields=(
                FieldSpec("appearance", C, vocabulary="CervicalMucusAppearance"),
                FieldSpec("sensation", C, vocabulary="CervicalMucusSensation"),
            ),
        ),
        Type("ovulationTest", C, INSTANT, vocabulary="OvulationTestResult"),
        Type("sexualActivity", C, INSTANT, vocabulary="SexualActivityProtection"),
        Type("intermenstrualBleeding", ValuePattern.NONE, INSTANT),
        Type(
            "basalBodyTemperature",
            M,
            INSTANT,
            fields=_temperature_fields("BodyTemperatureMeasurementLocation"),
        ),
        Type("menstruationPeriod", ValuePattern.NONE, INTERVAL, ANDROID_ONLY),
        Type(
            "contraceptive",
            M,
            INSTANT,
            IOS_ONLY,
            fields=(FieldSpec("method", C, vocabulary="ContraceptiveMethod", required=True),),
        ),
        Type("lactation", M, INSTANT, IOS_ONLY),
        Type("pregnancy", M, INSTANT, IOS_ONLY),
        Type(
            "progesteroneTest",
            M,
            INSTANT,
            IOS_ONLY,
            fields=(FieldSpec("result", C, vocabulary="ProgesteroneTestResult", required=True),),
        ),
        # vitals
        Type("heartRate", S, INTERVAL, dimension=Dimension.RATE),
        Type("restingHeartRate", Q, INSTANT, dimension=Dimension.RATE),
        Type(
            "bloodGlucose",
            M,
            INSTANT,
            fields=(
                FieldSpec("level", Q, Dimension.BLOOD_GLUCOSE, required=True),
                FieldSpec("specimenSource", C, vocabulary="SpecimenSource"),
                FieldSpec("mealType", C, vocabulary="MealType"),
                FieldSpec("relationToMeal", C, vocabulary="RelationToMeal"),
            ),
        ),
        Type(
            "bodyTemperature",
            M,
            INSTANT,
            fields=_temperature_fields("BodyTemperatureMeasurementLocation"),
        ),
        Type("oxygenSaturation", Q, INSTANT, dimension=Dimension.PERCENT),
        Type("respiratoryRate", Q, INSTANT, dimension=Dimension.RATE),
        Type(
            "vo2Max",
            M,
            INSTANT,
            fields=(
                FieldSpec("vo2Max", Q, Dimension.VO2, required=True),
                FieldSpec("measurementMethod", C, vocabulary="Vo2MaxMeasurementMethod"),
            ),
        ),
        Type(
            "skinTemperature",
            M,
            INTERVAL,
            ANDROID_ONLY,
            fields=(
                FieldSpec("deltas", S, Dimension.TEMPERATURE, required=True, delta=True),
                FieldSpec("baseline", Q, Dimension.TEMPERATURE),
                FieldSpec("measurementLocation", C, vocabulary="SkinTemperatureMeasurementLocation"),
            ),
        ),
        Type(
            "heartRateVariability",
            M,
            INSTANT,
            IOS_ONLY,
            fields=(FieldSpec("sdnn", Q, Dimension.TIME, required=True),),
        ),
        Type(
            "peripheralPerfusionIndex",
            M,
            INSTANT,
            IOS_ONLY,
            fields=(FieldSpec("percentage", Q, Dimension.PERCENT, required=True),),
        ),
        # nutrition
        Type("waterIntake", Q, INTERVAL, dimension=Dimension.VOLUME),
        Type("numberOfAlcoholicBeverages", Q, INTERVAL, IOS_ONLY, dimension=Dimension.COUNT),
        # wellness
        Type(
            "mindfulSession",
            M,
            INTERVAL,
            fields=(
                FieldSpec("mindfulnessSessionType", C, vocabulary="MindfulnessSessionType", required=True),
                FieldSpec("title", ValuePattern.LABEL),
                FieldSpec("notes", ValuePattern.LABEL),
            ),
        ),
        Type(
            "uvExposure",
            M,
            INSTANT,
            IOS_ONLY,
            fields=(FieldSpec("index", Q, Dimension.COUNT, required=True),),
        ),
        Type(
            "timeInDaylight",
            M,
            INSTANT,
            IOS_ONLY,
            fields=(FieldSpec("duration", Q, Dimension.TIME, required=True),),
        ),
        # hearing
        Type(
            "environmentalAudioExposure",
            M,
            INSTANT,
            IOS_ONLY,
            fields=(FieldSpec("level", Q, Dimension.SOUND_LEVEL, required=True),),
        ),
        Type(
            "headphoneAudioExposure",
            M,
            INSTANT,
            IOS_ONLY,
            fields=(FieldSpec("level", Q, Dimension.SOUND_LEVEL, required=True),),
        ),
    ]


def build_default_registry() -> TypeRegistry:
    registry = TypeRegistry()
    for type_ in _simple_types():
        registry.register(type_)

    workout = Type("workout", ValuePattern.MULTIPLE, INTERVAL)
    workout_energy = Type("workout.energy", Q, INTERVAL, dimension=Dimension.ENERGY)
    workout_distance = Type("workout.distance", Q, INTERVAL, dimension=Dimension.LENGTH)
    # Heart rate, speed and power stay components but are left out of the default expansion.
    registry.register_composite(
        workout,
        [
            workout_energy,
            workout_distance,
            Type("workout.heartRate", S, INTERVAL, dimension=Dimension.RATE),
            Type("workout.speed", S, INTERVAL, dimension=Dimension.VELOCITY),
            Type("workout.power", S, INTERVAL, dimension=Dimension.POWER),
        ],
        expands_to=[workout, workout_energy, workout_distance],
    )
    registry.register_composite(
        Type("bloodPressure", ValuePattern.MULTIPLE, INSTANT),
        [
            Type("bloodPressure.systolic", Q, INSTANT, dimension=Dimension.PRESSURE),
            Type("bloodPressure.diastolic", Q, INSTANT, dimension=Dimension.PRESSURE),
        ],
    )
    registry.register_composite(
        Type("sleepSession", ValuePattern.MULTIPLE, INTERVAL),
        [
            Type(f"sleepSession.{stage}", Q, INTERVAL, dimension=Dimension.TIME)
            for stage in SLEEP_STAGE_COMPONENTS
        ],
    )
    nutrition_components = [Type("nutrition.energy", Q, INTERVAL, dimension=Dimension.ENERGY)]
    nutrition_components.extend(
        Type(f"nutrition.{name}", Q, INTERVAL, dimension=Dimension.MASS)
        for name in NUTRIENT_MASS_COMPONENTS
    )
    nutrition_components.append(
        Type("nutrition.caffeine", Q, INTERVAL, IOS_ONLY, dimension=Dimension.MASS)
    )
    registry.register_composite(
        Type("nutrition", ValuePattern.MULTIPLE, INTERVAL),
        nutrition_components,
    )
    return registry


registry = build_default_registry()
