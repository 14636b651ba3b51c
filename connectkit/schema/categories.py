# -*- coding: utf-8 -*-
"""Named category vocabularies used by category values and category sub-fields."""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

CATEGORIES: Dict[str, Tuple[str, ...]] = {
    "BodyTemperatureMeasurementLocation": (
        "armpit",
        "ear",
        "finger",
        "forehead",
        "mouth",
        "rectum",
        "artery",
        "toe",
        "vagina",
        "wrist",
        "unknown",
    ),
    "SpecimenSource": (
        "capillaryBlood",
        "interstitialFluid",
        "plasma",
        "serum",
        "tears",
        "blood",
        "unknown",
    ),
    "MealType": ("breakfast", "lunch", "dinner", "snack", "unknown"),
    "RelationToMeal": ("afterMeal", "beforeMeal", "fasting", "general", "unknown"),
    "Vo2MaxMeasurementMethod": (
        "cooperTest",
        "rateRatio",
        "metabolicCart",
        "multistageFitnessTest",
        "fitnessTest",
        "other",
    ),
    "SkinTemperatureMeasurementLocation": ("finger", "toe", "wrist", "unknown"),
    "MindfulnessSessionType": (
        "breathing",
        "meditation",
        "movement",
        "music",
        "unguided",
        "unknown",
    ),
    "MenstruationFlow": ("heavy", "light", "medium", "unknown"),
    "CervicalMucusAppearance": (
        "dry",
        "sticky",
        "creamy",
        "watery",
        "eggWhite",
        "unusual",
        "unknown",
    ),
    "CervicalMucusSensation": ("light", "medium", "heavy", "unknown"),
    "OvulationTestResult": ("high", "negative", "positive", "inconclusive"),
    "ProgesteroneTestResult": ("negative", "positive", "indeterminate"),
    "SexualActivityProtection": ("protected", "unprotected", "unknown"),
    "ActivityIntensityType": ("moderate", "vigorous"),
    "ContraceptiveMethod": (
        "unspecified",
        "implant",
        "injection",
        "intrauterineDevice",
        "intravaginalRing",
        "oral",
        "patch",
    ),
    # Record-level fields of the dedicated record kinds.
    "BodyPosition": ("standingUp", "sittingDown", "lyingDown", "reclining", "unknown"),
    "BloodPressureMeasurementLocation": (
        "leftWrist",
        "rightWrist",
        "leftUpperArm",
        "rightUpperArm",
        "unknown",
    ),
    "SleepStage": (
        "inBed",
        "outOfBed",
        "sleeping",
        "awake",
        "light",
        "deep",
        "rem",
        "unknown",
    ),
    "RecordingMethod": (
        "manualEntry",
        "activelyRecorded",
        "automaticallyRecorded",
        "unknown",
    ),
    "DeviceType": (
        "unknown",
        "phone",
        "watch",
        "scale",
        "ring",
        "chestStrap",
        "fitnessBand",
        "headMounted",
    ),
}


def category_names() -> List[str]:
    return sorted(CATEGORIES)


def values_of(category: str) -> Tuple[str, ...]:
    try:
        return CATEGORIES[category]
    except KeyError:
        raise KeyError(f"Unknown category vocabulary '{category}'") from None


def decode_category(category: str, value: str) -> Optional[str]:
    """Return ``value`` when it belongs to ``category``, else None. Matching is exact."""
    if value in values_of(category):
        return value
    return None
