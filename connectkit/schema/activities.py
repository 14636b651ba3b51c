# -*- coding: utf-8 -*-
"""Workout activity vocabulary."""

from __future__ import annotations

from typing import Tuple

OTHER_WORKOUT = "other_workout"

ACTIVITY_TYPES: Tuple[str, ...] = (
    "badminton",
    "baseball",
    "basketball",
    "biking",
    "biking_stationary",
    "boot_camp",
    "boxing",
    "calisthenics",
    "cricket",
    "dancing",
    "elliptical",
    "exercise_class",
    "fencing",
    "football_american",
    "football_australian",
    "frisbee_disc",
    "golf",
    "guided_breathing",
    "gymnastics",
    "handball",
    "high_intensity_interval_training",
    "hiking",
    "ice_hockey",
    "ice_skating",
    "martial_arts",
    "paddling",
    "paragliding",
    "pilates",
    "racquetball",
    "rock_climbing",
    "roller_hockey",
    "rowing",
    "rowing_machine",
    "rugby",
    "running",
    "running_treadmill",
    "sailing",
    "scuba_diving",
    "skating",
    "skiing",
    "snowboarding",
    "snowshoeing",
    "soccer",
    "softball",
    "squash",
    "stair_climbing",
    "stair_climbing_machine",
    "strength_training",
    "stretching",
    "surfing",
    "swimming_open_water",
    "swimming_pool",
    "table_tennis",
    "tennis",
    "volleyball",
    "walking",
    "water_polo",
    "weightlifting",
    "wheelchair",
    "yoga",
    OTHER_WORKOUT,
)

_ACTIVITY_SET = frozenset(ACTIVITY_TYPES)


def normalize_activity(name: str) -> Tuple[str, bool]:
    """Return ``(activity, recognized)``. Unrecognized names map to ``other_workout``."""
    key = name.strip().lower()
    if key in _ACTIVITY_SET:
        return key, True
    return OTHER_WORKOUT, False
