# -*- coding: utf-8 -*-
"""Decoders for the dedicated record kinds.

Each decoder turns one loosely-typed map into a validated record or raises
:class:`DecodeError`. Platform limitations surface as
:class:`UnsupportedKindError` so the write service can tag them separately.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..config import settings
from ..errors import DecodeError, UnsupportedKindError
from ..schema.activities import normalize_activity
from ..schema.types import NUTRIENT_MASS_COMPONENTS
from ..schema.units import Dimension
from ..write.models import FailureType, IndexPath, RecordFailure
from . import fields
from .data_record import DataRecordDecoder
from .models import (
    AudiogramRecord,
    BloodPressureRecord,
    NutritionRecord,
    Record,
    RecordKind,
    SensitivityPoint,
    SleepSessionRecord,
    SleepStage,
    WorkoutRecord,
)

AUDIOGRAM_MIN_HZ = 125.0
AUDIOGRAM_MAX_HZ = 16000.0

IOS_ONLY_NUTRIENTS = ("caffeine",)


class BloodPressureDecoder:
    KIND = RecordKind.BLOOD_PRESSURE.value

    def __init__(self, platform: Optional[str] = None, logger: Optional[logging.Logger] = None) -> None:
        self.platform = platform or settings.platform
        self.logger = logger or logging.getLogger(__name__)

    def decode(self, data: Mapping[str, Any]) -> BloodPressureRecord:
        kind = self.KIND
        time_range = fields.extract_instant(data, kind, self.logger)

        systolic = fields.read_quantity(data, "systolic", Dimension.PRESSURE, kind)
        diastolic = fields.read_quantity(data, "diastolic", Dimension.PRESSURE, kind)
        if not systolic.value > diastolic.value:
            raise DecodeError(
                f"Systolic value must be greater than diastolic value "
                f"(systolic={systolic.value:g}, diastolic={diastolic.value:g})",
                kind,
                "systolic/diastolic",
            )

        return BloodPressureRecord(
            systolic=systolic,
            diastolic=diastolic,
            body_position=fields.read_category(
                data, "bodyPosition", "BodyPosition", kind, default="unknown", log=self.logger
            ),
            measurement_location=fields.read_category(
                data,
                "measurementLocation",
                "BloodPressureMeasurementLocation",
                kind,
                default="unknown",
                log=self.logger,
            ),
            start_time=time_range.start_time,
            end_time=time_range.end_time,
            start_zone_offset=time_range.start_zone_offset,
            end_zone_offset=time_range.end_zone_offset,
            source=fields.extract_source(data, kind, self.platform, self.logger),
        )


class WorkoutDecoder:
    """Decodes a workout and, independently, each of its during-session records.

    A bad during-session record becomes a failure relative to the workout
    (``IndexPath(nested_position)``); the workout itself still decodes.
    """

    KIND = RecordKind.WORKOUT.value

    def __init__(
        self,
        data_decoder: Optional[DataRecordDecoder] = None,
        platform: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.platform = platform or settings.platform
        self.logger = logger or logging.getLogger(__name__)
        self.data_decoder = data_decoder or DataRecordDecoder(platform=self.platform, logger=self.logger)

    def decode(self, data: Mapping[str, Any]) -> Tuple[WorkoutRecord, List[RecordFailure]]:
        kind = self.KIND
        time_range = fields.extract_time_range(data, kind)

        raw_activity = fields.get_required_string(data, "activityType", kind)
        activity, recognized = normalize_activity(raw_activity)
        if not recognized:
            self.logger.warning("Unknown workout activity type '%s', using '%s'", raw_activity, activity)

        nested, failures = self._decode_during_session(data)
        if failures:
            self.logger.warning(
                "Workout decoded with %d successful and %d failed duringSession record(s)",
                len(nested),
                len(failures),
            )

        workout = WorkoutRecord(
            activity_type=activity,
            title=fields.get_optional_string(data, "title", kind),
            notes=fields.get_optional_string(data, "notes", kind),
            total_distance=fields.read_quantity(data, "totalDistance", Dimension.LENGTH, kind, required=False),
            total_energy_burned=fields.read_quantity(
                data, "totalEnergyBurned", Dimension.ENERGY, kind, required=False
            ),
            during_session=tuple(nested),
            start_time=time_range.start_time,
            end_time=time_range.end_time,
            start_zone_offset=time_range.start_zone_offset,
            end_zone_offset=time_range.end_zone_offset,
            source=fields.extract_source(data, kind, self.platform, self.logger),
        )
        return workout, failures

    def _decode_during_session(self, data: Mapping[str, Any]) -> Tuple[List[Record], List[RecordFailure]]:
        kind = self.KIND
        items = fields.get_optional_list(data, "duringSession", kind) or []
        records: List[Record] = []
        failures: List[RecordFailure] = []
        for index, item in enumerate(items):
            if not isinstance(item, Mapping):
                self.logger.warning(
                    "%s duringSession record at index %d is not a valid map, skipping", kind, index
                )
                failures.append(
                    RecordFailure(
                        f"{kind} duringSession record at index {index} is not a valid map",
                        FailureType.DURING_SESSION_INVALID_TYPE,
                        IndexPath(index),
                    )
                )
                continue
            try:
                records.append(self.data_decoder.decode(item))
            except DecodeError as exc:
                self.logger.warning(
                    "Failed to decode %s duringSession record at index %d: %s", kind, index, exc
                )
                failures.append(
                    RecordFailure(
                        f"{exc.record_kind or 'Unknown record kind'} | {exc.field_name or ''} | {exc.reason}",
                        FailureType.DURING_SESSION_DECODE_ERROR,
                        IndexPath(index),
                    )
                )
            except Exception as exc:
                self.logger.error(
                    "Unexpected error decoding duringSession record at index %d", index, exc_info=True
                )
                failures.append(
                    RecordFailure(
                        f"{kind} decode - Unexpected error: {exc}",
                        FailureType.UNEXPECTED_ERROR,
                        IndexPath(index),
                    )
                )
        return records, failures


class SleepSessionDecoder:
    """Sleep sessions with optional stages.

    Stage bounds and overlap are left to the platform unless
    ``validate_stages`` is switched on.
    """

    KIND = RecordKind.SLEEP_SESSION.value

    def __init__(
        self,
        platform: Optional[str] = None,
        validate_stages: Optional[bool] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.platform = platform or settings.platform
        self.validate_stages = (
            settings.validate_sleep_stages if validate_stages is None else validate_stages
        )
        self.logger = logger or logging.getLogger(__name__)

    def decode(self, data: Mapping[str, Any]) -> SleepSessionRecord:
        kind = self.KIND
        time_range = fields.extract_time_range(data, kind)

        stages: List[SleepStage] = []
        for index, item in enumerate(fields.get_optional_list(data, "stages", kind) or []):
            if not isinstance(item, Mapping):
                raise DecodeError.invalid_field_type(f"stages[{index}]", "map", item, kind)
            stages.append(self._decode_stage(item, index))

        if self.validate_stages:
            check_stages(stages, time_range.start_time, time_range.end_time, kind)

        return SleepSessionRecord(
            title=fields.get_optional_string(data, "title", kind),
            notes=fields.get_optional_string(data, "notes", kind),
            stages=tuple(stages),
            start_time=time_range.start_time,
            end_time=time_range.end_time,
            start_zone_offset=time_range.start_zone_offset,
            end_zone_offset=time_range.end_zone_offset,
            source=fields.extract_source(data, kind, self.platform, self.logger),
        )

    def _decode_stage(self, item: Mapping[str, Any], index: int) -> SleepStage:
        kind = self.KIND
        prefix = f"stages[{index}]"
        start = fields.parse_timestamp(
            fields.get_required(item, "startTime", kind), f"{prefix}.startTime", kind
        )
        end = fields.parse_timestamp(fields.get_required(item, "endTime", kind), f"{prefix}.endTime", kind)
        if end < start:
            raise DecodeError("Stage end time cannot be before its start time", kind, prefix)
        if item.get("stage") is None:
            raise DecodeError.missing_field(f"{prefix}.stage", kind)
        stage = fields.read_category(
            item, "stage", "SleepStage", kind, default="unknown", log=self.logger
        )
        return SleepStage(start_time=start, end_time=end, stage=stage)


def check_stages(stages: List[SleepStage], session_start, session_end, kind: str) -> None:
    last_end = None
    for index, stage in enumerate(stages):
        if stage.start_time < session_start or stage.end_time > session_end:
            raise DecodeError(
                f"Stage at index {index} is out of session bounds: "
                f"({stage.start_time.isoformat()} - {stage.end_time.isoformat()}) not within "
                f"({session_start.isoformat()} - {session_end.isoformat()})",
                kind,
                "stages",
            )
        if last_end is not None and stage.start_time < last_end:
            raise DecodeError(
                f"Stage at index {index} overlaps previous stage: starts at "
                f"{stage.start_time.isoformat()}, previous ended at {last_end.isoformat()}",
                kind,
                "stages",
            )
        last_end = stage.end_time


class NutritionDecoder:
    """Nutrition entries. Every nutrient is optional."""

    KIND = RecordKind.NUTRITION.value

    def __init__(self, platform: Optional[str] = None, logger: Optional[logging.Logger] = None) -> None:
        self.platform = platform or settings.platform
        self.logger = logger or logging.getLogger(__name__)

    def nutrient_dimensions(self) -> Dict[str, Dimension]:
        dims = {"energy": Dimension.ENERGY}
        dims.update({name: Dimension.MASS for name in NUTRIENT_MASS_COMPONENTS})
        if self.platform == "ios":
            dims.update({name: Dimension.MASS for name in IOS_ONLY_NUTRIENTS})
        return dims

    def decode(self, data: Mapping[str, Any]) -> NutritionRecord:
        kind = self.KIND
        time_range = fields.extract_time_range(data, kind)
        raw_nutrients = fields.get_optional_map(data, "nutrients", kind) or {}

        dims = self.nutrient_dimensions()
        unknown = sorted(k for k in raw_nutrients if k not in dims)
        if unknown:
            raise DecodeError(
                f"Unsupported nutrient(s) on {self.platform}: {', '.join(unknown)}",
                kind,
                "nutrients",
            )

        nutrients = {}
        for name, dimension in dims.items():
            entry = raw_nutrients.get(name)
            if entry is None:
                continue
            key = f"nutrients.{name}"
            if not isinstance(entry, Mapping):
                raise DecodeError.invalid_field_type(key, "map", entry, kind)
            pattern = entry.get("valuePattern")
            if pattern is not None and pattern != "quantity":
                raise DecodeError.invalid_field_value(
                    key, f"Expected valuePattern 'quantity', got '{pattern}'", kind
                )
            raw = fields.expect_number(fields.get_required(entry, "value", kind), key, kind)
            value = fields.to_canonical(raw, entry.get("unit"), dimension, key, kind, check=False)
            if value.value < 0:
                raise DecodeError.invalid_field_value(key, f"Nutrient must be non-negative, got {raw}", kind)
            nutrients[name] = value

        return NutritionRecord(
            name=fields.get_optional_string(data, "name", kind),
            meal_type=fields.read_category(
                data, "mealType", "MealType", kind, default="unknown", log=self.logger
            ),
            nutrients=nutrients,
            start_time=time_range.start_time,
            end_time=time_range.end_time,
            start_zone_offset=time_range.start_zone_offset,
            end_zone_offset=time_range.end_zone_offset,
            source=fields.extract_source(data, kind, self.platform, self.logger),
        )


class AudiogramDecoder:
    KIND = RecordKind.AUDIOGRAM.value

    def __init__(self, platform: Optional[str] = None, logger: Optional[logging.Logger] = None) -> None:
        self.platform = platform or settings.platform
        self.logger = logger or logging.getLogger(__name__)

    def decode(self, data: Mapping[str, Any]) -> AudiogramRecord:
        kind = self.KIND
        if self.platform != "ios":
            raise UnsupportedKindError(
                kind,
                self.platform,
                "Audiogram records are only supported on iOS with HealthKit. "
                "Android Health Connect does not have an equivalent record type.",
            )

        time_range = fields.extract_instant(data, kind, self.logger)
        raw_points = fields.get_optional_list(data, "sensitivityPoints", kind)
        if not raw_points:
            raise DecodeError(
                "Audiogram must have at least one sensitivity point", kind, "sensitivityPoints"
            )

        points = []
        for index, item in enumerate(raw_points):
            key = f"sensitivityPoints[{index}]"
            if not isinstance(item, Mapping):
                raise DecodeError.invalid_field_type(key, "map", item, kind)
            points.append(self._decode_point(item, key))

        return AudiogramRecord(
            sensitivity_points=tuple(points),
            start_time=time_range.start_time,
            end_time=time_range.end_time,
            start_zone_offset=time_range.start_zone_offset,
            end_zone_offset=time_range.end_zone_offset,
            source=fields.extract_source(data, kind, self.platform, self.logger),
        )

    def _decode_point(self, item: Mapping[str, Any], key: str) -> SensitivityPoint:
        kind = self.KIND
        frequency = fields.expect_number(item.get("frequency"), f"{key}.frequency", kind)
        if not AUDIOGRAM_MIN_HZ <= frequency <= AUDIOGRAM_MAX_HZ:
            raise DecodeError(
                f"Frequency {frequency:g} Hz is outside {AUDIOGRAM_MIN_HZ:g}-{AUDIOGRAM_MAX_HZ:g} Hz",
                kind,
                f"{key}.frequency",
            )

        ears = {}
        for side in ("leftEarSensitivity", "rightEarSensitivity"):
            raw = item.get(side)
            if raw is None:
                ears[side] = None
                continue
            number = fields.expect_number(raw, f"{key}.{side}", kind)
            ears[side] = fields.to_canonical(number, "dBHL", Dimension.HEARING_LEVEL, f"{key}.{side}", kind)
        if ears["leftEarSensitivity"] is None and ears["rightEarSensitivity"] is None:
            raise DecodeError("Sensitivity point must have at least one ear measurement", kind, key)

        return SensitivityPoint(
            frequency=fields.to_canonical(frequency, "Hz", Dimension.FREQUENCY, f"{key}.frequency", kind),
            left_ear=ears["leftEarSensitivity"],
            right_ear=ears["rightEarSensitivity"],
        )


class EcgDecoder:
    KIND = RecordKind.ECG.value

    def __init__(self, platform: Optional[str] = None) -> None:
        self.platform = platform or settings.platform

    def decode(self, data: Mapping[str, Any]) -> Record:
        if self.platform != "ios":
            raise UnsupportedKindError(
                self.KIND,
                self.platform,
                "ECG records are only supported on iOS with HealthKit. "
                "Android Health Connect does not have an equivalent record type.",
            )
        raise DecodeError("ECG records are read-only", self.KIND)
