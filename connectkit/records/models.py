# -*- coding: utf-8 -*-
"""Validated record models produced by the decoders.

Records are immutable once decoded. Every physical quantity is held as a
:class:`CanonicalValue`; raw ``(value, unit)`` pairs never leave the decoders.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Tuple, Union

from ..schema.types import Type, ValuePattern
from ..schema.units import CanonicalValue


class RecordKind(str, Enum):
    DATA = "data"
    BLOOD_PRESSURE = "bloodPressure"
    WORKOUT = "workout"
    NUTRITION = "nutrition"
    SLEEP_SESSION = "sleepSession"
    AUDIOGRAM = "audiogram"
    ECG = "ecg"


class RecordingMethod(str, Enum):
    MANUAL_ENTRY = "manualEntry"
    ACTIVELY_RECORDED = "activelyRecorded"
    AUTOMATICALLY_RECORDED = "automaticallyRecorded"
    UNKNOWN = "unknown"


class DeviceType(str, Enum):
    UNKNOWN = "unknown"
    PHONE = "phone"
    WATCH = "watch"
    SCALE = "scale"
    RING = "ring"
    CHEST_STRAP = "chestStrap"
    FITNESS_BAND = "fitnessBand"
    HEAD_MOUNTED = "headMounted"


@dataclass(frozen=True)
class Device:
    manufacturer: Optional[str] = None
    model: Optional[str] = None
    type: DeviceType = DeviceType.UNKNOWN
    hardware_version: Optional[str] = None
    software_version: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "manufacturer": self.manufacturer,
            "model": self.model,
            "type": self.type.value,
            "hardwareVersion": self.hardware_version,
            "softwareVersion": self.software_version,
        }


@dataclass(frozen=True)
class Source:
    """Provenance metadata. Client id and version are passed to the sink untouched."""

    recording_method: RecordingMethod = RecordingMethod.UNKNOWN
    device: Optional[Device] = None
    client_record_id: Optional[str] = None
    client_record_version: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "recordingMethod": self.recording_method.value,
            "device": self.device.to_dict() if self.device else None,
            "clientRecordId": self.client_record_id,
            "clientRecordVersion": self.client_record_version,
        }


@dataclass(frozen=True, kw_only=True)
class Record:
    kind: ClassVar[RecordKind]

    start_time: datetime
    end_time: datetime
    start_zone_offset: int = 0
    end_zone_offset: int = 0
    source: Optional[Source] = None
    id: Optional[str] = None

    @property
    def type_name(self) -> str:
        return self.kind.value

    def payload(self) -> Dict[str, Any]:
        """Kind specific canonical content, JSON serialisable."""
        return {}


@dataclass(frozen=True)
class Sample:
    time: datetime
    value: CanonicalValue

    def to_dict(self) -> Dict[str, Any]:
        return {"time": self.time.isoformat(), **self.value.to_dict()}


DataValue = Union[CanonicalValue, Tuple[Sample, ...], str, Dict[str, Any], None]


def _value_to_json(value: Any) -> Any:
    if isinstance(value, CanonicalValue):
        return value.to_dict()
    if isinstance(value, Sample):
        return value.to_dict()
    if isinstance(value, (tuple, list)):
        return [_value_to_json(v) for v in value]
    if isinstance(value, dict):
        return {k: _value_to_json(v) for k, v in value.items()}
    return value


@dataclass(frozen=True, kw_only=True)
class DataRecord(Record):
    kind: ClassVar[RecordKind] = RecordKind.DATA

    type: Type
    value: DataValue = None

    @property
    def type_name(self) -> str:
        return self.type.name

    @property
    def value_pattern(self) -> ValuePattern:
        return self.type.value_pattern

    def payload(self) -> Dict[str, Any]:
        return {"valuePattern": self.value_pattern.value, "value": _value_to_json(self.value)}


@dataclass(frozen=True, kw_only=True)
class BloodPressureRecord(Record):
    kind: ClassVar[RecordKind] = RecordKind.BLOOD_PRESSURE

    systolic: CanonicalValue
    diastolic: CanonicalValue
    body_position: str = "unknown"
    measurement_location: str = "unknown"

    def payload(self) -> Dict[str, Any]:
        return {
            "systolic": self.systolic.to_dict(),
            "diastolic": self.diastolic.to_dict(),
            "bodyPosition": self.body_position,
            "measurementLocation": self.measurement_location,
        }


@dataclass(frozen=True, kw_only=True)
class WorkoutRecord(Record):
    kind: ClassVar[RecordKind] = RecordKind.WORKOUT

    activity_type: str
    title: Optional[str] = None
    notes: Optional[str] = None
    total_distance: Optional[CanonicalValue] = None
    total_energy_burned: Optional[CanonicalValue] = None
    # Samples recorded while the session ran. Timestamps are not clipped to the session.
    during_session: Tuple[Record, ...] = ()

    def payload(self) -> Dict[str, Any]:
        return {
            "activityType": self.activity_type,
            "title": self.title,
            "notes": self.notes,
            "totalDistance": _value_to_json(self.total_distance),
            "totalEnergyBurned": _value_to_json(self.total_energy_burned),
            "duringSessionCount": len(self.during_session),
        }


@dataclass(frozen=True)
class SleepStage:
    start_time: datetime
    end_time: datetime
    stage: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "startTime": self.start_time.isoformat(),
            "endTime": self.end_time.isoformat(),
            "stage": self.stage,
        }


@dataclass(frozen=True, kw_only=True)
class SleepSessionRecord(Record):
    kind: ClassVar[RecordKind] = RecordKind.SLEEP_SESSION

    title: Optional[str] = None
    notes: Optional[str] = None
    stages: Tuple[SleepStage, ...] = ()

    def payload(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "notes": self.notes,
            "stages": [s.to_dict() for s in self.stages],
        }


@dataclass(frozen=True, kw_only=True)
class NutritionRecord(Record):
    kind: ClassVar[RecordKind] = RecordKind.NUTRITION

    name: Optional[str] = None
    meal_type: str = "unknown"
    nutrients: Dict[str, CanonicalValue] = field(default_factory=dict)

    def payload(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "mealType": self.meal_type,
            "nutrients": {k: v.to_dict() for k, v in self.nutrients.items()},
        }


@dataclass(frozen=True)
class SensitivityPoint:
    frequency: CanonicalValue
    left_ear: Optional[CanonicalValue] = None
    right_ear: Optional[CanonicalValue] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "frequency": self.frequency.to_dict(),
            "leftEar": _value_to_json(self.left_ear),
            "rightEar": _value_to_json(self.right_ear),
        }


@dataclass(frozen=True, kw_only=True)
class AudiogramRecord(Record):
    kind: ClassVar[RecordKind] = RecordKind.AUDIOGRAM

    sensitivity_points: Tuple[SensitivityPoint, ...]

    def payload(self) -> Dict[str, Any]:
        return {"sensitivityPoints": [p.to_dict() for p in self.sensitivity_points]}

