# -*- coding: utf-8 -*-
"""Record mapper — kind dispatch."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from ..config import settings
from ..errors import DecodeError
from ..schema.types import TypeRegistry
from ..schema.types import registry as default_registry
from ..write.models import RecordFailure
from .data_record import DataRecordDecoder
from .decoders import (
    AudiogramDecoder,
    BloodPressureDecoder,
    EcgDecoder,
    NutritionDecoder,
    SleepSessionDecoder,
    WorkoutDecoder,
)
from .models import Record, RecordKind

MapperResult = Tuple[List[Record], List[RecordFailure]]


class RecordMapper:
    """Decodes one record map into the records to persist.

    ``decode`` returns the parent record followed by any during-session
    records, plus failures for nested records (paths relative to the parent).
    Every :class:`RecordKind` must have a handler.
    """

    def __init__(
        self,
        registry: Optional[TypeRegistry] = None,
        platform: Optional[str] = None,
        validate_sleep_stages: Optional[bool] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.platform = platform or settings.platform
        self.logger = logger or logging.getLogger(__name__)
        self.registry = registry or default_registry

        self.data_decoder = DataRecordDecoder(self.registry, self.platform, self.logger)
        self.blood_pressure_decoder = BloodPressureDecoder(self.platform, self.logger)
        self.workout_decoder = WorkoutDecoder(self.data_decoder, self.platform, self.logger)
        self.sleep_session_decoder = SleepSessionDecoder(self.platform, validate_sleep_stages, self.logger)
        self.nutrition_decoder = NutritionDecoder(self.platform, self.logger)
        self.audiogram_decoder = AudiogramDecoder(self.platform, self.logger)
        self.ecg_decoder = EcgDecoder(self.platform)

        self._handlers: Dict[RecordKind, Callable[[Mapping[str, Any]], MapperResult]] = {
            RecordKind.DATA: self._single(self.data_decoder.decode),
            RecordKind.BLOOD_PRESSURE: self._single(self.blood_pressure_decoder.decode),
            RecordKind.WORKOUT: self._decode_workout,
            RecordKind.NUTRITION: self._single(self.nutrition_decoder.decode),
            RecordKind.SLEEP_SESSION: self._single(self.sleep_session_decoder.decode),
            RecordKind.AUDIOGRAM: self._single(self.audiogram_decoder.decode),
            RecordKind.ECG: self._single(self.ecg_decoder.decode),
        }
        missing = set(RecordKind) - set(self._handlers)
        if missing:
            raise RuntimeError(
                "No decoder registered for record kind(s): "
                + ", ".join(sorted(k.value for k in missing))
            )

    def decode(self, data: Mapping[str, Any]) -> MapperResult:
        if not isinstance(data, Mapping):
            raise DecodeError(f"Record must be a map, got {type(data).__name__}")
        raw_kind = data.get("recordKind")
        if raw_kind is None:
            raise DecodeError("Missing required field 'recordKind'", None, "recordKind")
        if not isinstance(raw_kind, str):
            raise DecodeError.invalid_field_type("recordKind", "string", raw_kind, "unknown")
        try:
            kind = RecordKind(raw_kind)
        except ValueError:
            raise DecodeError(f"Unknown record kind: '{raw_kind}'", raw_kind, "recordKind") from None

        self.logger.debug("Mapping record kind: '%s'", kind.value)
        return self._handlers[kind](data)

    @staticmethod
    def _single(decode: Callable[[Mapping[str, Any]], Record]) -> Callable[[Mapping[str, Any]], MapperResult]:
        def handler(data: Mapping[str, Any]) -> MapperResult:
            return [decode(data)], []

        return handler

    def _decode_workout(self, data: Mapping[str, Any]) -> MapperResult:
        workout, failures = self.workout_decoder.decode(data)
        return [workout, *workout.during_session], failures
