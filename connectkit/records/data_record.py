# -*- coding: utf-8 -*-
"""Decoder for generic data records (``recordKind == "data"``).

The registered type decides everything: the value pattern the payload must
declare, the dimension quantities convert into, the vocabulary category values
are checked against and whether the record is instantaneous.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from ..config import settings
from ..errors import DecodeError, UnknownType
from ..schema.types import FieldSpec, TimePattern, Type, TypeRegistry, ValuePattern
from ..schema.types import registry as default_registry
from ..schema.units import Dimension
from . import fields
from .models import DataRecord, DataValue, RecordKind, Sample

KIND = RecordKind.DATA.value


class DataRecordDecoder:
    def __init__(
        self,
        registry: Optional[TypeRegistry] = None,
        platform: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.registry = registry or default_registry
        self.platform = platform or settings.platform
        self.logger = logger or logging.getLogger(__name__)
        self._value_decoders: Dict[ValuePattern, Callable[[Type, Mapping[str, Any]], DataValue]] = {
            ValuePattern.QUANTITY: self._decode_quantity,
            ValuePattern.SAMPLES: self._decode_samples,
            ValuePattern.CATEGORY: self._decode_category,
            ValuePattern.MULTIPLE: self._decode_multiple,
            ValuePattern.LABEL: self._decode_label,
            ValuePattern.NONE: self._decode_none,
        }

    def decode(self, data: Mapping[str, Any]) -> DataRecord:
        type_ = self._resolve_type(fields.get_required_string(data, "type", KIND))
        self.logger.debug("Mapping data record type '%s'", type_.name)

        if type_.time_pattern is TimePattern.INSTANTANEOUS:
            time_range = fields.extract_instant(data, KIND, self.logger)
        else:
            time_range = fields.extract_time_range(data, KIND)

        if type_.value_pattern is ValuePattern.NONE:
            payload = fields.get_optional_map(data, "data", KIND) or {}
        else:
            payload = fields.get_required_map(data, "data", KIND)
            declared = fields.get_required_string(payload, "valuePattern", KIND)
            if declared != type_.value_pattern.value:
                raise DecodeError(
                    f"Type '{type_.name}' expects valuePattern "
                    f"'{type_.value_pattern.value}', got '{declared}'",
                    KIND,
                    "valuePattern",
                )

        value = self._value_decoders[type_.value_pattern](type_, payload)

        return DataRecord(
            type=type_,
            value=value,
            start_time=time_range.start_time,
            end_time=time_range.end_time,
            start_zone_offset=time_range.start_zone_offset,
            end_zone_offset=time_range.end_zone_offset,
            source=fields.extract_source(data, KIND, self.platform, self.logger),
        )

    def _resolve_type(self, name: str) -> Type:
        type_ = self.registry.get(name)
        if type_ is None:
            raise UnknownType(name, KIND)
        if self.registry.is_composite(type_):
            raise DecodeError(
                f"Type '{name}' is a composite; write it with recordKind '{name}'",
                KIND,
                "type",
            )
        parent = self.registry.parent_of(type_)
        if parent is not None:
            raise DecodeError(
                f"Type '{name}' is a component of '{parent.name}' and cannot be written on its own",
                KIND,
                "type",
            )
        if not type_.supported_on(self.platform):
            raise DecodeError(
                f"Type '{name}' is not supported on {self.platform}",
                KIND,
                "type",
            )
        if not type_.writable:
            raise DecodeError(f"Type '{name}' is read-only", KIND, "type")
        return type_

    # --- value patterns ---------------------------------------------------

    def _decode_quantity(self, type_: Type, payload: Mapping[str, Any]):
        raw = fields.expect_number(fields.get_required(payload, "value", KIND), "value", KIND)
        return fields.to_canonical(raw, payload.get("unit"), type_.dimension, "value", KIND)

    def _decode_samples(self, type_: Type, payload: Mapping[str, Any]):
        return self._samples(payload, type_.dimension, "value")

    def _decode_category(self, type_: Type, payload: Mapping[str, Any]):
        fields.get_required(payload, "value", KIND)
        return fields.read_category(payload, "value", type_.vocabulary, KIND)

    def _decode_label(self, type_: Type, payload: Mapping[str, Any]):
        return fields.get_required_string(payload, "value", KIND)

    def _decode_none(self, type_: Type, payload: Mapping[str, Any]):
        if payload.get("value") is not None:
            self.logger.debug("Type '%s' carries no value; ignoring supplied value", type_.name)
        return None

    def _decode_multiple(self, type_: Type, payload: Mapping[str, Any]):
        value = fields.get_required_map(payload, "value", KIND)
        known = {spec.name for spec in type_.fields}
        ignored = sorted(k for k in value if k not in known)
        if ignored:
            self.logger.warning(
                "Ignoring unknown fields %s for type '%s'", ", ".join(ignored), type_.name
            )

        result: Dict[str, Any] = {}
        for spec in type_.fields:
            key = f"value.{spec.name}"
            if value.get(spec.name) is None:
                if spec.required:
                    raise DecodeError.missing_field(key, KIND)
                continue
            entry = fields.get_required_map(value, spec.name, KIND)
            declared = fields.get_required_string(entry, "valuePattern", KIND)
            if declared != spec.pattern.value:
                raise DecodeError(
                    f"Field '{spec.name}' expects valuePattern '{spec.pattern.value}', got '{declared}'",
                    KIND,
                    key,
                )
            result[spec.name] = self._decode_field(spec, entry, key)
        return result

    def _decode_field(self, spec: FieldSpec, entry: Mapping[str, Any], key: str) -> Any:
        if spec.pattern is ValuePattern.QUANTITY:
            raw = fields.expect_number(fields.get_required(entry, "value", KIND), key, KIND)
            return fields.to_canonical(raw, entry.get("unit"), spec.dimension, key, KIND, delta=spec.delta)
        if spec.pattern is ValuePattern.SAMPLES:
            return self._samples(entry, spec.dimension, key, delta=spec.delta)
        if spec.pattern is ValuePattern.CATEGORY:
            raw = fields.get_required(entry, "value", KIND)
            return fields.read_category({key: raw}, key, spec.vocabulary, KIND)
        if spec.pattern is ValuePattern.LABEL:
            raw = fields.get_required(entry, "value", KIND)
            if not isinstance(raw, str):
                raise DecodeError.invalid_field_type(key, "string", raw, KIND)
            return raw
        raise DecodeError(f"Unsupported field pattern '{spec.pattern.value}'", KIND, key)

    def _samples(
        self,
        payload: Mapping[str, Any],
        dimension: Dimension,
        key: str,
        delta: bool = False,
    ) -> Tuple[Sample, ...]:
        raw_samples = fields.get_required(payload, "value", KIND)
        if not isinstance(raw_samples, (list, tuple)):
            raise DecodeError.invalid_field_type(key, "list of samples", raw_samples, KIND)
        if not raw_samples:
            raise DecodeError("Sample list cannot be empty", KIND, key)

        unit = payload.get("unit")
        samples: List[Sample] = []
        for i, item in enumerate(raw_samples):
            sample_key = f"{key}[{i}]"
            if not isinstance(item, Mapping):
                raise DecodeError.invalid_field_type(sample_key, "sample map", item, KIND)
            raw = fields.expect_number(item.get("value"), f"{sample_key}.value", KIND)
            time = fields.parse_timestamp(
                fields.get_required(item, "time", KIND), f"{sample_key}.time", KIND
            )
            # Temperature deltas may legitimately be negative.
            canonical = fields.to_canonical(
                raw, unit, dimension, sample_key, KIND, delta=delta, check=not delta
            )
            samples.append(Sample(time=time, value=canonical))
        return tuple(samples)
