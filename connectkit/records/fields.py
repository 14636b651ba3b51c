# -*- coding: utf-8 -*-
"""Field extraction shared by every decoder.

All helpers take the record kind so errors point back at the offending input.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from ..errors import DecodeError, InvalidUnit
from ..schema.categories import decode_category, values_of
from ..schema.units import (
    NON_NEGATIVE_DIMENSIONS,
    POSITIVE_DIMENSIONS,
    CanonicalValue,
    Dimension,
    convert,
)
from .models import Device, DeviceType, RecordingMethod, Source

logger = logging.getLogger(__name__)

MAX_ZONE_OFFSET_SECONDS = 18 * 3600


@dataclass(frozen=True)
class TimeRange:
    start_time: datetime
    end_time: datetime
    start_zone_offset: int = 0
    end_zone_offset: int = 0


# --- primitive getters -------------------------------------------------------


def _type_label(value: Any) -> str:
    return "null" if value is None else type(value).__name__


def get_required(data: Mapping[str, Any], key: str, kind: str) -> Any:
    value = data.get(key)
    if value is None:
        raise DecodeError.missing_field(key, kind)
    return value


def get_required_string(data: Mapping[str, Any], key: str, kind: str) -> str:
    value = get_required(data, key, kind)
    if not isinstance(value, str):
        raise DecodeError.invalid_field_type(key, "string", value, kind)
    return value


def get_optional_string(data: Mapping[str, Any], key: str, kind: str) -> Optional[str]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise DecodeError.invalid_field_type(key, "string", value, kind)
    return value


def get_required_map(data: Mapping[str, Any], key: str, kind: str) -> Dict[str, Any]:
    value = get_required(data, key, kind)
    if not isinstance(value, Mapping):
        raise DecodeError.invalid_field_type(key, "map", value, kind)
    return dict(value)


def get_optional_map(data: Mapping[str, Any], key: str, kind: str) -> Optional[Dict[str, Any]]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise DecodeError.invalid_field_type(key, "map", value, kind)
    return dict(value)


def get_optional_list(data: Mapping[str, Any], key: str, kind: str) -> Optional[List[Any]]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, (list, tuple)):
        raise DecodeError.invalid_field_type(key, "list", value, kind)
    return list(value)


def expect_number(value: Any, key: str, kind: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DecodeError.invalid_field_type(key, "number", value, kind)
    try:
        number = float(value)
    except OverflowError:
        number = math.inf
    if not math.isfinite(number):
        raise DecodeError.invalid_field_value(key, "Value must be a finite number", kind)
    return number


# --- time ----------------------------------------------------------------------


def parse_timestamp(raw: Any, key: str, kind: str) -> datetime:
    """Epoch milliseconds or an ISO 8601 string with an offset, returned as aware UTC."""
    if isinstance(raw, bool):
        raise DecodeError.invalid_field_type(key, "epoch milliseconds or ISO 8601 string", raw, kind)
    if isinstance(raw, (int, float)):
        try:
            return datetime.fromtimestamp(raw / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as exc:
            raise DecodeError.invalid_field_value(key, f"Timestamp out of range: {raw}", kind) from exc
    if isinstance(raw, str):
        text = raw.strip()
        if text.endswith("Z") or text.endswith("z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as exc:
            raise DecodeError.invalid_field_value(key, f"Invalid ISO 8601 timestamp: '{raw}'", kind) from exc
        if parsed.tzinfo is None:
            raise DecodeError.invalid_field_value(
                key, f"Timestamp '{raw}' has no UTC offset", kind
            )
        return parsed.astimezone(timezone.utc)
    raise DecodeError.invalid_field_type(key, "epoch milliseconds or ISO 8601 string", raw, kind)


def parse_zone_offset(data: Mapping[str, Any], key: str, kind: str) -> int:
    raw = data.get(key)
    if raw is None:
        return 0
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise DecodeError.invalid_field_type(key, "integer seconds", raw, kind)
    if abs(raw) > MAX_ZONE_OFFSET_SECONDS:
        raise DecodeError.invalid_field_value(
            key, f"Zone offset {raw}s is outside +/-{MAX_ZONE_OFFSET_SECONDS}s", kind
        )
    return raw


def extract_time_range(data: Mapping[str, Any], kind: str) -> TimeRange:
    start = parse_timestamp(get_required(data, "startTime", kind), "startTime", kind)
    end = parse_timestamp(get_required(data, "endTime", kind), "endTime", kind)
    if end < start:
        raise DecodeError(
            f"End time ({end.isoformat()}) cannot be before start time ({start.isoformat()})",
            kind,
            "endTime",
        )
    return TimeRange(
        start,
        end,
        parse_zone_offset(data, "startZoneOffsetSeconds", kind),
        parse_zone_offset(data, "endZoneOffsetSeconds", kind),
    )


def extract_instant(
    data: Mapping[str, Any],
    kind: str,
    log: Optional[logging.Logger] = None,
) -> TimeRange:
    """Time range for a record that only has a single timestamp.

    Reads ``time`` (with ``zoneOffsetSeconds``) and falls back to ``startTime``.
    A differing ``endTime`` is logged and dropped.
    """
    log = log or logger
    if data.get("time") is not None:
        start = parse_timestamp(data["time"], "time", kind)
        offset = parse_zone_offset(data, "zoneOffsetSeconds", kind)
    else:
        start = parse_timestamp(get_required(data, "startTime", kind), "startTime", kind)
        offset = parse_zone_offset(data, "startZoneOffsetSeconds", kind)
    if data.get("endTime") is not None:
        end = parse_timestamp(data["endTime"], "endTime", kind)
        if end != start:
            log.warning(
                "%s is instantaneous but startTime != endTime; using startTime %s",
                kind,
                start.isoformat(),
            )
    return TimeRange(start, start, offset, offset)


# --- source --------------------------------------------------------------------


def _lenient_enum(enum_cls, raw: Any, label: str, log: logging.Logger):
    if raw is None:
        return enum_cls("unknown")
    if isinstance(raw, str):
        for member in enum_cls:
            if member.value.lower() == raw.strip().lower():
                return member
    log.warning("Unknown %s '%s', using unknown", label, raw)
    return enum_cls("unknown")


def extract_source(
    data: Mapping[str, Any],
    kind: str,
    platform: str,
    log: Optional[logging.Logger] = None,
) -> Optional[Source]:
    log = log or logger
    source_map = get_optional_map(data, "source", kind)
    if source_map is None:
        return None

    method = _lenient_enum(RecordingMethod, source_map.get("recordingMethod"), "recording method", log)

    device = None
    device_map = get_optional_map(source_map, "device", kind)
    if device_map is not None:
        device = Device(
            manufacturer=get_optional_string(device_map, "manufacturer", kind),
            model=get_optional_string(device_map, "model", kind),
            type=_lenient_enum(DeviceType, device_map.get("type"), "device type", log),
            hardware_version=get_optional_string(device_map, "hardwareVersion", kind),
            software_version=get_optional_string(device_map, "softwareVersion", kind),
        )

    # Health Connect only accepts actively/automatically recorded data with a device.
    if (
        platform == "android"
        and device is None
        and method in (RecordingMethod.ACTIVELY_RECORDED, RecordingMethod.AUTOMATICALLY_RECORDED)
    ):
        log.warning("%s data requires a device, falling back to unknown", method.value)
        method = RecordingMethod.UNKNOWN

    client_record_id = get_optional_string(source_map, "clientRecordId", kind)
    client_record_version = source_map.get("clientRecordVersion")
    if client_record_version is not None:
        if isinstance(client_record_version, bool) or not isinstance(client_record_version, int):
            raise DecodeError.invalid_field_type(
                "source.clientRecordVersion", "integer", client_record_version, kind
            )
        if client_record_version < 0:
            raise DecodeError.invalid_field_value(
                "source.clientRecordVersion", "Version must be non-negative", kind
            )

    return Source(
        recording_method=method,
        device=device,
        client_record_id=client_record_id,
        client_record_version=client_record_version,
    )


# --- values --------------------------------------------------------------------


def check_magnitude(value: CanonicalValue, key: str, kind: str) -> CanonicalValue:
    if value.dimension in POSITIVE_DIMENSIONS and value.value <= 0:
        raise DecodeError.invalid_field_value(key, f"Value must be positive, got {value.value}", kind)
    if value.dimension in NON_NEGATIVE_DIMENSIONS and value.value < 0:
        raise DecodeError.invalid_field_value(
            key, f"Value must be non-negative, got {value.value}", kind
        )
    if value.dimension is Dimension.PERCENT and value.value > 100:
        raise DecodeError.invalid_field_value(
            key, f"Percentage must be at most 100, got {value.value}", kind
        )
    return value


def to_canonical(
    raw: Any,
    unit: Any,
    dimension: Dimension,
    key: str,
    kind: str,
    delta: bool = False,
    check: bool = True,
) -> CanonicalValue:
    try:
        value = convert(raw, unit, dimension, field_context=key, delta=delta)
    except InvalidUnit as exc:
        raise InvalidUnit(exc.reason, field_name=key, record_kind=kind) from exc
    return check_magnitude(value, key, kind) if check else value


def read_quantity(
    data: Mapping[str, Any],
    key: str,
    dimension: Dimension,
    kind: str,
    required: bool = True,
) -> Optional[CanonicalValue]:
    """Read ``{value, unit}`` stored under ``key`` and convert it."""
    if data.get(key) is None:
        if required:
            raise DecodeError.missing_field(key, kind)
        return None
    entry = get_required_map(data, key, kind)
    pattern = entry.get("valuePattern")
    if pattern is not None and pattern != "quantity":
        raise DecodeError.invalid_field_value(
            key, f"Expected valuePattern 'quantity', got '{pattern}'", kind
        )
    raw = expect_number(get_required(entry, "value", kind), key, kind)
    return to_canonical(raw, entry.get("unit"), dimension, key, kind)


def read_category(
    data: Mapping[str, Any],
    key: str,
    vocabulary: str,
    kind: str,
    default: Optional[str] = None,
    log: Optional[logging.Logger] = None,
) -> Optional[str]:
    """Read a category string.

    With a ``default`` an unrecognised value is logged and replaced; without
    one it is a DecodeError.
    """
    raw = data.get(key)
    if raw is None:
        return default
    if not isinstance(raw, str):
        raise DecodeError.invalid_field_type(key, "string", raw, kind)
    decoded = decode_category(vocabulary, raw)
    if decoded is not None:
        return decoded
    if default is not None:
        (log or logger).warning("Unknown %s '%s', using '%s'", vocabulary, raw, default)
        return default
    raise DecodeError.invalid_field_value(
        key,
        f"Invalid {vocabulary} value '{raw}'. Expected one of: {', '.join(values_of(vocabulary))}",
        kind,
    )
