# -*- coding: utf-8 -*-
"""Error taxonomy shared by the schema, decoders, sinks and the write service."""

from __future__ import annotations

from typing import Any, Optional


class ConnectKitError(Exception):
    """Base class for every error raised by the pipeline."""


class DecodeError(ConnectKitError):
    """A record map could not be decoded into a validated record.

    The rendered message keeps the kind and field in front so that a single
    failure string is enough to locate the problem in caller input.
    """

    def __init__(
        self,
        message: str,
        record_kind: Optional[str] = None,
        field_name: Optional[str] = None,
    ) -> None:
        self.reason = message
        self.record_kind = record_kind
        self.field_name = field_name
        super().__init__(self._build_message(message, record_kind, field_name))

    @staticmethod
    def _build_message(message: str, record_kind: Optional[str], field_name: Optional[str]) -> str:
        parts = []
        if record_kind is not None:
            parts.append(f"Record kind: {record_kind}")
        if field_name is not None:
            parts.append(f"Field: {field_name}")
        parts.append(message)
        return " | ".join(parts)

    @classmethod
    def missing_field(cls, field_name: str, record_kind: str) -> "DecodeError":
        return cls("Missing required field", record_kind, field_name)

    @classmethod
    def invalid_field_type(
        cls, field_name: str, expected: str, actual: Any, record_kind: str
    ) -> "DecodeError":
        actual_name = "null" if actual is None else type(actual).__name__
        return cls(f"Expected {expected} but got {actual_name}", record_kind, field_name)

    @classmethod
    def invalid_field_value(cls, field_name: str, reason: str, record_kind: str) -> "DecodeError":
        return cls(reason, record_kind, field_name)


class UnknownType(DecodeError):
    """Type identifier is not registered."""

    def __init__(self, identifier: str, record_kind: Optional[str] = None) -> None:
        self.identifier = identifier
        super().__init__(f"Unknown type identifier '{identifier}'", record_kind, "type")


class InvalidUnit(DecodeError):
    """Unit symbol missing or not valid for the dimension being converted."""

    def __init__(self, message: str, field_name: Optional[str] = None, record_kind: Optional[str] = None) -> None:
        super().__init__(message, record_kind, field_name or "unit")


class UnsupportedKindError(ConnectKitError):
    """Record kind has no equivalent on the configured platform."""

    def __init__(self, record_kind: str, platform: str, message: str) -> None:
        self.record_kind = record_kind
        self.platform = platform
        super().__init__(f"[{platform}] Unsupported record kind '{record_kind}': {message}")


class SinkError(ConnectKitError):
    """The persistence sink rejected the whole batch."""
