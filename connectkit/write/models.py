# -*- coding: utf-8 -*-
"""Write pipeline — result models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class FailureType(str, Enum):
    NO_RECORDS = "NoRecords"
    DECODE_ERROR = "DecodeError"
    UNSUPPORTED_KIND = "UnsupportedKindError"
    UNEXPECTED_ERROR = "UnexpectedError"
    SINK_ERROR = "SinkError"
    DURING_SESSION_DECODE_ERROR = "DuringSessionDecodeError"
    DURING_SESSION_INVALID_TYPE = "DuringSessionInvalidType"


class WriteOutcome(str, Enum):
    COMPLETE_SUCCESS = "completeSuccess"
    PARTIAL_SUCCESS = "partialSuccess"
    FAILURE = "failure"


@dataclass(frozen=True)
class IndexPath:
    """Position of a failed record in the caller's batch.

    ``index`` is the top-level position. ``nested`` is set for a
    during-session record and holds its position inside the parent.
    """

    index: int
    nested: Optional[int] = None

    @property
    def is_nested(self) -> bool:
        return self.nested is not None

    def prefixed(self, top_index: int) -> "IndexPath":
        """Re-root a parent-relative path under ``top_index``."""
        if self.is_nested:
            raise ValueError(f"Index path {self.to_list()} is already two levels deep")
        return IndexPath(top_index, self.index)

    def to_list(self) -> List[int]:
        if self.nested is None:
            return [self.index]
        return [self.index, self.nested]


@dataclass(frozen=True)
class RecordFailure:
    message: str
    type: FailureType
    index_path: Optional[IndexPath] = None

    def prefixed(self, top_index: int) -> "RecordFailure":
        if self.index_path is None:
            return self
        return RecordFailure(self.message, self.type, self.index_path.prefixed(top_index))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "indexPath": self.index_path.to_list() if self.index_path else None,
            "message": self.message,
            "type": self.type.value,
        }


@dataclass(frozen=True)
class WriteResult:
    outcome: WriteOutcome
    persisted_record_ids: List[str] = field(default_factory=list)
    validation_failures: List[RecordFailure] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        # Empty lists go over the wire as null.
        return {
            "outcome": self.outcome.value,
            "persistedRecordIds": list(self.persisted_record_ids) or None,
            "validationFailures": [f.to_dict() for f in self.validation_failures] or None,
        }


# --- HTTP models -------------------------------------------------------------


class WriteRecordsRequest(BaseModel):
    records: List[Any] = Field(default_factory=list, description="Loosely-typed record maps")


class RecordFailureModel(BaseModel):
    indexPath: Optional[List[int]] = None
    message: str
    type: FailureType


class WriteResultResponse(BaseModel):
    outcome: WriteOutcome
    persistedRecordIds: Optional[List[str]] = None
    validationFailures: Optional[List[RecordFailureModel]] = None

    @classmethod
    def from_result(cls, result: WriteResult) -> "WriteResultResponse":
        return cls.model_validate(result.to_dict())


class ExpandTypesRequest(BaseModel):
    types: List[str] = Field(..., description="Type identifiers, e.g. 'bloodPressure'")


class TypeListResponse(BaseModel):
    types: List[str]
    count: int
