# -*- coding: utf-8 -*-
"""Write pipeline — batch orchestration.

Each input map is decoded on its own; one bad record never stops the rest.
Whatever decodes is handed to the sink in a single call, then the outcome is
classified from the persisted ids and the collected failures.
"""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional, Sequence

from ..errors import DecodeError, UnsupportedKindError
from ..records.mapper import RecordMapper
from ..records.models import Record
from ..sinks.base import RecordSink
from .aggregator import aggregate
from .models import FailureType, IndexPath, RecordFailure, WriteResult

SINK_FAILURE_MESSAGE = "Failed to write records to the sink"


class WriteService:
    def __init__(
        self,
        mapper: RecordMapper,
        sink: RecordSink,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.mapper = mapper
        self.sink = sink
        self.logger = logger or logging.getLogger(__name__)

    def write_records(self, records: Sequence[Any]) -> WriteResult:
        if not records:
            self.logger.warning("Write called with an empty batch")
            return aggregate(
                [],
                [RecordFailure("No records to write - empty input", FailureType.NO_RECORDS)],
            )

        self.logger.info("Writing batch of %d record(s)", len(records))

        pending: List[Record] = []
        failures: List[RecordFailure] = []
        for index, item in enumerate(records):
            decoded, item_failures = self._decode_one(index, item)
            pending.extend(decoded)
            failures.extend(item_failures)

        if failures:
            self.logger.warning(
                "%d record(s) failed validation, %d ready to persist", len(failures), len(pending)
            )

        persisted_ids: List[str] = []
        if pending:
            try:
                persisted_ids = list(self.sink.insert_batch(pending))
            except Exception as exc:
                # Driver text stays in the log; callers only see the fixed message.
                self.logger.error(
                    "Sink rejected batch of %d record(s): %s", len(pending), exc, exc_info=True
                )
                failures.append(RecordFailure(SINK_FAILURE_MESSAGE, FailureType.SINK_ERROR))
                persisted_ids = []

        result = aggregate(persisted_ids, failures)
        self.logger.info(
            "Write finished: %s (%d persisted, %d failed)",
            result.outcome.value,
            len(result.persisted_record_ids),
            len(result.validation_failures),
        )
        return result

    def _decode_one(self, index: int, item: Any):
        path = IndexPath(index)
        if not isinstance(item, Mapping):
            self.logger.warning("Record at index %d is not a map", index)
            failure = RecordFailure(
                f"Record at index {index} is not a valid map (got {type(item).__name__})",
                FailureType.DECODE_ERROR,
                path,
            )
            return [], [failure]

        try:
            decoded, nested_failures = self.mapper.decode(item)
            # Nested paths are relative to the parent record.
            return decoded, [f.prefixed(index) for f in nested_failures]
        except DecodeError as exc:
            self.logger.error("Failed to decode record at index %d: %s", index, exc, exc_info=True)
            message = f"{exc.record_kind or 'Unknown record kind'} | {exc.field_name or ''} | {exc.reason}"
            return [], [RecordFailure(message, FailureType.DECODE_ERROR, path)]
        except UnsupportedKindError as exc:
            self.logger.error("Unsupported record at index %d: %s", index, exc, exc_info=True)
            return [], [RecordFailure(str(exc), FailureType.UNSUPPORTED_KIND, path)]
        except Exception as exc:
            self.logger.error("Unexpected error decoding record at index %d", index, exc_info=True)
            return [], [RecordFailure(f"Unexpected error: {exc}", FailureType.UNEXPECTED_ERROR, path)]
