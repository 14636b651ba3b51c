# -*- coding: utf-8 -*-
"""Write pipeline — outcome classification."""

from __future__ import annotations

from typing import List, Sequence

from .models import RecordFailure, WriteOutcome, WriteResult


def aggregate(persisted_ids: Sequence[str], failures: Sequence[RecordFailure]) -> WriteResult:
    """Classify a write from what was persisted and what failed.

    Anything persisted with no failures is a complete success, anything
    persisted alongside failures is partial, and nothing persisted is a failure.
    """
    ids: List[str] = list(persisted_ids)
    failure_list: List[RecordFailure] = list(failures)

    if ids and not failure_list:
        outcome = WriteOutcome.COMPLETE_SUCCESS
    elif ids:
        outcome = WriteOutcome.PARTIAL_SUCCESS
    else:
        outcome = WriteOutcome.FAILURE

    return WriteResult(
        outcome=outcome,
        persisted_record_ids=ids,
        validation_failures=failure_list,
    )
