# -*- coding: utf-8 -*-
"""Persistence sink interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Sequence

from ..records.models import Record


class RecordSink(ABC):
    """Receives one decoded batch per write call.

    Implementations return one id per submitted record, in submission order,
    and raise :class:`~connectkit.errors.SinkError` when the batch is rejected.
    """

    @abstractmethod
    def insert_batch(self, records: Sequence[Record]) -> List[str]:
        raise NotImplementedError
