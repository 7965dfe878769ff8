# SPDX-License-Identifier: LGPL-3.0-only
# Copyright (c) 2026 Mirrowel

"""
Paginated export engine.

Counts the matching records, then walks offset pages strictly in sequence,
streaming every record to a writer as soon as it arrives. Progress is
reported after each page.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from ..core.constants import DEFAULT_EXPORT_BATCH_SIZE, EXPORT_BATCH_DELAY
from .sources import RecordSource
from .writers import RecordWriter

lib_logger = logging.getLogger("helicone_library")

STATUS_COMPLETED = "completed"
STATUS_EMPTY = "empty"
STATUS_FAILED = "failed"


@dataclass
class ExportProgress:
    exported: int
    target: int
    elapsed: float

    @property
    def percent(self) -> float:
        return (self.exported / self.target * 100) if self.target else 100.0

    @property
    def rate(self) -> float:
        return self.exported / self.elapsed if self.elapsed > 0 else 0.0

    @property
    def eta_seconds(self) -> float:
        rate = self.rate
        if rate <= 0:
            return 0.0
        return max(self.target - self.exported, 0) / rate


@dataclass
class ExportResult:
    status: str
    exported: int = 0
    target: int = 0
    total_count: int = 0
    elapsed: float = 0.0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status != STATUS_FAILED


class ExportEngine:
    """
    Drives one export job.

    ``writer_factory`` is only called once at least one record is known to
    match, so an empty result never creates an output file. The writer is
    closed on every path; on a fetch error the closing framing is skipped.
    """

    def __init__(
        self,
        source: RecordSource,
        writer_factory: Callable[[], RecordWriter],
        batch_size: int = DEFAULT_EXPORT_BATCH_SIZE,
        limit: Optional[int] = None,
        delay: float = EXPORT_BATCH_DELAY,
        on_progress: Optional[Callable[[ExportProgress], None]] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep=asyncio.sleep,
    ):
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        self.source = source
        self.writer_factory = writer_factory
        self.batch_size = batch_size
        self.limit = limit
        self.delay = delay
        self.on_progress = on_progress
        self._clock = clock
        self._sleep = sleep

    async def run(self) -> ExportResult:
        count_result = await self.source.count()
        if count_result.error:
            return ExportResult(status=STATUS_FAILED, error=count_result.error)

        total = int(count_result.data or 0)
        if total <= 0:
            return ExportResult(status=STATUS_EMPTY)

        target = min(total, self.limit) if self.limit is not None else total
        lib_logger.debug(f"Exporting {target} of {total} records in batches of {self.batch_size}")

        started = self._clock()
        exported = 0
        offset = 0
        writer = self.writer_factory()
        complete = False
        try:
            while exported < target:
                page_limit = min(self.batch_size, target - exported)
                page = await self.source.fetch(offset, page_limit)
                if page.error:
                    return ExportResult(
                        status=STATUS_FAILED,
                        exported=exported,
                        target=target,
                        total_count=total,
                        elapsed=self._clock() - started,
                        error=page.error,
                    )

                records = (page.data or [])[:page_limit]
                if not records:
                    break

                for record in records:
                    writer.write(await self.source.enrich(record))
                exported += len(records)
                offset += self.batch_size

                if self.on_progress:
                    self.on_progress(
                        ExportProgress(exported, target, self._clock() - started)
                    )
                if exported < target:
                    await self._sleep(self.delay)

            complete = True
        finally:
            writer.close(complete=complete)

        return ExportResult(
            status=STATUS_COMPLETED,
            exported=exported,
            target=target,
            total_count=total,
            elapsed=self._clock() - started,
        )
