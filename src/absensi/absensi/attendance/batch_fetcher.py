from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Iterable, Iterator, Optional, Sequence

from ..core.constants import DEFAULT_LOG_FETCH_CHUNK_SIZE, DEFAULT_LOG_FETCH_MAX_WORKERS
from ..core.exceptions import PartialBatchFailure
from .model import AttendanceLog
from .repository import AttendanceLogRepository

logger = logging.getLogger(__name__)

OPERATION = "fetch_attendance_logs"


def chunked(values: Sequence[str], size: int) -> Iterator[Sequence[str]]:
    for i in range(0, len(values), size):
        yield values[i : i + size]


class BatchedLogFetcher:
    """Fetch attendance logs for many meetings with chunked "IN (...)" queries.

    Chunks are independent reads, so they fan out on a thread pool and are
    merged back in chunk order. One failed chunk fails the whole fetch.
    """

    def __init__(
        self,
        logs: AttendanceLogRepository,
        *,
        chunk_size: int = DEFAULT_LOG_FETCH_CHUNK_SIZE,
        max_workers: int = DEFAULT_LOG_FETCH_MAX_WORKERS,
    ):
        if int(chunk_size) <= 0:
            raise ValueError("chunk_size must be positive")
        self._logs = logs
        self._chunk_size = int(chunk_size)
        self._max_workers = max(int(max_workers), 1)

    def fetch_logs(self, meeting_ids: Iterable[str]) -> list[AttendanceLog]:
        ids = sorted({str(m) for m in meeting_ids if m})
        if not ids:
            return []

        chunks = list(chunked(ids, self._chunk_size))
        results: list[Optional[Sequence[AttendanceLog]]] = [None] * len(chunks)
        errors: list[Exception] = []

        if len(chunks) == 1 or self._max_workers == 1:
            for i, chunk in enumerate(chunks):
                try:
                    results[i] = self._logs.fetch_for_meetings(chunk)
                except Exception as exc:
                    logger.error("log fetch chunk %d/%d failed: %s", i + 1, len(chunks), exc)
                    errors.append(exc)
        else:
            with ThreadPoolExecutor(max_workers=min(self._max_workers, len(chunks))) as executor:
                futures = {executor.submit(self._logs.fetch_for_meetings, chunk): i for i, chunk in enumerate(chunks)}
                for future in as_completed(futures):
                    i = futures[future]
                    try:
                        results[i] = future.result()
                    except Exception as exc:
                        logger.error("log fetch chunk %d/%d failed: %s", i + 1, len(chunks), exc)
                        errors.append(exc)

        if errors:
            raise PartialBatchFailure(OPERATION, failed=len(errors), total=len(chunks), cause=errors[0]) from errors[0]

        merged = [log for part in results for log in (part or [])]
        logger.debug("fetched %d log(s) for %d meeting(s) in %d chunk(s)", len(merged), len(ids), len(chunks))
        return merged
