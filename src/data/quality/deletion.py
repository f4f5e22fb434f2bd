from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterator, Sequence

from sqlalchemy.exc import SQLAlchemyError

from data.quality.candidates import DeletionCandidates

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 100

DeleteFn = Callable[[list[str]], int]


@dataclass
class DeletionReport:
    deleted: int = 0
    total_matched: int = 0
    breakdown: dict[str, int] = field(default_factory=dict)
    failed_chunks: int = 0


def chunked(items: Sequence[str], size: int) -> Iterator[list[str]]:
    if size <= 0:
        raise ValueError("chunk size must be positive")
    for start in range(0, len(items), size):
        yield list(items[start : start + size])


class DeletionExecutor:
    """Deletes candidates in fixed-size chunks, one store call per chunk.

    A failing chunk is logged and left out of ``deleted``; the remaining
    chunks still run.
    """

    def __init__(self, delete_fn: DeleteFn, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        self.delete_fn = delete_fn
        self.chunk_size = chunk_size

    def execute(self, candidates: DeletionCandidates) -> DeletionReport:
        report = DeletionReport(
            total_matched=len(candidates), breakdown=candidates.breakdown()
        )
        ids = candidates.ids()
        for index, chunk in enumerate(chunked(ids, self.chunk_size), start=1):
            try:
                removed = self.delete_fn(chunk)
            except SQLAlchemyError as exc:
                report.failed_chunks += 1
                logger.error("Delete chunk %d (%d ids) failed: %s", index, len(chunk), exc)
                continue
            report.deleted += removed
            logger.info("Delete chunk %d removed %d of %d", index, removed, len(chunk))
        logger.info(
            "Deleted %d of %d matched signals (%d failed chunks)",
            report.deleted,
            report.total_matched,
            report.failed_chunks,
        )
        return report
