from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.orm import Session

from agents.base import AgentBase
from core.config import get_settings
from data.quality.candidates import DeletionCandidates
from data.quality.dedupe import dedupe_job_signals, dedupe_ma_signals
from data.quality.deletion import DeletionExecutor, DeletionReport
from data.quality.rules import JOB_SIGNAL_TYPES, RuleConfig, classify
from data.storage.repositories import signals_repo

_MA_SCAN_LIMIT = 500


@dataclass
class MaDedupReport:
    checked: int
    deleted: int
    total_matched: int


class SignalCleanupAgent(AgentBase):
    name = "signal_cleanup"

    def __init__(
        self,
        session: Session,
        config: RuleConfig | None = None,
        chunk_size: int | None = None,
    ) -> None:
        self.session = session
        self.config = config or RuleConfig.from_settings()
        self.executor = DeletionExecutor(
            lambda ids: signals_repo.delete_signals(self.session, ids),
            chunk_size=chunk_size or get_settings().delete_chunk_size,
        )

    def find_candidates(self) -> DeletionCandidates:
        signals = signals_repo.list_signals_by_types(
            self.session, self.config.all_types | JOB_SIGNAL_TYPES, newest_first=True
        )
        candidates = classify(signals, self.config)
        job_signals = [signal for signal in signals if signal.signal_type in JOB_SIGNAL_TYPES]
        dedupe_job_signals(job_signals, candidates)
        self.logger.info(
            "Cleanup scan: %d signals checked, %d candidates", len(signals), len(candidates)
        )
        return candidates

    def run(self) -> DeletionReport:
        candidates = self.find_candidates()
        if not candidates:
            return DeletionReport()
        return self.executor.execute(candidates)

    def dedupe_ma(self) -> MaDedupReport:
        signals = signals_repo.list_signals_by_types(
            self.session, ["ma_transaction"], newest_first=True, limit=_MA_SCAN_LIMIT
        )
        candidates = dedupe_ma_signals(signals)
        report = self.executor.execute(candidates) if candidates else DeletionReport()
        self.logger.info(
            "M&A dedup: %d signals checked, %d deleted", len(signals), report.deleted
        )
        return MaDedupReport(
            checked=len(signals), deleted=report.deleted, total_matched=report.total_matched
        )
