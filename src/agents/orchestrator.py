from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sqlalchemy.orm import Session

from agents.client_inference.agent import ClientInferenceAgent
from agents.client_inference.provider import Prediction
from agents.signal_cleanup.agent import MaDedupReport, SignalCleanupAgent
from data.quality.deletion import DeletionReport
from data.storage.repositories import signals_repo

logger = logging.getLogger(__name__)

INFERENCE_SIGNAL_TYPES = ("competitor_job_posting",)


@dataclass
class MaintenanceResult:
    cleanup: DeletionReport
    ma_dedup: MaDedupReport
    predictions: dict[str, list[Prediction]] = field(default_factory=dict)


class Orchestrator:
    def __init__(
        self,
        session: Session,
        cleanup: SignalCleanupAgent | None = None,
        inferencer: ClientInferenceAgent | None = None,
    ) -> None:
        self.session = session
        self.cleanup = cleanup or SignalCleanupAgent(session)
        self.inferencer = inferencer or ClientInferenceAgent()

    def run(self) -> MaintenanceResult:
        try:
            cleanup_report = self.cleanup.run()
            ma_report = self.cleanup.dedupe_ma()
            new_signals = signals_repo.list_signals_with_status(
                self.session, INFERENCE_SIGNAL_TYPES, status="new"
            )
            predictions = self.inferencer.infer(new_signals)
        finally:
            self.inferencer.close()
        logger.info(
            "Maintenance run: %d cleaned, %d M&A duplicates, %d/%d signals inferred",
            cleanup_report.deleted,
            ma_report.deleted,
            len(predictions),
            len(new_signals),
        )
        return MaintenanceResult(
            cleanup=cleanup_report, ma_dedup=ma_report, predictions=predictions
        )
