from __future__ import annotations

from core.logger import setup_logging
from data.storage.db import SessionLocal
from agents.orchestrator import MaintenanceResult, Orchestrator
from agents.registry.agent import RegistryReconciler


def run() -> MaintenanceResult:
    setup_logging()
    with SessionLocal() as session:
        RegistryReconciler(session).reconcile()
        return Orchestrator(session).run()


if __name__ == "__main__":
    result = run()
    print(f"cleanup: deleted {result.cleanup.deleted} of {result.cleanup.total_matched}")
    for reason, count in sorted(result.cleanup.breakdown.items()):
        print(f"  {reason}: {count}")
    print(f"ma dedup: deleted {result.ma_dedup.deleted} of {result.ma_dedup.checked} checked")
    print(f"inference: {len(result.predictions)} signals")
