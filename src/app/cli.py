from __future__ import annotations

import typer

from agents.client_inference.agent import ClientInferenceAgent
from agents.orchestrator import INFERENCE_SIGNAL_TYPES, Orchestrator
from agents.registry.agent import RegistryReconciler
from agents.signal_cleanup.agent import SignalCleanupAgent
from core.logger import setup_logging
from data.storage.db import SessionLocal, init_db
from data.storage.repositories import signals_repo

app = typer.Typer(help="Signal queue maintenance CLI")


@app.callback()
def main() -> None:
    setup_logging()


@app.command()
def initdb() -> None:
    init_db()
    typer.echo("Tables created")


@app.command()
def cleanup(dry_run: bool = typer.Option(False, help="Report candidates without deleting")) -> None:
    with SessionLocal() as session:
        agent = SignalCleanupAgent(session)
        if dry_run:
            candidates = agent.find_candidates()
            typer.echo(f"Matched {len(candidates)} signals: {candidates.breakdown()}")
            return
        report = agent.run()
        typer.echo(
            f"Deleted {report.deleted} of {report.total_matched} signals: {report.breakdown}"
        )


@app.command("dedup-ma")
def dedup_ma() -> None:
    with SessionLocal() as session:
        report = SignalCleanupAgent(session).dedupe_ma()
        typer.echo(f"Checked {report.checked} MA signals, deleted {report.deleted} duplicates")


@app.command("reconcile-firms")
def reconcile_firms() -> None:
    with SessionLocal() as session:
        report = RegistryReconciler(session).reconcile()
        typer.echo(
            f"{report.deactivated} deactivated, {report.seeded} seeded, {report.skipped} skipped"
        )
        for item in report.skipped_firms:
            typer.echo(f"  skipped {item['name']}: {item['reason']}")


@app.command()
def infer() -> None:
    with SessionLocal() as session:
        signals = signals_repo.list_signals_with_status(
            session, INFERENCE_SIGNAL_TYPES, status="new"
        )
        inferencer = ClientInferenceAgent()
        try:
            predictions = inferencer.infer(signals)
        finally:
            inferencer.close()
        typer.echo(f"Inferred end clients for {len(predictions)}/{len(signals)} signals")
        for signal_id, items in predictions.items():
            top = ", ".join(f"{item.company} ({item.confidence})" for item in items)
            typer.echo(f"  {signal_id}: {top}")


@app.command()
def maintenance() -> None:
    with SessionLocal() as session:
        result = Orchestrator(session).run()
        typer.echo(
            f"Cleanup deleted {result.cleanup.deleted}, M&A dedup deleted "
            f"{result.ma_dedup.deleted}, inferred {len(result.predictions)} signals"
        )


if __name__ == "__main__":
    app()
