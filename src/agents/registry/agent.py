from __future__ import annotations

from dataclasses import dataclass, field

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from agents.base import AgentBase
from data.storage.repositories import competitor_repo

# CROs and associations that were picked up as staffing firms by mistake.
EXCLUDED_FIRMS = (
    "ICON plc",
    "ICON",
    "Advanced Clinical",
    "Alku",
    "Black Diamond Networks",
    "Real Life Sciences",
    "The Planet Group",
    "USTech Solutions",
    "Soliant Health",
    "Epic Staffing Group",
    "Spectra Force",
    "Mindlance",
    "Pacer Staffing",
    "ZP Group",
    "Meet Staffing",
    "Ampcus",
    "ClinLab Staffing",
    "Peoplelink Group",
)

STAFFING_FIRMS = (
    "Randstad",
    "Adecco",
    "Kelly Services",
    "Manpower",
    "Hays",
    "Actalent",
    "Insight Global",
    "Planet Pharma",
    "Proclinical",
    "Real Staffing",
    "GForce Life Sciences",
    "Medix",
    "EPM Scientific",
    "ClinLab Solutions Group",
    "Sci.bio",
    "Gemini Staffing Consultants",
    "Orbis Clinical",
    "Scientific Search",
    "TriNet Pharma",
    "The Fountain Group",
    "Hueman RPO",
    "Net2Source",
    "Oxford Global Resources",
    "Beacon Hill Staffing Group",
    "ASGN Incorporated",
    "Yoh Services",
    "Joule Staffing",
    "Solomon Page",
    "Green Key Resources",
    "Phaidon International",
)


@dataclass(frozen=True)
class RegistryConfig:
    excluded: tuple[str, ...] = EXCLUDED_FIRMS
    canonical: tuple[str, ...] = STAFFING_FIRMS


@dataclass
class ReconcileReport:
    deactivated_firms: list[str] = field(default_factory=list)
    seeded: int = 0
    skipped_firms: list[dict[str, str]] = field(default_factory=list)

    @property
    def deactivated(self) -> int:
        return len(self.deactivated_firms)

    @property
    def skipped(self) -> int:
        return len(self.skipped_firms)


class RegistryReconciler(AgentBase):
    """Keeps ``competitor_firms`` aligned with the canonical staffing-firm list.

    Excluded entities are switched off rather than deleted; canonical firms
    are reactivated or inserted. Running it again only re-affirms the state.
    """

    name = "registry_reconciler"

    def __init__(self, session: Session, config: RegistryConfig | None = None) -> None:
        self.session = session
        self.config = config or RegistryConfig()

    def reconcile(self) -> ReconcileReport:
        report = ReconcileReport()
        self._deactivate_excluded(report)
        self._seed_canonical(report)
        self.logger.info(
            "Registry reconciled: %d deactivated, %d seeded, %d skipped",
            report.deactivated,
            report.seeded,
            report.skipped,
        )
        return report

    def _deactivate_excluded(self, report: ReconcileReport) -> None:
        for name in self.config.excluded:
            firm = competitor_repo.find_firm_by_name(self.session, name)
            if firm is None:
                continue
            try:
                competitor_repo.set_firm_active(self.session, firm, False)
            except SQLAlchemyError as exc:
                self.session.rollback()
                self.logger.warning("Failed to deactivate %s: %s", firm.name, exc)
                continue
            report.deactivated_firms.append(firm.name)
            self.logger.info("Deactivated: %s", firm.name)

    def _seed_canonical(self, report: ReconcileReport) -> None:
        for name in self.config.canonical:
            try:
                firm = competitor_repo.find_firm_by_name(self.session, name)
                if firm is not None:
                    competitor_repo.set_firm_active(self.session, firm, True)
                    self.logger.info("Reactivated: %s", name)
                else:
                    competitor_repo.create_firm(self.session, name)
                    self.logger.info("Seeded: %s", name)
            except SQLAlchemyError as exc:
                self.session.rollback()
                report.skipped_firms.append({"name": name, "reason": str(exc)})
                self.logger.warning("Failed to upsert %s: %s", name, exc)
                continue
            report.seeded += 1
