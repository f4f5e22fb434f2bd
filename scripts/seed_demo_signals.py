from __future__ import annotations

from datetime import timedelta

from core.utils.time import utc_now
from data.storage.db import Signal, SessionLocal, init_db
from data.storage.repositories import company_repo, contacts_repo, signals_repo


DEMO_COMPANIES = [
    ("Vertex Pharmaceuticals", "vrtx.com", "warm", "5000+"),
    ("Arcellx", "arcellx.com", "new_prospect", "201-500"),
    ("Kelly Services", "kellyservices.com", "new_prospect", "5000+"),
]


def main() -> None:
    init_db()
    now = utc_now()
    with SessionLocal() as session:
        companies = {
            name: company_repo.create_company(session, name, domain, warmth, size)
            for name, domain, warmth, size in DEMO_COMPANIES
        }
        contacts_repo.create_contact(
            session, companies["Vertex Pharmaceuticals"].id, "Dana Reyes", "VP Clinical Ops"
        )

        demo_signals = [
            Signal(
                company_id=companies["Arcellx"].id,
                signal_type="clinical_trial_phase_transition",
                signal_summary="Arcellx advances anito-cel to Phase 3",
                signal_detail={"company_name": "Arcellx", "phase_from": "Phase 2", "phase_to": "Phase 3"},
                first_detected_at=now,
                priority_score=42,
            ),
            Signal(
                signal_type="clinical_trial_new_ind",
                signal_summary="University of Pennsylvania files new IND",
                signal_detail={"sponsor": "University of Pennsylvania", "phase_to": "Phase 1"},
                first_detected_at=now - timedelta(days=1),
                priority_score=30,
            ),
            Signal(
                company_id=companies["Kelly Services"].id,
                signal_type="competitor_job_posting",
                signal_summary='Kelly Services: "Clinical Research Associate II"',
                signal_detail={
                    "job_title": "Clinical Research Associate II",
                    "job_location": "Cambridge, MA",
                    "competitor_firm": "Kelly Services",
                    "job_url": "https://www.linkedin.com/jobs/view/100200300",
                    "job_description": "Kelly Services is hiring a CRA II for a Boston oncology sponsor.",
                    "ats_source": "linkedin",
                },
                first_detected_at=now,
                priority_score=15,
            ),
            Signal(
                company_id=companies["Vertex Pharmaceuticals"].id,
                signal_type="funding_new_award",
                signal_summary="Vertex receives CF Foundation award",
                signal_detail={"company_name": "Vertex Pharmaceuticals"},
                first_detected_at=now - timedelta(hours=3),
                priority_score=55,
                status="claimed",
                claimed_by="rep@example.com",
            ),
        ]
        for signal in demo_signals:
            signals_repo.insert_signal(session, signal)
        print(f"Seeded {len(companies)} companies and {len(demo_signals)} signals")


if __name__ == "__main__":
    main()
