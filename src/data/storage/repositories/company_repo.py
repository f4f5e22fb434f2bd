from __future__ import annotations

from sqlalchemy.orm import Session

from data.storage.db import Company


def create_company(
    session: Session,
    name: str,
    domain: str | None = None,
    relationship_warmth: str = "new_prospect",
    size_range: str | None = None,
) -> Company:
    company = Company(
        name=name,
        domain=domain,
        relationship_warmth=relationship_warmth,
        size_range=size_range,
    )
    session.add(company)
    session.commit()
    session.refresh(company)
    return company
