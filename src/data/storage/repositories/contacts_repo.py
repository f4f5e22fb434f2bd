from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from data.storage.db import Contact, SignalContact


def create_contact(
    session: Session, company_id: str, name: str, title: str | None = None, email: str | None = None
) -> Contact:
    contact = Contact(company_id=company_id, name=name, title=title, email=email)
    session.add(contact)
    session.commit()
    session.refresh(contact)
    return contact


def link_contact(
    session: Session, signal_id: str, contact_id: str, is_primary: bool = False
) -> SignalContact:
    link = SignalContact(signal_id=signal_id, contact_id=contact_id, is_primary=is_primary)
    session.add(link)
    session.commit()
    session.refresh(link)
    return link


def list_company_ids_with_contacts(session: Session) -> set[str]:
    return set(session.execute(select(Contact.company_id).distinct()).scalars())


def list_signal_contact_links(session: Session) -> list[SignalContact]:
    return list(session.execute(select(SignalContact)).scalars())
