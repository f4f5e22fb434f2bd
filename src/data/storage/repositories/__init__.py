from data.storage.repositories import (
    company_repo,
    competitor_repo,
    contacts_repo,
    signals_repo,
)

__all__ = [
    "company_repo",
    "competitor_repo",
    "contacts_repo",
    "signals_repo",
]
