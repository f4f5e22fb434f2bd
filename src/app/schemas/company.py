from __future__ import annotations

from pydantic import BaseModel


class CompanyBrief(BaseModel):
    id: str
    name: str
    domain: str | None
    industry: str | None = None
    relationship_warmth: str = "new_prospect"
    size_range: str | None

    model_config = {"from_attributes": True}
