"""Schemas describing the authenticated caller."""

from pydantic import BaseModel


class CurrentUser(BaseModel):
    """Identity extracted from a bearer token. Anonymous checkouts carry no user."""

    id: str
    tenant_id: str | None = None
