from datetime import datetime
from typing import List, Optional
from pydantic import ConfigDict, Field, HttpUrl, model_validator
from teamflow.models.organization import OrganizationPlan, OrganizationStatus
from teamflow.schemas.common import CamelModel, PaginationMeta

# URL-safe: lowercase letters, numbers and hyphens
SLUG_PATTERN = r"^[a-z0-9-]+$"


class OrganizationCreate(CamelModel):
    name: str = Field(..., min_length=2, max_length=100)
    slug: str = Field(..., min_length=3, max_length=50, pattern=SLUG_PATTERN)
    logo: Optional[HttpUrl] = None


class OrganizationPatch(CamelModel):
    """
    Partial update of an organization.

    Only the fields declared here can change. Anything else, including
    the immutable slug, is rejected.
    """
    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    logo: Optional[HttpUrl] = None

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def check_not_empty(self):
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided for update")
        if "name" in self.model_fields_set and self.name is None:
            raise ValueError("Organization name cannot be null")
        return self


class OrganizationResponse(CamelModel):
    id: str
    name: str
    slug: str
    logo: Optional[str] = None
    plan: OrganizationPlan
    status: OrganizationStatus
    owner_id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class OrganizationList(CamelModel):
    items: List[OrganizationResponse]
    pagination: PaginationMeta
