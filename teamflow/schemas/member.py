from datetime import datetime
from typing import List, Optional
from pydantic import ConfigDict, model_validator
from teamflow.models.organization_member import MemberRole, MemberStatus
from teamflow.schemas.common import CamelModel, PaginationMeta


class MemberResponse(CamelModel):
    id: str
    user_id: str
    organization_id: str
    role: MemberRole
    status: MemberStatus
    joined_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class MemberList(CamelModel):
    items: List[MemberResponse]
    pagination: PaginationMeta


class MemberPatch(CamelModel):
    """Admin change to a membership. Only role and status can be set."""
    role: Optional[MemberRole] = None
    status: Optional[MemberStatus] = None

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def check_not_empty(self):
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided for update")
        for field in self.model_fields_set:
            if getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self
