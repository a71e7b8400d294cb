import enum
import uuid
from sqlalchemy import Column, String, ForeignKey, DateTime, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from teamflow.database import Base, TimestampMixin
from teamflow.core.tenant_scope import TenantScoped


class MemberRole(str, enum.Enum):
    OWNER = "OWNER"
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"
    GUEST = "GUEST"


class MemberStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    INVITED = "INVITED"
    SUSPENDED = "SUSPENDED"


class OrganizationMember(Base, TenantScoped, TimestampMixin):
    """Membership of a user in an organization. Never deleted; status models removal."""
    __tablename__ = "organization_member"
    __table_args__ = (
        UniqueConstraint("user_id", "organization_id", name="uq_organization_member_user_org"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(Enum(MemberRole), nullable=False, default=MemberRole.MEMBER)
    status = Column(Enum(MemberStatus), nullable=False, default=MemberStatus.INVITED)
    joined_at = Column(DateTime(timezone=True), nullable=True)

    user = relationship("User", back_populates="memberships")
    organization = relationship("Organization", back_populates="members")
