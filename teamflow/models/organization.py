import enum
import uuid
from sqlalchemy import Column, String, ForeignKey, Enum
from sqlalchemy.orm import relationship
from teamflow.database import Base, TimestampMixin


class OrganizationPlan(str, enum.Enum):
    FREE = "FREE"
    PRO = "PRO"
    ENTERPRISE = "ENTERPRISE"


class OrganizationStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    SUSPENDED = "SUSPENDED"
    CANCELED = "CANCELED"


class Organization(Base, TimestampMixin):
    __tablename__ = "organization"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(100), nullable=False)
    slug = Column(String(50), unique=True, index=True, nullable=False)  # immutable after creation
    logo = Column(String, nullable=True)
    plan = Column(Enum(OrganizationPlan), nullable=False, default=OrganizationPlan.FREE)
    status = Column(Enum(OrganizationStatus), nullable=False, default=OrganizationStatus.ACTIVE)
    owner_id = Column(String(36), ForeignKey("user.id"), nullable=False, index=True)

    owner = relationship("User")
    members = relationship("OrganizationMember", back_populates="organization")
