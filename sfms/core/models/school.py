"""School (tenant) and the administrators linked to it."""

import uuid

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import relationship

from sfms.core.enums import AdministratorRole
from sfms.core.models._common import utcnow
from sfms.db.session import Base


class School(Base):
    """Every other row is scoped by school_id."""

    __tablename__ = "schools"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    administrators = relationship("SchoolAdministrator", back_populates="school", cascade="all, delete-orphan")


class SchoolAdministrator(Base):
    """
    Links an identity-provider user (user_id = token subject) to one school.
    A user without a row here has no school and every school-scoped endpoint is disabled.
    """

    __tablename__ = "school_administrators"
    __table_args__ = (
        CheckConstraint(
            "role IN ('OWNER','ADMIN','ACCOUNTANT')",
            name="chk_school_administrator_role",
        ),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(String(255), nullable=False, unique=True, index=True)
    school_id = Column(Uuid, ForeignKey("schools.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(String(20), nullable=False, default=AdministratorRole.ADMIN.value)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    school = relationship("School", back_populates="administrators")
