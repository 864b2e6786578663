"""Fee type master (Tuition, Bus, Exam) and its class scoping."""

import uuid

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Numeric, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from sfms.core.models._common import utcnow
from sfms.db.session import Base


class FeeType(Base):
    """
    Named charge with a default amount. scheduled_date is the activation date:
    until it arrives the fee counts as assigned but not yet due.
    """

    __tablename__ = "fee_types"
    __table_args__ = (
        CheckConstraint("default_amount >= 0", name="chk_fee_type_default_amount"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    school_id = Column(Uuid, ForeignKey("schools.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    default_amount = Column(Numeric(12, 2), nullable=False, default=0)
    scheduled_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    class_links = relationship("FeeTypeClass", back_populates="fee_type", cascade="all, delete-orphan")


class FeeTypeClass(Base):
    """Link table: a fee type applies to these classes."""

    __tablename__ = "fee_type_classes"
    __table_args__ = (
        UniqueConstraint("fee_type_id", "class_id", name="uq_fee_type_class"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    school_id = Column(Uuid, ForeignKey("schools.id", ondelete="CASCADE"), nullable=False, index=True)
    fee_type_id = Column(Uuid, ForeignKey("fee_types.id", ondelete="CASCADE"), nullable=False)
    class_id = Column(Uuid, ForeignKey("classes.id", ondelete="CASCADE"), nullable=False)

    fee_type = relationship("FeeType", back_populates="class_links")
    school_class = relationship("SchoolClass")
