"""Students and their fee-type assignments."""

import uuid

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, Numeric, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from sfms.core.enums import StudentStatus
from sfms.core.models._common import utcnow
from sfms.db.session import Base


class Student(Base):
    """
    total_fees is a snapshot of the assigned total written at registration/edit.
    Reports that need current figures recompute from fee_links and payments.
    """

    __tablename__ = "students"
    __table_args__ = (
        CheckConstraint("status IN ('active','inactive')", name="chk_student_status"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    school_id = Column(Uuid, ForeignKey("schools.id", ondelete="CASCADE"), nullable=False, index=True)
    class_id = Column(Uuid, ForeignKey("classes.id", ondelete="RESTRICT"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    roll_no = Column(String(50), nullable=False)
    academic_year = Column(String(20), nullable=False)
    status = Column(String(20), nullable=False, default=StudentStatus.active.value)
    is_passed_out = Column(Boolean, nullable=False, default=False)
    total_fees = Column(Numeric(12, 2), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    school_class = relationship("SchoolClass")
    fee_links = relationship("StudentFeeType", back_populates="student", cascade="all, delete-orphan")
    payments = relationship("Payment", back_populates="student")


class StudentFeeType(Base):
    """
    Fee type assigned to a student. assigned_amount NULL means "use the fee type default".
    Replaced wholesale when the student is edited.
    """

    __tablename__ = "student_fee_types"
    __table_args__ = (
        UniqueConstraint("student_id", "fee_type_id", name="uq_student_fee_type"),
        CheckConstraint("discount >= 0", name="chk_student_fee_type_discount"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    school_id = Column(Uuid, ForeignKey("schools.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(Uuid, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    fee_type_id = Column(Uuid, ForeignKey("fee_types.id", ondelete="RESTRICT"), nullable=False)
    assigned_amount = Column(Numeric(12, 2), nullable=True)
    discount = Column(Numeric(12, 2), nullable=False, default=0)
    discount_description = Column(Text, nullable=True)

    student = relationship("Student", back_populates="fee_links")
    fee_type = relationship("FeeType")
