from sfms.core.models.school import School, SchoolAdministrator
from sfms.core.models.class_model import SchoolClass
from sfms.core.models.fee_type import FeeType, FeeTypeClass
from sfms.core.models.student import Student, StudentFeeType
from sfms.core.models.payment import Payment

__all__ = [
    "School",
    "SchoolAdministrator",
    "SchoolClass",
    "FeeType",
    "FeeTypeClass",
    "Student",
    "StudentFeeType",
    "Payment",
]
