from enum import Enum


class AdministratorRole(str, Enum):
    OWNER = "OWNER"
    ADMIN = "ADMIN"
    ACCOUNTANT = "ACCOUNTANT"


class StudentStatus(str, Enum):
    active = "active"
    inactive = "inactive"


class PaymentMode(str, Enum):
    cash = "cash"
    upi = "upi"
    bank_transfer = "bank_transfer"
    cheque = "cheque"
    dd = "dd"
    online_portal = "online_portal"
    other = "other"


class FeeStatus(str, Enum):
    paid = "paid"
    partially_paid = "partially_paid"
    unpaid = "unpaid"
    no_fees_due = "no_fees_due"


class FeeView(str, Enum):
    """Which fee total a report compares payments against."""

    total = "total"  # every assigned line
    due = "due"  # lines whose scheduled date has arrived


class ExportFormat(str, Enum):
    csv = "csv"
    xlsx = "xlsx"
