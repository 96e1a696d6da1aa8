# app/exceptions.py
"""
Domain exceptions raised by the compliance services.
Mapped to HTTP responses by the handlers registered in app/main.py.
"""


class ComplianceError(Exception):
    """Base class for compliance service errors."""


class MissingComplianceEntityError(ComplianceError):
    """The requested check type needs an id (or date) the caller did not supply."""

    def __init__(self, check_type: str, missing: list):
        self.check_type = check_type
        self.missing = missing
        super().__init__(f"'{check_type}' compliance check requires: {', '.join(missing)}")


class ComplianceAuditError(ComplianceError):
    """The audit row could not be written. The gated action must not proceed."""


class ComplianceBlockedError(ComplianceError):
    """A compliance check blocked the operation and no valid override was given."""

    def __init__(self, result, can_override: bool, operation: str):
        self.result = result
        self.can_override = can_override
        self.operation = operation
        message = (result.primary_violation.message if result.primary_violation
                   else "Operation blocked due to compliance violations")
        super().__init__(message)
