"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidPaybackPlanError(DomainException):
    """Payback plan data is incomplete or inconsistent"""

    pass


class PlanNotActiveError(DomainException):
    """Payback plan cannot generate paybacks in its current state"""

    pass
