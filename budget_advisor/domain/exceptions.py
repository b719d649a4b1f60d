"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class NoAccountError(DomainException):
    """User has no linked account to analyze"""

    pass


class InvalidPeriodError(DomainException):
    """Analysis window or reference month is invalid"""

    pass


class ComputationError(DomainException):
    """Unexpected failure while computing a recommendation"""

    def __init__(self, step: str, message: str):
        super().__init__(f"{step}: {message}")
        self.step = step
