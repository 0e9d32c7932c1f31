"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidInputError(DomainException):
    """A debt or plan setting violates a range or non-negativity rule"""

    pass


class SnapshotVersionError(DomainException):
    """Persisted plan snapshot has a schema version we cannot read"""

    pass
