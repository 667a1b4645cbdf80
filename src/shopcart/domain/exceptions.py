"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the application layer can catch them uniformly and collect their
messages for the caller.
"""


class DomainException(Exception):
    """Base class for all domain errors.

    May carry several human-readable messages, e.g. every reason a
    voucher was refused.
    """

    def __init__(self, *messages: str) -> None:
        super().__init__(*messages)
        self.messages = list(messages)

    def __str__(self) -> str:
        return "; ".join(self.messages)


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class IdentityMismatchError(DomainException):
    """The product addressed by the request disagrees with the payload."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class VoucherIneligibleError(DomainException):
    """The voucher is inactive, expired or disallowed for this customer."""


class PersistenceFailure(DomainException):
    """The store reported that a commit had no effect."""


class ConcurrentModificationError(DomainException):
    """The cart changed in storage after it was loaded."""


class AuthenticationError(DomainException):
    """No verified customer identity is available."""
