"""Domain layer errors.

Expected verification failures are returned as Outcome values carrying a
FailureReason. The exceptions here are for faults the domain cannot turn
into an answer.
"""


class DomainError(Exception):
    """Base domain error."""

    pass


class SecretUnavailableError(DomainError):
    """An encrypted secret could not be decrypted.

    Callers treat the value as unavailable rather than failing outright.
    """

    pass


class RepositoryError(DomainError):
    """A repository could not complete a read or write."""

    pass
