"""Exceptions for the paper graph query layer."""


class PaperGraphError(Exception):
    """Base exception for all paper graph errors."""


class AuthorNotFound(PaperGraphError):
    """No author matches the requested name."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"No such author: {name}")


class PaperNotFound(PaperGraphError):
    """No paper matches the requested title."""

    def __init__(self, title: str) -> None:
        self.title = title
        super().__init__(f"No such paper: {title}")


class MalformedQuery(PaperGraphError):
    """Boolean search query cannot be compiled."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Malformed query: {reason}")


class StoreUnavailable(PaperGraphError):
    """Document store failed or returned inconsistent data."""

    def __init__(self, cause: str) -> None:
        self.cause = cause
        super().__init__(f"Document store unavailable: {cause}")


class StoreInconsistency(StoreUnavailable):
    """Store answered, but its records contradict each other.

    Not transient: retrying the same call gives the same answer.
    """
