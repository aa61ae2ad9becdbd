class DomainError(Exception):
    """Base class for every error a service raises on purpose.

    The web layer maps each subclass to an HTTP status; anything else is
    treated as an unexpected failure.
    """


class ValidationError(DomainError):
    """Bad argument or business rule violation (missing name, capacity out of range...)."""


class NotFoundError(DomainError):
    pass


class AuthenticationError(DomainError):
    """Wrong credentials or no logged-in user."""


class AuthorizationError(DomainError):
    """The current role or ownership does not allow the action."""
