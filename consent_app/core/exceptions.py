"""Errors raised by the consent decision engine."""


class ConsentError(Exception):
    """Base exception for consent interactions."""
    pass


class InvalidApplicationError(ConsentError):
    """The application is missing; the interaction cannot continue."""
    
    def __init__(self, message: str = "Invalid application"):
        super().__init__(message)


class EmptyScopeError(ConsentError):
    """Nothing to consent to: grant and deny are disabled."""
    
    def __init__(self, message: str = "No scopes to consent to"):
        super().__init__(message)


class GrantInProgressError(ConsentError):
    """A grant is already outstanding, or the interaction already finished."""
    pass


class ConsentGrantError(ConsentError):
    """The grant service rejected the decision or could not be reached.
    
    Attributes:
        message: User-visible message (server ``msg`` when available)
    """
    
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)
