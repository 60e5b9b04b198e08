"""Consent service exceptions for error handling."""


class ConsentBackendError(Exception):
    """Base exception for all consent service calls."""
    pass


class ConsentAPIError(ConsentBackendError):
    """HTTP error from the consent service.
    
    Attributes:
        status_code: HTTP status code
        message: Error message from response
        endpoint: API endpoint that failed
    """
    
    def __init__(self, status_code: int, message: str, endpoint: str):
        self.status_code = status_code
        self.message = message
        self.endpoint = endpoint
        super().__init__(f"[{status_code}] {endpoint}: {message}")


class ConsentConnectionError(ConsentBackendError):
    """The call could not complete (connection refused, timeout, bad JSON)."""
    
    def __init__(self, message: str, endpoint: str):
        self.message = message
        self.endpoint = endpoint
        super().__init__(f"{endpoint}: {message}")


class ConsentServiceError(ConsentBackendError):
    """The service answered with ``status: "error"``.
    
    Attributes:
        message: Server-provided ``msg`` (user-visible)
    """
    
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)
