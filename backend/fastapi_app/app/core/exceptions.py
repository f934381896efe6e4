"""
Custom exceptions for the ShieldNav safety API.
"""


class ShieldNavException(Exception):
    """Base exception for all ShieldNav errors."""

    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class NoRouteFoundException(ShieldNavException):
    """Raised when the routing provider returns no candidate routes."""

    def __init__(self, origin: tuple, destination: tuple):
        message = (
            f"No route found between origin ({origin[0]:.4f}, {origin[1]:.4f}) "
            f"and destination ({destination[0]:.4f}, {destination[1]:.4f})."
        )
        super().__init__(message, status_code=404)


class InvalidCoordinatesException(ShieldNavException):
    """Raised when coordinates are invalid or out of bounds."""

    def __init__(self, lat: float, lng: float, reason: str = ""):
        message = f"Invalid coordinates: ({lat}, {lng})"
        if reason:
            message += f". {reason}"
        super().__init__(message, status_code=400)


class ProviderUnavailableException(ShieldNavException):
    """Raised by provider clients when an external service fails or times out."""

    def __init__(self, provider: str, reason: str = ""):
        self.provider = provider
        message = f"Provider '{provider}' unavailable"
        if reason:
            message += f": {reason}"
        super().__init__(message, status_code=503)


class SessionNotFoundException(ShieldNavException):
    """Raised when a navigation session id is unknown or already closed."""

    def __init__(self, session_id: str):
        super().__init__(f"Navigation session '{session_id}' not found.", status_code=404)


class StaleSearchException(ShieldNavException):
    """Raised when a newer route search from the same client superseded this one."""

    def __init__(self, client_id: str):
        message = f"Route search for client '{client_id}' was superseded by a newer search."
        super().__init__(message, status_code=409)


class ConfigurationException(ShieldNavException):
    """Raised when there's a configuration error."""

    def __init__(self, message: str):
        super().__init__(f"Configuration error: {message}", status_code=500)
