"""
Exceptions raised by the outbound integration adapters (AI completions, email).

Handlers turn these into short, user-safe messages; the original error text
is only ever logged.
"""


class UpstreamError(Exception):
    """Base exception for third-party service failures"""

    def __init__(self, message: str, service: str = None):
        self.message = message
        self.service = service
        super().__init__(message)


class UpstreamConfigError(UpstreamError):
    """Raised when a service is not configured or rejects our credentials"""
    pass


class UpstreamUnavailable(UpstreamError):
    """Raised when a service times out, is unreachable, or returns an error"""
    pass


class UpstreamRejected(UpstreamError):
    """Raised when a service refuses the request itself; sending it again will not help"""
    pass
