"""
Service layer exceptions.
"""


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(
        self,
        message: str,
        service_id: str | None = None,
        url: str | None = None,
    ):
        self.service_id = service_id
        self.url = url
        super().__init__(message)


class TransportError(ServiceError):
    """Network failure or non-2xx response."""

    def __init__(
        self,
        message: str,
        service_id: str | None = None,
        url: str | None = None,
        status_code: int | None = None,
    ):
        self.status_code = status_code
        super().__init__(message, service_id=service_id, url=url)


class RequestTimeoutError(TransportError):
    """Request timed out."""

    def __init__(self, service_id: str, timeout: float, url: str | None = None):
        self.timeout = timeout
        super().__init__(
            f"Request to service '{service_id}' timed out after {timeout}s",
            service_id=service_id,
            url=url,
        )


class ParseError(ServiceError):
    """Response body is not valid JSON."""

    pass
