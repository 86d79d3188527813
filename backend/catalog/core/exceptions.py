from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    def __init__(self, detail: str = "Resource not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class BadRequestError(HTTPException):
    def __init__(self, detail: str = "Bad request"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class ValidationError(BadRequestError):
    """Input rejected before or during persistence.

    ``errors`` carries per-field messages; it is rendered next to ``message``
    in the response body when non-empty.
    """

    def __init__(self, detail: str = "Validation failed", errors: list[str] | None = None):
        super().__init__(detail=detail)
        self.errors = errors or []


class UnauthorizedError(HTTPException):
    def __init__(self, detail: str = "Not authenticated"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class ExternalServiceError(Exception):
    """A call to a third-party service failed.

    Never mapped to an HTTP response: callers that talk to external
    services catch it and decide whether the failure matters.
    """

    def __init__(self, service: str, detail: str):
        super().__init__(f"{service}: {detail}")
        self.service = service
        self.detail = detail
