"""HTTP-aware error types raised by the services and dependencies.

Every error is an ``HTTPException`` so routes can let it propagate unchanged;
``agenda.main`` renders all of them as ``{"error": <detail>}``.
"""

from fastapi import HTTPException, status


class UnauthorizedError(HTTPException):
    def __init__(self, detail: str = 'Unauthorized.') -> None:
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class ValidationFailedError(HTTPException):
    def __init__(self, detail: str) -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class ConflictError(HTTPException):
    """Duplicate natural key, e.g. an e-mail already registered.

    Reported as 400 rather than 409 to keep the signup contract stable.
    """

    def __init__(self, detail: str) -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class NotFoundError(HTTPException):
    # Also used for records owned by someone else.
    def __init__(self, detail: str) -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)
