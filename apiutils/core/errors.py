from http import HTTPStatus
from typing import Optional

from fastapi import HTTPException


class AppError(HTTPException):
    """Application error carrying an HTTP status and a client-facing message.

    Subclasses FastAPI's HTTPException so it can be raised from a route, and
    returned by helpers (such as the validator) that report rather than raise.
    """

    def __init__(self, status_code: int, message: str, cause: Optional[BaseException] = None):
        super().__init__(status_code=int(status_code), detail=message)
        self.message = message
        self.cause = cause

    @property
    def status_text(self) -> str:
        try:
            return HTTPStatus(self.status_code).phrase
        except ValueError:
            return ""

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"AppError(status_code={self.status_code!r}, message={self.message!r})"


def bad_request(message: str, cause: Optional[BaseException] = None) -> AppError:
    return AppError(HTTPStatus.BAD_REQUEST, message, cause)


def not_found(message: str) -> AppError:
    return AppError(HTTPStatus.NOT_FOUND, message)
