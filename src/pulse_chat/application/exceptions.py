from __future__ import annotations


class AppError(Exception):
    """Base application error, rendered as ``{"detail": ...}``."""

    status_code = 400

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(detail)


class NotFoundError(AppError):
    status_code = 404


class ForbiddenError(AppError):
    status_code = 403


class ValidationError(AppError):
    status_code = 422


class AuthenticationError(AppError):
    status_code = 401
