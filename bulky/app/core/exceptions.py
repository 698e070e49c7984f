"""
Unified base exception classes for all services.

Each service extends ServiceError with its own base (e.g. KuponServiceError)
so routers can catch one type per module and map it to an HTTP response.
"""


class ServiceError(Exception):
    """Base exception for all service-layer errors."""

    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class NotFoundError(ServiceError):
    def __init__(self, message: str = "data tidak ditemukan"):
        super().__init__(message, 404)


class ConflictError(ServiceError):
    def __init__(self, message: str):
        super().__init__(message, 409)


class AuthError(ServiceError):
    def __init__(self, message: str):
        super().__init__(message, 401)


class ForbiddenError(ServiceError):
    def __init__(self, message: str = "akses ditolak"):
        super().__init__(message, 403)
