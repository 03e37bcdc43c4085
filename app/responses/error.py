from fastapi import status

from .base import build_response


def failure_response(status_code: int, error: str, message: str, data=None):
    return build_response(status_code, "failure", message=message, data=data, error=error)


def conflict_error(message: str = "Resource already exists"):
    return failure_response(status.HTTP_409_CONFLICT, "conflict", message)


def not_found_error(message: str = "Resource not found"):
    return failure_response(status.HTTP_404_NOT_FOUND, "not_found", message)


def unauthorized_error(message: str = "Invalid credentials"):
    return failure_response(status.HTTP_401_UNAUTHORIZED, "unauthorized", message)


def forbidden_error(message: str = "Access denied"):
    return failure_response(status.HTTP_403_FORBIDDEN, "forbidden", message)


def internal_server_error(message: str = "Internal server error"):
    return failure_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "internal_server_error", message)


def domain_error(exc):
    """Failure envelope for a WarehouseError, with its structured fields under data."""
    return failure_response(exc.status_code, exc.error, exc.message, data=exc.details())
