"""Structured HTTP errors shared by the services.

Every rejection carries a machine-readable ``code`` next to the human
message so callers can render a specific explanation.
"""
from fastapi import HTTPException, status


def rejection(status_code: int, code: str, message: str) -> HTTPException:
    return HTTPException(status_code=status_code, detail={"code": code, "message": message})


def validation_error(code: str, message: str) -> HTTPException:
    return rejection(status.HTTP_400_BAD_REQUEST, code, message)


def forbidden(code: str, message: str) -> HTTPException:
    return rejection(status.HTTP_403_FORBIDDEN, code, message)


def conflict(code: str, message: str) -> HTTPException:
    return rejection(status.HTTP_409_CONFLICT, code, message)


def not_found(what: str) -> HTTPException:
    return rejection(status.HTTP_404_NOT_FOUND, "not_found", f"{what} not found")


def upstream_error(code: str, message: str) -> HTTPException:
    return rejection(status.HTTP_502_BAD_GATEWAY, code, message)


def unavailable(code: str, message: str) -> HTTPException:
    return rejection(status.HTTP_503_SERVICE_UNAVAILABLE, code, message)
