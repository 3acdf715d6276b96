"""
Structured HTTP errors for the service layer.

Every domain failure is an HTTPException whose detail carries a human message
plus field-level messages, so clients can attach errors to form fields:

    {"message": "...", "errors": {"group_id": ["..."]}}
"""
from __future__ import annotations

from typing import Optional

from fastapi import HTTPException, status


def status_error(status_code: int, message: str, field: Optional[str] = None) -> HTTPException:
    errors = {field: [message]} if field else {}
    return HTTPException(status_code=status_code, detail={"message": message, "errors": errors})


def validation_error(message: str, field: Optional[str] = None) -> HTTPException:
    return status_error(status.HTTP_400_BAD_REQUEST, message, field)


def not_found(message: str, field: Optional[str] = None) -> HTTPException:
    return status_error(status.HTTP_404_NOT_FOUND, message, field)


def forbidden(message: str, field: Optional[str] = None) -> HTTPException:
    return status_error(status.HTTP_403_FORBIDDEN, message, field)


def conflict(message: str, field: Optional[str] = None) -> HTTPException:
    return status_error(status.HTTP_409_CONFLICT, message, field)
