"""Mapping of core errors onto HTTP responses."""

from fastapi import HTTPException

from ..errors import (
    ChatBusyError,
    ClappError,
    CredentialSyncError,
    ProcessError,
    UnknownAgentError,
    ValidationError,
)


def to_http_error(error: Exception) -> HTTPException:
    if isinstance(error, HTTPException):
        return error
    if isinstance(error, ValidationError):
        return HTTPException(
            status_code=422, detail={"detail": error.message, "field": error.field}
        )
    if isinstance(error, UnknownAgentError):
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, ChatBusyError):
        return HTTPException(status_code=409, detail=str(error))
    if isinstance(error, (CredentialSyncError, ProcessError)):
        return HTTPException(status_code=502, detail=str(error))
    if isinstance(error, ClappError):
        return HTTPException(status_code=400, detail=str(error))
    return HTTPException(status_code=500, detail=str(error))
