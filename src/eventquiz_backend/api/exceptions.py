import re
from typing import Any, Dict, Optional
from fastapi import HTTPException, status

class NotFoundException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_404_NOT_FOUND
        self.detail = detail or "Not found"

class ForbiddenException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_403_FORBIDDEN
        self.detail = detail or "Forbidden"

class BadRequestException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_400_BAD_REQUEST
        self.detail = detail or "Bad request"

class UnauthorizedException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers or {"WWW-Authenticate": "Bearer"}
        self.status_code = status.HTTP_401_UNAUTHORIZED
        self.detail = detail or "Unauthorized"

class ConflictException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_409_CONFLICT
        self.detail = detail or "Conflict"

class InternalServerException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        self.detail = detail or "Internal server error"


class AuthorizationDenied(ForbiddenException):
    """No policy rule permitted the operation for this principal."""

    def __init__(self, table: str, action: str, detail: Any = None):
        self.table = table
        self.action = action
        super().__init__(detail=detail or {"entity": table, "action": action, "reason": "not permitted"})

class IntegrityViolation(ConflictException):
    """A uniqueness or foreign key invariant would be broken."""

class ProvisioningFailure(InternalServerException):
    """The profile of a newly created principal could not be inserted.

    The principal creation is rolled back as a whole; it is never retried.
    """


def integrity_message(error: Exception) -> str:
    error_msg = str(error.orig) if hasattr(error, 'orig') else str(error)
    if 'DETAIL:' in error_msg:
        main_error = error_msg.split('\n')[0]
        detail_part = error_msg.split('DETAIL:')[1].split('\n')[0].strip()
        return f"{main_error}. {detail_part}"
    return error_msg.split('\n')[0]


_SQLITE_CONSTRAINT = re.compile(r'^(?:UNIQUE|NOT NULL) constraint failed: "?(\w+)"?\.')

def violated_table(error: Exception) -> Optional[str]:
    """Table whose constraint rejected the statement, when the driver reports it."""
    orig = getattr(error, 'orig', None)
    table_name = getattr(getattr(orig, 'diag', None), 'table_name', None)
    if table_name:
        return table_name
    match = _SQLITE_CONSTRAINT.match(str(orig))
    return match.group(1) if match else None
