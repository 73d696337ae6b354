from fastapi import HTTPException
from typing import Any, Dict, Optional


class RecordStoreException(HTTPException):
    """Base exception for the Record Store API"""
    def __init__(
        self,
        status_code: int,
        detail: str,
        headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)


class ValidationError(RecordStoreException):
    """Malformed or missing input, detected before touching storage"""
    def __init__(self, message: str):
        super().__init__(status_code=400, detail=message)


class NotFoundException(RecordStoreException):
    """Resource not found"""
    def __init__(self, resource: str, resource_id: Any = None):
        detail = f"{resource} not found"
        if resource_id is not None:
            detail = f"{resource} with id {resource_id} not found"
        super().__init__(status_code=404, detail=detail)


class ConflictError(RecordStoreException):
    """Resource already exists"""
    def __init__(self, message: str):
        super().__init__(status_code=409, detail=message)


class UnauthorizedError(RecordStoreException):
    """User is not authenticated"""
    def __init__(self, message: str = "Not authorized"):
        super().__init__(
            status_code=401,
            detail=message,
            headers={"WWW-Authenticate": "Bearer"}
        )


class ForbiddenError(RecordStoreException):
    """User is authenticated but lacks the required role"""
    def __init__(self, message: str = "Admin access required"):
        super().__init__(status_code=403, detail=message)


class StorageError(RecordStoreException):
    """Database failure. The cause is logged, never sent to the client."""
    def __init__(self, message: str = "Internal server error"):
        super().__init__(status_code=500, detail=message)


class IntegrityWarning(Exception):
    """
    A linked row that should exist is missing or malformed (e.g. a record
    links a track that is gone). Logged by the aggregation layer; the
    response is still returned with whatever could be resolved.
    """
    def __init__(self, entity: str, entity_id: Any, context: str):
        self.entity = entity
        self.entity_id = entity_id
        self.context = context
        super().__init__(f"{entity} {entity_id} {context}")
