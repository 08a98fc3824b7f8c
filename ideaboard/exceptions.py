"""
Idea Board errors.

Primary-path errors (validation, conflict, not-found, store and task-service
failures) surface to the caller. ``DependencyError`` describes a failed side
effect (messaging, points) and is only ever logged.

Usage:
    from ideaboard.exceptions import NotFoundError

    if not docs:
        raise NotFoundError("No vote found to remove")
"""

from typing import Any, Dict, Optional


class IdeaBoardError(Exception):
    """Base exception for all idea board errors"""

    status_code = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }


# ============================================
# Caller errors
# ============================================

class ValidationError(IdeaBoardError):
    """Missing required fields or an invalid enum value"""

    status_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class ConflictError(IdeaBoardError):
    """Duplicate vote by the same user on the same idea"""

    status_code = 409

    def __init__(self, message: str = "User has already voted on this idea", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="CONFLICT", details=details)


class NotFoundError(IdeaBoardError):
    """Idea or vote reference does not exist"""

    status_code = 404

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="NOT_FOUND", details=details)


# ============================================
# Collaborator errors
# ============================================

class DependencyError(IdeaBoardError):
    """A best-effort side effect (messaging, points) failed"""

    def __init__(self, collaborator: str, message: str):
        super().__init__(
            f"{collaborator} failed: {message}",
            code="DEPENDENCY_ERROR",
            details={"collaborator": collaborator},
        )


class PropagatedError(IdeaBoardError):
    """A primary-path failure re-raised with operation context"""

    def __init__(self, operation: str, message: str):
        super().__init__(
            f"Failed to {operation}: {message}",
            code="OPERATION_FAILED",
            details={"operation": operation},
        )
        self.operation = operation


# ============================================
# Store errors
# ============================================

class StoreError(IdeaBoardError):
    """The document store could not complete an operation"""

    def __init__(self, message: str, collection: Optional[str] = None):
        super().__init__(message, code="STORE_ERROR", details={"collection": collection})
        self.collection = collection


class DocumentNotFoundError(StoreError):
    """Requested document does not exist"""

    def __init__(self, collection: str, document_id: str):
        super().__init__(f"Document {document_id} not found in {collection}", collection)
        self.document_id = document_id


class StaleDocumentError(StoreError):
    """Versioned write lost against a concurrent writer"""

    def __init__(self, collection: str, document_id: str, expected_version: int):
        super().__init__(
            f"Document {document_id} in {collection} changed since version {expected_version}",
            collection,
        )
        self.document_id = document_id
        self.expected_version = expected_version


class DuplicateDocumentError(StoreError):
    """Write violated a uniqueness rule"""
