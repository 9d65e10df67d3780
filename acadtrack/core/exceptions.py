from typing import Any, Dict, List, Optional

from fastapi import status


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def to_payload(self) -> Dict[str, Any]:
        return {"success": False, "error": self.message}


class ValidationError(ServiceError):
    """Malformed or missing input, or access outside the caller's scope (403)."""

    def __init__(self, message: str, status_code: int = status.HTTP_400_BAD_REQUEST) -> None:
        super().__init__(message, status_code)


class NotFoundError(ServiceError):
    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_404_NOT_FOUND)


class ConflictError(ServiceError):
    def __init__(self, message: str, status_code: int = status.HTTP_409_CONFLICT) -> None:
        super().__init__(message, status_code)


class StoreError(ServiceError):
    """Underlying data store failure; not recoverable inside a request."""

    def __init__(self, message: str = "Data store operation failed") -> None:
        super().__init__(message, status.HTTP_500_INTERNAL_SERVER_ERROR)


class LockedError(ConflictError):
    def __init__(
        self,
        message: str = "Your subject selections are locked. Contact your class teacher to make changes.",
    ) -> None:
        super().__init__(message, status.HTTP_403_FORBIDDEN)


class IncompleteSelectionError(ValidationError):
    """Lock attempted while required elective categories are still empty."""

    def __init__(self, missing: List[str], message: Optional[str] = None) -> None:
        self.missing = list(missing)
        super().__init__(
            message
            or f"Please select all required elective subjects ({', '.join(self.missing)}) before locking."
        )

    def to_payload(self) -> Dict[str, Any]:
        payload = super().to_payload()
        payload["missing"] = self.missing
        return payload
