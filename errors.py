"""
Error taxonomy shared by extraction, storage and the RPC boundary.

Every error carries a stable ``code`` and renders a ``{code, message}``
payload so the UI can pick a specific remediation.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class ColderError(Exception):
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def details(self) -> Dict[str, Any]:
        return {}

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"code": self.code, "message": self.message}
        payload.update(self.details())
        return payload


class InvalidPageError(ColderError):
    code = "INVALID_PAGE"

    def __init__(self, url: str) -> None:
        super().__init__(f"Not a LinkedIn profile page: {url}")
        self.url = url

    def details(self) -> Dict[str, Any]:
        return {"url": self.url}


class MissingMandatoryFieldError(ColderError):
    code = "MISSING_MANDATORY_FIELD"

    def __init__(self, field: str, missing_fields: List[str], quality: str) -> None:
        super().__init__(f"Unable to extract profile {field}")
        self.field = field
        self.missing_fields = list(missing_fields)
        self.quality = quality

    def details(self) -> Dict[str, Any]:
        return {"missingFields": self.missing_fields, "quality": self.quality}


class ExtractionFailedError(ColderError):
    code = "EXTRACTION_FAILED"

    def __init__(
        self,
        attempts: int,
        missing_fields: List[str],
        quality: str,
        last_error: Optional[Exception] = None,
    ) -> None:
        reason = f": {last_error}" if last_error else ""
        super().__init__(f"Failed to extract profile after {attempts} attempts{reason}")
        self.attempts = attempts
        self.missing_fields = list(missing_fields)
        self.quality = quality
        self.last_error = last_error

    def details(self) -> Dict[str, Any]:
        return {
            "attempts": self.attempts,
            "missingFields": self.missing_fields,
            "quality": self.quality,
        }


class ExtractionCancelledError(ColderError):
    code = "EXTRACTION_CANCELLED"

    def __init__(self, attempt: int) -> None:
        super().__init__(f"Extraction cancelled before attempt {attempt}")
        self.attempt = attempt


class StorageQuotaExceededError(ColderError):
    code = "STORAGE_QUOTA_EXCEEDED"

    def __init__(self, domain: str, used: int, capacity: int, requested: int) -> None:
        super().__init__(
            f"Storage quota would be exceeded in '{domain}' storage "
            f"({used} + {requested} > {capacity} bytes); clear some data first"
        )
        self.domain = domain
        self.used = used
        self.capacity = capacity
        self.requested = requested

    def details(self) -> Dict[str, Any]:
        return {
            "domain": self.domain,
            "used": self.used,
            "capacity": self.capacity,
            "requested": self.requested,
        }


class StorageAccessError(ColderError):
    code = "STORAGE_ACCESS_FAILURE"


class AnalysisServiceError(ColderError):
    code = "ANALYSIS_FAILED"

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code

    def details(self) -> Dict[str, Any]:
        return {"statusCode": self.status_code} if self.status_code is not None else {}


class InvalidRequestError(ColderError):
    code = "INVALID_REQUEST"
