from typing import Dict, Optional
from fastapi import HTTPException
from scimpatch.schemas.error import ErrorResponse


class SCIMException(HTTPException):
    def __init__(
        self,
        status_code: int,
        detail: Optional[str] = None,
        scim_type: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.scim_type = scim_type
        super().__init__(
            status_code=status_code,
            detail=detail,
            headers=headers,
        )

    def to_error_response(self) -> ErrorResponse:
        return ErrorResponse(
            status=self.status_code,
            detail=self.detail,
            scim_type=self.scim_type
        )


class UnsupportedPatchRequest(SCIMException):
    def __init__(self, detail: str = "Unsupported PATCH request"):
        super().__init__(
            status_code=400,
            detail=detail,
            scim_type="invalidPath"
        )


class MalformedFilter(SCIMException):
    def __init__(self, filter_expression: str, reason: str):
        self.filter_expression = filter_expression
        super().__init__(
            status_code=400,
            detail=f"Invalid filter expression '{filter_expression}': {reason}",
            scim_type="invalidFilter"
        )


class InvalidSyntax(SCIMException):
    def __init__(self, detail: str):
        super().__init__(
            status_code=400,
            detail=detail,
            scim_type="invalidSyntax"
        )


class InvalidCredentials(SCIMException):
    def __init__(self, detail: str = "Invalid or missing authentication credentials"):
        super().__init__(
            status_code=401,
            detail=detail,
            headers={"WWW-Authenticate": 'Basic realm="SCIM API", Bearer realm="SCIM API"'},
        )
