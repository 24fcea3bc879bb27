from .base import (
    SCIMSchemaUri,
    PatchOperationRequest,
    PatchRequest,
)
from .error import ErrorResponse

__all__ = [
    "SCIMSchemaUri",
    "PatchOperationRequest",
    "PatchRequest",
    "ErrorResponse",
]
