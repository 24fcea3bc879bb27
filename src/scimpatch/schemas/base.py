from typing import List, Optional, Union
from pydantic import BaseModel, ConfigDict, field_validator
from enum import Enum


class SCIMSchemaUri(str, Enum):
    ERROR = "urn:ietf:params:scim:api:messages:2.0:Error"
    PATCH_OP = "urn:ietf:params:scim:api:messages:2.0:PatchOp"


class PatchOperationRequest(BaseModel):
    """One entry of ``Operations`` as sent by the identity provider."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    op: str
    path: Optional[str] = None
    value: Optional[Union[str, List[str]]] = None

    @field_validator("value", mode="before")
    def stringify_scalars(cls, v):
        # Entra ID sends booleans for "active"
        if isinstance(v, bool):
            return "true" if v else "false"
        if isinstance(v, (int, float)):
            return str(v)
        return v


class PatchRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    schemas: List[str] = [SCIMSchemaUri.PATCH_OP.value]
    Operations: List[PatchOperationRequest]

