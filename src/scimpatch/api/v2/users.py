from typing import List
from fastapi import APIRouter, Body, Path, Response, status
from scimpatch.schemas import PatchRequest, ErrorResponse, SCIMSchemaUri
from scimpatch.dependencies import AppSettings, Applier, CurrentCompany, PatchParser, RequestId
from scimpatch.exceptions import UnsupportedPatchRequest
from scimpatch.services import PatchOperation
from scimpatch.utils import logger

router = APIRouter(tags=["Users"])


@router.patch("/Users/{user_id}", status_code=status.HTTP_204_NO_CONTENT, responses={400: {"model": ErrorResponse, "description": "Invalid patch"}, 401: {"model": ErrorResponse, "description": "Invalid credentials"}})
async def patch_user(
    user_id: str = Path(..., description="User ID"),
    patch_request: PatchRequest = Body(...),
    company: CurrentCompany = None,
    parser: PatchParser = None,
    applier: Applier = None,
    request_id: RequestId = None,
    config: AppSettings = None,
) -> Response:
    logger.info(f"Patching user: {user_id} (company: {company.subdomain}, request_id: {request_id})")

    if SCIMSchemaUri.PATCH_OP.value not in patch_request.schemas:
        raise UnsupportedPatchRequest("Invalid schema for PATCH request")

    if config.debug or config.log_level == "DEBUG":
        logger.debug(f"User PATCH request payload: {patch_request.model_dump_json(indent=2)}")

    operations: List[PatchOperation] = []
    for idx, raw in enumerate(patch_request.Operations):
        operation = parser.parse(raw.op, raw.path, raw.value)
        if not operation.is_resolved:
            raise UnsupportedPatchRequest(f"Operation {idx + 1}: attribute '{raw.path}' is not mutable")
        operations.append(operation)

    await applier.apply(company, user_id, operations)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
