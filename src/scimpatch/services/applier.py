from typing import Protocol, Sequence
from scimpatch.models import Company
from scimpatch.utils import logger
from .patch_operation import PatchOperation


class PatchApplier(Protocol):
    """Applies normalized PATCH operations to a stored resource."""

    async def apply(self, company: Company, resource_id: str, operations: Sequence[PatchOperation]) -> None:
        ...


class LoggingPatchApplier:
    """Default applier: records what would change without touching storage."""

    async def apply(self, company: Company, resource_id: str, operations: Sequence[PatchOperation]) -> None:
        for operation in operations:
            logger.info(
                f"{company.subdomain}/{resource_id}: {operation.op.value} "
                f"{operation.path} -> {operation.storage_attribute} = {operation.value!r}"
            )
