from .patch_operation import PatchOp, PatchOperation, PatchOperationParser, parse_patch_operation
from .authorizer import AuthorizeApiRequest, hash_token
from .applier import PatchApplier, LoggingPatchApplier
from .company import CompanyService

__all__ = [
    "PatchOp",
    "PatchOperation",
    "PatchOperationParser",
    "parse_patch_operation",
    "AuthorizeApiRequest",
    "hash_token",
    "PatchApplier",
    "LoggingPatchApplier",
    "CompanyService",
]
