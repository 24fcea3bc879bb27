from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Tuple, Union

from scimpatch.exceptions import UnsupportedPatchRequest
from scimpatch.utils import logger
from scimpatch.utils.schema_tree import SchemaConfig, StoragePath, resolve_storage_path
from scimpatch.utils.scim_path_parser import ScimPath, format_path_scim, parse_path_scim


PatchValue = Optional[Union[str, Tuple[str, ...]]]


class PatchOp(str, Enum):
    ADD = "add"
    REPLACE = "replace"
    REMOVE = "remove"


@dataclass(frozen=True)
class PatchOperation:
    """A single normalized PATCH operation with its resolved storage path."""
    op: PatchOp
    path_scim: ScimPath
    path_sp: Optional[StoragePath]
    value: PatchValue = None
    storage_attribute: Any = None

    @property
    def path(self) -> str:
        return format_path_scim(self.path_scim)

    @property
    def is_resolved(self) -> bool:
        return self.path_sp is not None


class PatchOperationParser:
    """
    Turns raw ``(op, path, value)`` triples into ``PatchOperation`` records.

    Complex values must already be split into single-value operations, so a
    value is a string, a list of strings, or None.
    """

    def __init__(self, schema_config: SchemaConfig):
        self.schema_config = schema_config

    def parse(self, op: Optional[str], path: Optional[str], value: Any = None) -> PatchOperation:
        patch_op = self._parse_op(op)
        if not path:
            raise UnsupportedPatchRequest(f"Operation '{patch_op.value}' requires a path")
        self._validate_value(value)

        path_scim = parse_path_scim(path, self.schema_config.known_attributes)
        path_sp = resolve_storage_path(
            path_scim,
            self.schema_config.mutable_attributes,
            self.schema_config.filter_attributes,
        )
        if path_sp is None:
            logger.warning(f"Path '{path}' does not resolve against the mutable attribute schema")

        operation = PatchOperation(
            op=patch_op,
            path_scim=path_scim,
            path_sp=path_sp,
            value=tuple(value) if isinstance(value, list) else value,
            storage_attribute=self.schema_config.storage_attribute(path_sp),
        )
        logger.debug(f"Parsed PATCH operation: {operation}")
        return operation

    @staticmethod
    def _parse_op(op: Optional[str]) -> PatchOp:
        try:
            return PatchOp((op or "").lower())
        except ValueError:
            allowed_ops = [member.value for member in PatchOp]
            raise UnsupportedPatchRequest(f"Operation must be one of {allowed_ops}, got '{op}'")

    @staticmethod
    def _validate_value(value: Any) -> None:
        if value is None or isinstance(value, str):
            return
        if isinstance(value, list) and all(isinstance(item, str) for item in value):
            return
        raise UnsupportedPatchRequest("PATCH value must be a string or a list of strings")


def parse_patch_operation(op: Optional[str], path: Optional[str], value: Any, schema_config: SchemaConfig) -> PatchOperation:
    return PatchOperationParser(schema_config).parse(op, path, value)
