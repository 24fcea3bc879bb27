from .logging import logger, setup_logging
from .scim_path_parser import parse_path_scim, format_path_scim, parse_filter, ScimPath, PathFilter
from .schema_tree import (
    Leaf,
    Mapping,
    Sequence,
    SchemaConfig,
    build_tree,
    dig,
    locate,
    resolve_storage_path,
)
from .encoder import encode_token, decode_token

__all__ = [
    "logger",
    "setup_logging",
    "parse_path_scim",
    "format_path_scim",
    "parse_filter",
    "ScimPath",
    "PathFilter",
    "Leaf",
    "Mapping",
    "Sequence",
    "SchemaConfig",
    "build_tree",
    "dig",
    "locate",
    "resolve_storage_path",
    "encode_token",
    "decode_token",
]
