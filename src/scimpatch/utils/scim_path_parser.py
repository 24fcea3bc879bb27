"""
SCIM Path Parser for PATCH operation paths.

Supports:
- Simple paths: "userName", "name.givenName"
- ValuePath with a single filter: "emails[type eq \"work\"].value"
- Known attribute names containing dots or colons, e.g.
  "urn:ietf:params:scim:schemas:extension:enterprise:2.0:User:department"
"""

import re
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from ..exceptions import MalformedFilter, UnsupportedPatchRequest
from .logging import logger


FILTER_PATTERN = re.compile(r"\[(.+?)\]")

# Sub-attributes follow a '.', or a ':' after a schema URN
SEPARATORS = (".", ":")


@dataclass(frozen=True)
class PathFilter:
    """Filter selecting one element of a multi-valued attribute"""
    attribute: str  # e.g. "type"
    operator: str  # e.g. "eq"
    parameter: str  # e.g. "work", quotes removed


@dataclass(frozen=True)
class ScimPath:
    """Represents a parsed SCIM path"""
    attribute: str  # Main attribute name (e.g., "emails", "name")
    rest_path: Tuple[str, ...] = ()  # Sub-attributes in order (e.g., ("value",))
    filter: Optional[PathFilter] = None


def parse_filter(filter_string: str) -> PathFilter:
    """
    Parse a filter such as 'type eq "work"'.

    The filter must consist of exactly three whitespace-separated tokens
    and the parameter must be double-quoted.

    Raises:
        MalformedFilter: If the filter does not have that shape
    """
    filter_elements = filter_string.split()
    if len(filter_elements) != 3:
        raise MalformedFilter(filter_string, "expected 'attribute operator \"value\"'")

    attribute, operator, parameter = filter_elements
    if len(parameter) < 2 or not (parameter.startswith('"') and parameter.endswith('"')):
        raise MalformedFilter(filter_string, "filter value must be double-quoted")

    return PathFilter(attribute=attribute, operator=operator, parameter=parameter[1:-1])


def _match_known_attribute(path: str, known_attributes: Iterable[str]) -> Optional[str]:
    """Longest known attribute name that equals ``path`` or prefixes it up to a separator"""
    matches = [
        attr for attr in known_attributes
        if path == attr or (path.startswith(attr) and path[len(attr)] in SEPARATORS)
    ]
    if not matches:
        return None
    return max(matches, key=len)


def parse_path_scim(path: str, known_attributes: Iterable[str] = ()) -> ScimPath:
    """
    Parse a PATCH path into its attribute, filter and remaining sub-path.

    Examples:
        "displayName" -> ScimPath(attribute="displayName")
        "name.givenName" -> ScimPath(attribute="name", rest_path=("givenName",))
        'emails[type eq "work"].value' -> ScimPath(
            attribute="emails",
            rest_path=("value",),
            filter=PathFilter(attribute="type", operator="eq", parameter="work"),
        )

    Args:
        path: The raw path from the PATCH operation
        known_attributes: Top-level mutable attribute names from the schema

    Raises:
        UnsupportedPatchRequest: If the path is empty or has more than one filter
        MalformedFilter: If the filter cannot be split into three tokens
    """
    if not path:
        raise UnsupportedPatchRequest("PATCH operation path cannot be empty")

    filters = FILTER_PATTERN.findall(path)
    if len(filters) > 1:
        raise UnsupportedPatchRequest(f"Multiple filters are not supported: {path}")

    path_filter = None
    path_str = path
    if filters:
        path_filter = parse_filter(filters[0])
        path_str = FILTER_PATTERN.sub("", path, count=1)

    if "[" in path_str or "]" in path_str:
        raise MalformedFilter(path, "unbalanced brackets")

    first_element = _match_known_attribute(path_str, known_attributes)
    if first_element is None:
        logger.warning(f"Path '{path_str}' does not start with a configured attribute, splitting on '.'")
        path_elements = path_str.split(".")
    elif path_str == first_element:
        path_elements = [first_element]
    else:
        path_elements = [first_element] + path_str[len(first_element) + 1:].split(".")

    if not path_elements[0] or any(not element for element in path_elements[1:]):
        raise UnsupportedPatchRequest(f"Invalid SCIM path: {path}")

    return ScimPath(
        attribute=path_elements[0],
        rest_path=tuple(path_elements[1:]),
        filter=path_filter,
    )


def format_path_scim(path_scim: ScimPath) -> str:
    """Render a parsed path back into its canonical string form."""
    path = path_scim.attribute
    if path_scim.filter is not None:
        f = path_scim.filter
        path += f'[{f.attribute} {f.operator} "{f.parameter}"]'
    for element in path_scim.rest_path:
        path += f".{element}"
    return path
