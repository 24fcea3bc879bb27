"""
Schema trees and depth-first attribute lookup.

A schema description is a nested structure of mappings, sequences and scalar
placeholders, e.g.::

    {"name": {"givenName": "given_name"}, "emails": [{"value": "email"}]}

It is converted once into an immutable tagged tree (``Leaf``, ``Mapping``,
``Sequence``) which is searched by ``locate``. The same search serves two
purposes: finding the storage path of a SCIM attribute in the mutable
attribute schema, and finding an arbitrary attribute inside an inbound payload.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping as MappingABC, Optional, Tuple, Union

from .scim_path_parser import ScimPath


PathKey = Union[str, int]
StoragePath = Tuple[PathKey, ...]


@dataclass(frozen=True)
class Leaf:
    value: Any


@dataclass(frozen=True)
class Mapping:
    entries: Tuple[Tuple[str, "Node"], ...] = ()

    def get(self, key: str) -> Optional["Node"]:
        for entry_key, node in self.entries:
            if entry_key == key:
                return node
        return None

    def keys(self) -> Tuple[str, ...]:
        return tuple(key for key, _ in self.entries)


@dataclass(frozen=True)
class Sequence:
    items: Tuple["Node", ...] = ()


Node = Union[Leaf, Mapping, Sequence]


def build_tree(obj: Any) -> Node:
    """Convert raw nested dict/list/scalar data into a tagged tree, keeping order."""
    if isinstance(obj, MappingABC):
        return Mapping(tuple((str(key), build_tree(value)) for key, value in obj.items()))
    if isinstance(obj, (list, tuple)):
        return Sequence(tuple(build_tree(item) for item in obj))
    return Leaf(obj)


def locate(
    target: Any,
    tree: Node,
    path: StoragePath = (),
    match_leaves: bool = True,
) -> Optional[StoragePath]:
    """
    Find the key/index path of ``target`` inside ``tree``.

    A node matches when it is a leaf equal to ``target`` or when the mapping
    key leading to it equals ``target``. With ``match_leaves=False`` only
    mapping keys are compared. The search is depth-first in document order
    and the first match wins.

    Examples:
        locate("givenName", build_tree({"names": [{"givenName": "x"}]}))
            -> ("names", 0, "givenName")
        locate("given_name", build_tree({"name": {"givenName": "given_name"}}))
            -> ("name", "givenName")

    Returns:
        The path as a tuple, or None when ``target`` does not occur.
    """
    if isinstance(tree, Leaf):
        return path if match_leaves and path and tree.value == target else None

    if isinstance(tree, Mapping):
        for key, node in tree.entries:
            if key == target:
                return path + (key,)
            found = locate(target, node, path + (key,), match_leaves)
            if found is not None:
                return found
        return None

    for index, node in enumerate(tree.items):
        found = locate(target, node, path + (index,), match_leaves)
        if found is not None:
            return found
    return None


def node_at(tree: Node, path: Iterable[PathKey]) -> Optional[Node]:
    """Follow ``path`` through a tagged tree."""
    node: Optional[Node] = tree
    for key in path:
        if isinstance(node, Mapping) and isinstance(key, str):
            node = node.get(key)
        elif isinstance(node, Sequence) and isinstance(key, int) and 0 <= key < len(node.items):
            node = node.items[key]
        else:
            return None
        if node is None:
            return None
    return node


def dig(data: Any, path: Optional[Iterable[PathKey]]) -> Any:
    """Follow ``path`` through raw nested data, returning None on any miss."""
    if path is None:
        return None
    current = data
    for key in path:
        if isinstance(current, MappingABC):
            if key not in current:
                return None
            current = current[key]
        elif isinstance(current, (list, tuple)) and isinstance(key, int):
            if not 0 <= key < len(current):
                return None
            current = current[key]
        else:
            return None
    return current


def _select_index(sequence: Sequence, path_scim: ScimPath) -> Optional[int]:
    """Pick the element of a multi-valued attribute a path refers to."""
    path_filter = path_scim.filter
    if path_filter is not None and path_filter.operator.lower() == "eq":
        for index, item in enumerate(sequence.items):
            if not isinstance(item, Mapping):
                continue
            discriminator = item.get(path_filter.attribute)
            if isinstance(discriminator, Leaf) and discriminator.value == path_filter.parameter:
                return index

    for index, item in enumerate(sequence.items):
        if node_at(item, path_scim.rest_path) is not None:
            return index
    return None


def _selector_keys(item: Node, path_scim: ScimPath, filter_attributes: Iterable[str]) -> Tuple[str, ...]:
    """Keys of a sequence element that pick the element rather than store a value."""
    if not isinstance(item, Mapping):
        return ()
    selectors = set(filter_attributes)
    path_filter = path_scim.filter
    if path_filter is not None:
        selectors.add(path_filter.attribute)
        selectors.update(
            key for key, node in item.entries
            if isinstance(node, Leaf) and node.value == path_filter.parameter
        )
    return tuple(key for key in item.keys() if key in selectors)


def resolve_storage_path(
    path_scim: ScimPath,
    tree: Node,
    filter_attributes: Iterable[str] = (),
) -> Optional[StoragePath]:
    """
    Convert a parsed SCIM path into the key/index path inside ``tree``.

    ``emails[type eq "work"].value`` against
    ``{"emails": [{"type": "work", "value": "email"}]}`` gives
    ``("emails", 0, "value")``.

    Only top-level keys of ``tree`` are attributes; keys nested deeper are
    reachable through ``rest_path`` alone. Inside a multi-valued attribute the
    keys that select an element (the filter attribute, a key holding the filter
    parameter, or any of ``filter_attributes``) are not writable and resolve
    to None.
    """
    base = locate(path_scim.attribute, tree, match_leaves=False)
    if base is None or len(base) != 1:
        return None

    node = node_at(tree, base)
    storage_path = base
    selectors: Tuple[str, ...] = ()
    if isinstance(node, Sequence):
        index = _select_index(node, path_scim)
        if index is None:
            return None
        storage_path = storage_path + (index,)
        node = node.items[index]
        selectors = _selector_keys(node, path_scim, filter_attributes)

    if path_scim.rest_path and path_scim.rest_path[-1] in selectors:
        return None

    for key in path_scim.rest_path:
        if not isinstance(node, Mapping):
            return None
        node = node.get(key)
        if node is None:
            return None
        storage_path = storage_path + (key,)

    return storage_path


@dataclass(frozen=True)
class SchemaConfig:
    """Immutable schema configuration injected into the PATCH parser."""

    mutable_attributes: Node = field(default_factory=Mapping)
    filter_attributes: Tuple[str, ...] = ()

    @classmethod
    def from_mappings(
        cls,
        mutable_attributes: MappingABC[str, Any],
        filter_attributes: Iterable[str] = (),
    ) -> "SchemaConfig":
        return cls(
            mutable_attributes=build_tree(mutable_attributes),
            filter_attributes=tuple(filter_attributes),
        )

    @property
    def known_attributes(self) -> Tuple[str, ...]:
        if isinstance(self.mutable_attributes, Mapping):
            return self.mutable_attributes.keys()
        return ()

    def storage_attribute(self, storage_path: Optional[StoragePath]) -> Any:
        """Return the leaf placeholder stored at ``storage_path``."""
        if storage_path is None:
            return None
        node = node_at(self.mutable_attributes, storage_path)
        return node.value if isinstance(node, Leaf) else None
