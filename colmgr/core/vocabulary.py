"""Fixed predicate vocabulary used by the repository's resource index.

Relationships are addressed by a namespace URI plus a predicate name, the
same split the Fedora RELS-EXT datastream uses. Short aliases such as
``fedora-rels-ext`` are accepted anywhere a namespace URI is expected.
"""

from __future__ import annotations

from enum import Enum

from .exceptions import InvalidArgument

FEDORA_URI_PREFIX = "info:fedora/"

FEDORA_RELS_EXT_URI = "info:fedora/fedora-system:def/relations-external#"
FEDORA_MODEL_URI = "info:fedora/fedora-system:def/model#"
FEDORA_VIEW_URI = "info:fedora/fedora-system:def/view#"

NAMESPACE_ALIASES: dict[str, str] = {
    "fedora-rels-ext": FEDORA_RELS_EXT_URI,
    "fedora-model": FEDORA_MODEL_URI,
    "fedora-view": FEDORA_VIEW_URI,
}

# Membership
IS_MEMBER_OF_COLLECTION = "isMemberOfCollection"
IS_MEMBER_OF = "isMemberOf"
MEMBERSHIP_PREDICATES = (IS_MEMBER_OF_COLLECTION, IS_MEMBER_OF)

# Object properties
HAS_MODEL = "hasModel"
LABEL = "label"
OWNER_ID = "ownerId"
STATE = "state"
LAST_MODIFIED_DATE = "lastModifiedDate"

COLLECTION_CONTENT_MODEL = "islandora:collectionCModel"


class ObjectState(Enum):
    """Lifecycle states of a repository object."""

    ACTIVE = "Active"
    INACTIVE = "Inactive"
    DELETED = "Deleted"

    @property
    def uri(self) -> str:
        """Full resource URI of this state."""
        return FEDORA_MODEL_URI + self.value

    @classmethod
    def from_value(cls, value: str) -> ObjectState:
        """Parse a state from its short name or full URI."""
        name = value.rsplit("#", 1)[-1].strip()
        for state in cls:
            if state.value.lower() == name.lower() or state.value[0] == name.upper():
                return state
        raise InvalidArgument("state", f"unknown object state {value!r}")


def resolve_namespace(namespace: str) -> str:
    """Map a namespace alias to its full URI.

    Args:
        namespace: Alias like ``fedora-rels-ext`` or a full namespace URI

    Returns:
        Full namespace URI

    Raises:
        InvalidArgument: If the value is neither a known alias nor a URI
    """
    namespace = namespace.strip()
    if namespace in NAMESPACE_ALIASES:
        return NAMESPACE_ALIASES[namespace]
    if ":" in namespace and namespace.endswith(("#", "/")):
        return namespace
    raise InvalidArgument("predicate namespace", f"unknown namespace {namespace!r}")
