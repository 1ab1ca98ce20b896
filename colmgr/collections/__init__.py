"""Collection membership and listing.

This package provides:
- Membership management across current and legacy predicates
- Collection search restricted by namespace policy
- Paged member listings
"""

from .lister import CollectionLister, NamespacePolicy, build_collections_query
from .membership import MembershipManager, pid_of

__all__ = [
    "MembershipManager",
    "CollectionLister",
    "NamespacePolicy",
    "build_collections_query",
    "pid_of",
]
