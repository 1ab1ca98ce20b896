"""Core models, vocabulary and errors shared across colmgr.

This package provides:
- Repository object and relationship triple models
- The fixed predicate vocabulary
- PID validation helpers
- The exception taxonomy
"""

from .exceptions import BackendUnavailable, ColmgrError, InvalidArgument, NotFound
from .models import MemberRecord, PageResult, RelationshipTriple, RepositoryObject
from .pids import from_uri, namespace_of, to_uri, validate_pid

__all__ = [
    # Models
    "RepositoryObject",
    "RelationshipTriple",
    "MemberRecord",
    "PageResult",
    # Errors
    "ColmgrError",
    "BackendUnavailable",
    "InvalidArgument",
    "NotFound",
    # PIDs
    "validate_pid",
    "namespace_of",
    "to_uri",
    "from_uri",
]
