"""
Domain Services

Available Domain Services:
=========================

1. **GroupDirectoryService** - groups, memberships, display names
2. **MembershipSearchResolver** - user-in-group searches
"""

from .group_service import GroupDirectoryService, derive_gid
from .membership_search import MembershipSearchResolver, UserHandle, UserDirectory

__all__ = [
    'GroupDirectoryService',
    'derive_gid',
    'MembershipSearchResolver',
    'UserHandle',
    'UserDirectory'
]
