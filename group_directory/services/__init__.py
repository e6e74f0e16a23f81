"""
Service Layer

This package holds the group directory's business logic. It sits between
the HTTP routes and the store adapter and owns the group cache.

Architecture:
============

1. **Base Services** (base.py):
   - Error taxonomy and the ServiceResult type
   - Logging and store error translation for service methods

2. **Capabilities** (capabilities.py):
   - Runtime-checkable protocols a group backend may implement
   - Action flags derived from those protocols

3. **Domain Services** (domain/):
   - GroupDirectoryService, the cache-first directory API
   - Membership search and lazily resolved user handles

Usage Example:
=============

```python
from group_directory.core.database import SessionLocal
from group_directory.core.group_store import GroupStore
from group_directory.services.domain import GroupDirectoryService

directory = GroupDirectoryService(GroupStore(SessionLocal))

result = directory.create_group("Engineering")
if result.success:
    directory.add_to_group("alice", result.data)
```
"""

from .base import BaseService, ServiceError, ServiceResult, StoreError, GroupAlreadyExistsError

__all__ = [
    'BaseService',
    'ServiceError',
    'ServiceResult',
    'StoreError',
    'GroupAlreadyExistsError'
]
